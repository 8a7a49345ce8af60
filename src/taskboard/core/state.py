# src/taskboard/core/state.py

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from ..storage.manager import StorageManager
from ..tasks.task_controller import TaskController
from ..tasks.task_repository import TaskRepository
from ..users.user_controller import UserController
from ..users.user_repository import UserRepository
from .result import Result

logger = logging.getLogger(__name__)


@dataclass
class App:
    """
    Everything one running taskboard needs, wired by bootstrap.init_app().

    `login`/`logout` keep the two controllers' sessions in step.
    """

    settings: Any
    storage: StorageManager
    users: UserRepository
    tasks: TaskRepository
    user_controller: UserController
    task_controller: TaskController

    def login(self, username: str) -> Result:
        res = self.user_controller.login(username)
        if res.success:
            self.task_controller.set_current_user(res.data.id)
        return res

    def logout(self) -> Result:
        res = self.user_controller.logout()
        self.task_controller.set_current_user(None)
        return res

    def reload(self) -> None:
        """Re-read both collections after the store was replaced (import/reset)."""
        self.users.reload()
        self.tasks.reload()
