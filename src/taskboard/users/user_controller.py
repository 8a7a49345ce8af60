# src/taskboard/users/user_controller.py

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from ..core.errors import DuplicateUsername, UserNotFound, ValidationError
from ..core.result import Result, guarded
from .user_models import User
from .user_repository import UserRepository

logger = logging.getLogger(__name__)


class UserController:
    """
    Login/registration on top of UserRepository.

    The session (current user) is a plain attribute of this instance; it is never
    persisted. Every method returns a Result.
    """

    def __init__(self, users: UserRepository) -> None:
        self._users = users
        self._current_user: User | None = None

    @property
    def current_user(self) -> User | None:
        return self._current_user

    def login(self, username: str) -> Result:
        def op() -> Result:
            name = (username or "").strip()
            if not name:
                raise ValidationError("Username is required")
            try:
                user = self._users.find_by_username(name)
            except UserNotFound:
                return Result.fail(f"User '{name}' not found, please register first")
            self._current_user = user
            logger.info("Login user_id=%s username=%s", user.id, user.username)
            return Result.ok(user, message=f"Welcome, {user.display_name}!")

        return guarded("login", op, log=logger)

    def logout(self) -> Result:
        user = self._current_user
        self._current_user = None
        if user is None:
            return Result.ok(message="Logged out")
        logger.info("Logout user_id=%s", user.id)
        return Result.ok(message=f"Goodbye, {user.display_name}!")

    def register(self, data: Mapping[str, Any]) -> Result:
        def op() -> Result:
            username = str(data.get("username") or "")
            full_name = data.get("fullName", data.get("full_name")) or ""
            try:
                user = self._users.create(
                    username=username,
                    email=str(data.get("email") or ""),
                    full_name=str(full_name),
                )
            except DuplicateUsername as e:
                return Result.fail(
                    f"Username '{e.username}' is already taken, please choose another one"
                )
            return Result.ok(user, message=f"User {user.username} registered, you can log in now")

        return guarded("register", op, log=logger)

    def get_all_users(self) -> Result:
        return guarded("get_all_users", lambda: Result.ok_list(self._users.find_all()), log=logger)

    def get_current_user(self) -> Result:
        if self._current_user is None:
            return Result.fail("No user is logged in")
        return Result.ok(self._current_user)

    def get_assignable_users(self) -> Result:
        """Users a task can be assigned to, besides "self" (everyone but the session user)."""

        def op() -> Result:
            me = self._current_user.id if self._current_user else None
            return Result.ok_list([u for u in self._users.find_all() if u.id != me])

        return guarded("get_assignable_users", op, log=logger)
