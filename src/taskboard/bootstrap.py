# src/taskboard/bootstrap.py

"""
Bootstrap helpers.

This module is the "composition root":
- loads settings once (or takes injected ones),
- configures logging,
- wires storage, repositories and controllers into an App,
- seeds demo users into an empty store,
- exports / imports dated JSON backups.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any

from .config import get_settings
from .core.errors import TaskboardError
from .core.state import App
from .logging_setup import level_from_name, setup_logging
from .storage.manager import COLLECTIONS, StorageManager
from .tasks.task_controller import TaskController
from .tasks.task_models import Task
from .tasks.task_repository import TaskRepository
from .users.user_controller import UserController
from .users.user_models import User
from .users.user_repository import UserRepository

logger = logging.getLogger(__name__)

DEMO_USERS = (
    {"username": "demo", "email": "demo@example.com", "full_name": "Demo User"},
    {"username": "john", "email": "john@example.com", "full_name": "John Doe"},
)


def seed_demo_users(users: UserRepository) -> int:
    """Create the demo accounts when there are no users yet. Returns how many were created."""
    if users.count() > 0:
        return 0
    created = 0
    for spec in DEMO_USERS:
        try:
            users.create(**spec)
            created += 1
        except TaskboardError:
            logger.exception("Failed to create demo user %s", spec["username"])
    if created:
        logger.info("Demo users created: %s", created)
    return created


def init_app(
    *,
    settings=None,
    configure_logging: bool = True,
    clock: Callable[[], float] = time.time,
) -> App:
    """
    Build an App from the provided settings.

    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    if configure_logging:
        setup_logging(
            log_dir=settings.data_dir,
            console_level=level_from_name(settings.log_level),
        )

    logger.info("Initializing %s...", getattr(settings, "app_name", "taskboard"))

    storage = StorageManager(
        settings.db_path,
        app_id=settings.app_id,
        version=settings.schema_version,
        quota_bytes=settings.storage_quota_bytes,
    )
    users = UserRepository(storage, clock=clock)
    tasks = TaskRepository(storage, users, clock=clock)

    app = App(
        settings=settings,
        storage=storage,
        users=users,
        tasks=tasks,
        user_controller=UserController(users),
        task_controller=TaskController(tasks, due_soon_days=settings.due_soon_days),
    )

    if settings.seed_demo_users:
        seed_demo_users(users)

    logger.info("App ready users=%s tasks=%s", users.count(), tasks.count())
    return app


def export_app_data(app: App, directory: str | Path | None = None) -> Path | None:
    """Write the dated backup file (into settings.export_dir by default)."""
    if directory is None:
        directory = app.settings.export_dir
    return app.storage.export_to_file(directory)


def snapshot_problems(snapshot: dict[str, Any]) -> list[str]:
    """
    Consistency problems of a backup snapshot; empty when it is safe to import.

    Checks what the repositories guarantee for live data: readable records,
    unique user ids and usernames, unique task ids, and every task owned by a
    user of the same snapshot.
    """
    problems: list[str] = []
    users: list[User] = []
    tasks: list[Task] = []

    for rec in snapshot.get("users") or []:
        try:
            users.append(User.from_record(rec))
        except (KeyError, TypeError, ValueError, AttributeError):
            problems.append(f"unreadable user record: {rec!r}")
    for rec in snapshot.get("tasks") or []:
        try:
            tasks.append(Task.from_record(rec))
        except (KeyError, TypeError, ValueError, AttributeError):
            problems.append(f"unreadable task record: {rec!r}")

    seen_ids: set[str] = set()
    seen_names: set[str] = set()
    for u in users:
        if u.id in seen_ids:
            problems.append(f"duplicate user id {u.id}")
        if u.username in seen_names:
            problems.append(f"duplicate username {u.username!r}")
        seen_ids.add(u.id)
        seen_names.add(u.username)

    seen_tasks: set[str] = set()
    for t in tasks:
        if t.id in seen_tasks:
            problems.append(f"duplicate task id {t.id}")
        seen_tasks.add(t.id)
        if t.owner_id not in seen_ids:
            problems.append(f"task {t.id} owned by unknown user {t.owner_id}")

    return problems


def import_app_data(app: App, path: str | Path) -> bool:
    """Replace the stored dataset with a backup file and refresh the repositories."""
    snapshot = app.storage.load_file(path)
    if snapshot is None:
        return False

    # shape errors (non-list collections) are left to import_all
    if all(isinstance(snapshot.get(n, []), list) for n in COLLECTIONS):
        problems = snapshot_problems(snapshot)
        if problems:
            logger.error(
                "Import rejected: %s problem(s) in %s, first: %s", len(problems), path, problems[0]
            )
            return False

    if not app.storage.import_all(snapshot):
        return False
    app.reload()
    app.logout()
    return True
