# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from taskboard.storage.manager import StorageManager
from taskboard.tasks.task_controller import TaskController
from taskboard.tasks.task_repository import TaskRepository
from taskboard.users.user_controller import UserController
from taskboard.users.user_models import User
from taskboard.users.user_repository import UserRepository

from .fakes import FakeClock


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with bootstrap.init_app().

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="taskboard-test",
        log_level="INFO",
        app_id="taskAppTest",
        schema_version="2.0",
        data_dir=tmp_path,
        db_path=tmp_path / "storage.sqlite3",
        export_dir=tmp_path / "exports",
        storage_quota_bytes=5 * 1024 * 1024,
        due_soon_days=3,
        seed_demo_users=False,
    )


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def storage(settings: SimpleNamespace) -> StorageManager:
    """Real SQLite store in tmp_path; its correctness is part of what we test."""
    return StorageManager(
        settings.db_path,
        app_id=settings.app_id,
        version=settings.schema_version,
        quota_bytes=settings.storage_quota_bytes,
    )


@pytest.fixture()
def users(storage: StorageManager, clock: FakeClock) -> UserRepository:
    return UserRepository(storage, clock=clock)


@pytest.fixture()
def tasks(storage: StorageManager, users: UserRepository, clock: FakeClock) -> TaskRepository:
    return TaskRepository(storage, users, clock=clock)


@pytest.fixture()
def alice(users: UserRepository) -> User:
    return users.create(username="alice", email="alice@example.com", full_name="Alice Liddell")


@pytest.fixture()
def bob(users: UserRepository) -> User:
    return users.create(username="bob", email="bob@example.com", full_name="Bob Builder")


@pytest.fixture()
def user_controller(users: UserRepository) -> UserController:
    return UserController(users)


@pytest.fixture()
def task_controller(tasks: TaskRepository, alice: User) -> TaskController:
    """Controller already scoped to alice."""
    ctl = TaskController(tasks, due_soon_days=3)
    ctl.set_current_user(alice.id)
    return ctl
