# tests/test_bootstrap.py

from __future__ import annotations

import json
import logging
from dataclasses import replace
from pathlib import Path
from types import SimpleNamespace

import pytest

from taskboard.bootstrap import export_app_data, import_app_data, init_app, snapshot_problems
from taskboard.config import Settings
from taskboard.logging_setup import _ConsoleNoiseFilter, level_from_name, setup_logging

from .fakes import FakeClock


def _settings_for(base: SimpleNamespace, tmp: Path, **over) -> SimpleNamespace:
    values = dict(vars(base))
    values.update(data_dir=tmp, db_path=tmp / "storage.sqlite3", export_dir=tmp / "exports")
    values.update(over)
    return SimpleNamespace(**values)


def test_init_app_seeds_demo_users_once(settings: SimpleNamespace) -> None:
    settings.seed_demo_users = True

    app = init_app(settings=settings, configure_logging=False, clock=FakeClock())
    assert [u.username for u in app.users.find_all()] == ["demo", "john"]

    again = init_app(settings=settings, configure_logging=False)
    assert again.users.count() == 2


def test_app_login_scopes_task_controller(settings: SimpleNamespace) -> None:
    settings.seed_demo_users = True
    app = init_app(settings=settings, configure_logging=False, clock=FakeClock())

    res = app.login("demo")
    assert res.success is True
    assert app.task_controller.current_user_id == res.data.id

    created = app.task_controller.create_task({"title": "Try the app"})
    assert created.data.owner_id == res.data.id

    app.logout()
    assert app.user_controller.current_user is None
    assert app.task_controller.get_all_tasks().success is False


def test_failed_login_keeps_previous_scope(settings: SimpleNamespace) -> None:
    settings.seed_demo_users = True
    app = init_app(settings=settings, configure_logging=False)
    app.login("demo")
    scope = app.task_controller.current_user_id

    assert app.login("nobody").success is False
    assert app.task_controller.current_user_id == scope


def test_export_then_import_into_fresh_app(settings: SimpleNamespace, tmp_path: Path) -> None:
    settings.seed_demo_users = True
    app = init_app(settings=settings, configure_logging=False, clock=FakeClock())
    app.login("john")
    app.task_controller.create_task({"title": "Pay rent", "category": "finance"})

    path = export_app_data(app)
    assert path is not None
    assert path.parent == settings.export_dir

    fresh_settings = _settings_for(settings, tmp_path / "fresh", seed_demo_users=False)
    fresh = init_app(settings=fresh_settings, configure_logging=False)
    assert fresh.users.count() == 0

    assert import_app_data(fresh, path) is True
    assert {u.id for u in fresh.users.find_all()} == {u.id for u in app.users.find_all()}
    assert [t.to_record() for t in fresh.tasks.find_all()] == [
        t.to_record() for t in app.tasks.find_all()
    ]


def test_import_missing_file_fails(settings: SimpleNamespace, tmp_path: Path) -> None:
    app = init_app(settings=settings, configure_logging=False)
    assert import_app_data(app, tmp_path / "nope.json") is False


def _user_rec(user_id: str, username: str) -> dict:
    return {"id": user_id, "username": username, "email": "", "fullName": "", "createdAt": 1.0}


def _task_rec(task_id: str, owner_id: str) -> dict:
    return {
        "id": task_id,
        "title": "t",
        "description": "",
        "status": "pending",
        "priority": "medium",
        "category": "other",
        "ownerId": owner_id,
        "createdAt": 1.0,
        "updatedAt": 1.0,
        "dueDate": None,
    }


@pytest.mark.parametrize(
    ("users", "tasks", "problem"),
    [
        ([_user_rec("u1", "sam"), _user_rec("u2", "sam")], [], "duplicate username"),
        ([_user_rec("u1", "sam"), _user_rec("u1", "kim")], [], "duplicate user id"),
        ([_user_rec("u1", "sam")], [_task_rec("t1", "u9")], "unknown user"),
        (
            [_user_rec("u1", "sam")],
            [_task_rec("t1", "u1"), _task_rec("t1", "u1")],
            "duplicate task",
        ),
        ([{"username": "no-id"}], [], "unreadable user"),
    ],
)
def test_import_rejects_inconsistent_snapshot(
    settings: SimpleNamespace, tmp_path: Path, users: list, tasks: list, problem: str
) -> None:
    settings.seed_demo_users = True
    app = init_app(settings=settings, configure_logging=False)
    before = sorted(u.username for u in app.users.find_all())

    backup = tmp_path / "bad.json"
    backup.write_text(json.dumps({"users": users, "tasks": tasks, "version": "2.0"}), "utf-8")

    assert any(problem in p for p in snapshot_problems({"users": users, "tasks": tasks}))
    assert import_app_data(app, backup) is False
    assert sorted(u.username for u in app.users.find_all()) == before
    assert sorted(u["username"] for u in app.storage.get("users")) == before


def test_consistent_snapshot_has_no_problems() -> None:
    snap = {"users": [_user_rec("u1", "sam")], "tasks": [_task_rec("t1", "u1")]}
    assert snapshot_problems(snap) == []


def test_settings_from_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("TASKBOARD_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("TASKBOARD_DUE_SOON_DAYS", "7")
    monkeypatch.setenv("TASKBOARD_SEED_DEMO_USERS", "no")
    monkeypatch.setenv("TASKBOARD_STORAGE_QUOTA_BYTES", "not-a-number")
    monkeypatch.delenv("TASKBOARD_DB_PATH", raising=False)

    s = Settings.from_env()

    assert s.db_path == tmp_path / "storage.sqlite3"
    assert s.due_soon_days == 7
    assert s.seed_demo_users is False
    assert s.storage_quota_bytes == 5 * 1024 * 1024
    assert replace(s, app_id="other").app_id == "other"


def test_setup_logging_writes_file(tmp_path: Path) -> None:
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        log_file = setup_logging(log_dir=tmp_path / "logs")
        logging.getLogger("taskboard.test").info("hello from test")
        for h in root.handlers:
            h.flush()
        assert "hello from test" in log_file.read_text("utf-8")
    finally:
        for h in list(root.handlers):
            root.removeHandler(h)
            h.close()
        for h in saved_handlers:
            root.addHandler(h)
        root.setLevel(saved_level)
        logging.captureWarnings(False)


def test_console_filter_and_level_names() -> None:
    flt = _ConsoleNoiseFilter()

    def rec(name: str, level: int) -> logging.LogRecord:
        return logging.LogRecord(name, level, __file__, 1, "msg", None, None)

    assert flt.filter(rec("taskboard.users.user_controller", logging.INFO))
    assert not flt.filter(rec("taskboard.storage.manager", logging.DEBUG))
    assert flt.filter(rec("taskboard.storage.manager", logging.WARNING))
    assert not flt.filter(rec("urllib3", logging.WARNING))

    assert level_from_name("debug") == logging.DEBUG
    assert level_from_name("bogus") == logging.INFO
