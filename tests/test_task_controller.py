# tests/test_task_controller.py

from __future__ import annotations

from taskboard.tasks.task_controller import TaskController
from taskboard.tasks.task_models import TaskStatus
from taskboard.tasks.task_repository import SECONDS_PER_DAY, TaskRepository
from taskboard.users.user_models import User

from .fakes import FakeClock


def test_create_requires_current_user(tasks: TaskRepository) -> None:
    ctl = TaskController(tasks)

    res = ctl.create_task({"title": "x"})

    assert res.success is False
    assert res.error == "No user is logged in"
    assert tasks.count() == 0


def test_create_for_self_and_for_assignee(
    task_controller: TaskController, alice: User, bob: User
) -> None:
    mine = task_controller.create_task({"title": "Mine", "assignee": "self", "category": "work"})
    theirs = task_controller.create_task({"title": "Theirs", "assignee": bob.id})

    assert mine.success and theirs.success
    assert mine.data.owner_id == alice.id
    assert mine.message == "Task created"
    assert theirs.data.owner_id == bob.id
    assert theirs.message == "Task created and assigned"


def test_create_for_unknown_assignee_fails(task_controller: TaskController) -> None:
    res = task_controller.create_task({"title": "x", "assignee": "user_ghost"})
    assert res.success is False
    assert "not found" in (res.error or "")


def test_toggle_twice_is_involution_and_bumps_updated_at(task_controller: TaskController) -> None:
    created = task_controller.create_task({"title": "Flip me"}).data

    first = task_controller.toggle_task_status(created.id)
    second = task_controller.toggle_task_status(created.id)

    assert first.data.status is TaskStatus.COMPLETED
    assert first.message == "Task marked as completed"
    assert second.data.status is created.status
    assert created.updated_at < first.data.updated_at < second.data.updated_at


def test_cannot_touch_other_users_tasks(
    tasks: TaskRepository, task_controller: TaskController, bob: User
) -> None:
    foreign = tasks.create(title="Bob's", owner_id=bob.id)

    toggled = task_controller.toggle_task_status(foreign.id)
    deleted = task_controller.delete_task(foreign.id)
    updated = task_controller.update_task(foreign.id, {"title": "hijack"})

    assert not toggled.success and not deleted.success and not updated.success
    assert "your own tasks" in (toggled.error or "")
    assert tasks.find_by_id(foreign.id) == foreign


def test_delete_missing_task_leaves_set_unchanged(
    tasks: TaskRepository, task_controller: TaskController
) -> None:
    task_controller.create_task({"title": "keep"})
    before = len(tasks.find_all())

    res = task_controller.delete_task("task_missing")

    assert res.success is False
    assert "not found" in (res.error or "")
    assert len(tasks.find_all()) == before


def test_delete_own_task(task_controller: TaskController, tasks: TaskRepository) -> None:
    t = task_controller.create_task({"title": "Temp"}).data

    res = task_controller.delete_task(t.id)

    assert res.success is True
    assert res.message == "Task 'Temp' deleted"
    assert tasks.count() == 0


def test_update_task_maps_form_keys(task_controller: TaskController) -> None:
    t = task_controller.create_task({"title": "Plan"}).data

    res = task_controller.update_task(t.id, {"dueDate": 1_900_000_000, "priority": "low"})

    assert res.success is True
    assert res.data.due_date == 1_900_000_000.0
    assert res.data.priority.value == "low"

    bad = task_controller.update_task(t.id, {"colour": "red"})
    assert bad.success is False

    numeric = task_controller.update_task(t.id, {"title": 42})
    assert numeric.success is True
    assert numeric.data.title == "42"


def test_get_all_tasks_is_scoped_to_current_user(
    tasks: TaskRepository, task_controller: TaskController, bob: User
) -> None:
    task_controller.create_task({"title": "a"})
    task_controller.create_task({"title": "b"})
    tasks.create(title="bob's", owner_id=bob.id)

    res = task_controller.get_all_tasks()

    assert res.success is True
    assert res.count == 2
    assert [t.title for t in res.data] == ["a", "b"]
    assert res.to_dict()["count"] == 2


def test_overdue_and_due_soon(
    tasks: TaskRepository, task_controller: TaskController, clock: FakeClock, bob: User
) -> None:
    now = clock.now
    task_controller.create_task({"title": "late", "dueDate": now - 3600})
    task_controller.create_task({"title": "soon", "dueDate": now + SECONDS_PER_DAY})
    task_controller.create_task({"title": "far", "dueDate": now + 10 * SECONDS_PER_DAY})
    tasks.create(title="bob late", owner_id=bob.id, due_date=now - 3600)

    overdue = task_controller.get_overdue_tasks()
    soon = task_controller.get_tasks_due_soon()
    wide = task_controller.get_tasks_due_soon(30)

    assert [t.title for t in overdue.data] == ["late"]
    assert overdue.count == 1
    assert [t.title for t in soon.data] == ["soon"]
    assert soon.count == 1
    assert [t.title for t in wide.data] == ["soon", "far"]


def test_list_operations_require_session(tasks: TaskRepository) -> None:
    ctl = TaskController(tasks)
    for res in (ctl.get_all_tasks(), ctl.get_overdue_tasks(), ctl.get_tasks_due_soon(3)):
        assert res.success is False
        assert res.error == "No user is logged in"


def test_filtered_tasks_by_category_newest_first(task_controller: TaskController) -> None:
    for title, category in [
        ("w1", "work"),
        ("p1", "personal"),
        ("w2", "work"),
        ("p2", "personal"),
        ("w3", "work"),
    ]:
        task_controller.create_task({"title": title, "category": category})

    res = task_controller.get_filtered_tasks("category", "work")

    assert [t.title for t in res.data] == ["w3", "w2", "w1"]
    assert res.count == 3

    empty = task_controller.get_filtered_tasks("category", "finance")
    assert empty.count == 0
    assert empty.message == "No tasks found in finance category"

    assert task_controller.get_filtered_tasks("urgent").success is False


def test_category_and_task_stats(task_controller: TaskController, clock: FakeClock) -> None:
    a = task_controller.create_task({"title": "a", "category": "work"}).data
    task_controller.create_task({"title": "b", "category": "work"})
    task_controller.create_task({"title": "c", "category": "health", "dueDate": clock.now - 10})
    task_controller.toggle_task_status(a.id)

    cats = task_controller.get_category_stats()
    stats = task_controller.get_task_stats()

    assert cats.data == {
        "work": {"total": 2, "completed": 1},
        "health": {"total": 1, "completed": 0},
    }
    assert stats.data == {"total": 3, "completed": 1, "pending": 2, "overdue": 1}
