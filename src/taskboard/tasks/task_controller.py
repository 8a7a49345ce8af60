# src/taskboard/tasks/task_controller.py

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from ..core.errors import Forbidden, NoCurrentUser
from ..core.result import Result, guarded
from .task_filters import TaskFilter, apply_filter, empty_state_message, visible_category_stats
from .task_models import Task, TaskStatus
from .task_repository import TaskRepository

logger = logging.getLogger(__name__)

ASSIGNEE_SELF = "self"

# Input keys as sent by the form layer -> repository field names.
_PATCH_KEYS = {
    "title": "title",
    "description": "description",
    "status": "status",
    "priority": "priority",
    "category": "category",
    "dueDate": "due_date",
    "due_date": "due_date",
}


class TaskController:
    """
    Task lifecycle scoped to one current user.

    Ownership policy: a user sees and modifies only tasks whose owner_id is their
    own id. Tasks assigned to somebody else belong to that user from creation on.
    """

    def __init__(self, tasks: TaskRepository, *, due_soon_days: int = 3) -> None:
        self._tasks = tasks
        self.due_soon_days = due_soon_days
        self._current_user_id: str | None = None

    @property
    def current_user_id(self) -> str | None:
        return self._current_user_id

    def set_current_user(self, user_id: str | None) -> None:
        self._current_user_id = user_id or None
        logger.debug("Task scope set to user_id=%s", self._current_user_id)

    # ---- helpers ----

    def _require_user(self) -> str:
        if not self._current_user_id:
            raise NoCurrentUser()
        return self._current_user_id

    def _owned_task(self, task_id: str) -> Task:
        uid = self._require_user()
        task = self._tasks.find_by_id(task_id)
        if task.owner_id != uid:
            raise Forbidden("You can only change your own tasks")
        return task

    def _resolve_assignee(self, assignee: Any) -> str:
        uid = self._require_user()
        raw = str(assignee or "").strip()
        if not raw or raw == ASSIGNEE_SELF:
            return uid
        return raw

    def _my_tasks(self) -> list[Task]:
        return self._tasks.find_by_owner(self._require_user())

    # ---- operations ----

    def create_task(self, data: Mapping[str, Any]) -> Result:
        def op() -> Result:
            owner_id = self._resolve_assignee(data.get("assignee"))
            task = self._tasks.create(
                title=str(data.get("title") or ""),
                owner_id=owner_id,
                description=str(data.get("description") or ""),
                priority=data.get("priority"),
                category=data.get("category"),
                due_date=data.get("dueDate", data.get("due_date")),
            )
            if owner_id != self._current_user_id:
                return Result.ok(task, message="Task created and assigned")
            return Result.ok(task, message="Task created")

        return guarded("create_task", op, log=logger)

    def update_task(self, task_id: str, patch: Mapping[str, Any]) -> Result:
        def op() -> Result:
            self._owned_task(task_id)
            fields: dict[str, Any] = {}
            for key, value in patch.items():
                if key == "assignee":
                    fields["owner_id"] = self._resolve_assignee(value)
                else:
                    # unknown keys pass through so the repository rejects them
                    fields[_PATCH_KEYS.get(key, key)] = value
            task = self._tasks.update(task_id, **fields)
            return Result.ok(task, message="Task updated")

        return guarded("update_task", op, log=logger)

    def toggle_task_status(self, task_id: str) -> Result:
        def op() -> Result:
            task = self._owned_task(task_id)
            updated = self._tasks.update(task_id, status=task.status.toggled())
            if updated.status is TaskStatus.COMPLETED:
                return Result.ok(updated, message="Task marked as completed")
            return Result.ok(updated, message="Task marked as pending")

        return guarded("toggle_task_status", op, log=logger)

    def delete_task(self, task_id: str) -> Result:
        def op() -> Result:
            self._owned_task(task_id)
            removed = self._tasks.delete(task_id)
            return Result.ok(removed, message=f"Task '{removed.title}' deleted")

        return guarded("delete_task", op, log=logger)

    def get_all_tasks(self) -> Result:
        return guarded("get_all_tasks", lambda: Result.ok_list(self._my_tasks()), log=logger)

    def get_overdue_tasks(self) -> Result:
        def op() -> Result:
            uid = self._require_user()
            found = [t for t in self._tasks.find_overdue() if t.owner_id == uid]
            return Result.ok_list(found, message=f"{len(found)} overdue task(s)")

        return guarded("get_overdue_tasks", op, log=logger)

    def get_tasks_due_soon(self, window_days: int | None = None) -> Result:
        def op() -> Result:
            uid = self._require_user()
            days = self.due_soon_days if window_days is None else window_days
            found = [t for t in self._tasks.find_due_soon(window_days=days) if t.owner_id == uid]
            return Result.ok_list(found, message=f"{len(found)} task(s) due within {days} day(s)")

        return guarded("get_tasks_due_soon", op, log=logger)

    def get_filtered_tasks(self, filter_type: str = "all", filter_value: str | None = None) -> Result:
        def op() -> Result:
            try:
                flt = TaskFilter.parse(filter_type, filter_value)
            except ValueError as e:
                return Result.fail(str(e))
            found = apply_filter(self._my_tasks(), flt)
            return Result.ok_list(found, message=None if found else empty_state_message(flt))

        return guarded("get_filtered_tasks", op, log=logger)

    def get_category_stats(self) -> Result:
        def op() -> Result:
            stats = visible_category_stats(self._my_tasks())
            return Result.ok({c.value: s for c, s in stats.items()})

        return guarded("get_category_stats", op, log=logger)

    def get_task_stats(self) -> Result:
        def op() -> Result:
            uid = self._require_user()
            mine = self._my_tasks()
            completed = sum(1 for t in mine if t.is_completed)
            overdue = sum(1 for t in self._tasks.find_overdue() if t.owner_id == uid)
            return Result.ok(
                {
                    "total": len(mine),
                    "completed": completed,
                    "pending": len(mine) - completed,
                    "overdue": overdue,
                }
            )

        return guarded("get_task_stats", op, log=logger)
