# src/taskboard/tasks/task_repository.py

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Callable
from dataclasses import replace
from datetime import date, datetime
from typing import Any

from ..core.errors import StorageUnavailable, TaskNotFound, UserNotFound, ValidationError
from ..core.ports import KeyValueStore, UserLookup
from .task_models import Task, TaskCategory, TaskPriority, TaskStatus

logger = logging.getLogger(__name__)

TASKS_KEY = "tasks"
SECONDS_PER_DAY = 86400.0

_UPDATABLE_FIELDS = frozenset(
    {"title", "description", "status", "priority", "category", "due_date", "owner_id"}
)


def _clean_text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def coerce_due_date(value: Any) -> float | None:
    """
    Normalize a due date to epoch seconds.

    Accepts None/"" (no due date), epoch numbers, datetime/date objects and
    ISO-8601 strings ("2026-10-18" or "2026-10-18T17:00"). Naive values are local time.
    """
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValidationError("Invalid due date")
    if isinstance(value, int | float):
        return float(value)
    if isinstance(value, datetime):
        return value.timestamp()
    if isinstance(value, date):
        return datetime.combine(value, datetime.min.time()).timestamp()
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.strip()).timestamp()
        except ValueError:
            raise ValidationError(f"Invalid due date: {value!r}") from None
    raise ValidationError("Invalid due date")


class TaskRepository:
    """
    Typed view over the `tasks` collection.

    Same persistence contract as UserRepository: the in-memory list changes only
    after storage accepted the new collection. Finders return fresh lists in
    insertion order; Task objects are frozen, so callers cannot mutate state.
    """

    def __init__(
        self,
        storage: KeyValueStore,
        users: UserLookup,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._storage = storage
        self._users = users
        self._clock = clock
        self._tasks: list[Task] = []
        self.reload()

    def reload(self) -> None:
        raw = self._storage.get(TASKS_KEY)
        tasks: list[Task] = []
        if isinstance(raw, list):
            for rec in raw:
                try:
                    tasks.append(Task.from_record(rec))
                except (KeyError, TypeError, ValueError, AttributeError):
                    logger.warning("Skipping malformed task record: %r", rec)
        elif raw is not None:
            logger.warning("Stored tasks collection is not a list; starting empty.")
        self._tasks = tasks
        logger.debug("Loaded %s tasks", len(tasks))

    # ---- low-level helpers ----

    def _persist(self, tasks: list[Task]) -> None:
        if not self._storage.set(TASKS_KEY, [t.to_record() for t in tasks]):
            raise StorageUnavailable(TASKS_KEY)
        self._tasks = tasks

    def _index_of(self, task_id: str) -> int:
        for i, t in enumerate(self._tasks):
            if t.id == task_id:
                return i
        raise TaskNotFound(task_id)

    def _next_stamp(self, previous: float) -> float:
        # updated_at must move forward even when the clock did not.
        now = self._clock()
        return now if now > previous else previous + 0.001

    def _require_owner(self, owner_id: str | None) -> str:
        owner_id = (owner_id or "").strip()
        if not owner_id:
            raise ValidationError("Task owner is required")
        if not self._users.exists(owner_id):
            raise UserNotFound(owner_id)
        return owner_id

    def _select(self, pred: Callable[[Task], bool]) -> list[Task]:
        return [t for t in self._tasks if pred(t)]

    # ---- public API ----

    def create(
        self,
        *,
        title: str,
        owner_id: str,
        description: str = "",
        priority: str | None = None,
        category: str | None = None,
        due_date: Any = None,
    ) -> Task:
        title = _clean_text(title)
        if not title:
            raise ValidationError("Task title is required")
        owner_id = self._require_owner(owner_id)

        now = self._clock()
        task = Task(
            id=f"task_{uuid.uuid4().hex}",
            title=title,
            description=_clean_text(description),
            status=TaskStatus.PENDING,
            priority=TaskPriority.resolve(priority),
            category=TaskCategory.resolve(category),
            owner_id=owner_id,
            created_at=now,
            updated_at=now,
            due_date=coerce_due_date(due_date),
        )
        self._persist([*self._tasks, task])
        logger.info(
            "Task created id=%s owner=%s priority=%s category=%s",
            task.id,
            task.owner_id,
            task.priority.value,
            task.category.value,
        )
        return task

    def update(self, task_id: str, **patch: Any) -> Task:
        unknown = set(patch) - _UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Unknown task field(s): {', '.join(sorted(unknown))}")

        idx = self._index_of(task_id)
        current = self._tasks[idx]

        changes: dict[str, Any] = {}
        if "title" in patch:
            title = _clean_text(patch["title"])
            if not title:
                raise ValidationError("Task title is required")
            changes["title"] = title
        if "description" in patch:
            changes["description"] = _clean_text(patch["description"])
        if "status" in patch:
            try:
                changes["status"] = TaskStatus(patch["status"])
            except ValueError:
                raise ValidationError(f"Invalid status: {patch['status']!r}") from None
        if "priority" in patch:
            changes["priority"] = TaskPriority.resolve(patch["priority"])
        if "category" in patch:
            changes["category"] = TaskCategory.resolve(patch["category"])
        if "due_date" in patch:
            changes["due_date"] = coerce_due_date(patch["due_date"])
        if "owner_id" in patch:
            changes["owner_id"] = self._require_owner(patch["owner_id"])

        updated = replace(current, **changes, updated_at=self._next_stamp(current.updated_at))

        tasks = list(self._tasks)
        tasks[idx] = updated
        self._persist(tasks)
        logger.debug("Task updated id=%s fields=%s", task_id, sorted(changes))
        return updated

    def delete(self, task_id: str) -> Task:
        idx = self._index_of(task_id)
        removed = self._tasks[idx]
        self._persist(self._tasks[:idx] + self._tasks[idx + 1 :])
        logger.info("Task deleted id=%s", task_id)
        return removed

    def find_by_id(self, task_id: str) -> Task:
        return self._tasks[self._index_of(task_id)]

    def find_all(self) -> list[Task]:
        return list(self._tasks)

    def find_by_owner(self, owner_id: str) -> list[Task]:
        return self._select(lambda t: t.owner_id == owner_id)

    def find_by_status(self, status: TaskStatus | str) -> list[Task]:
        return self._select(lambda t: t.status == status)

    def find_by_priority(self, priority: TaskPriority | str) -> list[Task]:
        return self._select(lambda t: t.priority == priority)

    def find_by_category(self, category: TaskCategory | str) -> list[Task]:
        return self._select(lambda t: t.category == category)

    def find_overdue(self, now: float | None = None) -> list[Task]:
        """Not completed, with a due date strictly before `now`."""
        if now is None:
            now = self._clock()
        return self._select(
            lambda t: t.due_date is not None and t.due_date < now and not t.is_completed
        )

    def find_due_soon(self, now: float | None = None, window_days: float = 3) -> list[Task]:
        """Not completed, due within [now, now + window_days]."""
        if now is None:
            now = self._clock()
        horizon = now + max(0.0, float(window_days)) * SECONDS_PER_DAY
        return self._select(
            lambda t: t.due_date is not None and now <= t.due_date <= horizon and not t.is_completed
        )

    def count(self) -> int:
        return len(self._tasks)
