# src/taskboard/tasks/task_filters.py

"""
Pure list policies consumed by the rendering layer.

- TaskFilter: exactly one active filter mode (all / status / priority / category)
- apply_filter: filter + newest-first ordering
- category_stats: per-category totals over the unfiltered task set
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from .task_models import Task, TaskCategory, TaskPriority, TaskStatus

FILTER_ALL = "all"
FILTER_PENDING = "pending"
FILTER_COMPLETED = "completed"
FILTER_CATEGORY = "category"

FILTER_MODES = (
    FILTER_ALL,
    FILTER_PENDING,
    FILTER_COMPLETED,
    TaskPriority.HIGH.value,
    TaskPriority.MEDIUM.value,
    TaskPriority.LOW.value,
    FILTER_CATEGORY,
)

CATEGORY_DISPLAY_NAMES: dict[TaskCategory, str] = {
    TaskCategory.WORK: "Work",
    TaskCategory.PERSONAL: "Personal",
    TaskCategory.STUDY: "Study",
    TaskCategory.HEALTH: "Health",
    TaskCategory.FINANCE: "Finance",
    TaskCategory.SHOPPING: "Shopping",
    TaskCategory.OTHER: "Other",
}


@dataclass(frozen=True, slots=True)
class TaskFilter:
    mode: str = FILTER_ALL
    category: TaskCategory | None = None

    @classmethod
    def parse(cls, filter_type: str | None = None, filter_value: str | None = None) -> TaskFilter:
        mode = (filter_type or FILTER_ALL).strip().lower()
        if mode not in FILTER_MODES:
            raise ValueError(f"Unknown filter: {filter_type!r}")
        if mode != FILTER_CATEGORY:
            return cls(mode=mode)

        # Category filters are strict: an unknown category is a caller bug, not "other".
        try:
            category = TaskCategory(str(filter_value or "").strip().lower())
        except ValueError:
            raise ValueError(f"Unknown category: {filter_value!r}") from None
        return cls(mode=FILTER_CATEGORY, category=category)

    def matches(self, task: Task) -> bool:
        if self.mode == FILTER_ALL:
            return True
        if self.mode == FILTER_PENDING:
            return task.status is not TaskStatus.COMPLETED
        if self.mode == FILTER_COMPLETED:
            return task.status is TaskStatus.COMPLETED
        if self.mode == FILTER_CATEGORY:
            return task.category == self.category
        return task.priority.value == self.mode


def sort_newest_first(tasks: Iterable[Task]) -> list[Task]:
    # sorted() with reverse=True keeps ties in their original order.
    return sorted(tasks, key=lambda t: t.created_at, reverse=True)


def apply_filter(tasks: Iterable[Task], flt: TaskFilter | None = None) -> list[Task]:
    flt = flt or TaskFilter()
    return sort_newest_first(t for t in tasks if flt.matches(t))


def category_stats(tasks: Iterable[Task]) -> dict[TaskCategory, dict[str, int]]:
    """{category: {"total": n, "completed": m}} for all categories, in fixed order."""
    stats = {c: {"total": 0, "completed": 0} for c in TaskCategory}
    for t in tasks:
        bucket = stats[t.category]
        bucket["total"] += 1
        if t.is_completed:
            bucket["completed"] += 1
    return stats


def visible_category_stats(tasks: Iterable[Task]) -> dict[TaskCategory, dict[str, int]]:
    """category_stats without the empty categories."""
    return {c: s for c, s in category_stats(tasks).items() if s["total"] > 0}


def empty_state_message(flt: TaskFilter) -> str:
    if flt.mode == FILTER_CATEGORY and flt.category is not None:
        return f"No tasks found in {flt.category.value} category"
    return f"No tasks found with {flt.mode} filter"
