# src/taskboard/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class TaskStatus(StrEnum):
    PENDING = "pending"
    COMPLETED = "completed"

    @classmethod
    def from_db(cls, raw: str | None) -> TaskStatus:
        if not raw:
            return cls.PENDING
        try:
            return cls(raw)
        except ValueError:
            return cls.PENDING

    def toggled(self) -> TaskStatus:
        return TaskStatus.PENDING if self is TaskStatus.COMPLETED else TaskStatus.COMPLETED


class TaskPriority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @classmethod
    def resolve(cls, raw: str | None) -> TaskPriority:
        """Missing or unrecognised -> medium."""
        if not raw:
            return cls.MEDIUM
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            return cls.MEDIUM


class TaskCategory(StrEnum):
    WORK = "work"
    PERSONAL = "personal"
    STUDY = "study"
    HEALTH = "health"
    FINANCE = "finance"
    SHOPPING = "shopping"
    OTHER = "other"

    @classmethod
    def resolve(cls, raw: str | None) -> TaskCategory:
        """Missing or unrecognised -> other."""
        if not raw:
            return cls.OTHER
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            return cls.OTHER


@dataclass(frozen=True, slots=True)
class Task:
    id: str
    title: str
    description: str
    status: TaskStatus
    priority: TaskPriority
    category: TaskCategory
    owner_id: str

    created_at: float
    updated_at: float
    due_date: float | None = None

    @property
    def is_completed(self) -> bool:
        return self.status is TaskStatus.COMPLETED

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "status": self.status.value,
            "priority": self.priority.value,
            "category": self.category.value,
            "ownerId": self.owner_id,
            "dueDate": self.due_date,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_record(cls, rec: dict[str, Any]) -> Task:
        """Raises KeyError/ValueError on a record without id, title or owner."""
        task_id = str(rec["id"])
        title = str(rec["title"]).strip()
        owner_id = str(rec["ownerId"])
        if not task_id or not title or not owner_id:
            raise ValueError("task record without id, title or ownerId")
        due = rec.get("dueDate")
        created_at = float(rec.get("createdAt") or 0.0)
        return cls(
            id=task_id,
            title=title,
            description=str(rec.get("description") or ""),
            status=TaskStatus.from_db(rec.get("status")),
            priority=TaskPriority.resolve(rec.get("priority")),
            category=TaskCategory.resolve(rec.get("category")),
            owner_id=owner_id,
            created_at=created_at,
            updated_at=float(rec.get("updatedAt") or created_at),
            due_date=float(due) if due is not None else None,
        )
