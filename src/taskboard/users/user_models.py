# src/taskboard/users/user_models.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class User:
    id: str
    username: str
    email: str
    full_name: str
    created_at: float

    @property
    def display_name(self) -> str:
        return self.full_name or self.username

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "fullName": self.full_name,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_record(cls, rec: dict[str, Any]) -> User:
        """Raises KeyError/ValueError on a record without id or username."""
        user_id = str(rec["id"])
        username = str(rec["username"]).strip()
        if not user_id or not username:
            raise ValueError("user record without id or username")
        return cls(
            id=user_id,
            username=username,
            email=str(rec.get("email") or ""),
            full_name=str(rec.get("fullName") or ""),
            created_at=float(rec.get("createdAt") or 0.0),
        )
