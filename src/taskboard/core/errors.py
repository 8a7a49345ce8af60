# src/taskboard/core/errors.py

"""
Typed failures raised by repositories.

Controllers catch TaskboardError and turn it into a failure Result;
`str(exc)` is the user-facing message.
"""

from __future__ import annotations


class TaskboardError(Exception):
    """Base class for every failure the data layer reports."""

    kind = "error"


class ValidationError(TaskboardError):
    kind = "validation"


class DuplicateUsername(TaskboardError):
    kind = "duplicate_username"

    def __init__(self, username: str) -> None:
        super().__init__(f"Username '{username}' is already taken")
        self.username = username


class NotFound(TaskboardError):
    kind = "not_found"


class UserNotFound(NotFound):
    def __init__(self, ref: str) -> None:
        super().__init__(f"User '{ref}' not found")
        self.ref = ref


class TaskNotFound(NotFound):
    def __init__(self, task_id: str) -> None:
        super().__init__(f"Task '{task_id}' not found")
        self.task_id = task_id


class NoCurrentUser(TaskboardError):
    kind = "no_current_user"

    def __init__(self) -> None:
        super().__init__("No user is logged in")


class Forbidden(TaskboardError):
    kind = "forbidden"


class StorageUnavailable(TaskboardError):
    kind = "storage_unavailable"

    def __init__(self, collection: str) -> None:
        super().__init__(f"Could not save {collection}: storage is unavailable")
        self.collection = collection
