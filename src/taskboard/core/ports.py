# src/taskboard/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the repositories.

Repositories depend on Protocols instead of concrete implementations.
This keeps the storage backend swappable and makes testing easier.
"""

from typing import Any, Protocol


class KeyValueStore(Protocol):
    """Namespaced key-value persistence (see storage.manager.StorageManager)."""

    def get(self, key: str) -> Any | None: ...
    def set(self, key: str, value: Any) -> bool: ...


class UserLookup(Protocol):
    """What the task side needs to know about users."""

    def exists(self, user_id: str) -> bool: ...
