# src/taskboard/users/user_repository.py

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Callable

from ..core.errors import DuplicateUsername, StorageUnavailable, UserNotFound, ValidationError
from ..core.ports import KeyValueStore
from .user_models import User

logger = logging.getLogger(__name__)

USERS_KEY = "users"


class UserRepository:
    """
    Typed view over the `users` collection.

    The whole collection is loaded once and kept in memory (insertion order);
    every mutation writes the full collection back before it is applied locally,
    so a refused write leaves both the store and the view unchanged.
    """

    def __init__(self, storage: KeyValueStore, *, clock: Callable[[], float] = time.time) -> None:
        self._storage = storage
        self._clock = clock
        self._users: list[User] = []
        self.reload()

    def reload(self) -> None:
        raw = self._storage.get(USERS_KEY)
        users: list[User] = []
        if isinstance(raw, list):
            for rec in raw:
                try:
                    users.append(User.from_record(rec))
                except (KeyError, TypeError, ValueError, AttributeError):
                    logger.warning("Skipping malformed user record: %r", rec)
        elif raw is not None:
            logger.warning("Stored users collection is not a list; starting empty.")
        self._users = users
        logger.debug("Loaded %s users", len(users))

    def _persist(self, users: list[User]) -> None:
        if not self._storage.set(USERS_KEY, [u.to_record() for u in users]):
            raise StorageUnavailable(USERS_KEY)
        self._users = users

    # ---- public API ----

    def create(self, *, username: str, email: str = "", full_name: str = "") -> User:
        username = (username or "").strip()
        if not username:
            raise ValidationError("Username is required")

        if any(u.username == username for u in self._users):
            raise DuplicateUsername(username)

        user = User(
            id=f"user_{uuid.uuid4().hex}",
            username=username,
            email=(email or "").strip(),
            full_name=(full_name or "").strip(),
            created_at=self._clock(),
        )
        self._persist([*self._users, user])
        logger.info("User created id=%s username=%s", user.id, user.username)
        return user

    def find_all(self) -> list[User]:
        return list(self._users)

    def find_by_id(self, user_id: str) -> User:
        for u in self._users:
            if u.id == user_id:
                return u
        raise UserNotFound(user_id)

    def find_by_username(self, username: str) -> User:
        for u in self._users:
            if u.username == username:
                return u
        raise UserNotFound(username)

    def exists(self, user_id: str) -> bool:
        return any(u.id == user_id for u in self._users)

    def count(self) -> int:
        return len(self._users)
