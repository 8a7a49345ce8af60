# src/taskboard/storage/manager.py

from __future__ import annotations

import contextlib
import json
import logging
import os
import sqlite3
import time
from datetime import UTC, date, datetime
from pathlib import Path
from typing import Any

from ..config import DEFAULT_STORAGE_QUOTA_BYTES

logger = logging.getLogger(__name__)

COLLECTIONS = ("users", "tasks")
EXPORT_FILE_PREFIX = "task-app-backup-"


class StorageManager:
    """
    SQLite-backed key-value store, namespaced by app id + schema version.

    Every key lives in one table as `<app_id>:<version>:<key>` with a JSON value,
    so two schema versions of the app never read each other's data.

    Failure policy:
    - no method raises; failures are logged and reported as None / False
    - each write runs in one transaction, a failed write keeps the old value

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(
        self,
        db_path: str | Path = "storage.sqlite3",
        *,
        app_id: str = "taskAppDay2",
        version: str = "2.0",
        quota_bytes: int | None = DEFAULT_STORAGE_QUOTA_BYTES,
    ) -> None:
        self._db_path = Path(db_path)
        self.app_id = app_id
        self.version = version
        self.quota_bytes = quota_bytes
        self.available = True

        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            self._ensure_schema()
        except (OSError, sqlite3.Error):
            self.available = False
            logger.exception("StorageManager unavailable db=%s", self._db_path)
            return

        logger.info(
            "StorageManager ready db=%s namespace=%s keys=%s",
            self._db_path,
            self.namespace,
            self.keys(),
        )

    # ---- low-level helpers ----

    @property
    def namespace(self) -> str:
        return f"{self.app_id}:{self.version}"

    def _full_key(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at REAL NOT NULL
                )
                """
            )
            conn.commit()
        finally:
            conn.close()

    def _encode(self, key: str, value: Any) -> str | None:
        try:
            raw = json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError):
            logger.exception("Failed to JSON-encode value for key=%s", key)
            return None

        if self.quota_bytes is not None and len(raw.encode("utf-8")) > self.quota_bytes:
            logger.error(
                "Storage quota exceeded key=%s size=%s quota=%s",
                key,
                len(raw.encode("utf-8")),
                self.quota_bytes,
            )
            return None
        return raw

    def _write_many(self, items: dict[str, str]) -> bool:
        """Upsert several already-encoded values in one transaction."""
        now = time.time()
        conn = self._get_conn()
        try:
            with conn:
                conn.executemany(
                    """
                    INSERT INTO kv(key, value, updated_at) VALUES (?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET
                        value = excluded.value,
                        updated_at = excluded.updated_at
                    """,
                    [(self._full_key(k), v, now) for k, v in items.items()],
                )
            return True
        finally:
            conn.close()

    def _read_raw(self, key: str) -> str | None:
        """Stored JSON text for key, None if absent. Raises sqlite3.Error."""
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT value FROM kv WHERE key = ?", (self._full_key(key),)
            ).fetchone()
        finally:
            conn.close()
        return None if row is None else str(row["value"])

    # ---- public API ----

    def get(self, key: str) -> Any | None:
        if not self.available:
            return None
        try:
            raw = self._read_raw(key)
        except sqlite3.Error:
            logger.exception("Storage read failed key=%s", key)
            return None

        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("Stored value for key=%s is not valid JSON; ignoring.", key)
            return None

    def set(self, key: str, value: Any) -> bool:
        if not self.available:
            logger.warning("Storage unavailable, dropping write key=%s", key)
            return False

        raw = self._encode(key, value)
        if raw is None:
            return False
        try:
            self._write_many({key: raw})
        except sqlite3.Error:
            logger.exception("Storage write failed key=%s", key)
            return False
        logger.debug("Stored key=%s bytes=%s", key, len(raw))
        return True

    def remove(self, key: str) -> bool:
        if not self.available:
            return False
        try:
            conn = self._get_conn()
            try:
                with conn:
                    conn.execute("DELETE FROM kv WHERE key = ?", (self._full_key(key),))
            finally:
                conn.close()
        except sqlite3.Error:
            logger.exception("Storage delete failed key=%s", key)
            return False
        return True

    def keys(self) -> list[str]:
        """Keys of this namespace, prefix stripped."""
        if not self.available:
            return []
        prefix = f"{self.namespace}:"
        try:
            conn = self._get_conn()
            try:
                rows = conn.execute(
                    "SELECT key FROM kv WHERE substr(key, 1, ?) = ? ORDER BY key",
                    (len(prefix), prefix),
                ).fetchall()
            finally:
                conn.close()
        except sqlite3.Error:
            logger.exception("Storage key listing failed")
            return []
        return [str(r["key"])[len(prefix):] for r in rows]

    def clear(self) -> bool:
        """Remove every key of this namespace (other app ids / versions are kept)."""
        if not self.available:
            return False
        prefix = f"{self.namespace}:"
        try:
            conn = self._get_conn()
            try:
                with conn:
                    conn.execute(
                        "DELETE FROM kv WHERE substr(key, 1, ?) = ?", (len(prefix), prefix)
                    )
            finally:
                conn.close()
        except sqlite3.Error:
            logger.exception("Storage clear failed namespace=%s", self.namespace)
            return False
        logger.info("Storage cleared namespace=%s", self.namespace)
        return True

    # ---- snapshots ----

    def export_all(self) -> dict[str, Any] | None:
        """
        Snapshot of every collection, or None when there is nothing trustworthy to export.

        A missing collection exports as []; an unavailable store, a failed read or a
        stored value that is not a JSON list fails the whole export.
        """
        if not self.available:
            logger.error("Export failed: storage unavailable")
            return None

        snapshot: dict[str, Any] = {}
        for name in COLLECTIONS:
            try:
                raw = self._read_raw(name)
            except sqlite3.Error:
                logger.exception("Export failed: could not read %s", name)
                return None
            if raw is None:
                snapshot[name] = []
                continue
            try:
                value = json.loads(raw)
            except ValueError:
                logger.error("Export failed: stored %s is not valid JSON", name)
                return None
            if not isinstance(value, list):
                logger.error("Export failed: stored %s is not a list", name)
                return None
            snapshot[name] = value
        snapshot["exportedAt"] = datetime.now(UTC).isoformat()
        snapshot["version"] = self.version
        return snapshot

    def import_all(self, snapshot: dict[str, Any]) -> bool:
        """
        Replace the users/tasks collections from an export snapshot.

        Both collections are written in one transaction: either both land or neither.
        """
        if not self.available:
            return False
        if not isinstance(snapshot, dict):
            logger.error("Import rejected: snapshot is not an object")
            return False

        encoded: dict[str, str] = {}
        for name in COLLECTIONS:
            records = snapshot.get(name, [])
            if not isinstance(records, list):
                logger.error("Import rejected: %s is not a list", name)
                return False
            raw = self._encode(name, records)
            if raw is None:
                return False
            encoded[name] = raw

        if snapshot.get("version") not in (None, self.version):
            logger.warning(
                "Importing snapshot version=%s into namespace version=%s",
                snapshot.get("version"),
                self.version,
            )

        try:
            self._write_many(encoded)
        except sqlite3.Error:
            logger.exception("Storage import failed")
            return False
        logger.info(
            "Imported snapshot users=%s tasks=%s",
            len(snapshot.get("users", [])),
            len(snapshot.get("tasks", [])),
        )
        return True

    def export_to_file(self, directory: str | Path, *, today: date | None = None) -> Path | None:
        """Write the snapshot as `task-app-backup-YYYY-MM-DD.json` inside `directory`."""
        if today is None:
            today = datetime.now().astimezone().date()
        path = Path(directory) / f"{EXPORT_FILE_PREFIX}{today.isoformat()}.json"

        snapshot = self.export_all()
        if snapshot is None:
            return None

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp = path.with_suffix(".tmp")
            tmp.write_text(json.dumps(snapshot, ensure_ascii=False, indent=2), "utf-8")
            os.replace(tmp, path)
        except (OSError, TypeError, ValueError):
            logger.exception("Failed to export data to %s", path)
            return None

        logger.info("Exported data to %s", path)
        return path

    @staticmethod
    def load_file(path: str | Path) -> dict[str, Any] | None:
        """Read a snapshot written by export_to_file."""
        try:
            data = json.loads(Path(path).read_text("utf-8"))
        except (OSError, ValueError):
            logger.exception("Failed to read snapshot %s", path)
            return None
        if not isinstance(data, dict):
            logger.error("Snapshot %s is not a JSON object", path)
            return None
        return data
