# src/taskboard/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Every component also accepts an injected settings object (tests use SimpleNamespace).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TASKBOARD"

DEFAULT_STORAGE_QUOTA_BYTES = 5 * 1024 * 1024


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


load_dotenv(override=False)


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Storage namespace ----
    app_id: str
    schema_version: str

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    db_path: Path
    export_dir: Path

    # ---- Limits / behaviour ----
    storage_quota_bytes: int
    due_soon_days: int
    seed_demo_users: bool

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "taskboard").strip() or "taskboard"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        app_id = _env(_k("APP_ID"), "taskAppDay2").strip() or "taskAppDay2"
        schema_version = _env(_k("SCHEMA_VERSION"), "2.0").strip() or "2.0"

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/taskboard"))
        db_path = _env_path(_k("DB_PATH"), data_dir / "storage.sqlite3")
        export_dir = _env_path(_k("EXPORT_DIR"), data_dir / "exports")

        storage_quota_bytes = _env_int(_k("STORAGE_QUOTA_BYTES"), DEFAULT_STORAGE_QUOTA_BYTES)
        due_soon_days = max(0, _env_int(_k("DUE_SOON_DAYS"), 3))
        seed_demo_users = _env_bool(_k("SEED_DEMO_USERS"), True)

        return Settings(
            app_name=app_name,
            log_level=log_level,
            app_id=app_id,
            schema_version=schema_version,
            data_dir=data_dir,
            db_path=db_path,
            export_dir=export_dir,
            storage_quota_bytes=storage_quota_bytes,
            due_soon_days=due_soon_days,
            seed_demo_users=seed_demo_users,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
