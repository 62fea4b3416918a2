# src/todolist/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Nothing is required at import time; every value has a default.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TODO"

DEFAULT_APP_TITLE = "Joy's Todo App"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


# A local .env never overrides variables already set in the process.
load_dotenv(override=False)


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
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
    app_title: str
    log_level: str

    # ---- Console ----
    console_enabled: bool
    write_wait_seconds: float

    # ---- Local data (ignored by git) ----
    data_dir: Path
    tasks_db_path: Path
    db_timeout_seconds: float
    destructive_migration: bool

    @staticmethod
    def from_env() -> "Settings":
        app_title = _env(_k("APP_TITLE"), DEFAULT_APP_TITLE).strip() or DEFAULT_APP_TITLE
        log_level = _env(_k("LOG_LEVEL"), "WARNING").strip().upper() or "WARNING"

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/todolist"))
        tasks_db_path = _env_path(_k("DB_PATH"), data_dir / "task_db.sqlite3")

        return Settings(
            app_title=app_title,
            log_level=log_level,
            console_enabled=_env_bool(_k("CONSOLE_ENABLED"), True),
            write_wait_seconds=max(0.1, _env_float(_k("WRITE_WAIT_SECONDS"), 5.0)),
            data_dir=data_dir,
            tasks_db_path=tasks_db_path,
            db_timeout_seconds=max(0.0, _env_float(_k("DB_TIMEOUT_SECONDS"), 30.0)),
            destructive_migration=_env_bool(_k("DESTRUCTIVE_MIGRATION"), True),
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
