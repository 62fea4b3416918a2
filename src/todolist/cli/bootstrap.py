# src/todolist/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures the local (gitignored) data directory exists,
- builds the task store and hands it to the coordinator explicitly.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.coordinator import TaskCoordinator
from ..core.state import AppState
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.tasks_db_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Settings are injectable to keep tests isolated from the environment.
    If settings is None, falls back to get_settings().
    Raises StorageFailure if the database cannot be opened.
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    store = TaskStore(
        settings.tasks_db_path,
        timeout_seconds=getattr(settings, "db_timeout_seconds", 30.0),
        destructive_migration=getattr(settings, "destructive_migration", True),
    )
    coordinator = TaskCoordinator(store)
    logger.info("State ready db=%s", settings.tasks_db_path)
    return AppState(settings=settings, store=store, coordinator=coordinator)


def shutdown_state(state: AppState) -> None:
    """Best-effort shutdown: drain pending writes, then close subscriptions."""
    try:
        state.coordinator.shutdown(wait=True)
    except Exception:
        logger.exception("Coordinator shutdown failed.")

    try:
        state.store.close()
    except Exception:
        logger.exception("Store close failed.")
