# tests/conftest.py

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from types import SimpleNamespace

import pytest

from todolist.core.coordinator import TaskCoordinator
from todolist.core.state import AppState
from todolist.tasks.task_store import TaskStore


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the environment and any local .env.
    """
    return SimpleNamespace(
        app_title="Test Todo",
        log_level="WARNING",
        console_enabled=True,
        write_wait_seconds=5.0,
        data_dir=tmp_path / "data",
        tasks_db_path=tmp_path / "data" / "task_db.sqlite3",
        db_timeout_seconds=5.0,
        destructive_migration=True,
    )


@pytest.fixture()
def store(settings: SimpleNamespace) -> Iterator[TaskStore]:
    s = TaskStore(settings.tasks_db_path, timeout_seconds=settings.db_timeout_seconds)
    yield s
    s.close()


@pytest.fixture()
def coordinator(store: TaskStore) -> Iterator[TaskCoordinator]:
    c = TaskCoordinator(store)
    yield c
    c.shutdown()


@pytest.fixture()
def state(settings: SimpleNamespace, store: TaskStore, coordinator: TaskCoordinator) -> AppState:
    """
    AppState wired with the real SQLite store.

    The store's ordering and notification behavior is part of what we test,
    so only failure scenarios use the fakes.
    """
    return AppState(settings=settings, store=store, coordinator=coordinator)
