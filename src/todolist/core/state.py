# src/todolist/core/state.py

from __future__ import annotations

from dataclasses import dataclass

from .coordinator import TaskCoordinator
from .ports import TaskRepo


@dataclass
class AppState:
    # Settings object (real Settings or a test SimpleNamespace).
    settings: object

    store: TaskRepo
    coordinator: TaskCoordinator

    @property
    def app_title(self) -> str:
        return str(getattr(self.settings, "app_title", "Todo"))

    @property
    def write_wait_seconds(self) -> float:
        return float(getattr(self.settings, "write_wait_seconds", 5.0))
