# src/todolist/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The coordinator depends on a Protocol instead of the concrete SQLite store,
so tests can swap in fakes (e.g. a repo whose writes always fail).
"""

from typing import Protocol

from ..tasks.task_feed import TaskSubscription
from ..tasks.task_models import Task


class TaskRepo(Protocol):
    def list_all(self) -> TaskSubscription: ...
    def snapshot(self) -> list[Task]: ...
    def insert(self, name: str, description: str) -> int: ...
    def update(self, task: Task) -> None: ...
    def delete(self, task: Task) -> None: ...
    def get_task(self, task_id: int) -> Task | None: ...
    def close(self) -> None: ...
