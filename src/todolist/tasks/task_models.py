# src/todolist/tasks/task_models.py

from __future__ import annotations

import sqlite3
from dataclasses import dataclass, replace


@dataclass(frozen=True, slots=True)
class Task:
    """One row of the tasks table."""

    id: int
    name: str
    description: str
    completed: bool = False

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> Task:
        return cls(
            id=int(row["id"]),
            name=str(row["name"] or ""),
            description=str(row["description"] or ""),
            completed=bool(row["completed"]),
        )

    def with_completed(self, completed: bool) -> Task:
        return replace(self, completed=bool(completed))

    def sort_key(self) -> tuple[bool, int]:
        # Incomplete first, then creation order.
        return (self.completed, self.id)
