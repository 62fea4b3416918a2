# src/todolist/cli/render.py

from __future__ import annotations

from collections.abc import Sequence

from ..tasks.task_models import Task

EMPTY_STATE = "No tasks available"


def render_task(task: Task) -> str:
    mark = "x" if task.completed else " "
    line = f"[{mark}] #{task.id} {task.name}"
    if task.description:
        line += f"\n      {task.description}"
    return line


def render_tasks(tasks: Sequence[Task], *, title: str) -> str:
    """Text view of one snapshot: header, then rows or the empty-state line."""
    lines = [title, "=" * len(title)]
    if not tasks:
        lines.append(EMPTY_STATE)
    else:
        lines.extend(render_task(t) for t in tasks)
    return "\n".join(lines)
