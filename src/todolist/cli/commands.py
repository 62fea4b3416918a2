# src/todolist/cli/commands.py

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from typing import cast

from ..core.coordinator import WriteTicket
from ..core.state import AppState
from ..tasks.task_models import Task
from .render import render_tasks

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console (/add, /done, /del, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}
        self._raw: set[str] = set()

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
        raw: bool = False,
    ) -> None:
        """
        raw=True hands the handler the rest of the line as a single argument,
        with inner whitespace untouched, instead of whitespace-split words.
        """
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler
        if raw:
            self._raw.update(k.lower() for k in [key, *aliases])

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split(maxsplit=1)
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        rest = parts[1] if len(parts) > 1 else ""

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        if name in self._raw:
            args = [rest] if rest.strip() else []
        else:
            args = rest.split()

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return h3(state, args, emit)

        h2 = cast(CommandHandler2, handler)
        return h2(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        lines.append("  /exit - Quit.")
        return "\n".join(lines)


registry = CommandRegistry()


def _parse_task_id(args: list[str]) -> int | None:
    if not args:
        return None
    raw = args[0].lstrip("#")
    try:
        return int(raw)
    except ValueError:
        return None


def _lookup(state: AppState, args: list[str], usage: str) -> tuple[Task | None, str | None]:
    task_id = _parse_task_id(args)
    if task_id is None:
        return None, usage
    task = state.store.get_task(task_id)
    if task is None:
        return None, f"No task #{task_id}."
    return task, None


def _wait(state: AppState, ticket: WriteTicket, done: str, failed: str) -> str:
    """Wait (bounded) for a forwarded write and turn its outcome into a reply."""
    try:
        outcome = ticket.result(timeout=state.write_wait_seconds)
    except TimeoutError:
        logger.warning("Write %s still pending after %.1fs", ticket.intent.value, state.write_wait_seconds)
        return "Still saving; the list will refresh when the write lands."
    if not outcome.ok:
        return failed
    return done.format(id=outcome.task_id)


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_list(state: AppState, args: list[str]) -> str:
    return render_tasks(state.store.snapshot(), title=state.app_title)


def cmd_add(state: AppState, args: list[str]) -> str:
    """
    /add <name>                  -> task without description
    /add <name> | <description>  -> task with description
    """
    if not args:
        return "Usage: /add <name> | <description>"

    name, _, description = args[0].partition("|")
    ticket = state.coordinator.add_task(name.strip(), description.strip())
    return _wait(state, ticket, done="Added task #{id}.", failed="Task was not added.")


def _set_completed(state: AppState, args: list[str], completed: bool | None) -> str:
    usage = "Usage: /done <id> | /undo <id> | /toggle <id>"
    task, err = _lookup(state, args, usage)
    if task is None:
        return err or usage

    flag = (not task.completed) if completed is None else completed
    if flag == task.completed:
        state_word = "completed" if flag else "open"
        return f"Task #{task.id} is already {state_word}."

    ticket = state.coordinator.toggle_task(task, flag)
    verb = "Completed" if flag else "Reopened"
    return _wait(state, ticket, done=f"{verb} task #{{id}}.", failed=f"Task #{task.id} was not changed.")


def cmd_done(state: AppState, args: list[str]) -> str:
    return _set_completed(state, args, True)


def cmd_undo(state: AppState, args: list[str]) -> str:
    return _set_completed(state, args, False)


def cmd_toggle(state: AppState, args: list[str]) -> str:
    return _set_completed(state, args, None)


def cmd_delete(state: AppState, args: list[str]) -> str:
    task, err = _lookup(state, args, "Usage: /del <id>")
    if task is None:
        return err or "Usage: /del <id>"

    ticket = state.coordinator.delete_task(task)
    return _wait(state, ticket, done="Deleted task #{id}.", failed=f"Task #{task.id} was not deleted.")


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("list", cmd_list, help_text="Show all tasks.", aliases=["ls"])
registry.register("add", cmd_add, help_text="Add a task: /add <name> | <description>.", aliases=["new"], raw=True)
registry.register("done", cmd_done, help_text="Mark a task completed: /done <id>.")
registry.register("undo", cmd_undo, help_text="Mark a task open again: /undo <id>.")
registry.register("toggle", cmd_toggle, help_text="Flip a task's completed flag: /toggle <id>.")
registry.register("del", cmd_delete, help_text="Delete a task: /del <id>.", aliases=["delete", "rm"])
