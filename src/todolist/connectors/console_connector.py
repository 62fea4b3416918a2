# src/todolist/connectors/console_connector.py

from __future__ import annotations

import logging
from collections.abc import Callable

from ..cli.commands import registry as command_registry
from ..cli.render import render_tasks
from ..core.coordinator import WriteOutcome
from ..core.state import AppState
from ..errors import SubscriptionClosed
from ..tasks.task_feed import TaskSubscription
from ..tasks.task_models import Task

logger = logging.getLogger(__name__)

ReadLine = Callable[[str], str]
Write = Callable[[str], None]


def _drain(subscription: TaskSubscription) -> list[Task] | None:
    """Return the freshest snapshot already delivered, or None if nothing new arrived."""
    try:
        return subscription.latest(timeout=0)
    except TimeoutError:
        return None
    except SubscriptionClosed:
        logger.debug("Task subscription closed; keeping last snapshot.")
        return None


def run_console_loop(state: AppState, *, read_line: ReadLine = input, write: Write = print) -> None:
    """
    Interactive task list.

    The list is re-rendered whenever the live subscription delivered a new
    snapshot, i.e. after every write that landed. Failed writes arrive
    through the coordinator's error channel and are printed as [error] lines.
    """
    logger.info("Console connector started.")

    def on_error(outcome: WriteOutcome) -> None:
        target = f" #{outcome.task_id}" if outcome.task_id is not None else ""
        write(f"[error] {outcome.intent.value}{target} failed: {outcome.error}")

    state.coordinator.on_error = on_error

    with state.coordinator.tasks() as subscription:
        current = subscription.get(timeout=state.write_wait_seconds)
        write(render_tasks(current, title=state.app_title))
        write("Use /help for commands. Use /exit to quit.\n")

        while True:
            try:
                line = read_line(">>> ").strip()
            except EOFError:
                logger.info("Console EOF received, exiting.")
                break
            except KeyboardInterrupt:
                logger.info("Console KeyboardInterrupt, exiting.")
                write("")
                break

            if not line:
                continue

            if line.lower() in ("/exit", "/quit"):
                logger.info("Console exit command received.")
                break

            try:
                response = command_registry.handle(state, line, emit=write)
            except Exception:
                logger.exception("Command handler crashed.")
                response = "Internal error while handling a command."

            if response is None:
                write("Not a command. Try /add <name> | <description>, or /help.")
                continue

            write(response)

            fresh = _drain(subscription)
            if fresh is not None and fresh != current:
                current = fresh
                write(render_tasks(current, title=state.app_title))

    logger.info("Console connector finished.")
