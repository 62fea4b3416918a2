# src/todolist/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState (store + coordinator), then runs the
console task list in the main thread until /exit, EOF or a signal.
"""

from __future__ import annotations

import logging
import signal
import sys
import threading

from ..cli.bootstrap import create_initial_state, shutdown_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..errors import StorageFailure
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


def main() -> int:
    settings = get_settings()

    console_level = getattr(logging, str(settings.log_level).upper(), logging.WARNING)
    log_file = setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s (log=%s)...", settings.app_title, log_file)

    try:
        state = create_initial_state(settings=settings)
    except StorageFailure as exc:
        logger.error("Task database unavailable: %s", exc)
        print(f"[error] Task database unavailable: {exc}", file=sys.stderr)
        return 1

    # Use an Event so main can wait without a busy while-loop.
    stop_main = threading.Event()

    def _handle_signal(signum, _frame) -> None:
        logger.info("Signal %s received, shutting down...", signum)
        stop_main.set()
        if settings.console_enabled:
            # Unblocks input(); the console loop treats it as a normal exit.
            raise KeyboardInterrupt

    try:
        signal.signal(signal.SIGTERM, _handle_signal)
    except (ValueError, OSError, AttributeError):
        # Not in the main thread, or the platform has no SIGTERM.
        logger.debug("SIGTERM handler not installed.", exc_info=True)

    try:
        if settings.console_enabled:
            run_console_loop(state)
        else:
            logger.info("Console disabled. Nothing to do until a signal arrives.")
            try:
                stop_main.wait()
            except KeyboardInterrupt:
                logger.info("KeyboardInterrupt, shutting down...")
    finally:
        shutdown_state(state)
        logger.info("Bye.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
