# src/todolist/core/coordinator.py

from __future__ import annotations

"""
Task coordinator.

Thin layer between user intents and the task repository:
- exposes the repository's live sequence unchanged,
- runs every write on a single background writer thread (FIFO),
- reports each write back through a ticket, and failed writes through
  an error channel (log + failures list + optional on_error callback).

No validation and no debouncing happen here.
"""

import logging
import queue
import threading
from collections import deque
from collections.abc import Callable
from concurrent.futures import Future
from dataclasses import dataclass
from enum import Enum

from ..tasks.task_feed import TaskSubscription
from ..tasks.task_models import Task
from .ports import TaskRepo

logger = logging.getLogger(__name__)


class WriteIntent(str, Enum):
    ADD = "add"
    TOGGLE = "toggle"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(slots=True, frozen=True)
class WriteOutcome:
    intent: WriteIntent
    task_id: int | None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class WriteTicket:
    """Handle for one forwarded write. Callers may ignore it (fire-and-forget)."""

    def __init__(self, intent: WriteIntent, future: Future[WriteOutcome]) -> None:
        self.intent = intent
        self._future = future

    def done(self) -> bool:
        return self._future.done()

    def result(self, timeout: float | None = None) -> WriteOutcome:
        """Wait for the write to land. Raises TimeoutError if it does not within timeout."""
        return self._future.result(timeout=timeout)


ErrorCallback = Callable[[WriteOutcome], None]

_Job = tuple[WriteIntent, int | None, Callable[[], int | None], Future[WriteOutcome]]


class TaskCoordinator:
    def __init__(
        self,
        repo: TaskRepo,
        *,
        on_error: ErrorCallback | None = None,
        max_failures: int = 50,
    ) -> None:
        self._repo = repo
        self.on_error = on_error
        self.failures: deque[WriteOutcome] = deque(maxlen=max(1, int(max_failures)))

        self._queue: queue.Queue[_Job | None] = queue.Queue()
        self._lock = threading.Lock()
        self._stopped = False
        self._worker = threading.Thread(
            target=self._worker_loop, name="todolist-writer", daemon=True
        )
        self._worker.start()

    # ---- worker ----

    def _worker_loop(self) -> None:
        logger.debug("Writer thread started.")
        while True:
            job = self._queue.get()
            if job is None:
                logger.debug("Writer thread received stop signal.")
                return

            intent, task_id, op, future = job
            try:
                new_id = op()
            except Exception as exc:
                logger.exception("Task write failed intent=%s task_id=%s", intent.value, task_id)
                outcome = WriteOutcome(intent=intent, task_id=task_id, error=exc)
                self._report_failure(outcome)
            else:
                outcome = WriteOutcome(intent=intent, task_id=new_id if new_id is not None else task_id)
                logger.debug("Task write done intent=%s task_id=%s", intent.value, outcome.task_id)
            future.set_result(outcome)

    def _report_failure(self, outcome: WriteOutcome) -> None:
        self.failures.append(outcome)
        callback = self.on_error
        if callback is None:
            return
        try:
            callback(outcome)
        except Exception:
            logger.exception("on_error callback crashed intent=%s", outcome.intent.value)

    def _submit(
        self, intent: WriteIntent, task_id: int | None, op: Callable[[], int | None]
    ) -> WriteTicket:
        future: Future[WriteOutcome] = Future()
        with self._lock:
            if self._stopped:
                raise RuntimeError("TaskCoordinator is shut down")
            self._queue.put((intent, task_id, op, future))
        return WriteTicket(intent, future)

    # ---- intents ----

    def tasks(self) -> TaskSubscription:
        return self._repo.list_all()

    def add_task(self, name: str, description: str) -> WriteTicket:
        return self._submit(WriteIntent.ADD, None, lambda: self._repo.insert(name, description))

    def toggle_task(self, task: Task, completed: bool) -> WriteTicket:
        updated = task.with_completed(completed)

        def op() -> None:
            self._repo.update(updated)

        return self._submit(WriteIntent.TOGGLE, task.id, op)

    def update_task(self, task: Task) -> WriteTicket:
        def op() -> None:
            self._repo.update(task)

        return self._submit(WriteIntent.UPDATE, task.id, op)

    def delete_task(self, task: Task) -> WriteTicket:
        def op() -> None:
            self._repo.delete(task)

        return self._submit(WriteIntent.DELETE, task.id, op)

    # ---- lifecycle ----

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting writes; pending writes still run before the worker exits."""
        with self._lock:
            if self._stopped:
                return
            self._stopped = True
            self._queue.put(None)
        if wait:
            self._worker.join()

    def __enter__(self) -> TaskCoordinator:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()
