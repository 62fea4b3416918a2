# src/todolist/tasks/task_feed.py

"""
Live task sequence.

The store publishes a full ordered snapshot after every successful write.
Each subscriber owns a queue seeded with the snapshot current at subscribe
time, so a new subscriber always starts from fresh data and then sees every
later write in commit order.

A subscriber queue holds at most `max_pending` snapshots. When a reader
falls behind, the oldest pending snapshot is dropped; the newest one is
always kept, so a slow reader still converges on the current table.
"""

from __future__ import annotations

import asyncio
import logging
import queue
import threading

from ..errors import SubscriptionClosed
from .task_models import Task

logger = logging.getLogger(__name__)

DEFAULT_MAX_PENDING = 32


class TaskSubscription:
    """
    One consumer of the live task sequence.

    Blocking iteration:
        for snapshot in store.list_all(): ...

    Async iteration (reads run in a worker thread):
        async for snapshot in store.list_all(): ...

    Cancelling an async reader closes the subscription.
    """

    def __init__(self, broadcaster: SnapshotBroadcaster, *, max_pending: int = DEFAULT_MAX_PENDING) -> None:
        self._broadcaster = broadcaster
        self._max_pending = max(1, int(max_pending))
        self._queue: queue.Queue[list[Task] | None] = queue.Queue()
        self._lock = threading.Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def _push(self, snapshot: list[Task]) -> None:
        with self._lock:
            if self._closed:
                return
            while self._queue.qsize() >= self._max_pending:
                try:
                    self._queue.get_nowait()
                except queue.Empty:
                    break
            self._queue.put(snapshot)

    def get(self, timeout: float | None = None) -> list[Task]:
        """Block until the next snapshot arrives."""
        try:
            item = self._queue.get(timeout=timeout)
        except queue.Empty:
            raise TimeoutError(f"no task snapshot within {timeout}s") from None

        if item is None:
            # Keep the sentinel so every later read fails the same way.
            self._queue.put(None)
            raise SubscriptionClosed("task subscription is closed")
        return item

    def latest(self, timeout: float | None = None) -> list[Task]:
        """Return the freshest pending snapshot, skipping older ones."""
        snapshot = self.get(timeout=timeout)
        while True:
            try:
                item = self._queue.get_nowait()
            except queue.Empty:
                return snapshot
            if item is None:
                self._queue.put(None)
                return snapshot
            snapshot = item

    async def aget(self, timeout: float | None = None) -> list[Task]:
        try:
            return await asyncio.to_thread(self.get, timeout)
        except asyncio.CancelledError:
            # The worker thread is still parked in get(); the sentinel releases it.
            self.close()
            raise

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._queue.put(None)
        self._broadcaster.unsubscribe(self)

    def __iter__(self):
        while True:
            try:
                yield self.get()
            except SubscriptionClosed:
                return

    def __aiter__(self) -> TaskSubscription:
        return self

    async def __anext__(self) -> list[Task]:
        try:
            return await self.aget()
        except SubscriptionClosed:
            raise StopAsyncIteration from None

    def __enter__(self) -> TaskSubscription:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class SnapshotBroadcaster:
    """Fan-out of task snapshots to every open subscription."""

    def __init__(self, *, max_pending: int = DEFAULT_MAX_PENDING) -> None:
        self._max_pending = max_pending
        self._lock = threading.Lock()
        self._subscribers: set[TaskSubscription] = set()

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def subscribe(self, initial: list[Task]) -> TaskSubscription:
        sub = TaskSubscription(self, max_pending=self._max_pending)
        sub._push(list(initial))
        with self._lock:
            self._subscribers.add(sub)
        logger.debug("Task subscription opened (total=%d)", len(self._subscribers))
        return sub

    def unsubscribe(self, sub: TaskSubscription) -> None:
        with self._lock:
            self._subscribers.discard(sub)

    def publish(self, snapshot: list[Task]) -> int:
        """Deliver a copy of snapshot to every subscriber. Returns the number reached."""
        with self._lock:
            targets = list(self._subscribers)
        for sub in targets:
            sub._push(list(snapshot))
        return len(targets)

    def close_all(self) -> None:
        with self._lock:
            targets = list(self._subscribers)
        for sub in targets:
            sub.close()
