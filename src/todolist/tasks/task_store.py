# src/todolist/tasks/task_store.py

from __future__ import annotations

import contextlib
import logging
import sqlite3
import threading
from collections.abc import Iterator
from pathlib import Path

from ..errors import StorageFailure
from .task_feed import DEFAULT_MAX_PENDING, SnapshotBroadcaster, TaskSubscription
from .task_models import Task

logger = logging.getLogger(__name__)

DEFAULT_DB_NAME = "task_db.sqlite3"
SCHEMA_VERSION = 1

_EXPECTED_COLUMNS = frozenset({"id", "name", "description", "completed"})


class TaskStore:
    """
    SQLite task store with a live snapshot feed.

    Schema:
    - a single `tasks` table, version stamped in PRAGMA user_version
    - on a version or column mismatch the table is dropped and recreated
      (destructive_migration=True) or StorageFailure is raised

    Writes:
    - insert() always creates a new row with a fresh AUTOINCREMENT id
    - update() is an upsert (INSERT OR REPLACE by id)
    - delete() of a missing row is a no-op
    Every write that changes the table publishes the full ordered snapshot
    to all subscriptions returned by list_all().

    Thread-safety:
    - each method opens its own SQLite connection
    - writes and their snapshot publication are serialized by one lock
    """

    def __init__(
        self,
        db_path: str | Path = DEFAULT_DB_NAME,
        *,
        timeout_seconds: float = 30.0,
        destructive_migration: bool = True,
        max_pending_snapshots: int = DEFAULT_MAX_PENDING,
    ) -> None:
        self._db_path = Path(db_path)
        self._timeout = float(timeout_seconds)
        self._destructive_migration = destructive_migration
        self._write_lock = threading.Lock()
        self._feed = SnapshotBroadcaster(max_pending=max_pending_snapshots)

        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageFailure(f"cannot create directory for {self._db_path}: {exc}") from exc

        self._ensure_schema()
        logger.info("TaskStore ready db=%s total=%s", self._db_path, self.count_tasks())

    @property
    def db_path(self) -> Path:
        return self._db_path

    def close(self) -> None:
        """End every open subscription. Connections are per call, nothing else to release."""
        self._feed.close_all()

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=self._timeout)
        conn.row_factory = sqlite3.Row
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")

    @contextlib.contextmanager
    def _session(self, action: str) -> Iterator[sqlite3.Connection]:
        try:
            conn = self._get_conn()
        except sqlite3.Error as exc:
            raise StorageFailure(f"{action}: cannot open {self._db_path}: {exc}") from exc
        try:
            yield conn
        except sqlite3.Error as exc:
            raise StorageFailure(f"{action} failed on {self._db_path}: {exc}") from exc
        finally:
            conn.close()

    def _ensure_schema(self) -> None:
        with self._session("schema check") as conn:
            (version,) = conn.execute("PRAGMA user_version").fetchone()
            cols = {row["name"] for row in conn.execute("PRAGMA table_info(tasks)")}

            if cols and (version != SCHEMA_VERSION or cols != _EXPECTED_COLUMNS):
                if not self._destructive_migration:
                    raise StorageFailure(
                        f"schema mismatch in {self._db_path}: version={version} "
                        f"columns={sorted(cols)} (expected version {SCHEMA_VERSION})"
                    )
                logger.warning(
                    "TaskStore schema mismatch (version=%s columns=%s); dropping tasks table",
                    version,
                    sorted(cols),
                )
                conn.execute("DROP TABLE tasks")

            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS tasks (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    description TEXT NOT NULL,
                    completed INTEGER NOT NULL DEFAULT 0
                )
                """
            )
            conn.execute(f"PRAGMA user_version = {SCHEMA_VERSION}")
            conn.commit()

    @staticmethod
    def _read_snapshot(conn: sqlite3.Connection) -> list[Task]:
        rows = conn.execute(
            "SELECT id, name, description, completed FROM tasks ORDER BY completed, id"
        ).fetchall()
        return [Task.from_row(r) for r in rows]

    def _publish(self, snapshot: list[Task]) -> None:
        # Caller holds the write lock and has already committed, so snapshots
        # go out in commit order and publishing never touches the database.
        reached = self._feed.publish(snapshot)
        logger.debug("Published snapshot size=%d subscribers=%d", len(snapshot), reached)

    # ---- public API ----

    def count_tasks(self) -> int:
        with self._session("count") as conn:
            (n,) = conn.execute("SELECT COUNT(*) FROM tasks").fetchone()
            return int(n)

    def snapshot(self) -> list[Task]:
        """Current table contents, incomplete tasks first, each group by id."""
        with self._session("list") as conn:
            return self._read_snapshot(conn)

    def get_task(self, task_id: int) -> Task | None:
        with self._session("get") as conn:
            row = conn.execute(
                "SELECT id, name, description, completed FROM tasks WHERE id = ?",
                (int(task_id),),
            ).fetchone()
            return Task.from_row(row) if row else None

    def list_all(self) -> TaskSubscription:
        """
        Open a live sequence of snapshots.

        The first snapshot is the current table; another one follows every
        successful write. Close the subscription (or use it as a context
        manager) when done.

        Each subscription buffers at most `max_pending_snapshots` unread
        snapshots. A reader that falls further behind loses the oldest ones
        but always receives the newest.
        """
        with self._write_lock:
            return self._feed.subscribe(self.snapshot())

    def insert(self, name: str, description: str) -> int:
        """Create an incomplete task and return its id. Content is stored as given."""
        with self._write_lock:
            with self._session("insert") as conn:
                cur = conn.execute(
                    "INSERT INTO tasks(name, description, completed) VALUES (?, ?, 0)",
                    (name, description),
                )
                rowid = cur.lastrowid
                if rowid is None:
                    raise StorageFailure("SQLite did not return lastrowid for tasks insert")
                snapshot = self._read_snapshot(conn)
                conn.commit()
            task_id = int(rowid)
            logger.debug("Task inserted id=%s", task_id)
            self._publish(snapshot)
            return task_id

    def update(self, task: Task) -> None:
        """
        Replace the row with task.id by task.

        A missing id is inserted with that id (upsert). id <= 0 means
        "not assigned yet" and gets a fresh id.
        """
        with self._write_lock:
            with self._session("update") as conn:
                if task.id > 0:
                    conn.execute(
                        "INSERT OR REPLACE INTO tasks(id, name, description, completed) "
                        "VALUES (?, ?, ?, ?)",
                        (int(task.id), task.name, task.description, int(task.completed)),
                    )
                else:
                    conn.execute(
                        "INSERT INTO tasks(name, description, completed) VALUES (?, ?, ?)",
                        (task.name, task.description, int(task.completed)),
                    )
                snapshot = self._read_snapshot(conn)
                conn.commit()
            logger.debug("Task upserted id=%s completed=%s", task.id, task.completed)
            self._publish(snapshot)

    def delete(self, task: Task) -> None:
        """Remove the row with task.id. Missing rows are ignored."""
        with self._write_lock:
            with self._session("delete") as conn:
                cur = conn.execute("DELETE FROM tasks WHERE id = ?", (int(task.id),))
                removed = cur.rowcount
                snapshot = self._read_snapshot(conn) if removed > 0 else None
                conn.commit()
            if snapshot is None:
                logger.debug("Task delete id=%s: no such row", task.id)
                return
            logger.debug("Task deleted id=%s", task.id)
            self._publish(snapshot)
