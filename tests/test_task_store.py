# tests/test_task_store.py

from __future__ import annotations

import sqlite3
from pathlib import Path

import pytest

from todolist.errors import StorageFailure
from todolist.tasks.task_models import Task
from todolist.tasks.task_store import SCHEMA_VERSION, TaskStore


def _flags(store: TaskStore) -> list[tuple[int, bool]]:
    return [(t.id, t.completed) for t in store.snapshot()]


def test_insert_assigns_increasing_ids_and_defaults_incomplete(store: TaskStore) -> None:
    a = store.insert("Buy milk", "2%")
    b = store.insert("Walk dog", "")
    assert b > a > 0

    tasks = store.snapshot()
    assert tasks == [
        Task(id=a, name="Buy milk", description="2%", completed=False),
        Task(id=b, name="Walk dog", description="", completed=False),
    ]
    assert store.count_tasks() == 2


def test_snapshot_orders_incomplete_first_then_by_id(store: TaskStore) -> None:
    ids = [store.insert(f"t{i}", "") for i in range(5)]
    store.update(store.get_task(ids[0]).with_completed(True))
    store.update(store.get_task(ids[3]).with_completed(True))

    assert _flags(store) == [
        (ids[1], False),
        (ids[2], False),
        (ids[4], False),
        (ids[0], True),
        (ids[3], True),
    ]


def test_concrete_scenario(store: TaskStore) -> None:
    first = store.insert("Buy milk", "2%")
    second = store.insert("Walk dog", "")
    assert (first, second) == (1, 2)
    assert _flags(store) == [(1, False), (2, False)]

    store.update(Task(id=1, name="Buy milk", description="2%", completed=True))
    assert _flags(store) == [(2, False), (1, True)]

    store.delete(Task(id=2, name="Walk dog", description=""))
    assert _flags(store) == [(1, True)]


def test_toggle_keeps_id_and_fields(store: TaskStore) -> None:
    tid = store.insert("Write report", "due friday")
    store.update(store.get_task(tid).with_completed(True))

    task = store.get_task(tid)
    assert task == Task(id=tid, name="Write report", description="due friday", completed=True)


def test_deleted_id_is_never_reused(store: TaskStore) -> None:
    a = store.insert("a", "")
    b = store.insert("b", "")
    store.delete(store.get_task(b))
    store.delete(store.get_task(a))

    c = store.insert("c", "")
    assert c > b
    assert [t.id for t in store.snapshot()] == [c]


def test_delete_missing_is_noop(store: TaskStore) -> None:
    tid = store.insert("keep", "")
    before = store.snapshot()

    store.delete(Task(id=tid + 100, name="ghost", description=""))
    assert store.snapshot() == before


def test_update_missing_id_upserts(store: TaskStore) -> None:
    store.update(Task(id=42, name="imported", description="from elsewhere", completed=True))
    assert store.get_task(42) == Task(id=42, name="imported", description="from elsewhere", completed=True)

    # Later inserts continue after the highest id seen.
    assert store.insert("next", "") > 42


def test_update_without_id_gets_fresh_id(store: TaskStore) -> None:
    existing = store.insert("existing", "")
    store.update(Task(id=0, name="unsaved", description=""))

    names = {t.name: t.id for t in store.snapshot()}
    assert names["unsaved"] > existing


def test_empty_and_whitespace_content_is_accepted(store: TaskStore) -> None:
    tid = store.insert("", "   ")
    assert store.get_task(tid) == Task(id=tid, name="", description="   ", completed=False)


def test_data_survives_reopen(settings) -> None:
    s1 = TaskStore(settings.tasks_db_path)
    tid = s1.insert("persist me", "")
    s1.close()

    s2 = TaskStore(settings.tasks_db_path)
    assert s2.get_task(tid) is not None
    s2.close()


def test_schema_version_is_stamped(store: TaskStore) -> None:
    conn = sqlite3.connect(str(store.db_path))
    try:
        (version,) = conn.execute("PRAGMA user_version").fetchone()
    finally:
        conn.close()
    assert version == SCHEMA_VERSION


def test_foreign_schema_is_reset(tmp_path: Path) -> None:
    db = tmp_path / "legacy.sqlite3"
    conn = sqlite3.connect(str(db))
    conn.execute(
        "CREATE TABLE tasks (id INTEGER PRIMARY KEY AUTOINCREMENT, taskName TEXT, body TEXT, isCompleted INTEGER)"
    )
    conn.execute("INSERT INTO tasks(taskName, body, isCompleted) VALUES ('old', 'row', 0)")
    conn.commit()
    conn.close()

    store = TaskStore(db)
    assert store.count_tasks() == 0
    tid = store.insert("fresh", "")
    assert store.get_task(tid).name == "fresh"
    store.close()


def test_version_mismatch_without_destructive_migration_fails(tmp_path: Path) -> None:
    db = tmp_path / "v2.sqlite3"
    TaskStore(db).insert("keep", "")

    conn = sqlite3.connect(str(db))
    conn.execute("PRAGMA user_version = 2")
    conn.commit()
    conn.close()

    with pytest.raises(StorageFailure):
        TaskStore(db, destructive_migration=False)

    # The default policy drops and recreates the table.
    assert TaskStore(db).count_tasks() == 0


def test_unusable_path_raises_storage_failure(tmp_path: Path) -> None:
    # A directory cannot be opened as a database file.
    with pytest.raises(StorageFailure) as exc_info:
        TaskStore(tmp_path)
    assert isinstance(exc_info.value.__cause__, sqlite3.Error)


def test_committed_write_succeeds_without_a_separate_snapshot_read(store: TaskStore, monkeypatch) -> None:
    with store.list_all() as sub:
        assert sub.get(timeout=1) == []

        def broken_snapshot() -> list[Task]:
            raise StorageFailure("list failed: disk I/O error")

        monkeypatch.setattr(store, "snapshot", broken_snapshot)

        tid = store.insert("Buy milk", "2%")
        assert store.get_task(tid) == Task(id=tid, name="Buy milk", description="2%")
        assert sub.get(timeout=1) == [Task(id=tid, name="Buy milk", description="2%")]

        store.update(Task(id=tid, name="Buy milk", description="2%", completed=True))
        assert sub.get(timeout=1) == [Task(id=tid, name="Buy milk", description="2%", completed=True)]

        store.delete(Task(id=tid, name="Buy milk", description="2%"))
        assert sub.get(timeout=1) == []
        assert store.get_task(tid) is None


def test_published_snapshots_are_plain_task_lists(store: TaskStore) -> None:
    store.insert("a", "")
    with store.list_all() as sub:
        snapshot = sub.get(timeout=1)
    assert type(snapshot) is list
    assert all(type(t) is Task for t in snapshot)
