# tests/test_backend.py

from __future__ import annotations

from pathlib import Path

from focusflow.storage.backend import SQLiteKeyValueBackend


def test_get_set_delete(tmp_path: Path) -> None:
    kv = SQLiteKeyValueBackend(tmp_path / "kv.sqlite3")
    assert kv.get("tasks") is None

    kv.set("tasks", "[]")
    assert kv.get("tasks") == "[]"

    kv.set("tasks", '[{"id": "1"}]')
    assert kv.get("tasks") == '[{"id": "1"}]'

    kv.delete("tasks")
    assert kv.get("tasks") is None


def test_poll_reports_only_other_writers(tmp_path: Path) -> None:
    db = tmp_path / "kv.sqlite3"
    a = SQLiteKeyValueBackend(db, writer_id="a")
    b = SQLiteKeyValueBackend(db, writer_id="b")

    a.set("goals", "[]")
    assert a.poll_changes() == []

    events = b.poll_changes()
    assert [(e.key, e.raw) for e in events] == [("goals", "[]")]
    # Already seen.
    assert b.poll_changes() == []

    a.delete("goals")
    events = b.poll_changes()
    assert [(e.key, e.raw) for e in events] == [("goals", None)]


def test_existing_rows_are_not_reported_as_changes(tmp_path: Path) -> None:
    db = tmp_path / "kv.sqlite3"
    SQLiteKeyValueBackend(db, writer_id="old").set("tasks", "[]")

    fresh = SQLiteKeyValueBackend(db, writer_id="new")
    assert fresh.poll_changes() == []
    assert fresh.get("tasks") == "[]"


def test_closed_backend_stops_reporting(tmp_path: Path) -> None:
    db = tmp_path / "kv.sqlite3"
    a = SQLiteKeyValueBackend(db, writer_id="a")
    b = SQLiteKeyValueBackend(db, writer_id="b")
    b.close()

    a.set("tasks", "[]")
    assert b.poll_changes() == []
