# src/focusflow/storage/backend.py

from __future__ import annotations

import contextlib
import logging
import sqlite3
import time
import uuid
from pathlib import Path

from ..core.ports import ChangeEvent

logger = logging.getLogger(__name__)


class SQLiteKeyValueBackend:
    """
    SQLite key/value medium shared by every process that opens the same file.

    One row per logical key:
    - value is the serialized payload (NULL is a tombstone for a removed key),
    - revision is bumped on every write/delete,
    - writer identifies the backend instance that made the last change.

    poll_changes() compares revisions with the ones seen last time and reports
    rows whose last writer is another instance. That is how a process learns
    about writes made elsewhere (the "storage event" of the durable medium).

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(self, db_path: str | Path = "state.sqlite3", *, writer_id: str | None = None) -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._writer_id = writer_id or uuid.uuid4().hex
        self._seen: dict[str, int] = {}
        self._closed = False
        self._ensure_schema()
        self._seen = self._current_revisions()
        logger.info("KV backend ready db=%s keys=%s writer=%s", self._db_path, len(self._seen), self._writer_id)

    @property
    def writer_id(self) -> str:
        return self._writer_id

    def close(self) -> None:
        """Stop reporting changes (no persistent connections to close)."""
        self._closed = True
        self._seen.clear()

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(Exception):
            conn.execute("PRAGMA journal_mode=WAL")

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv (
                    key TEXT PRIMARY KEY,
                    value TEXT,
                    revision INTEGER NOT NULL DEFAULT 1,
                    writer TEXT NOT NULL DEFAULT '',
                    updated_at REAL NOT NULL DEFAULT 0
                )
                """
            )
            conn.commit()
        finally:
            conn.close()

    def _current_revisions(self) -> dict[str, int]:
        conn = self._get_conn()
        try:
            rows = conn.execute("SELECT key, revision FROM kv").fetchall()
            return {str(r["key"]): int(r["revision"]) for r in rows}
        finally:
            conn.close()

    def _upsert(self, key: str, raw: str | None) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO kv(key, value, revision, writer, updated_at)
                VALUES (?, ?, 1, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    revision = kv.revision + 1,
                    writer = excluded.writer,
                    updated_at = excluded.updated_at
                """,
                (key, raw, self._writer_id, time.time()),
            )
            conn.commit()
        finally:
            conn.close()

    # ---- public API ----

    def get(self, key: str) -> str | None:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
            if row is None or row["value"] is None:
                return None
            return str(row["value"])
        finally:
            conn.close()

    def set(self, key: str, raw: str) -> None:
        self._upsert(key, raw)
        logger.debug("KV set key=%s bytes=%s", key, len(raw))

    def delete(self, key: str) -> None:
        self._upsert(key, None)
        logger.debug("KV delete key=%s", key)

    def poll_changes(self) -> list[ChangeEvent]:
        if self._closed:
            return []

        conn = self._get_conn()
        try:
            rows = conn.execute("SELECT key, value, revision, writer FROM kv").fetchall()
        finally:
            conn.close()

        events: list[ChangeEvent] = []
        for row in rows:
            key = str(row["key"])
            revision = int(row["revision"])
            if self._seen.get(key) == revision:
                continue
            self._seen[key] = revision
            if row["writer"] == self._writer_id:
                continue
            raw = row["value"]
            events.append(ChangeEvent(key=key, raw=None if raw is None else str(raw)))

        if events:
            logger.debug("KV external changes: %s", [e.key for e in events])
        return events
