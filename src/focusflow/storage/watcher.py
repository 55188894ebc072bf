# src/focusflow/storage/watcher.py

from __future__ import annotations

"""
Cross-context change watcher.

A small polling loop that:
- asks the durable backend for keys changed by other processes,
- hands each change to the store (which replaces its in-memory value).

To stop the watcher, cancel the coroutine/task.
"""

import asyncio
import logging

from ..core.ports import KeyValueBackend
from .persisted_store import PersistedStore

logger = logging.getLogger(__name__)


def sync_external_changes(store: PersistedStore, backend: KeyValueBackend) -> int:
    """Apply every pending external change once. Returns the number applied."""
    try:
        events = backend.poll_changes()
    except Exception:
        logger.exception("poll_changes failed")
        return 0

    for event in events:
        logger.info("External change observed key=%s removed=%s", event.key, event.raw is None)
        store.apply_external_change(event.key, event.raw)
    return len(events)


async def run_change_watcher(
        store: PersistedStore,
        backend: KeyValueBackend,
        *,
        interval_seconds: float = 1.0,
) -> None:
    sleep_s = max(0.05, float(interval_seconds))
    logger.debug("Change watcher started (interval=%.2fs)", sleep_s)

    try:
        while True:
            sync_external_changes(store, backend)
            await asyncio.sleep(sleep_s)
    finally:
        logger.debug("Change watcher stopped")
