# tests/test_loops.py

from __future__ import annotations

import asyncio

import pytest

from focusflow.core.models import TimerSettings
from focusflow.storage import keys
from focusflow.storage.keys import register_focus_keys
from focusflow.storage.persisted_store import PersistedStore
from focusflow.storage.watcher import run_change_watcher
from focusflow.timer.session_engine import SessionEngine
from focusflow.timer.ticker import run_ticker

from .fakes import InMemoryBackend, SharedMedium


@pytest.mark.asyncio
async def test_ticker_counts_down_running_engine() -> None:
    engine = SessionEngine(TimerSettings(work_duration=1))
    engine.start()

    runner = asyncio.create_task(run_ticker(engine, interval_seconds=0.01))

    await asyncio.sleep(0.1)
    runner.cancel()
    with pytest.raises(asyncio.CancelledError):
        await runner

    assert engine.remaining_seconds < 60
    assert engine.is_running


@pytest.mark.asyncio
async def test_ticker_leaves_paused_engine_alone() -> None:
    engine = SessionEngine(TimerSettings(work_duration=1))

    runner = asyncio.create_task(run_ticker(engine, interval_seconds=0.01))

    await asyncio.sleep(0.05)
    runner.cancel()
    with pytest.raises(asyncio.CancelledError):
        await runner

    assert engine.remaining_seconds == 60


@pytest.mark.asyncio
async def test_watcher_applies_changes_from_other_context() -> None:
    medium = SharedMedium()
    mine = InMemoryBackend(medium)
    theirs = InMemoryBackend(medium)

    store = PersistedStore(mine)
    register_focus_keys(store, default_timer_settings=TimerSettings())
    other = PersistedStore(theirs)
    register_focus_keys(other, default_timer_settings=TimerSettings())

    seen: list[str | None] = []
    store.subscribe(keys.ACTIVE_TASK_ID, seen.append)

    runner = asyncio.create_task(run_change_watcher(store, mine, interval_seconds=0.05))

    other.write(keys.ACTIVE_TASK_ID, "t1")
    await asyncio.sleep(0.15)
    runner.cancel()
    with pytest.raises(asyncio.CancelledError):
        await runner

    assert store.read(keys.ACTIVE_TASK_ID) == "t1"
    assert seen == ["t1"]
