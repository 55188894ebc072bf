# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from focusflow.cli.bootstrap import create_initial_state
from focusflow.core.models import TimerSettings
from focusflow.core.state import AppState
from focusflow.storage.keys import register_focus_keys
from focusflow.storage.persisted_store import PersistedStore

from .fakes import FakeLLMClient, InMemoryBackend, SharedMedium


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and core modules.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="focusflow-test",
        data_dir=tmp_path,
        state_db_path=tmp_path / "state.sqlite3",
        default_timer_settings=TimerSettings(),
        default_pomodoros_target=8,
        default_tasks_target=3,
        tick_seconds=0.01,
        sync_poll_seconds=0.01,
        llm_models=[],
    )


@pytest.fixture()
def medium() -> SharedMedium:
    return SharedMedium()


@pytest.fixture()
def store(medium: SharedMedium) -> PersistedStore:
    """A store with the focus keys over an in-memory backend (nothing pre-created)."""
    s = PersistedStore(InMemoryBackend(medium))
    register_focus_keys(s, default_timer_settings=TimerSettings())
    return s


@pytest.fixture()
def state(settings: SimpleNamespace, medium: SharedMedium) -> AppState:
    """
    AppState wired through the real composition root with deterministic fakes.

    The in-memory backend lets tests open a second "process" on the same medium.
    """
    return create_initial_state(
        settings=settings,
        backend=InMemoryBackend(medium),
        llm=FakeLLMClient("Keep going!"),
    )
