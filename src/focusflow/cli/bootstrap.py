# src/focusflow/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the durable backend, store, aggregator, timer engine and LLM client into AppState,
- connects the engine to the settings key and to work-session accounting.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.ports import KeyValueBackend, LLMClient
from ..core.state import AppState
from ..llm.client import OpenRouterLLMClient
from ..llm.offline import OfflineLLMClient
from ..storage import keys
from ..storage.backend import SQLiteKeyValueBackend
from ..storage.persisted_store import PersistedStore
from ..timer.session_engine import SessionEngine
from ..tracking.daily_log import DailyLogAggregator, TargetDefaults, today_key
from ..tracking.task_api import handle_session_completed

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.state_db_path.parent.mkdir(parents=True, exist_ok=True)


def _make_llm(settings) -> LLMClient:
    try:
        return OpenRouterLLMClient(settings)
    except Exception as e:
        # Fallback for local runs without external services.
        logger.info("LLM unavailable (%s); using offline motivator.", e)
        return OfflineLLMClient()


def create_initial_state(
        *,
        settings=None,
        backend: KeyValueBackend | None = None,
        llm: LLMClient | None = None,
) -> AppState:
    """
    Create AppState from the provided settings.

    backend/llm are injectable for tests; by default a SQLite file under
    settings.state_db_path and an OpenRouter client (offline fallback) are used.
    """
    if settings is None:
        settings = get_settings()

    if backend is None:
        _ensure_local_dirs(settings)
        backend = SQLiteKeyValueBackend(settings.state_db_path)

    store = PersistedStore(backend)
    keys.register_focus_keys(store, default_timer_settings=settings.default_timer_settings)

    engine = SessionEngine(store.read(keys.POMODORO_SETTINGS))
    aggregator = DailyLogAggregator(
        store,
        TargetDefaults(
            pomodoros_target=settings.default_pomodoros_target,
            tasks_target=settings.default_tasks_target,
        ),
    )

    state = AppState(
        settings=settings,
        backend=backend,
        store=store,
        aggregator=aggregator,
        engine=engine,
        llm=llm if llm is not None else _make_llm(settings),
    )

    # Settings replaced here or in another process -> engine pauses and re-arms.
    store.subscribe(keys.POMODORO_SETTINGS, engine.apply_settings)
    engine.on_session_completed(lambda event: handle_session_completed(state, event))

    aggregator.ensure(today_key())
    logger.info(
        "State ready: tasks=%s goals=%s logs=%s",
        len(store.read(keys.TASKS)),
        len(store.read(keys.GOALS)),
        len(store.read(keys.DAILY_LOGS)),
    )
    return state


def shutdown_state(state: AppState) -> None:
    """Best-effort teardown (no exceptions should escape)."""
    try:
        state.engine.pause()
    except Exception:
        logger.debug("Engine pause failed.", exc_info=True)

    try:
        state.store.close()
    except Exception:
        logger.exception("Store close failed.")
