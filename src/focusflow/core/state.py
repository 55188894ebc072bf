# src/focusflow/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ..storage.persisted_store import PersistedStore
from .ports import KeyValueBackend, LLMClient

if TYPE_CHECKING:
    from ..timer.session_engine import SessionEngine
    from ..tracking.daily_log import DailyLogAggregator


@dataclass
class AppState:
    """
    Runtime state shared by commands and background loops.

    settings is kept loosely typed so tests can pass a SimpleNamespace.
    """

    settings: Any
    backend: KeyValueBackend
    store: PersistedStore
    aggregator: DailyLogAggregator
    engine: SessionEngine
    llm: LLMClient
