# src/focusflow/storage/keys.py

from __future__ import annotations

from typing import Any

from ..core.models import DailyLog, Goal, Task, TimerSettings
from .persisted_store import PersistedStore

TASKS = "tasks"
GOALS = "goals"
DAILY_LOGS = "daily_logs"
POMODORO_SETTINGS = "pomodoro_settings"
ACTIVE_TASK_ID = "active_task_id"


def _decode_tasks(raw: Any) -> list[Task]:
    if not isinstance(raw, list):
        raise TypeError("tasks must be a list")
    return [Task.from_dict(item) for item in raw]


def _decode_goals(raw: Any) -> list[Goal]:
    if not isinstance(raw, list):
        raise TypeError("goals must be a list")
    return [Goal.from_dict(item) for item in raw]


def _decode_logs(raw: Any) -> dict[str, DailyLog]:
    if not isinstance(raw, dict):
        raise TypeError("daily logs must be an object")
    out: dict[str, DailyLog] = {}
    for date, item in raw.items():
        log = DailyLog.from_dict(item)
        if log.date != date:
            raise ValueError(f"daily log keyed {date!r} carries date {log.date!r}")
        out[date] = log
    return out


def _decode_active(raw: Any) -> str | None:
    if raw is None:
        return None
    if not isinstance(raw, str):
        raise TypeError("active task id must be a string or null")
    return raw or None


def register_focus_keys(store: PersistedStore, *, default_timer_settings: TimerSettings) -> None:
    """Declare the five logical stores with their defaults and codecs."""
    store.register(
        TASKS,
        [],
        decode=_decode_tasks,
        encode=lambda tasks: [t.to_dict() for t in tasks],
    )
    store.register(
        GOALS,
        [],
        decode=_decode_goals,
        encode=lambda goals: [g.to_dict() for g in goals],
    )
    store.register(
        DAILY_LOGS,
        {},
        decode=_decode_logs,
        encode=lambda logs: {date: log.to_dict() for date, log in logs.items()},
    )
    store.register(
        POMODORO_SETTINGS,
        default_timer_settings,
        decode=TimerSettings.from_dict,
        encode=lambda s: s.to_dict(),
    )
    store.register(ACTIVE_TASK_ID, None, decode=_decode_active)
