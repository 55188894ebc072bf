# src/focusflow/tracking/daily_log.py

"""
Daily log aggregation.

The functions in this module are the only writers of the completion counters of
a DailyLog. Each one is a pure transform of the `date -> DailyLog` mapping and
creates the log for a date lazily, with default targets, the first time that
date is touched.

A log is never edited retroactively by another day's action: un-completing a
task that was completed on a different day leaves every log untouched.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime

from ..config import DEFAULT_POMODOROS_TARGET, DEFAULT_TASKS_TARGET
from ..core.models import DailyLog
from ..storage import keys
from ..storage.persisted_store import PersistedStore

logger = logging.getLogger(__name__)

DailyLogs = dict[str, DailyLog]


@dataclass(frozen=True, slots=True)
class TargetDefaults:
    pomodoros_target: int = DEFAULT_POMODOROS_TARGET
    tasks_target: int = DEFAULT_TASKS_TARGET


def date_key(ts: float) -> str:
    """Local calendar date (YYYY-MM-DD) of an epoch timestamp."""
    return datetime.fromtimestamp(ts).astimezone().date().isoformat()


def today_key(now: datetime | None = None) -> str:
    now = now or datetime.now().astimezone()
    return now.date().isoformat()


def new_log(date: str, defaults: TargetDefaults) -> DailyLog:
    return DailyLog(
        date=date,
        pomodoros_target=defaults.pomodoros_target,
        tasks_target=defaults.tasks_target,
    )


def _with_log(logs: DailyLogs, log: DailyLog) -> DailyLogs:
    out = dict(logs)
    out[log.date] = log
    return out


def ensure_log(logs: DailyLogs, date: str, defaults: TargetDefaults = TargetDefaults()) -> DailyLogs:
    if date in logs:
        return logs
    return _with_log(logs, new_log(date, defaults))


def record_pomodoro_completed(
        logs: DailyLogs,
        date: str,
        defaults: TargetDefaults = TargetDefaults(),
) -> DailyLogs:
    log = logs.get(date) or new_log(date, defaults)
    return _with_log(logs, replace(log, pomodoros_completed=log.pomodoros_completed + 1))


def record_task_toggled(
        logs: DailyLogs,
        date: str,
        *,
        became_completed: bool,
        completion_was_on_date: bool,
        defaults: TargetDefaults = TargetDefaults(),
) -> DailyLogs:
    """
    became_completed: the task was just marked done (count +1 on date).
    completion_was_on_date: when un-completing, whether the previous completion
    happened on `date`; only then is the count decremented (floored at 0).
    """
    if became_completed:
        log = logs.get(date) or new_log(date, defaults)
        return _with_log(logs, replace(log, tasks_completed=log.tasks_completed + 1))

    if not completion_was_on_date:
        return logs

    log = logs.get(date) or new_log(date, defaults)
    return _with_log(logs, replace(log, tasks_completed=max(0, log.tasks_completed - 1)))


def set_targets(
        logs: DailyLogs,
        date: str,
        *,
        pomodoros_target: int,
        tasks_target: int,
        defaults: TargetDefaults = TargetDefaults(),
) -> DailyLogs:
    log = logs.get(date) or new_log(date, defaults)
    return _with_log(
        logs,
        replace(
            log,
            pomodoros_target=max(0, int(pomodoros_target)),
            tasks_target=max(0, int(tasks_target)),
        ),
    )


class DailyLogAggregator:
    """Applies the daily-log transforms through the persisted store."""

    def __init__(self, store: PersistedStore, defaults: TargetDefaults | None = None) -> None:
        self._store = store
        self._defaults = defaults or TargetDefaults()

    @property
    def defaults(self) -> TargetDefaults:
        return self._defaults

    def get(self, date: str) -> DailyLog | None:
        return self._store.read(keys.DAILY_LOGS).get(date)

    def ensure(self, date: str) -> DailyLog:
        logs = self._store.read(keys.DAILY_LOGS)
        if date not in logs:
            logs = self._store.write(keys.DAILY_LOGS, lambda prev: ensure_log(prev, date, self._defaults))
            logger.info("Daily log created date=%s", date)
        return logs[date]

    def record_pomodoro_completed(self, date: str) -> DailyLog:
        logs = self._store.write(
            keys.DAILY_LOGS,
            lambda prev: record_pomodoro_completed(prev, date, self._defaults),
        )
        log = logs[date]
        logger.info("Pomodoro recorded date=%s total=%s", date, log.pomodoros_completed)
        return log

    def record_task_toggled(self, date: str, *, became_completed: bool, completion_was_on_date: bool) -> None:
        if not became_completed and not completion_was_on_date:
            logger.debug("Task un-completed outside %s; logs unchanged", date)
            return
        self._store.write(
            keys.DAILY_LOGS,
            lambda prev: record_task_toggled(
                prev,
                date,
                became_completed=became_completed,
                completion_was_on_date=completion_was_on_date,
                defaults=self._defaults,
            ),
        )

    def set_targets(self, date: str, *, pomodoros_target: int, tasks_target: int) -> DailyLog:
        logs = self._store.write(
            keys.DAILY_LOGS,
            lambda prev: set_targets(
                prev,
                date,
                pomodoros_target=pomodoros_target,
                tasks_target=tasks_target,
                defaults=self._defaults,
            ),
        )
        return logs[date]
