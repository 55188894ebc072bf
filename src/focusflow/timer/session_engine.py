# src/focusflow/timer/session_engine.py

"""
Interval timer session engine.

An explicit finite-state machine over SessionType:

    WORK        --expire--> SHORT_BREAK | LONG_BREAK  (long every pomodoros_per_set)
    WORK        --skip----> SHORT_BREAK
    SHORT/LONG  --expire--> WORK
    SHORT/LONG  --skip----> WORK
    any         --reset---> WORK (fresh set)

The engine owns only transient countdown state. Durable effects of a finished
work session (daily log, active task) belong to SessionCompleted listeners.

Key invariants:
- skip() never emits SessionCompleted and never changes the in-set counter,
- natural expiry of WORK increments the in-set counter exactly once,
- apply_settings() always pauses and re-arms the current session's full duration,
- the in-set counter is only zeroed by reset(), not after a long break.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum

from ..core.models import SessionType, TimerSettings

logger = logging.getLogger(__name__)


class TransitionReason(StrEnum):
    EXPIRED = "expired"
    SKIPPED = "skipped"
    RESET = "reset"


@dataclass(frozen=True, slots=True)
class SessionCompleted:
    session_type: SessionType


@dataclass(frozen=True, slots=True)
class SessionTransition:
    previous: SessionType
    current: SessionType
    reason: TransitionReason
    completed_work_sessions_in_set: int


@dataclass(frozen=True, slots=True)
class TimerSnapshot:
    session_type: SessionType
    remaining_seconds: int
    total_seconds: int
    is_running: bool
    completed_work_sessions_in_set: int
    progress: float


CompletedListener = Callable[[SessionCompleted], None]
TransitionListener = Callable[[SessionTransition], None]


def next_after_expiry(
        session: SessionType,
        *,
        completed_work_sessions_in_set: int,
        pomodoros_per_set: int,
) -> SessionType:
    """
    Where natural expiry leads.

    completed_work_sessions_in_set must already include the session that just ended.
    """
    if session is SessionType.WORK:
        if completed_work_sessions_in_set % max(1, pomodoros_per_set) == 0:
            return SessionType.LONG_BREAK
        return SessionType.SHORT_BREAK
    return SessionType.WORK


def next_after_skip(session: SessionType) -> SessionType:
    return SessionType.SHORT_BREAK if session is SessionType.WORK else SessionType.WORK


def compute_progress(total_seconds: int, remaining_seconds: int) -> float:
    if total_seconds <= 0:
        return 0.0
    frac = (total_seconds - remaining_seconds) / total_seconds
    return max(0.0, min(1.0, frac))


def format_clock(seconds: int) -> str:
    seconds = max(0, int(seconds))
    return f"{seconds // 60:02d}:{seconds % 60:02d}"


class SessionEngine:
    def __init__(self, settings: TimerSettings | None = None) -> None:
        self._settings = settings or TimerSettings()
        self._session = SessionType.WORK
        self._remaining = self._settings.seconds_for(SessionType.WORK)
        self._running = False
        self._completed_in_set = 0

        self._completed_listeners: list[CompletedListener] = []
        self._transition_listeners: list[TransitionListener] = []

    # ---- state ----

    @property
    def settings(self) -> TimerSettings:
        return self._settings

    @property
    def session_type(self) -> SessionType:
        return self._session

    @property
    def remaining_seconds(self) -> int:
        return self._remaining

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def completed_work_sessions_in_set(self) -> int:
        return self._completed_in_set

    @property
    def total_seconds(self) -> int:
        return self._settings.seconds_for(self._session)

    @property
    def progress(self) -> float:
        return compute_progress(self.total_seconds, self._remaining)

    def snapshot(self) -> TimerSnapshot:
        return TimerSnapshot(
            session_type=self._session,
            remaining_seconds=self._remaining,
            total_seconds=self.total_seconds,
            is_running=self._running,
            completed_work_sessions_in_set=self._completed_in_set,
            progress=self.progress,
        )

    # ---- listeners ----

    def on_session_completed(self, listener: CompletedListener) -> Callable[[], None]:
        self._completed_listeners.append(listener)
        return lambda: self._discard(self._completed_listeners, listener)

    def on_transition(self, listener: TransitionListener) -> Callable[[], None]:
        self._transition_listeners.append(listener)
        return lambda: self._discard(self._transition_listeners, listener)

    @staticmethod
    def _discard(listeners: list, listener) -> None:
        try:
            listeners.remove(listener)
        except ValueError:
            pass

    # ---- operations ----

    def start(self) -> None:
        if self._running:
            return
        self._running = True
        logger.debug("Timer started session=%s remaining=%s", self._session.value, self._remaining)

    def pause(self) -> None:
        if not self._running:
            return
        self._running = False
        logger.debug("Timer paused session=%s remaining=%s", self._session.value, self._remaining)

    def toggle(self) -> bool:
        if self._running:
            self.pause()
        else:
            self.start()
        return self._running

    def tick(self) -> bool:
        """
        Advance the countdown by one second.

        Returns True if this tick finished the current session.
        """
        if not self._running:
            return False
        if self._remaining > 0:
            self._remaining -= 1
        if self._remaining == 0:
            self._expire()
            return True
        return False

    def reset(self) -> None:
        previous = self._session
        self._running = False
        self._completed_in_set = 0
        self._enter(SessionType.WORK)
        logger.info("Timer reset (fresh set)")
        self._emit_transition(previous, TransitionReason.RESET)

    def skip(self) -> None:
        previous = self._session
        self._running = False
        self._enter(next_after_skip(previous))
        logger.info("Session skipped %s -> %s", previous.value, self._session.value)
        self._emit_transition(previous, TransitionReason.SKIPPED)

    def apply_settings(self, settings: TimerSettings) -> None:
        self._settings = settings
        self._running = False
        self._remaining = settings.seconds_for(self._session)
        logger.info(
            "Timer settings applied work=%s short=%s long=%s per_set=%s",
            settings.work_duration,
            settings.short_break_duration,
            settings.long_break_duration,
            settings.pomodoros_per_set,
        )

    # ---- internals ----

    def _enter(self, session: SessionType) -> None:
        self._session = session
        self._remaining = self._settings.seconds_for(session)

    def _expire(self) -> None:
        finished = self._session
        self._running = False

        event = SessionCompleted(session_type=finished)
        for listener in list(self._completed_listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("SessionCompleted listener failed session=%s", finished.value)

        if finished is SessionType.WORK:
            self._completed_in_set += 1

        nxt = next_after_expiry(
            finished,
            completed_work_sessions_in_set=self._completed_in_set,
            pomodoros_per_set=self._settings.pomodoros_per_set,
        )
        self._enter(nxt)
        logger.info(
            "Session completed %s -> %s (in_set=%s)",
            finished.value,
            nxt.value,
            self._completed_in_set,
        )
        self._emit_transition(finished, TransitionReason.EXPIRED)

    def _emit_transition(self, previous: SessionType, reason: TransitionReason) -> None:
        event = SessionTransition(
            previous=previous,
            current=self._session,
            reason=reason,
            completed_work_sessions_in_set=self._completed_in_set,
        )
        for listener in list(self._transition_listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Transition listener failed reason=%s", reason.value)
