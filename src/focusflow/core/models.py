# src/focusflow/core/models.py

"""
Domain records persisted by the store.

All records are immutable; mutators build new values with dataclasses.replace()
so every store update is a pure transform of the previous value.

Serialized form is a JSON object with the snake_case field names below.
Decoders ignore unknown fields and raise ValueError/TypeError/KeyError on a
malformed payload (the store turns that into "use the default").
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import StrEnum
from typing import Any


class SessionType(StrEnum):
    WORK = "work"
    SHORT_BREAK = "short_break"
    LONG_BREAK = "long_break"

    @property
    def is_break(self) -> bool:
        return self is not SessionType.WORK


def _opt_float(raw: Any) -> float | None:
    return None if raw is None else float(raw)


def _opt_str(raw: Any) -> str | None:
    if raw is None:
        return None
    s = str(raw)
    return s or None


def _non_negative_int(raw: Any) -> int:
    value = int(raw)
    if value < 0:
        raise ValueError(f"expected a non-negative integer, got {value}")
    return value


@dataclass(frozen=True, slots=True)
class Task:
    id: str
    name: str
    estimated_pomodoros: int
    completed_pomodoros: int
    is_completed: bool
    created_at: float
    order: float
    completed_at: float | None = None
    goal_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Task:
        if not isinstance(raw, dict):
            raise TypeError("task must be an object")
        is_completed = bool(raw.get("is_completed", False))
        return cls(
            id=str(raw["id"]),
            name=str(raw["name"]),
            estimated_pomodoros=max(1, int(raw.get("estimated_pomodoros", 1))),
            completed_pomodoros=_non_negative_int(raw.get("completed_pomodoros", 0)),
            is_completed=is_completed,
            created_at=float(raw.get("created_at", 0.0)),
            order=float(raw.get("order", 0)),
            completed_at=_opt_float(raw.get("completed_at")) if is_completed else None,
            goal_id=_opt_str(raw.get("goal_id")),
        )


@dataclass(frozen=True, slots=True)
class Goal:
    id: str
    name: str
    created_at: float
    order: float
    description: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Goal:
        if not isinstance(raw, dict):
            raise TypeError("goal must be an object")
        return cls(
            id=str(raw["id"]),
            name=str(raw["name"]),
            created_at=float(raw.get("created_at", 0.0)),
            order=float(raw.get("order", 0)),
            description=_opt_str(raw.get("description")),
        )


@dataclass(frozen=True, slots=True)
class DailyLog:
    date: str  # YYYY-MM-DD (local calendar date)
    pomodoros_target: int
    tasks_target: int
    pomodoros_completed: int = 0
    tasks_completed: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> DailyLog:
        if not isinstance(raw, dict):
            raise TypeError("daily log must be an object")
        return cls(
            date=str(raw["date"]),
            pomodoros_target=_non_negative_int(raw.get("pomodoros_target", 0)),
            tasks_target=_non_negative_int(raw.get("tasks_target", 0)),
            pomodoros_completed=_non_negative_int(raw.get("pomodoros_completed", 0)),
            tasks_completed=_non_negative_int(raw.get("tasks_completed", 0)),
        )


@dataclass(frozen=True, slots=True)
class TimerSettings:
    """Durations are in minutes; pomodoros_per_set is the long-break threshold."""

    work_duration: int = 25
    short_break_duration: int = 5
    long_break_duration: int = 15
    pomodoros_per_set: int = 4

    def __post_init__(self) -> None:
        for name in ("work_duration", "short_break_duration", "long_break_duration", "pomodoros_per_set"):
            if int(getattr(self, name)) <= 0:
                raise ValueError(f"{name} must be > 0")

    @classmethod
    def clamped(
        cls,
        *,
        work_duration: int,
        short_break_duration: int,
        long_break_duration: int,
        pomodoros_per_set: int,
    ) -> TimerSettings:
        """Floor every field at its minimum valid value (1)."""
        return cls(
            work_duration=max(1, int(work_duration)),
            short_break_duration=max(1, int(short_break_duration)),
            long_break_duration=max(1, int(long_break_duration)),
            pomodoros_per_set=max(1, int(pomodoros_per_set)),
        )

    def minutes_for(self, session: SessionType) -> int:
        if session is SessionType.WORK:
            return self.work_duration
        if session is SessionType.SHORT_BREAK:
            return self.short_break_duration
        return self.long_break_duration

    def seconds_for(self, session: SessionType) -> int:
        return self.minutes_for(session) * 60

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> TimerSettings:
        if not isinstance(raw, dict):
            raise TypeError("timer settings must be an object")
        return cls(
            work_duration=int(raw["work_duration"]),
            short_break_duration=int(raw["short_break_duration"]),
            long_break_duration=int(raw["long_break_duration"]),
            pomodoros_per_set=int(raw["pomodoros_per_set"]),
        )
