# src/focusflow/tracking/summary.py

"""Read-side views over the daily logs (no writes)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta

from ..core.models import DailyLog
from ..llm.motivator import WeeklySummaryInput


@dataclass(frozen=True, slots=True)
class WeeklySummary:
    days: list[DailyLog]  # oldest first
    total_pomodoros_completed: int
    total_tasks_completed: int
    total_pomodoros_target: int
    total_tasks_target: int

    def to_motivator_input(self) -> WeeklySummaryInput:
        return WeeklySummaryInput(
            weekly_pomodoros_completed=self.total_pomodoros_completed,
            weekly_tasks_completed=self.total_tasks_completed,
            weekly_goal_pomodoros=self.total_pomodoros_target,
            weekly_goal_tasks=self.total_tasks_target,
        )


def last_days(today: date, n: int = 7) -> list[str]:
    return [(today - timedelta(days=i)).isoformat() for i in range(n - 1, -1, -1)]


def build_weekly_summary(logs: dict[str, DailyLog], today: date) -> WeeklySummary:
    """
    The 7-day window ending today.

    Days without a log count as zero targets and zero completions; the window
    never creates logs.
    """
    days = [
        logs.get(d) or DailyLog(date=d, pomodoros_target=0, tasks_target=0)
        for d in last_days(today, 7)
    ]
    return WeeklySummary(
        days=days,
        total_pomodoros_completed=sum(d.pomodoros_completed for d in days),
        total_tasks_completed=sum(d.tasks_completed for d in days),
        total_pomodoros_target=sum(d.pomodoros_target for d in days),
        total_tasks_target=sum(d.tasks_target for d in days),
    )
