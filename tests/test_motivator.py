# tests/test_motivator.py

from __future__ import annotations

from datetime import date

import pytest

from focusflow.core.models import DailyLog
from focusflow.llm.motivator import (
    MotivationError,
    WeeklySummaryInput,
    build_prompt,
    generate_motivation,
)
from focusflow.llm.offline import OfflineLLMClient
from focusflow.tracking.summary import build_weekly_summary, last_days

from .fakes import FailingLLMClient, FakeLLMClient


def _log(day: str, p_done: int, t_done: int, p_target: int = 8, t_target: int = 3) -> DailyLog:
    return DailyLog(
        date=day,
        pomodoros_target=p_target,
        tasks_target=t_target,
        pomodoros_completed=p_done,
        tasks_completed=t_done,
    )


def test_last_days_window_is_oldest_first() -> None:
    assert last_days(date(2024, 1, 10), 3) == ["2024-01-08", "2024-01-09", "2024-01-10"]


def test_weekly_summary_counts_missing_days_as_zero() -> None:
    logs = {
        "2024-01-04": _log("2024-01-04", 5, 2),
        "2024-01-08": _log("2024-01-08", 3, 1),
        "2024-01-10": _log("2024-01-10", 6, 2, p_target=6),
        "2024-01-03": _log("2024-01-03", 99, 99),  # outside the window
    }
    summary = build_weekly_summary(logs, date(2024, 1, 10))

    assert len(summary.days) == 7
    assert summary.days[0].date == "2024-01-04"
    assert summary.days[-1].date == "2024-01-10"
    assert summary.total_pomodoros_completed == 14
    assert summary.total_tasks_completed == 5
    assert summary.total_pomodoros_target == 22
    assert summary.total_tasks_target == 9
    assert "2024-01-05" not in logs


def test_generate_motivation_sends_summary_numbers() -> None:
    llm = FakeLLMClient("  Great week!  ")
    summary = WeeklySummaryInput(
        weekly_pomodoros_completed=12,
        weekly_tasks_completed=4,
        weekly_goal_pomodoros=20,
        weekly_goal_tasks=6,
    )

    result = generate_motivation(llm, summary)

    assert result.motivation_message == "Great week!"
    messages, _system = llm.calls[0]
    prompt = messages[0]["content"]
    assert "Pomodoros Completed: 12" in prompt
    assert "Tasks Goal: 6" in prompt


def test_llm_failure_raises_motivation_error() -> None:
    llm = FailingLLMClient()
    with pytest.raises(MotivationError):
        generate_motivation(llm, WeeklySummaryInput(0, 0, 0, 0))
    assert llm.calls == 1


def test_empty_llm_output_raises_motivation_error() -> None:
    with pytest.raises(MotivationError):
        generate_motivation(FakeLLMClient("   "), WeeklySummaryInput(1, 1, 1, 1))


def test_negative_summary_is_rejected() -> None:
    with pytest.raises(ValueError):
        WeeklySummaryInput(-1, 0, 0, 0)


def test_offline_client_reads_numbers_from_prompt() -> None:
    prompt = build_prompt(WeeklySummaryInput(10, 3, 8, 3))
    text = "".join(OfflineLLMClient().stream_chat([{"role": "user", "content": prompt}], "sys"))
    assert "10 pomodoros and 3 tasks" in text
    assert "met your goals" in text
