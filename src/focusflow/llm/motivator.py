# src/focusflow/llm/motivator.py

"""
Weekly motivational message.

Input is the pre-aggregated weekly summary (four non-negative integers); output
is a single message. Any failure of the LLM collaborator is raised as
MotivationError so callers can show a retryable message. Nothing here touches
stored state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..core.ports import LLMClient

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a motivational AI assistant that provides encouraging messages to users "
    "based on their weekly productivity summary."
)

USER_TEMPLATE = """Generate a motivational message based on the following weekly summary:

Pomodoros Completed: {weekly_pomodoros_completed}
Tasks Completed: {weekly_tasks_completed}
Pomodoros Goal: {weekly_goal_pomodoros}
Tasks Goal: {weekly_goal_tasks}

Focus on encouraging the user to maintain or improve their productivity in the coming week. \
Acknowledge their accomplishments and suggest strategies for improvement if they fell short \
of their goals. Make the message concise and positive."""


class MotivationError(RuntimeError):
    """The motivator could not produce a message. Safe to retry."""


@dataclass(frozen=True, slots=True)
class WeeklySummaryInput:
    weekly_pomodoros_completed: int
    weekly_tasks_completed: int
    weekly_goal_pomodoros: int
    weekly_goal_tasks: int

    def __post_init__(self) -> None:
        for name in (
            "weekly_pomodoros_completed",
            "weekly_tasks_completed",
            "weekly_goal_pomodoros",
            "weekly_goal_tasks",
        ):
            if int(getattr(self, name)) < 0:
                raise ValueError(f"{name} must be >= 0")


@dataclass(frozen=True, slots=True)
class MotivationResult:
    motivation_message: str


def build_prompt(summary: WeeklySummaryInput) -> str:
    return USER_TEMPLATE.format(
        weekly_pomodoros_completed=summary.weekly_pomodoros_completed,
        weekly_tasks_completed=summary.weekly_tasks_completed,
        weekly_goal_pomodoros=summary.weekly_goal_pomodoros,
        weekly_goal_tasks=summary.weekly_goal_tasks,
    )


def generate_motivation(llm: LLMClient, summary: WeeklySummaryInput) -> MotivationResult:
    messages = [{"role": "user", "content": build_prompt(summary)}]
    try:
        text = "".join(llm.stream_chat(messages, SYSTEM_PROMPT)).strip()
    except Exception as e:
        logger.warning("Motivator failed: %s", e)
        raise MotivationError(str(e) or "Motivator failed.") from e

    if not text:
        raise MotivationError("Motivator returned an empty message.")

    logger.info("Motivation generated (%d chars)", len(text))
    return MotivationResult(motivation_message=text)
