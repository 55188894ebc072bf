# src/focusflow/llm/offline.py

from __future__ import annotations

import re
from collections.abc import Iterable

from ..core.ports import ChatMessage

_NUMBER_RE = re.compile(r"^\s*([A-Za-z ]+):\s*(\d+)\s*$", re.MULTILINE)


class OfflineLLMClient:
    """
    Offline deterministic LLM client used when no external API is configured.

    Behavior:
    - Motivation prompts -> a short message built from the numbers in the prompt
    - Anything else -> a friendly offline notice
    """

    def stream_chat(self, messages: list[ChatMessage], system_prompt: str) -> Iterable[str]:
        user_text = ""
        for m in reversed(messages):
            if m["role"] == "user":
                user_text = m["content"]
                break

        numbers = {label.strip().lower(): int(value) for label, value in _NUMBER_RE.findall(user_text)}
        if "pomodoros completed" not in numbers:
            yield (
                "Offline mode: no external LLM is configured.\n"
                "Set FOCUSFLOW_OPENROUTER_API_KEY (and FOCUSFLOW_LLM_MODELS) to enable real responses."
            )
            return

        done_p = numbers.get("pomodoros completed", 0)
        done_t = numbers.get("tasks completed", 0)
        goal_p = numbers.get("pomodoros goal", 0)
        goal_t = numbers.get("tasks goal", 0)

        yield f"You finished {done_p} pomodoros and {done_t} tasks this week. "
        if done_p >= goal_p and done_t >= goal_t:
            yield "You met your goals. Keep the same rhythm next week!"
        else:
            yield (
                "You're on your way. Try planning your top tasks each morning "
                "and protecting one more focus session a day."
            )
