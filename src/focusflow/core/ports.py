# src/focusflow/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps the durable medium and the LLM provider swappable and makes
testing easier (in-memory backend, fake LLM).
"""

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol

ChatMessage = dict[str, str]
# OpenAI-style chat messages: {"role": "...", "content": "..."}.


@dataclass(frozen=True, slots=True)
class ChangeEvent:
    """
    A durable key changed in another execution context.

    raw is the serialized value written there, or None if the key was removed.
    """

    key: str
    raw: str | None


class KeyValueBackend(Protocol):
    """Durable string key/value medium shared by several execution contexts."""

    def get(self, key: str) -> str | None: ...
    def set(self, key: str, raw: str) -> None: ...
    def delete(self, key: str) -> None: ...

    def poll_changes(self) -> list[ChangeEvent]:
        """Changes made by *other* contexts since the previous poll."""
        ...

    def close(self) -> None: ...


class LLMClient(Protocol):
    """Streaming chat completion client (OpenAI/OpenRouter-compatible)."""
    def stream_chat(self, messages: list[ChatMessage], system_prompt: str) -> Iterable[str]: ...
