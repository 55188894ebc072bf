# tests/fakes.py

from __future__ import annotations

import itertools
import time
from collections.abc import Iterable
from dataclasses import dataclass, field

from focusflow.core.ports import ChangeEvent, ChatMessage


class FakeLLMClient:
    """
    Deterministic LLM client for unit tests.

    - Captures calls for assertions
    - Yields a predefined text as a single chunk
    """

    def __init__(self, next_text: str = "ok") -> None:
        self.next_text = next_text
        self.calls: list[tuple[list[ChatMessage], str]] = []

    def stream_chat(self, messages: list[ChatMessage], system_prompt: str) -> Iterable[str]:
        self.calls.append((messages, system_prompt))
        yield self.next_text


class FailingLLMClient:
    """LLM client whose every call fails like a network outage (or with the given message)."""

    def __init__(self, message: str = "LLM network/timeout error. Try again later or change models.") -> None:
        self.message = message
        self.calls = 0

    def stream_chat(self, messages: list[ChatMessage], system_prompt: str) -> Iterable[str]:
        self.calls += 1
        raise RuntimeError(self.message)


class SlowLLMClient:
    """Blocks the calling thread like a slow network round-trip, then answers."""

    def __init__(self, delay_seconds: float, next_text: str = "ok") -> None:
        self.delay_seconds = delay_seconds
        self.next_text = next_text

    def stream_chat(self, messages: list[ChatMessage], system_prompt: str) -> Iterable[str]:
        time.sleep(self.delay_seconds)
        yield self.next_text


@dataclass(slots=True)
class SharedMedium:
    """
    In-memory durable medium shared by several "processes".

    Every write/delete is appended to a journal so each backend can tell which
    changes it has not seen yet.
    """

    values: dict[str, str] = field(default_factory=dict)
    journal: list[tuple[str, str | None, str]] = field(default_factory=list)  # (key, raw, writer)


_writer_ids = itertools.count(1)


class InMemoryBackend:
    """KeyValueBackend over a SharedMedium; one instance per simulated process."""

    def __init__(self, medium: SharedMedium | None = None, *, writer_id: str | None = None) -> None:
        self.medium = medium if medium is not None else SharedMedium()
        self.writer_id = writer_id or f"ctx-{next(_writer_ids)}"
        self._cursor = len(self.medium.journal)
        self.fail_writes = False
        self.closed = False

    def get(self, key: str) -> str | None:
        return self.medium.values.get(key)

    def set(self, key: str, raw: str) -> None:
        if self.fail_writes:
            raise OSError("disk full")
        self.medium.values[key] = raw
        self.medium.journal.append((key, raw, self.writer_id))

    def delete(self, key: str) -> None:
        self.medium.values.pop(key, None)
        self.medium.journal.append((key, None, self.writer_id))

    def poll_changes(self) -> list[ChangeEvent]:
        if self.closed:
            return []
        pending = self.medium.journal[self._cursor:]
        self._cursor = len(self.medium.journal)

        last: dict[str, tuple[str | None, str]] = {}
        for key, raw, writer in pending:
            last[key] = (raw, writer)
        return [
            ChangeEvent(key=key, raw=raw)
            for key, (raw, writer) in last.items()
            if writer != self.writer_id
        ]

    def close(self) -> None:
        self.closed = True
