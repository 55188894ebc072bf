# tests/test_llm_client.py

from __future__ import annotations

from types import SimpleNamespace

import httpx
import openai
import pytest

from focusflow.llm.client import OpenRouterLLMClient, friendly_llm_error_message

_REQUEST = httpx.Request("POST", "https://openrouter.test/api/v1/chat/completions")


def _status_error(cls: type[openai.APIStatusError], status: int) -> openai.APIStatusError:
    return cls(f"HTTP {status}", response=httpx.Response(status, request=_REQUEST), body=None)


def _chunk(text: str) -> SimpleNamespace:
    return SimpleNamespace(choices=[SimpleNamespace(delta=SimpleNamespace(content=text))])


class FakeCompletions:
    """Stands in for client.chat.completions; behavior maps model -> chunks or exception."""

    def __init__(self, behavior: dict[str, object]) -> None:
        self.behavior = behavior
        self.models: list[str] = []

    def create(self, *, model: str, **kwargs):
        self.models.append(model)
        outcome = self.behavior[model]
        if isinstance(outcome, Exception):
            raise outcome
        return [_chunk(t) for t in outcome]  # type: ignore[union-attr]


def _client(behavior: dict[str, object]) -> tuple[OpenRouterLLMClient, FakeCompletions]:
    settings = SimpleNamespace(
        openrouter_api_key="test-key",
        openrouter_base_url="https://openrouter.test/api/v1",
        llm_models=list(behavior),
        extra_headers={},
    )
    client = OpenRouterLLMClient(settings)
    completions = FakeCompletions(behavior)
    client._client = SimpleNamespace(chat=SimpleNamespace(completions=completions))  # type: ignore[assignment]
    return client, completions


def _run(client: OpenRouterLLMClient) -> str:
    return "".join(client.stream_chat([{"role": "user", "content": "hi"}], "sys"))


def test_missing_model_is_skipped_for_later_calls() -> None:
    client, completions = _client({
        "gone/model": _status_error(openai.NotFoundError, 404),
        "good/model": ["Keep ", "going!"],
    })

    assert _run(client) == "Keep going!"
    assert _run(client) == "Keep going!"
    assert completions.models == ["gone/model", "good/model", "good/model"]


def test_rate_limit_falls_through_to_next_model() -> None:
    client, completions = _client({
        "busy/model": _status_error(openai.RateLimitError, 429),
        "good/model": ["ok"],
    })

    assert _run(client) == "ok"
    assert completions.models == ["busy/model", "good/model"]


def test_auth_error_fails_fast() -> None:
    client, completions = _client({
        "a/model": _status_error(openai.AuthenticationError, 401),
        "b/model": ["never"],
    })

    with pytest.raises(RuntimeError, match="authentication failed"):
        _run(client)
    assert completions.models == ["a/model"]


def test_all_models_rate_limited_reports_rate_limit() -> None:
    client, _ = _client({
        "a/model": _status_error(openai.RateLimitError, 429),
        "b/model": _status_error(openai.RateLimitError, 429),
    })

    with pytest.raises(RuntimeError, match="rate-limited"):
        _run(client)


def test_empty_stream_counts_as_failure() -> None:
    client, _ = _client({"quiet/model": []})

    with pytest.raises(RuntimeError, match="All LLM models failed"):
        _run(client)


def test_missing_key_is_rejected_with_friendly_message() -> None:
    settings = SimpleNamespace(
        openrouter_api_key=None,
        openrouter_base_url="https://openrouter.test/api/v1",
        llm_models=["a/model"],
        extra_headers={},
    )
    with pytest.raises(RuntimeError) as excinfo:
        OpenRouterLLMClient(settings)

    assert "missing API key" in friendly_llm_error_message(excinfo.value)
