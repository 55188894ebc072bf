# tests/test_commands.py

from __future__ import annotations

import asyncio

import pytest

from focusflow.cli.commands import CommandRegistry, registry
from focusflow.storage import keys
from focusflow.timer.ticker import run_ticker
from focusflow.tracking import task_api
from focusflow.tracking.daily_log import today_key

from .fakes import FailingLLMClient, SlowLLMClient


def test_command_registry_routes_2_and_3_params(state) -> None:
    reg = CommandRegistry()
    called = {"h2": 0, "h3": 0}
    notes: list[str] = []

    def h2(state, args):
        called["h2"] += 1
        return "h2"

    def h3(state, args, emit):
        called["h3"] += 1
        if emit is not None:
            emit("note")
        return "h3"

    reg.register("a", h2, "a")
    reg.register("b", h3, "b", aliases=["bb"])

    assert reg.handle(state, "/a x") == "h2"
    assert reg.handle(state, "/BB y", emit=notes.append) == "h3"
    assert called["h2"] == 1
    assert called["h3"] == 1
    assert notes == ["note"]


def test_command_registry_unknown_and_non_command(state) -> None:
    reg = CommandRegistry()
    assert reg.handle(state, "hello") is None
    assert "Unknown command" in (reg.handle(state, "/nope") or "")
    assert "Empty command" in (reg.handle(state, "/") or "")


def test_invalid_input_is_reported_not_raised(state) -> None:
    reply = registry.handle(state, "/task add")
    assert reply is not None and reply.startswith("Error:")
    assert task_api.list_tasks(state) == []

    reply = registry.handle(state, "/settings a b c d")
    assert reply is not None and reply.startswith("Error:")


def test_task_commands_flow(state) -> None:
    reply = registry.handle(state, "/task add -p 3 Write the report")
    assert reply is not None and "Write the report" in reply

    task = task_api.list_tasks(state)[0]
    assert task.estimated_pomodoros == 3
    assert state.store.read(keys.ACTIVE_TASK_ID) == task.id

    reply = registry.handle(state, f"/t done {task.id[:6]}")
    assert "Task complete!" in (reply or "")
    assert state.aggregator.get(today_key()).tasks_completed == 1

    reply = registry.handle(state, f"/task done {task.id}")
    assert "reopened" in (reply or "")
    assert state.aggregator.get(today_key()).tasks_completed == 0

    registry.handle(state, "/task select none")
    assert state.store.read(keys.ACTIVE_TASK_ID) is None

    registry.handle(state, f"/task rm {task.id[:6]}")
    assert task_api.list_tasks(state) == []


def test_goal_commands_flow(state) -> None:
    registry.handle(state, "/goal add -d Quarterly Launch")
    goal = task_api.list_goals(state)[0]
    assert goal.name == "Launch"
    assert goal.description == "Quarterly"

    registry.handle(state, f"/task add -g {goal.id[:6]} Draft")
    assert task_api.tasks_in_scope(state, goal.id)[0].name == "Draft"

    reply = registry.handle(state, f"/goal rm {goal.id[:6]}")
    assert "kept" in (reply or "")
    assert task_api.tasks_in_scope(state, None)[0].name == "Draft"


def test_settings_and_targets(state) -> None:
    reply = registry.handle(state, "/settings 50 0 20 3")
    assert reply is not None and "Work 50 min" in reply
    s = state.store.read(keys.POMODORO_SETTINGS)
    assert (s.work_duration, s.short_break_duration, s.long_break_duration, s.pomodoros_per_set) == (50, 1, 20, 3)
    assert state.engine.remaining_seconds == 50 * 60

    reply = registry.handle(state, "/targets 6 -1")
    assert reply is not None and reply.startswith("Goals updated!")
    log = state.aggregator.get(today_key())
    assert (log.pomodoros_target, log.tasks_target) == (6, 0)


def test_timer_commands(state) -> None:
    assert "running" in (registry.handle(state, "/start") or "")
    assert "paused" in (registry.handle(state, "/pause") or "")
    assert "Short Break" in (registry.handle(state, "/skip") or "")
    assert "Work Session" in (registry.handle(state, "/reset") or "")


def test_day_and_summary_views(state) -> None:
    assert "Not a date" in (registry.handle(state, "/day yesterday") or "")
    assert "no activity" in (registry.handle(state, "/day 1999-01-01") or "")

    reply = registry.handle(state, "/summary") or ""
    assert reply.startswith("Weekly summary")
    assert "Total: pomodoros 0/8, tasks 0/3" in reply


@pytest.mark.asyncio
async def test_command_registry_awaits_coroutine_handlers(state) -> None:
    reg = CommandRegistry()

    async def slow(state, args, emit):
        await asyncio.sleep(0)
        return "done " + " ".join(args)

    async def bad(state, args, emit):
        raise ValueError("nope")

    reg.register("slow", slow, "slow")
    reg.register("bad", bad, "bad")

    assert await reg.handle_async(state, "/slow a b") == "done a b"
    assert await reg.handle_async(state, "/bad") == "Error: nope"
    assert await reg.handle_async(state, "/help") is not None
    assert await reg.handle_async(state, "plain text") is None


@pytest.mark.asyncio
async def test_motivate_returns_llm_message(state) -> None:
    emitted: list[str] = []
    reply = await registry.handle_async(state, "/motivate", emit=emitted.append)
    assert reply == "Keep going!"
    assert emitted == ["[AI] Generating..."]

    _messages, system_prompt = state.llm.calls[0]
    assert "motivational" in system_prompt


@pytest.mark.asyncio
async def test_motivate_failure_is_retryable_and_changes_nothing(state) -> None:
    task_api.add_task(state, "keep me")
    logs_before = state.store.read(keys.DAILY_LOGS)
    tasks_before = state.store.read(keys.TASKS)
    state.llm = FailingLLMClient()

    reply = await registry.handle_async(state, "/motivate")

    assert reply is not None
    assert reply.startswith("Failed to generate motivation. Please try again.")
    assert "LLM network/timeout error" in reply
    assert state.store.read(keys.DAILY_LOGS) is logs_before
    assert state.store.read(keys.TASKS) is tasks_before


@pytest.mark.asyncio
async def test_motivate_failure_explains_missing_configuration(state) -> None:
    state.llm = FailingLLMClient("LLM API key is not set. Set FOCUSFLOW_OPENROUTER_API_KEY in your .env.")

    reply = await registry.handle_async(state, "/motivate") or ""

    assert "Please try again." in reply
    assert "missing API key" in reply


@pytest.mark.asyncio
async def test_timer_keeps_counting_while_motivator_waits(state) -> None:
    state.llm = SlowLLMClient(0.5, "Nice week!")
    state.engine.start()
    ticker = asyncio.create_task(run_ticker(state.engine, interval_seconds=0.01))

    loop = asyncio.get_running_loop()
    t0 = loop.time()
    reply = await registry.handle_async(state, "/motivate")
    elapsed = loop.time() - t0

    ticker.cancel()
    with pytest.raises(asyncio.CancelledError):
        await ticker

    assert reply == "Nice week!"
    ticks = state.engine.total_seconds - state.engine.remaining_seconds
    assert elapsed >= 0.45
    assert ticks >= (elapsed / 0.01) * 0.5
