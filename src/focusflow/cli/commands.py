# src/focusflow/cli/commands.py

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable, Sequence
from datetime import date
from typing import TypeVar, cast

from ..core.models import SessionType, TimerSettings
from ..core.state import AppState
from ..llm.client import friendly_llm_error_message
from ..llm.motivator import MotivationError, generate_motivation
from ..storage import keys
from ..timer.session_engine import format_clock
from ..tracking import task_api
from ..tracking.daily_log import today_key
from ..tracking.summary import build_weekly_summary

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str | Awaitable[str]]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)

T = TypeVar("T")

SESSION_TITLES = {
    SessionType.WORK: "Work Session",
    SessionType.SHORT_BREAK: "Short Break",
    SessionType.LONG_BREAK: "Long Break",
}


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /start, /task, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | Awaitable[str] | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command; coroutine handlers
        return an awaitable (see handle_async).
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except Exception:
            nparams = 3

        try:
            if nparams >= 3:
                h3 = cast(CommandHandler3, handler)
                return h3(state, args, emit)
            h2 = cast(CommandHandler2, handler)
            return h2(state, args)
        except ValueError as e:
            # Invalid user input rejected at the mutation boundary.
            return f"Error: {e}"

    async def handle_async(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Like handle(), but awaits coroutine handlers.

        The console loop uses this so slow commands yield to the ticker.
        """
        reply = self.handle(state, line, emit)
        if not inspect.isawaitable(reply):
            return reply
        try:
            return await reply
        except ValueError as e:
            return f"Error: {e}"

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- helpers ----

def short_id(item_id: str) -> str:
    return item_id[:6]


def _resolve(items: Sequence[T], ref: str, what: str) -> T:
    """Find an item by full id or unique id prefix."""
    ref = ref.strip().lower()
    matches = [it for it in items if it.id.lower().startswith(ref)]  # type: ignore[attr-defined]
    if not ref or not matches:
        raise ValueError(f"no {what} matches '{ref}'")
    if len(matches) > 1:
        raise ValueError(f"'{ref}' matches several {what}s; use more characters")
    return matches[0]


def _parse_flags(args: list[str], flags: Sequence[str]) -> tuple[dict[str, str], list[str]]:
    """Split `-x value` pairs (for the given flags) from positional words."""
    opts: dict[str, str] = {}
    rest: list[str] = []
    i = 0
    while i < len(args):
        a = args[i]
        if a in flags and i + 1 < len(args):
            opts[a] = args[i + 1]
            i += 2
            continue
        rest.append(a)
        i += 1
    return opts, rest


def _int_arg(raw: str, what: str) -> int:
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{what} must be an integer, got '{raw}'") from None


def _format_timer(state: AppState) -> str:
    snap = state.engine.snapshot()
    title = SESSION_TITLES[snap.session_type]
    if snap.session_type is SessionType.WORK:
        active = task_api.get_active_task(state)
        if active is not None:
            title = f"Focus: {active.name}"
    run = "running" if snap.is_running else "paused"
    return (
        f"{title} {format_clock(snap.remaining_seconds)} ({run}, {snap.progress * 100:.0f}%) "
        f"set {snap.completed_work_sessions_in_set}/{state.engine.settings.pomodoros_per_set}"
    )


def _format_task(state: AppState, t) -> str:
    active_id = state.store.read(keys.ACTIVE_TASK_ID)
    mark = "x" if t.is_completed else " "
    star = "*" if t.id == active_id else " "
    return f"{star}[{mark}] {short_id(t.id)} {t.name} ({t.completed_pomodoros}/{t.estimated_pomodoros})"


def _format_log(log) -> str:
    return (
        f"{log.date}: pomodoros {log.pomodoros_completed}/{log.pomodoros_target}, "
        f"tasks {log.tasks_completed}/{log.tasks_target}"
    )


# ---- general ----

def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    log = state.aggregator.ensure(today_key())
    return f"Timer: {_format_timer(state)}\nToday: {_format_log(log)}"


# ---- timer ----

def cmd_start(state: AppState, args: list[str]) -> str:
    state.engine.start()
    return _format_timer(state)


def cmd_pause(state: AppState, args: list[str]) -> str:
    state.engine.pause()
    return _format_timer(state)


def cmd_reset(state: AppState, args: list[str]) -> str:
    state.engine.reset()
    return _format_timer(state)


def cmd_skip(state: AppState, args: list[str]) -> str:
    state.engine.skip()
    return f"Skipped to {SESSION_TITLES[state.engine.session_type]}. {_format_timer(state)}"


def cmd_settings(state: AppState, args: list[str]) -> str:
    """
    /settings                         -> show durations
    /settings WORK SHORT LONG PER_SET -> replace (minutes; values floored at 1)
    """
    if not args:
        s = state.store.read(keys.POMODORO_SETTINGS)
    elif len(args) == 4:
        work, short, long_, per_set = (_int_arg(a, "setting") for a in args)
        s = TimerSettings.clamped(
            work_duration=work,
            short_break_duration=short,
            long_break_duration=long_,
            pomodoros_per_set=per_set,
        )
        state.store.write(keys.POMODORO_SETTINGS, s)
    else:
        return "Usage: /settings WORK SHORT LONG PER_SET (minutes)."
    return (
        f"Work {s.work_duration} min, short break {s.short_break_duration} min, "
        f"long break {s.long_break_duration} min, long break every {s.pomodoros_per_set}."
    )


# ---- tasks ----

_TASK_USAGE = (
    "Usage:\n"
    "  /task list\n"
    "  /task add [-p POMODOROS] [-g GOAL] NAME\n"
    "  /task edit ID [-p POMODOROS] [NAME]\n"
    "  /task done ID        - toggle completion\n"
    "  /task rm ID\n"
    "  /task up ID | /task down ID\n"
    "  /task select ID|none\n"
    "  /task move ID GOAL|none"
)


def _list_tasks(state: AppState) -> str:
    lines: list[str] = []
    for goal in task_api.list_goals(state):
        lines.append(f"# {goal.name} ({short_id(goal.id)})")
        scoped = task_api.tasks_in_scope(state, goal.id)
        lines.extend(f"  {_format_task(state, t)}" for t in scoped)
        if not scoped:
            lines.append("  (no tasks)")
    loose = task_api.tasks_in_scope(state, None)
    if loose or not lines:
        lines.append("# Tasks")
        lines.extend(f"  {_format_task(state, t)}" for t in loose)
        if not loose:
            lines.append("  (no tasks)")
    return "\n".join(lines)


def cmd_task(state: AppState, args: list[str]) -> str:
    if not args:
        return _TASK_USAGE

    sub, rest = args[0].lower(), args[1:]

    if sub in ("list", "ls"):
        return _list_tasks(state)

    if sub == "add":
        opts, words = _parse_flags(rest, ("-p", "-g"))
        est = _int_arg(opts["-p"], "pomodoros") if "-p" in opts else 1
        goal_id = _resolve(task_api.list_goals(state), opts["-g"], "goal").id if "-g" in opts else None
        task = task_api.add_task(state, " ".join(words), est, goal_id=goal_id)
        return f"Task added: {_format_task(state, task)}"

    if not rest:
        return _TASK_USAGE
    if sub == "select" and rest[0].lower() == "none":
        task_api.select_task(state, None)
        return "No active task."
    task = _resolve(task_api.list_tasks(state), rest[0], "task")

    if sub == "edit":
        opts, words = _parse_flags(rest[1:], ("-p",))
        updated = task_api.update_task(
            state,
            task.id,
            name=" ".join(words) if words else None,
            estimated_pomodoros=_int_arg(opts["-p"], "pomodoros") if "-p" in opts else None,
        )
        return f"Task updated: {_format_task(state, updated)}"

    if sub == "done":
        updated = task_api.toggle_task_complete(state, task.id)
        if updated is not None and updated.is_completed:
            return f'Task complete! Great job finishing "{updated.name}"!'
        return f'Task reopened: "{task.name}".'

    if sub in ("rm", "delete"):
        task_api.delete_task(state, task.id)
        return f'Task deleted: "{task.name}".'

    if sub in ("up", "down"):
        moved = task_api.reorder_task(state, task.id, sub)
        return _list_tasks(state) if moved else f'"{task.name}" is already at the {"top" if sub == "up" else "bottom"}.'

    if sub == "select":
        task_api.select_task(state, task.id)
        return f'Focusing on "{task.name}".'

    if sub == "move":
        if len(rest) < 2:
            return _TASK_USAGE
        goal_id = None if rest[1].lower() == "none" else _resolve(task_api.list_goals(state), rest[1], "goal").id
        task_api.move_task_to_goal(state, task.id, goal_id)
        return _list_tasks(state)

    return _TASK_USAGE


# ---- goals ----

_GOAL_USAGE = (
    "Usage:\n"
    "  /goal list\n"
    "  /goal add [-d DESCRIPTION] NAME\n"
    "  /goal edit ID [-d DESCRIPTION] [NAME]\n"
    "  /goal rm ID         - tasks stay, unlinked\n"
    "  /goal up ID | /goal down ID"
)


def cmd_goal(state: AppState, args: list[str]) -> str:
    if not args:
        return _GOAL_USAGE

    sub, rest = args[0].lower(), args[1:]

    if sub in ("list", "ls"):
        goals = task_api.list_goals(state)
        if not goals:
            return "No goals yet."
        return "\n".join(
            f"{short_id(g.id)} {g.name}" + (f" - {g.description}" if g.description else "") for g in goals
        )

    if sub == "add":
        opts, words = _parse_flags(rest, ("-d",))
        goal = task_api.add_goal(state, " ".join(words), opts.get("-d"))
        return f"Goal added: {short_id(goal.id)} {goal.name}"

    if not rest:
        return _GOAL_USAGE
    goal = _resolve(task_api.list_goals(state), rest[0], "goal")

    if sub == "edit":
        opts, words = _parse_flags(rest[1:], ("-d",))
        updated = task_api.update_goal(
            state,
            goal.id,
            name=" ".join(words) if words else None,
            description=opts.get("-d"),
        )
        return f"Goal updated: {short_id(goal.id)} {updated.name if updated else goal.name}"

    if sub in ("rm", "delete"):
        task_api.delete_goal(state, goal.id)
        return f'Goal deleted: "{goal.name}". Its tasks were kept.'

    if sub in ("up", "down"):
        moved = task_api.reorder_goal(state, goal.id, sub)
        return cmd_goal(state, ["list"]) if moved else f'"{goal.name}" cannot move {sub}.'

    return _GOAL_USAGE


# ---- logs / summary ----

def cmd_targets(state: AppState, args: list[str]) -> str:
    """/targets POMODOROS TASKS -> set today's targets (floored at 0)."""
    if len(args) != 2:
        return "Usage: /targets POMODOROS TASKS"
    log = state.aggregator.set_targets(
        today_key(),
        pomodoros_target=_int_arg(args[0], "pomodoros"),
        tasks_target=_int_arg(args[1], "tasks"),
    )
    return f"Goals updated! {_format_log(log)}"


def cmd_today(state: AppState, args: list[str]) -> str:
    return _format_log(state.aggregator.ensure(today_key()))


def cmd_day(state: AppState, args: list[str]) -> str:
    """/day YYYY-MM-DD -> that day's log and the tasks completed on it."""
    if len(args) != 1:
        return "Usage: /day YYYY-MM-DD"
    try:
        day = date.fromisoformat(args[0]).isoformat()
    except ValueError:
        return f"Not a date: {args[0]} (expected YYYY-MM-DD)."

    log = state.aggregator.get(day)
    lines = [_format_log(log) if log else f"{day}: no activity logged."]
    done = task_api.completed_tasks_on(task_api.list_tasks(state), day)
    if done:
        lines.append("Tasks marked done:")
        lines.extend(f"  - {t.name} ({t.completed_pomodoros} pomodoros)" for t in done)
    return "\n".join(lines)


def _weekly(state: AppState):
    return build_weekly_summary(state.store.read(keys.DAILY_LOGS), date.fromisoformat(today_key()))


def cmd_summary(state: AppState, args: list[str]) -> str:
    summary = _weekly(state)
    lines = ["Weekly summary (last 7 days):"]
    for log in summary.days:
        label = date.fromisoformat(log.date).strftime("%a")
        lines.append(
            f"  {label} {log.date}  pomodoros {log.pomodoros_completed}/{log.pomodoros_target}"
            f"  tasks {log.tasks_completed}/{log.tasks_target}"
        )
    lines.append(
        f"Total: pomodoros {summary.total_pomodoros_completed}/{summary.total_pomodoros_target}, "
        f"tasks {summary.total_tasks_completed}/{summary.total_tasks_target}"
    )
    return "\n".join(lines)


async def cmd_motivate(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    # Read the logs on the loop thread; only the LLM round-trip runs in a worker.
    summary = _weekly(state).to_motivator_input()
    if emit:
        emit("[AI] Generating...")
    try:
        result = await asyncio.to_thread(generate_motivation, state.llm, summary)
    except MotivationError as e:
        logger.info("Motivation request failed; user may retry.")
        reason = friendly_llm_error_message(e.__cause__ or e)
        return f"Failed to generate motivation. Please try again.\nReason: {reason}"
    return result.motivation_message


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show timer and today's progress.", aliases=["s"])
registry.register("start", cmd_start, help_text="Start (or resume) the timer.")
registry.register("pause", cmd_pause, help_text="Pause the timer.")
registry.register("reset", cmd_reset, help_text="Stop and start a fresh set from a work session.")
registry.register("skip", cmd_skip, help_text="Skip the current session (no credit).")
registry.register("settings", cmd_settings, help_text="Show or set durations: /settings WORK SHORT LONG PER_SET.")
registry.register("task", cmd_task, help_text="Tasks: /task list|add|edit|done|rm|up|down|select|move.", aliases=["t"])
registry.register("goal", cmd_goal, help_text="Goals: /goal list|add|edit|rm|up|down.", aliases=["g"])
registry.register("targets", cmd_targets, help_text="Set today's targets: /targets POMODOROS TASKS.")
registry.register("today", cmd_today, help_text="Show today's log.")
registry.register("day", cmd_day, help_text="Show one day's log and completed tasks: /day YYYY-MM-DD.")
registry.register("summary", cmd_summary, help_text="Weekly summary (last 7 days).")
registry.register("motivate", cmd_motivate, help_text="Get an AI motivational message for this week.")
