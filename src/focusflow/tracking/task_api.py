# src/focusflow/tracking/task_api.py

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import replace

from ..core.models import Goal, SessionType, Task
from ..core.state import AppState
from ..storage import keys
from ..timer.session_engine import SessionCompleted
from . import ordering
from .daily_log import date_key
from .ordering import Direction

logger = logging.getLogger(__name__)


def _new_id() -> str:
    return uuid.uuid4().hex


def _clean_name(name: str, what: str) -> str:
    if not name or not name.strip():
        raise ValueError(f"{what} name is required")
    return name.strip()


def _clean_description(description: str | None) -> str | None:
    if description is None:
        return None
    return description.strip() or None


def _goal_scope(goal_id: str | None):
    return lambda t: t.goal_id == goal_id


# ---- queries ----

def list_tasks(state: AppState) -> list[Task]:
    return list(state.store.read(keys.TASKS))


def tasks_in_scope(state: AppState, goal_id: str | None) -> list[Task]:
    """Tasks of one ordering scope (a goal, or None for "no goal"), sorted by order."""
    return ordering.sorted_scope(state.store.read(keys.TASKS), _goal_scope(goal_id))


def get_task(state: AppState, task_id: str) -> Task | None:
    return next((t for t in state.store.read(keys.TASKS) if t.id == task_id), None)


def list_goals(state: AppState) -> list[Goal]:
    return ordering.sorted_scope(state.store.read(keys.GOALS))


def get_goal(state: AppState, goal_id: str) -> Goal | None:
    return next((g for g in state.store.read(keys.GOALS) if g.id == goal_id), None)


def get_active_task(state: AppState) -> Task | None:
    active_id = state.store.read(keys.ACTIVE_TASK_ID)
    if not active_id:
        return None
    return get_task(state, active_id)


def completed_tasks_on(tasks: list[Task], date: str) -> list[Task]:
    """Tasks whose current completion falls on the local calendar date."""
    return [
        t for t in tasks
        if t.is_completed and t.completed_at is not None and date_key(t.completed_at) == date
    ]


# ---- task mutations ----

def add_task(
        state: AppState,
        name: str,
        estimated_pomodoros: int = 1,
        *,
        goal_id: str | None = None,
        now_ts: float | None = None,
) -> Task:
    name = _clean_name(name, "task")
    if goal_id is not None and get_goal(state, goal_id) is None:
        raise ValueError(f"unknown goal: {goal_id}")

    now_ts = time.time() if now_ts is None else now_ts
    created: list[Task] = []

    def _add(prev: list[Task]) -> list[Task]:
        task = Task(
            id=_new_id(),
            name=name,
            estimated_pomodoros=max(1, int(estimated_pomodoros)),
            completed_pomodoros=0,
            is_completed=False,
            created_at=now_ts,
            order=ordering.next_order(prev, _goal_scope(goal_id)),
            goal_id=goal_id,
        )
        created.append(task)
        return [*prev, task]

    state.store.write(keys.TASKS, _add)
    task = created[0]
    logger.info("Task added id=%s goal=%s order=%s", task.id, goal_id, task.order)

    # The first task added becomes the focus when nothing is selected.
    if not state.store.read(keys.ACTIVE_TASK_ID):
        state.store.write(keys.ACTIVE_TASK_ID, task.id)
    return task


def update_task(
        state: AppState,
        task_id: str,
        *,
        name: str | None = None,
        estimated_pomodoros: int | None = None,
) -> Task | None:
    if name is not None:
        name = _clean_name(name, "task")

    def _update(t: Task) -> Task:
        return replace(
            t,
            name=t.name if name is None else name,
            estimated_pomodoros=(
                t.estimated_pomodoros if estimated_pomodoros is None else max(1, int(estimated_pomodoros))
            ),
        )

    tasks = state.store.write(
        keys.TASKS,
        lambda prev: [_update(t) if t.id == task_id else t for t in prev],
    )
    return next((t for t in tasks if t.id == task_id), None)


def move_task_to_goal(state: AppState, task_id: str, goal_id: str | None) -> Task | None:
    """Re-link a task; it joins the end of its new ordering scope."""
    if goal_id is not None and get_goal(state, goal_id) is None:
        raise ValueError(f"unknown goal: {goal_id}")

    def _move(prev: list[Task]) -> list[Task]:
        current = next((t for t in prev if t.id == task_id), None)
        if current is None or current.goal_id == goal_id:
            return prev
        siblings = [t for t in prev if t.id != task_id]
        moved = replace(current, goal_id=goal_id, order=ordering.next_order(siblings, _goal_scope(goal_id)))
        return [moved if t.id == task_id else t for t in prev]

    tasks = state.store.write(keys.TASKS, _move)
    return next((t for t in tasks if t.id == task_id), None)


def delete_task(state: AppState, task_id: str) -> bool:
    before = state.store.read(keys.TASKS)
    if not any(t.id == task_id for t in before):
        return False

    state.store.write(keys.TASKS, lambda prev: [t for t in prev if t.id != task_id])
    if state.store.read(keys.ACTIVE_TASK_ID) == task_id:
        state.store.write(keys.ACTIVE_TASK_ID, None)
        logger.info("Active task cleared (deleted id=%s)", task_id)
    logger.info("Task deleted id=%s", task_id)
    return True


def toggle_task_complete(state: AppState, task_id: str, *, now_ts: float | None = None) -> Task | None:
    """
    Flip completion and keep today's log in step.

    Completing stamps completed_at; un-completing clears it and only decrements
    today's count when the previous completion happened today.
    """
    current = get_task(state, task_id)
    if current is None:
        return None

    now_ts = time.time() if now_ts is None else now_ts
    today = date_key(now_ts)
    became_completed = not current.is_completed
    completion_was_today = (
        not became_completed
        and current.completed_at is not None
        and date_key(current.completed_at) == today
    )

    def _toggle(t: Task) -> Task:
        return replace(
            t,
            is_completed=became_completed,
            completed_at=now_ts if became_completed else None,
        )

    tasks = state.store.write(
        keys.TASKS,
        lambda prev: [_toggle(t) if t.id == task_id else t for t in prev],
    )
    state.aggregator.record_task_toggled(
        today,
        became_completed=became_completed,
        completion_was_on_date=completion_was_today,
    )
    logger.info("Task %s -> %s", task_id, "completed" if became_completed else "open")
    return next((t for t in tasks if t.id == task_id), None)


def reorder_task(state: AppState, task_id: str, direction: Direction | str) -> bool:
    """Swap a task with its neighbour inside its goal scope. False when nothing moved."""
    current = get_task(state, task_id)
    if current is None:
        return False

    before = state.store.read(keys.TASKS)
    if ordering.move(before, task_id, direction, _goal_scope(current.goal_id)) == before:
        return False
    state.store.write(
        keys.TASKS,
        lambda prev: ordering.move(prev, task_id, direction, _goal_scope(current.goal_id)),
    )
    return True


def select_task(state: AppState, task_id: str | None) -> Task | None:
    if task_id is None:
        state.store.write(keys.ACTIVE_TASK_ID, None)
        return None
    task = get_task(state, task_id)
    if task is None:
        raise ValueError(f"unknown task: {task_id}")
    state.store.write(keys.ACTIVE_TASK_ID, task.id)
    return task


# ---- goal mutations ----

def add_goal(
        state: AppState,
        name: str,
        description: str | None = None,
        *,
        now_ts: float | None = None,
) -> Goal:
    name = _clean_name(name, "goal")
    now_ts = time.time() if now_ts is None else now_ts
    created: list[Goal] = []

    def _add(prev: list[Goal]) -> list[Goal]:
        goal = Goal(
            id=_new_id(),
            name=name,
            created_at=now_ts,
            order=ordering.next_order(prev),
            description=_clean_description(description),
        )
        created.append(goal)
        return [*prev, goal]

    state.store.write(keys.GOALS, _add)
    logger.info("Goal added id=%s", created[0].id)
    return created[0]


def update_goal(
        state: AppState,
        goal_id: str,
        *,
        name: str | None = None,
        description: str | None = None,
) -> Goal | None:
    if name is not None:
        name = _clean_name(name, "goal")

    def _update(g: Goal) -> Goal:
        return replace(
            g,
            name=g.name if name is None else name,
            description=g.description if description is None else _clean_description(description),
        )

    goals = state.store.write(
        keys.GOALS,
        lambda prev: [_update(g) if g.id == goal_id else g for g in prev],
    )
    return next((g for g in goals if g.id == goal_id), None)


def delete_goal(state: AppState, goal_id: str) -> bool:
    """Remove a goal; its tasks stay and lose the link (goal_id -> None)."""
    if get_goal(state, goal_id) is None:
        return False

    state.store.write(keys.GOALS, lambda prev: [g for g in prev if g.id != goal_id])

    def _unlink(prev: list[Task]) -> list[Task]:
        # Orphans join the end of the "no goal" scope, keeping their relative order.
        next_free = ordering.next_order(prev, _goal_scope(None))
        relinked: dict[str, Task] = {}
        for i, t in enumerate(ordering.sorted_scope(prev, _goal_scope(goal_id))):
            relinked[t.id] = replace(t, goal_id=None, order=next_free + i)
        return [relinked.get(t.id, t) for t in prev]

    state.store.write(keys.TASKS, _unlink)
    logger.info("Goal deleted id=%s", goal_id)
    return True


def reorder_goal(state: AppState, goal_id: str, direction: Direction | str) -> bool:
    before = state.store.read(keys.GOALS)
    if ordering.move(before, goal_id, direction) == before:
        return False
    state.store.write(keys.GOALS, lambda prev: ordering.move(prev, goal_id, direction))
    return True


# ---- timer integration ----

def handle_session_completed(state: AppState, event: SessionCompleted, *, now_ts: float | None = None) -> None:
    """
    SessionCompleted listener.

    A finished work session counts toward today's log and, if a task is active,
    toward that task. Break sessions have no durable effect.
    """
    if event.session_type is not SessionType.WORK:
        return

    now_ts = time.time() if now_ts is None else now_ts
    state.aggregator.record_pomodoro_completed(date_key(now_ts))

    active_id = state.store.read(keys.ACTIVE_TASK_ID)
    if not active_id:
        return
    if get_task(state, active_id) is None:
        logger.warning("Active task %s no longer exists; pomodoro not attributed", active_id)
        return

    state.store.write(
        keys.TASKS,
        lambda prev: [
            replace(t, completed_pomodoros=t.completed_pomodoros + 1) if t.id == active_id else t
            for t in prev
        ],
    )
    logger.info("Pomodoro attributed to task id=%s", active_id)
