# src/focusflow/tracking/ordering.py

"""
Sibling ordering by an explicit `order` field.

Moving an item swaps its `order` with the neighbour in the sorted scope; no other
item is renumbered. Items are immutable dataclasses carrying `id` and `order`.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import replace
from enum import StrEnum
from typing import Any, TypeVar

T = TypeVar("T")


class Direction(StrEnum):
    UP = "up"
    DOWN = "down"


def _in_all(_item: Any) -> bool:
    return True


def sorted_scope(items: Iterable[T], scope: Callable[[T], bool] = _in_all) -> list[T]:
    # sorted() is stable: ties keep their stored sequence.
    return sorted((it for it in items if scope(it)), key=lambda it: it.order)  # type: ignore[attr-defined]


def next_order(items: Iterable[T], scope: Callable[[T], bool] = _in_all) -> float:
    orders = [it.order for it in items if scope(it)]  # type: ignore[attr-defined]
    return max(orders) + 1 if orders else 0.0


def move(
        items: Sequence[T],
        item_id: str,
        direction: Direction | str,
        scope: Callable[[T], bool] = _in_all,
) -> list[T]:
    """
    Return a new list where item_id swapped `order` with its neighbour in scope.

    Unknown ids and moves past either end of the scope return the items unchanged.
    The list keeps its stored sequence; only the two `order` values differ.
    """
    direction = Direction(direction)
    ordered = sorted_scope(items, scope)

    idx = next((i for i, it in enumerate(ordered) if it.id == item_id), -1)  # type: ignore[attr-defined]
    if idx == -1:
        return list(items)

    other_idx = idx - 1 if direction is Direction.UP else idx + 1
    if other_idx < 0 or other_idx >= len(ordered):
        return list(items)

    mover = ordered[idx]
    other = ordered[other_idx]
    swapped = {
        mover.id: replace(mover, order=other.order),  # type: ignore[attr-defined]
        other.id: replace(other, order=mover.order),  # type: ignore[attr-defined]
    }
    return [swapped.get(it.id, it) for it in items]  # type: ignore[attr-defined]
