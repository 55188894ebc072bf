# src/focusflow/timer/ticker.py

from __future__ import annotations

"""
One-second tick source for the session engine.

Ticks are scheduled against the event loop clock (start + n * period), so a slow
callback does not push every following tick later. The engine ignores ticks
while paused; the loop itself keeps running until cancelled.

To stop the ticker, cancel the coroutine/task.
"""

import asyncio
import logging

from .session_engine import SessionEngine

logger = logging.getLogger(__name__)


async def run_ticker(engine: SessionEngine, *, interval_seconds: float = 1.0) -> None:
    period = max(0.01, float(interval_seconds))
    loop = asyncio.get_running_loop()
    next_at = loop.time() + period
    logger.debug("Ticker started (period=%.2fs)", period)

    try:
        while True:
            await asyncio.sleep(max(0.0, next_at - loop.time()))
            next_at += period

            try:
                engine.tick()
            except Exception:
                logger.exception("engine.tick failed")

            # Fell behind by more than a period (e.g. the machine slept): do not
            # replay a burst of ticks.
            now = loop.time()
            if next_at < now:
                next_at = now + period
    finally:
        logger.debug("Ticker stopped")
