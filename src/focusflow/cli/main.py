# src/focusflow/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then runs on one event loop:
- the one-second timer ticker,
- the cross-process change watcher,
- the console REPL (returns on /exit or EOF).
"""

from __future__ import annotations

import asyncio
import contextlib
import logging

from ..cli.bootstrap import create_initial_state, shutdown_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..core.state import AppState
from ..logging_setup import setup_logging
from ..storage.watcher import run_change_watcher
from ..timer.ticker import run_ticker

logger = logging.getLogger(__name__)


async def run_app(state: AppState) -> None:
    settings = state.settings
    background = [
        asyncio.create_task(run_ticker(state.engine, interval_seconds=settings.tick_seconds), name="ticker"),
        asyncio.create_task(
            run_change_watcher(state.store, state.backend, interval_seconds=settings.sync_poll_seconds),
            name="change-watcher",
        ),
    ]
    try:
        await run_console_loop(state)
    finally:
        for task in background:
            task.cancel()
        for task in background:
            with contextlib.suppress(asyncio.CancelledError):
                await task


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    log_file = setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s (state=%s, log=%s)...", settings.app_name, settings.state_db_path, log_file)

    state = create_initial_state(settings=settings)
    try:
        asyncio.run(run_app(state))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down...")
    finally:
        shutdown_state(state)
        logger.info("Bye.")


if __name__ == "__main__":
    main()
