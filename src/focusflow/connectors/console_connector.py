# src/focusflow/connectors/console_connector.py

"""
Console connector.

Runs on the same event loop as the ticker and the change watcher: input() is
awaited in a worker thread, but every command is executed on the loop thread,
so commands and ticks never interleave mid-mutation. Coroutine commands
(/motivate) are awaited, so the ticker keeps running while they wait.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.models import SessionType
from ..core.state import AppState
from ..timer.session_engine import SessionTransition, TransitionReason

logger = logging.getLogger(__name__)

_EXPIRY_MESSAGES = {
    SessionType.LONG_BREAK: "Long Break Time! Great job! Time for a longer rest.",
    SessionType.SHORT_BREAK: "Short Break! Take a quick breather.",
    SessionType.WORK: "Back to Work! Let's get focused.",
}


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


def _announce(event: SessionTransition) -> None:
    if event.reason is TransitionReason.EXPIRED:
        _print_ts(f"[TIMER] {_EXPIRY_MESSAGES[event.current]} (/start to begin)")


async def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started.")
    _print_ts("[CONSOLE] Use /help for commands. Use /exit to quit.\n")

    unsubscribe = state.engine.on_transition(_announce)

    try:
        while True:
            try:
                user_input = (await asyncio.to_thread(input, ">>> ")).strip()
            except EOFError:
                logger.info("Console EOF received, exiting.")
                break
            except KeyboardInterrupt:
                logger.info("Console KeyboardInterrupt, exiting.")
                print()
                break

            if not user_input:
                continue

            if user_input.lower() in ("/exit", "/quit"):
                logger.info("Console exit command received.")
                break

            if not user_input.startswith("/"):
                _print_ts("Commands start with '/'. Use /help to list them.")
                continue

            try:
                response = await command_registry.handle_async(state, user_input, emit=_print_ts)
            except Exception:
                logger.exception("Command handler crashed.")
                response = "Internal error while handling a command."

            if response is not None:
                _print_ts(response)
    finally:
        unsubscribe()
        logger.info("Console connector finished.")
