# src/focusflow/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

# Loggers that fire on every tick/poll; on the console only their problems matter.
_PERIODIC_LOGGERS = frozenset({
    "focusflow.timer.ticker",
    "focusflow.storage.watcher",
    "focusflow.storage.backend",
})

_CHATTY_LIBRARIES = ("httpx", "httpcore", "openai")


class _ConsoleNoiseFilter(logging.Filter):
    """
    The console shares the terminal with the >>> prompt and timer announcements:
    - focusflow records pass, except the periodic loops below WARNING,
    - everything else (third-party, py.warnings) only at ERROR+.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name.startswith("focusflow."):
            if record.name in _PERIODIC_LOGGERS:
                return record.levelno >= logging.WARNING
            return True
        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    log_dir: str | Path = ".local/focusflow",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
    log_file_name: str = "focusflow.log",
) -> Path:
    """
    Console handler (stderr, filtered) + file handler with everything at file_level.

    Call once at startup, before the first record. Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / log_file_name

    root = logging.getLogger()
    root.setLevel(min(console_level, file_level))
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(fmt)
    console.addFilter(_ConsoleNoiseFilter())
    root.addHandler(console)

    file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
    file_handler.setLevel(file_level)
    file_handler.setFormatter(fmt)
    root.addHandler(file_handler)

    # Request-level logs of the LLM stack are noise even in the file.
    for name in _CHATTY_LIBRARIES:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.captureWarnings(True)
    return log_file
