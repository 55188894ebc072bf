# src/focusflow/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- No secrets required at import time.
- Timer / daily-target defaults are configurable but always valid.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .core.models import TimerSettings

ENV_PREFIX = "FOCUSFLOW"

DEFAULT_POMODOROS_TARGET = 8
DEFAULT_TASKS_TARGET = 3


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


load_dotenv(override=False)


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _first_env(*names: str, default: str | None = None) -> str | None:
    for n in names:
        v = os.getenv(n)
        if v is not None and v.strip() != "":
            return v
    return default


def _env_int(name: str, default: int, *, minimum: int | None = None) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    if minimum is not None and value < minimum:
        return default
    return value


def _env_float(name: str, default: float, *, minimum: float | None = None) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    if minimum is not None and value < minimum:
        return default
    return value


def _env_list(name: str, default: list[str]) -> list[str]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return list(default)
    return [p.strip() for p in raw.replace(",", " ").split() if p.strip()]


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    state_db_path: Path

    # ---- LLM / OpenRouter ----
    openrouter_api_key: str | None
    openrouter_base_url: str
    llm_models: list[str]
    extra_headers: dict[str, str]

    # ---- Timer / daily defaults ----
    default_timer_settings: TimerSettings
    default_pomodoros_target: int
    default_tasks_target: int

    # ---- Loop periods ----
    tick_seconds: float
    sync_poll_seconds: float

    @staticmethod
    def from_env() -> Settings:
        app_name = _env(_k("APP_NAME"), "focusflow") or "focusflow"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/focusflow"))
        state_db_path = _env_path(_k("STATE_DB_PATH"), data_dir / "state.sqlite3")

        openrouter_api_key = _first_env(_k("OPENROUTER_API_KEY"), "OPENROUTER_API_KEY", default=None)
        openrouter_base_url = _env(_k("OPENROUTER_BASE_URL"), "https://openrouter.ai/api/v1")

        extra_headers = {
            "HTTP-Referer": _env(_k("HTTP_REFERER"), "https://example.com"),
            "X-Title": _env(_k("APP_TITLE"), app_name),
        }

        llm_models = _env_list(
            _k("LLM_MODELS"),
            [
                "qwen/qwen-2.5-72b-instruct:free",
                "deepseek/deepseek-chat-v3-0324:free",
            ],
        )

        timer = TimerSettings(
            work_duration=_env_int(_k("WORK_MINUTES"), 25, minimum=1),
            short_break_duration=_env_int(_k("SHORT_BREAK_MINUTES"), 5, minimum=1),
            long_break_duration=_env_int(_k("LONG_BREAK_MINUTES"), 15, minimum=1),
            pomodoros_per_set=_env_int(_k("POMODOROS_PER_SET"), 4, minimum=1),
        )

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            state_db_path=state_db_path,
            openrouter_api_key=openrouter_api_key,
            openrouter_base_url=openrouter_base_url,
            llm_models=llm_models,
            extra_headers=extra_headers,
            default_timer_settings=timer,
            default_pomodoros_target=_env_int(_k("POMODOROS_TARGET"), DEFAULT_POMODOROS_TARGET, minimum=0),
            default_tasks_target=_env_int(_k("TASKS_TARGET"), DEFAULT_TASKS_TARGET, minimum=0),
            tick_seconds=_env_float(_k("TICK_SECONDS"), 1.0, minimum=0.01),
            sync_poll_seconds=_env_float(_k("SYNC_POLL_SECONDS"), 1.0, minimum=0.05),
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
