# config.example.py

"""
Documentation-only module (safe to commit).

The real configuration is loaded from environment variables (optionally via a local .env file).
Do NOT commit real secrets. Put them in .env (local, gitignored).
"""

ENV_VARS = {
    # App / logging
    "FOCUSFLOW_APP_NAME": "App display name (default: focusflow).",
    "FOCUSFLOW_LOG_LEVEL": "Console logging level (default: INFO).",
    # LLM / OpenRouter
    "FOCUSFLOW_OPENROUTER_API_KEY": "OpenRouter API key (without it the offline motivator is used).",
    "FOCUSFLOW_OPENROUTER_BASE_URL": "OpenRouter base URL (default: https://openrouter.ai/api/v1).",
    "FOCUSFLOW_LLM_MODELS": "Comma/space separated list of models to try in order.",
    "FOCUSFLOW_HTTP_REFERER": "Optional OpenRouter metadata header.",
    "FOCUSFLOW_APP_TITLE": "Optional OpenRouter metadata header title.",
    "FOCUSFLOW_LLM_FIRST_TOKEN_TIMEOUT_SECONDS": "Give up on a model without a first token (default: 20).",
    "FOCUSFLOW_LLM_READ_TIMEOUT_SECONDS": "HTTP read timeout (default: 25).",
    "FOCUSFLOW_LLM_CONNECT_TIMEOUT_SECONDS": "HTTP connect timeout (default: 5).",
    # Paths (gitignored)
    "FOCUSFLOW_DATA_DIR": "Local data directory (default: .local/focusflow).",
    "FOCUSFLOW_STATE_DB_PATH": "State SQLite path (default: <data_dir>/state.sqlite3).",
    # Timer defaults (used until /settings stores your own)
    "FOCUSFLOW_WORK_MINUTES": "Work session length (default: 25).",
    "FOCUSFLOW_SHORT_BREAK_MINUTES": "Short break length (default: 5).",
    "FOCUSFLOW_LONG_BREAK_MINUTES": "Long break length (default: 15).",
    "FOCUSFLOW_POMODOROS_PER_SET": "Work sessions before a long break (default: 4).",
    # Daily targets for newly created logs
    "FOCUSFLOW_POMODOROS_TARGET": "Default daily pomodoro target (default: 8).",
    "FOCUSFLOW_TASKS_TARGET": "Default daily task target (default: 3).",
    # Loop periods
    "FOCUSFLOW_TICK_SECONDS": "Timer tick period (default: 1.0).",
    "FOCUSFLOW_SYNC_POLL_SECONDS": "How often other processes' changes are picked up (default: 1.0).",
}
