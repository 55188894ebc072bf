"""FocusFlow: pomodoro timer with task/goal tracking and daily logs."""

__version__ = "0.1.0"
