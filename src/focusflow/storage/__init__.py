"""
Durable state.

Components:
- backend.py: SQLite key/value medium shared across processes (+ change polling)
- persisted_store.py: reactive key-keyed store with defaults and subscribers
- keys.py: the logical keys (tasks, goals, daily logs, timer settings, active task)
- watcher.py: polling loop that applies changes made by other processes
"""
