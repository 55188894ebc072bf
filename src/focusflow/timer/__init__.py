"""
Interval timer.

Components:
- session_engine.py: work/break state machine
- ticker.py: one-second tick loop driving the engine
"""
