"""
Task, goal and daily-log tracking.

Components:
- ordering.py: swap-based sibling ordering
- daily_log.py: daily log aggregation (sole writer of completion counters)
- task_api.py: task/goal mutations and work-session accounting
- summary.py: weekly read-side view
"""
