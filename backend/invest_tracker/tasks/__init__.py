"""
Background tasks package.

All tasks are scheduled via Celery Beat in celery_app.py.
"""
from invest_tracker.tasks.snapshots import create_daily_snapshots

__all__ = [
    "create_daily_snapshots",
]
