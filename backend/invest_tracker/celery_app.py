"""
Celery application configuration for background tasks.

Scheduled tasks:
- SNAPSHOT_HOUR:SNAPSHOT_MINUTE UTC (default 23:30): create_daily_snapshots -
  value every owner's portfolio and record today's entry
"""
from celery import Celery
from celery.schedules import crontab
from invest_tracker.config import settings

# Create Celery instance
celery_app = Celery(
    "investment_tracker",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=[
        "invest_tracker.tasks.snapshots",
    ]
)

# Celery configuration
celery_app.conf.update(
    # Snapshots are keyed by UTC calendar date
    timezone="UTC",
    enable_utc=True,

    # Task configuration
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    result_expires=86400,  # 24 hours

    # Worker configuration
    worker_prefetch_multiplier=1,
    worker_max_tasks_per_child=1000,

    # Retry configuration
    task_acks_late=True,
    task_reject_on_worker_lost=True,

    # Beat schedule
    beat_schedule={
        "create-daily-snapshots": {
            "task": "invest_tracker.tasks.snapshots.create_daily_snapshots",
            "schedule": crontab(hour=settings.snapshot_hour, minute=settings.snapshot_minute),
            "options": {
                "expires": 3600,
            }
        },
    },
)

if __name__ == "__main__":
    celery_app.start()
