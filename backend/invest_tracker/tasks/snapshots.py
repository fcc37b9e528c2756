"""
Daily portfolio snapshot tasks.

Values every owner's portfolio and records it as the day's entry of the
owner's value series. Re-running on the same day overwrites that day.
"""
from celery import shared_task
from datetime import date
from typing import Any, Dict, Optional
import asyncio
import logging

from invest_tracker.exceptions import InvestTrackerError
from invest_tracker.repositories import standalone_stores
from invest_tracker.services.portfolio_service import PortfolioService
from invest_tracker.utils.time_utils import parse_date_string, today_utc

logger = logging.getLogger(__name__)


async def snapshot_all_owners(target_date: date) -> Dict[str, Any]:
    """
    Save the snapshot of `target_date` for every owner with investments.

    A failing owner is logged and reported; the others still get their
    snapshot.
    """
    summary: Dict[str, Any] = {
        "snapshot_date": target_date.isoformat(),
        "snapshots": {},
        "failed": [],
    }

    async with standalone_stores() as stores:
        service = PortfolioService(stores)
        owners = await stores.investments.list_owners()
        logger.info(f"Creating snapshots for {len(owners)} owners on {target_date}")

        for owner_id in owners:
            try:
                point = await service.save_daily_snapshot(owner_id, target_date)
                summary["snapshots"][owner_id] = float(point.value)
            except InvestTrackerError as e:
                logger.error(f"Snapshot failed for {owner_id}: {e}")
                summary["failed"].append(owner_id)

    summary["status"] = "success" if not summary["failed"] else "partial"
    return summary


@shared_task(
    bind=True,
    autoretry_for=(Exception,),
    retry_kwargs={'max_retries': 3, 'countdown': 5},
    retry_backoff=True,
    retry_backoff_max=600,
    retry_jitter=True
)
def create_daily_snapshots(self, snapshot_date: Optional[str] = None):
    """
    Create the daily snapshot for every owner.

    Scheduled daily via Celery Beat (UTC).

    Args:
        snapshot_date: Date string (YYYY-MM-DD). If None, uses today's UTC date.

    Returns:
        dict: Snapshot summary
    """
    logger.info("Starting daily snapshot task")
    target_date = parse_date_string(snapshot_date) if snapshot_date else today_utc()

    summary = asyncio.run(snapshot_all_owners(target_date))
    logger.info(
        f"Daily snapshot task finished for {summary['snapshot_date']}: "
        f"{len(summary['snapshots'])} saved, {len(summary['failed'])} failed"
    )
    return summary
