"""
Historical backfill - Rebuilds the value series from acquisition dates.

Live prices for past days are not available, so each backfilled entry is
the cumulative purchase cost of every investment acquired on or before
that day. Days that already have a real snapshot are left alone unless
`overwrite` is set.
"""
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable, List, Optional, Tuple
import logging

from invest_tracker.config import settings
from invest_tracker.repositories.base import StoreBundle
from invest_tracker.services.valuation import ZERO, normalize_purchase_total, round_half_up
from invest_tracker.utils.time_utils import iter_days, today_utc

logger = logging.getLogger(__name__)


@dataclass
class BackfillResult:
    owner_id: str
    start: Optional[date]
    end: date
    written: int = 0
    skipped: int = 0


def cost_basis_series(investments: Iterable, start: date, end: date) -> List[Tuple[date, Decimal]]:
    """
    Cumulative purchase cost per day from `start` to `end`, both inclusive.

    Investments without an acquisition date never count.
    """
    dated = sorted(
        ((inv.date, normalize_purchase_total(inv)) for inv in investments if inv.date is not None),
        key=lambda item: item[0],
    )

    series = []
    running = ZERO
    index = 0
    for day in iter_days(start, end):
        while index < len(dated) and dated[index][0] <= day:
            running += dated[index][1]
            index += 1
        series.append((day, round_half_up(running)))
    return series


async def backfill_snapshots(
    stores: StoreBundle,
    owner_id: str,
    start: Optional[date] = None,
    end: Optional[date] = None,
    overwrite: bool = False,
) -> BackfillResult:
    """
    Write one cost-basis entry per day for the owner.

    Args:
        stores: Store bundle to read investments from and write snapshots to
        owner_id: Owner to backfill
        start: First day; defaults to the earliest acquisition date
        end: Last day; defaults to today (UTC)
        overwrite: Replace entries that already exist

    Raises:
        ValueError: start is after end, or the range exceeds backfill_max_days
    """
    end = end or today_utc()
    investments = await stores.investments.list_by_owner(owner_id)

    if start is None:
        dates = [inv.date for inv in investments if inv.date is not None]
        if not dates:
            logger.info(f"No dated investments for {owner_id}; nothing to backfill")
            return BackfillResult(owner_id=owner_id, start=None, end=end)
        start = min(dates)

    if start > end:
        raise ValueError(f"Start date {start} is after end date {end}")
    span = (end - start).days + 1
    if span > settings.backfill_max_days:
        raise ValueError(f"Backfill range of {span} days exceeds the limit of {settings.backfill_max_days}")

    existing_dates = {point.date for point in await stores.snapshots.list(owner_id)}
    result = BackfillResult(owner_id=owner_id, start=start, end=end)

    logger.info(f"Backfilling snapshots for {owner_id} from {start} to {end}")
    for day, value in cost_basis_series(investments, start, end):
        if day in existing_dates and not overwrite:
            result.skipped += 1
            continue
        await stores.snapshots.upsert_for_date(owner_id, day, value)
        result.written += 1

    logger.info(f"Backfill for {owner_id} complete: {result.written} written, {result.skipped} skipped")
    return result
