"""
Snapshot aggregator - Portfolio totals and the one-entry-per-day value series.
"""
from datetime import date
from decimal import Decimal
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

from invest_tracker.schemas.portfolio import HistoricalValuePoint
from invest_tracker.services.valuation import ZERO, round_half_up, valuate


def portfolio_total(
    investments: Iterable,
    resolved_prices: Mapping[int, Optional[Decimal]],
) -> Decimal:
    """
    Sum of current values across all investments, rounded to cents.

    Investments absent from `resolved_prices` are valued with no price
    (Money is unaffected, everything else counts as 0).
    """
    total = ZERO
    for inv in investments:
        total += valuate(inv, resolved_prices.get(inv.id)).current_value
    return round_half_up(total)


def upsert_series_entry(
    series: Sequence[HistoricalValuePoint],
    day: date,
    value: Decimal,
) -> List[HistoricalValuePoint]:
    """
    Return a copy of `series` holding `value` for `day`.

    An existing entry for the day is replaced in place; otherwise a new
    entry is appended. Other entries keep their order.
    """
    updated = list(series)
    point = HistoricalValuePoint(date=day, value=value)
    for index, existing in enumerate(updated):
        if existing.date == day:
            updated[index] = point
            return updated
    updated.append(point)
    return updated


def sort_series(series: Iterable[HistoricalValuePoint]) -> List[HistoricalValuePoint]:
    """Series ordered by date ascending, for reads."""
    return sorted(series, key=lambda point: point.date)


def take_snapshot(
    investments: Iterable,
    resolved_prices: Mapping[int, Optional[Decimal]],
    existing_series: Sequence[HistoricalValuePoint],
    today: date,
) -> Tuple[List[HistoricalValuePoint], Decimal]:
    """
    Value the portfolio and record it as today's entry.

    Args:
        investments: The owner's full investment set
        resolved_prices: Investment id -> resolved live price
        existing_series: Current value series (append order)
        today: UTC calendar date of the snapshot

    Returns:
        Tuple of (updated_series, total_value)
    """
    total_value = portfolio_total(investments, resolved_prices)
    return upsert_series_entry(existing_series, today, total_value), total_value
