"""Date utilities for portfolio tracking.

Snapshots are keyed by calendar date in a fixed reference timezone (UTC),
so a snapshot saved late in the evening in one place and early morning in
another still lands on a single, unambiguous day.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Iterator, Optional


def today_utc(now: Optional[datetime] = None) -> date:
    """
    Current calendar date in UTC.

    Args:
        now: Optional aware datetime to convert (defaults to the current time).
             Naive datetimes are assumed to already be UTC.

    Returns:
        The UTC date

    Examples:
        >>> today_utc(datetime(2025, 3, 1, 1, 30, tzinfo=timezone(timedelta(hours=5, minutes=30))))
        datetime.date(2025, 2, 28)
    """
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc).date()


def parse_date_string(date_str: str, format_str: str = "%Y-%m-%d") -> date:
    """
    Parse a date string into a date object.

    Raises:
        ValueError: If the string does not match `format_str` or is not a
            valid calendar date
    """
    try:
        return datetime.strptime(date_str.strip(), format_str).date()
    except (ValueError, AttributeError) as e:
        raise ValueError(f"Invalid date '{date_str}': expected format {format_str}") from e


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield every calendar date from start to end, both inclusive."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)
