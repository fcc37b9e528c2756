"""Utilities module for the investment tracker backend.

This package contains shared utility functions used across the application.
"""

from .time_utils import (
    today_utc,
    parse_date_string,
    iter_days,
)

__all__ = [
    "today_utc",
    "parse_date_string",
    "iter_days",
]
