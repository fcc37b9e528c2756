"""
Backfill historical portfolio snapshots.

Creates one entry per day from the earliest acquisition date (or --start)
to today. Past live prices are not available, so each day's value is the
cumulative purchase cost of the investments acquired by then. Days that
already have a snapshot are kept unless --overwrite is given.

Usage:
    python backfill_snapshots.py --owner alice
    python backfill_snapshots.py --owner alice --start 2024-01-01 --overwrite
"""
import sys
import os
import argparse
import asyncio
import logging

# Add backend directory to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from invest_tracker.exceptions import InvestTrackerError
from invest_tracker.repositories import standalone_stores, validate_owner_id
from invest_tracker.services.backfill import backfill_snapshots
from invest_tracker.utils.time_utils import parse_date_string

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Backfill daily portfolio value snapshots from acquisition dates"
    )
    parser.add_argument(
        "--owner",
        type=str,
        required=True,
        help="Owner id whose series is backfilled"
    )
    parser.add_argument(
        "--start",
        type=str,
        help="First date (YYYY-MM-DD); defaults to the earliest acquisition date"
    )
    parser.add_argument(
        "--overwrite",
        action="store_true",
        help="Replace snapshots that already exist"
    )
    return parser.parse_args(argv)


async def run(owner_id: str, start_date=None, overwrite: bool = False):
    async with standalone_stores() as stores:
        return await backfill_snapshots(stores, owner_id, start=start_date, overwrite=overwrite)


def main(argv=None):
    """Main function to run the backfill."""
    args = parse_args(argv)

    try:
        owner_id = validate_owner_id(args.owner)
        start_date = parse_date_string(args.start) if args.start else None
    except ValueError as e:
        logger.error(f"Error: {e}")
        sys.exit(2)

    logger.info(f"Starting portfolio snapshot backfill for {owner_id}")
    logger.info("=" * 60)

    try:
        result = asyncio.run(run(owner_id, start_date, args.overwrite))
    except (ValueError, InvestTrackerError) as e:
        logger.error(f"Error: {e}")
        sys.exit(1)

    logger.info("=" * 60)
    if result.start is None:
        logger.info("No dated investments found; nothing was written.")
    else:
        logger.info(f"Backfill complete: {result.start} to {result.end}")
        logger.info(f"Written: {result.written} snapshots")
        logger.info(f"Skipped: {result.skipped} snapshots (already existed)")
    logger.info("=" * 60)


if __name__ == "__main__":
    main()
