"""
Remove deprecated Bank data for one owner.

Deletes every investment in the Bank category and the manual prices that
were only used for bank sub-accounts (pnb, psb, indian, union, indian
overseas, cash).

Usage:
    python purge_bank_holdings.py --owner alice
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
from invest_tracker.services.maintenance import purge_bank_holdings

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


async def run(owner_id: str):
    async with standalone_stores() as stores:
        return await purge_bank_holdings(stores, owner_id)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Remove deprecated Bank holdings and bank manual prices")
    parser.add_argument("--owner", type=str, required=True, help="Owner id to clean up")
    args = parser.parse_args(argv)

    try:
        owner_id = validate_owner_id(args.owner)
    except ValueError as e:
        logger.error(f"Error: {e}")
        sys.exit(2)

    logger.info(f"Starting bank data removal for {owner_id}")
    try:
        result = asyncio.run(run(owner_id))
    except InvestTrackerError as e:
        logger.error(f"Error: {e}")
        sys.exit(1)

    logger.info(
        f"Bank data removal complete: {result.investments_removed} investments, "
        f"{result.overrides_removed} manual prices removed"
    )


if __name__ == "__main__":
    main()
