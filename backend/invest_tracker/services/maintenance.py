"""Maintenance operations on stored data."""
from dataclasses import dataclass
import logging

from invest_tracker.models.investment import InvestmentCategory
from invest_tracker.repositories.base import StoreBundle

logger = logging.getLogger(__name__)

# Override keys that only ever priced bank sub-accounts
BANK_OVERRIDE_NAMES = ("pnb", "psb", "indian", "union", "indian overseas", "cash")


@dataclass
class PurgeResult:
    owner_id: str
    investments_removed: int
    overrides_removed: int


async def purge_bank_holdings(stores: StoreBundle, owner_id: str) -> PurgeResult:
    """Delete the owner's deprecated Bank investments and their manual price overrides."""
    investments_removed = await stores.investments.delete_by_category(
        owner_id, InvestmentCategory.BANK.value
    )
    if investments_removed:
        logger.info(f"Removed {investments_removed} bank investments for {owner_id}")
    else:
        logger.info(f"No bank investments found for {owner_id}")

    overrides_removed = await stores.manual_prices.remove(owner_id, BANK_OVERRIDE_NAMES)
    if overrides_removed:
        logger.info(f"Removed {overrides_removed} bank-related manual prices for {owner_id}")
    else:
        logger.info(f"No bank-related manual prices found for {owner_id}")

    return PurgeResult(
        owner_id=owner_id,
        investments_removed=investments_removed,
        overrides_removed=overrides_removed,
    )
