"""
Portfolio service - Ties stores, price feeds, resolver and valuation together.

Routers, the scheduled snapshot task and maintenance scripts all go
through this class; none of them touch the resolver or the stores
directly for portfolio-level operations.
"""
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional, Tuple
import logging

from invest_tracker.config import settings
from invest_tracker.repositories.base import StoreBundle
from invest_tracker.schemas.investment import (
    InvestmentCreate,
    InvestmentRecord,
    InvestmentResponse,
    ValuedInvestment,
)
from invest_tracker.schemas.portfolio import HistoricalValuePoint
from invest_tracker.services.price_feeds import PriceFeedService
from invest_tracker.services.price_resolver import resolve_prices
from invest_tracker.services.snapshot_aggregator import take_snapshot
from invest_tracker.services.valuation import normalize_purchase_total, to_decimal, valuate
from invest_tracker.utils.time_utils import today_utc

logger = logging.getLogger(__name__)


def to_valued_investment(record: InvestmentRecord, resolved_price: Optional[Decimal]) -> ValuedInvestment:
    """Combine a stored record with its valuation."""
    valuation = valuate(record, resolved_price)
    return ValuedInvestment(
        id=record.id,
        owner_id=record.owner_id,
        category=record.category,
        name=record.name,
        quantity=valuation.quantity,
        date=record.date,
        total_purchase_price=valuation.total_purchase_price,
        live_price_per_unit=valuation.live_price_per_unit,
        current_value=valuation.current_value,
        profit_or_loss=valuation.profit_or_loss,
    )


def to_investment_response(record: InvestmentRecord) -> InvestmentResponse:
    """Stored record with normalized numbers, for create and update responses."""
    quantity = to_decimal(record.quantity)
    return InvestmentResponse(
        id=record.id,
        owner_id=record.owner_id,
        category=record.category,
        name=record.name,
        quantity=quantity,
        date=record.date,
        total_purchase_price=normalize_purchase_total(record, quantity),
    )


class PortfolioService:
    """Owner-scoped portfolio operations."""

    def __init__(
        self,
        stores: StoreBundle,
        feeds: Optional[PriceFeedService] = None,
        local_currency: Optional[str] = None,
    ):
        self.stores = stores
        self.feeds = feeds or PriceFeedService()
        self.local_currency = local_currency or settings.local_currency

    async def _priced_portfolio(
        self, owner_id: str
    ) -> Tuple[List[InvestmentRecord], Dict[int, Optional[Decimal]]]:
        """Load the owner's investments and resolve a live price for each."""
        investments = await self.stores.investments.list_by_owner(owner_id)
        overrides = await self.stores.manual_prices.get(owner_id)
        feeds = await self.feeds.fetch_for(investments)
        prices = resolve_prices(investments, overrides, feeds.crypto, feeds.stock, self.local_currency)
        return investments, prices

    async def list_valued_investments(self, owner_id: str) -> List[ValuedInvestment]:
        """All investments of the owner with live price, value and profit/loss."""
        investments, prices = await self._priced_portfolio(owner_id)
        return [to_valued_investment(inv, prices.get(inv.id)) for inv in investments]

    async def create_investment(self, owner_id: str, data: InvestmentCreate) -> InvestmentResponse:
        """
        Add an investment.

        A `manual_live_price` in the request is stored in the owner's
        override table under the investment's name.

        Raises:
            ConflictError: A Money holding with the same name already exists
        """
        record = await self.stores.investments.create(owner_id, data)
        if data.manual_live_price is not None:
            await self.stores.manual_prices.upsert(owner_id, data.name, data.manual_live_price)
        return to_investment_response(record)

    async def update_money_by_name(self, owner_id: str, name: str, value: Decimal) -> InvestmentResponse:
        """
        Set the balance of a Money holding.

        Raises:
            NotFoundError: No Money holding has that name
        """
        record = await self.stores.investments.update_value_by_name(owner_id, name, value)
        logger.info(f"Updated Money holding '{record.name}' to {value} for {owner_id}")
        return to_investment_response(record)

    async def delete_investment(self, owner_id: str, investment_id: int) -> None:
        await self.stores.investments.delete_by_id(owner_id, investment_id)

    async def get_manual_prices(self, owner_id: str) -> Dict[str, Decimal]:
        """Override table with every price parsed as a Decimal (unparsable values read as 0)."""
        overrides = await self.stores.manual_prices.get(owner_id)
        return {name: to_decimal(price) for name, price in overrides.items()}

    async def set_manual_price(self, owner_id: str, name: str, price: Decimal) -> Dict[str, Decimal]:
        """Upsert one override; returns the full override table."""
        overrides = await self.stores.manual_prices.upsert(owner_id, name, price)
        return {key: to_decimal(value) for key, value in overrides.items()}

    async def historical_values(self, owner_id: str) -> List[HistoricalValuePoint]:
        return await self.stores.snapshots.list(owner_id)

    async def save_daily_snapshot(self, owner_id: str, today: Optional[date] = None) -> HistoricalValuePoint:
        """
        Value the whole portfolio and record it as today's (UTC) entry.

        Saving twice on the same day overwrites the earlier value.

        Args:
            owner_id: Owner whose portfolio is valued
            today: Snapshot date; defaults to the current UTC date

        Returns:
            The recorded {date, value} point
        """
        day = today or today_utc()
        investments, prices = await self._priced_portfolio(owner_id)
        existing = await self.stores.snapshots.list(owner_id)
        _, total_value = take_snapshot(investments, prices, existing, day)

        point = await self.stores.snapshots.upsert_for_date(owner_id, day, total_value)
        logger.info(f"Saved portfolio snapshot for {owner_id} on {day}: {total_value}")
        return point
