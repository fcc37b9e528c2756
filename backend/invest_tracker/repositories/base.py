"""
Repository interfaces shared by every persistence backend.

All operations are scoped by owner id. Writes go through the store's
WriteQueue; reads never wait on it.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Iterable, List
import re

from invest_tracker.models.investment import InvestmentCategory
from invest_tracker.schemas.investment import InvestmentCreate, InvestmentRecord
from invest_tracker.schemas.portfolio import HistoricalValuePoint
from invest_tracker.services.write_queue import WriteQueue

# Owner ids double as directory names in the JSON backend
OWNER_ID_PATTERN = re.compile(r"^[A-Za-z0-9_@-][A-Za-z0-9_.@-]{0,63}$")


def validate_owner_id(owner_id: str) -> str:
    """Return `owner_id` unchanged, or raise ValueError if it is not a safe identifier."""
    if not isinstance(owner_id, str) or not OWNER_ID_PATTERN.match(owner_id):
        raise ValueError(f"Invalid owner id: {owner_id!r}")
    return owner_id


def is_money_named(category: Any, name: Any, wanted: str) -> bool:
    """True for a Money holding whose name matches `wanted`, ignoring case."""
    return (
        category == InvestmentCategory.MONEY.value
        and isinstance(name, str)
        and name.lower() == wanted.lower()
    )


class InvestmentRepository(ABC):
    """Investments of every owner."""

    def __init__(self):
        self.write_queue = WriteQueue("investments")

    @abstractmethod
    async def list_by_owner(self, owner_id: str) -> List[InvestmentRecord]:
        """All investments of the owner, in creation order."""

    @abstractmethod
    async def list_owners(self) -> List[str]:
        """Owner ids that hold at least one investment."""

    @abstractmethod
    async def create(self, owner_id: str, data: InvestmentCreate) -> InvestmentRecord:
        """
        Add an investment.

        Raises:
            ConflictError: A Money holding with the same name already exists
        """

    @abstractmethod
    async def update_value_by_name(self, owner_id: str, name: str, value: Decimal) -> InvestmentRecord:
        """
        Set the balance of the owner's Money holding called `name`.

        Raises:
            NotFoundError: No Money holding has that name
        """

    @abstractmethod
    async def delete_by_id(self, owner_id: str, investment_id: int) -> None:
        """
        Delete one investment.

        Raises:
            NotFoundError: The owner has no investment with that id
        """

    @abstractmethod
    async def delete_by_category(self, owner_id: str, category: str) -> int:
        """Delete every investment of a category; returns how many were removed."""


class ManualPriceStore(ABC):
    """Manual price overrides, keyed by lower-cased asset name."""

    def __init__(self):
        self.write_queue = WriteQueue("manual_asset_prices")

    @abstractmethod
    async def get(self, owner_id: str) -> Dict[str, Any]:
        """The owner's override table."""

    @abstractmethod
    async def upsert(self, owner_id: str, name: str, price: Decimal) -> Dict[str, Any]:
        """Set one override and return the whole table."""

    @abstractmethod
    async def remove(self, owner_id: str, names: Iterable[str]) -> int:
        """Drop overrides for the given names; returns how many were removed."""


class SnapshotStore(ABC):
    """Historical portfolio values, one entry per owner and day."""

    def __init__(self):
        self.write_queue = WriteQueue("historical_portfolio_value")

    @abstractmethod
    async def list(self, owner_id: str) -> List[HistoricalValuePoint]:
        """The owner's series ordered by date ascending."""

    @abstractmethod
    async def upsert_for_date(self, owner_id: str, day: date, value: Decimal) -> HistoricalValuePoint:
        """Record `value` for `day`, overwriting any existing entry for that day."""


@dataclass
class StoreBundle:
    """The three stores an application instance works with."""
    investments: InvestmentRepository
    manual_prices: ManualPriceStore
    snapshots: SnapshotStore
