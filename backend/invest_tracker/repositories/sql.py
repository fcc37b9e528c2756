"""
SQLAlchemy backend (PostgreSQL via asyncpg, SQLite via aiosqlite).

Each operation opens its own session from the factory, so repositories can
be shared across requests and used from background tasks alike.
"""
from contextlib import asynccontextmanager
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Iterable, List
import logging

from sqlalchemy import select, delete, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from invest_tracker.exceptions import ConflictError, NotFoundError, StorageError
from invest_tracker.models import Investment, InvestmentCategory, ManualAssetPrice, PortfolioSnapshot
from invest_tracker.repositories.base import InvestmentRepository, ManualPriceStore, SnapshotStore
from invest_tracker.schemas.investment import InvestmentCreate, InvestmentRecord
from invest_tracker.schemas.portfolio import HistoricalValuePoint

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _session_scope(session_factory: async_sessionmaker[AsyncSession]):
    """Session that commits on success, rolls back on error and maps driver errors to StorageError."""
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"Database error: {e}")
            raise StorageError("Database operation failed") from e
        except Exception:
            await session.rollback()
            raise


def _to_record(row: Investment) -> InvestmentRecord:
    return InvestmentRecord(
        id=row.id,
        owner_id=row.owner_id,
        category=row.category,
        name=row.name,
        quantity=row.quantity,
        total_purchase_price=row.total_purchase_price,
        purchase_price_per_unit=row.purchase_price_per_unit,
        date=row.acquired_on,
    )


def _money_named(owner_id: str, name: str):
    return (
        select(Investment)
        .where(Investment.owner_id == owner_id)
        .where(Investment.category == InvestmentCategory.MONEY.value)
        .where(func.lower(Investment.name) == name.lower())
    )


class SqlInvestmentRepository(InvestmentRepository):

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        super().__init__()
        self._session_factory = session_factory

    async def list_by_owner(self, owner_id: str) -> List[InvestmentRecord]:
        async with _session_scope(self._session_factory) as session:
            result = await session.execute(
                select(Investment)
                .where(Investment.owner_id == owner_id)
                .order_by(Investment.id)
            )
            return [_to_record(row) for row in result.scalars().all()]

    async def list_owners(self) -> List[str]:
        async with _session_scope(self._session_factory) as session:
            result = await session.execute(
                select(Investment.owner_id).distinct().order_by(Investment.owner_id)
            )
            return list(result.scalars().all())

    async def create(self, owner_id: str, data: InvestmentCreate) -> InvestmentRecord:
        async with self.write_queue:
            async with _session_scope(self._session_factory) as session:
                if data.category == InvestmentCategory.MONEY:
                    existing = await session.execute(_money_named(owner_id, data.name))
                    if existing.scalars().first() is not None:
                        raise ConflictError(f"A Money holding named '{data.name}' already exists")

                row = Investment(
                    owner_id=owner_id,
                    category=data.category.value,
                    name=data.name,
                    quantity=data.quantity,
                    total_purchase_price=data.total_purchase_price,
                    acquired_on=data.date,
                )
                session.add(row)
                await session.flush()
                record = _to_record(row)

        logger.info(f"Created investment {record.id} ({record.category}: {record.name}) for {owner_id}")
        return record

    async def update_value_by_name(self, owner_id: str, name: str, value: Decimal) -> InvestmentRecord:
        async with self.write_queue:
            async with _session_scope(self._session_factory) as session:
                result = await session.execute(_money_named(owner_id, name).order_by(Investment.id))
                row = result.scalars().first()
                if row is None:
                    raise NotFoundError(f"No Money holding named '{name}'")
                row.total_purchase_price = value
                row.purchase_price_per_unit = None
                await session.flush()
                return _to_record(row)

    async def delete_by_id(self, owner_id: str, investment_id: int) -> None:
        async with self.write_queue:
            async with _session_scope(self._session_factory) as session:
                result = await session.execute(
                    select(Investment)
                    .where(Investment.owner_id == owner_id)
                    .where(Investment.id == investment_id)
                )
                row = result.scalar_one_or_none()
                if row is None:
                    raise NotFoundError(f"Investment {investment_id} not found")
                await session.delete(row)

        logger.info(f"Deleted investment {investment_id} for {owner_id}")

    async def delete_by_category(self, owner_id: str, category: str) -> int:
        async with self.write_queue:
            async with _session_scope(self._session_factory) as session:
                result = await session.execute(
                    delete(Investment)
                    .where(Investment.owner_id == owner_id)
                    .where(Investment.category == category)
                )
                return result.rowcount or 0


class SqlManualPriceStore(ManualPriceStore):

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        super().__init__()
        self._session_factory = session_factory

    @staticmethod
    async def _load(session: AsyncSession, owner_id: str) -> Dict[str, Any]:
        result = await session.execute(
            select(ManualAssetPrice)
            .where(ManualAssetPrice.owner_id == owner_id)
            .order_by(ManualAssetPrice.asset_name)
        )
        return {row.asset_name: row.price for row in result.scalars().all()}

    async def get(self, owner_id: str) -> Dict[str, Any]:
        async with _session_scope(self._session_factory) as session:
            return await self._load(session, owner_id)

    async def upsert(self, owner_id: str, name: str, price: Decimal) -> Dict[str, Any]:
        asset_name = name.lower()
        async with self.write_queue:
            async with _session_scope(self._session_factory) as session:
                result = await session.execute(
                    select(ManualAssetPrice)
                    .where(ManualAssetPrice.owner_id == owner_id)
                    .where(ManualAssetPrice.asset_name == asset_name)
                )
                row = result.scalar_one_or_none()
                if row is None:
                    session.add(ManualAssetPrice(owner_id=owner_id, asset_name=asset_name, price=price))
                else:
                    row.price = price
                await session.flush()
                prices = await self._load(session, owner_id)

        logger.info(f"Manual price for '{asset_name}' set to {price} ({owner_id})")
        return prices

    async def remove(self, owner_id: str, names: Iterable[str]) -> int:
        wanted = sorted({name.lower() for name in names})
        if not wanted:
            return 0
        async with self.write_queue:
            async with _session_scope(self._session_factory) as session:
                result = await session.execute(
                    delete(ManualAssetPrice)
                    .where(ManualAssetPrice.owner_id == owner_id)
                    .where(ManualAssetPrice.asset_name.in_(wanted))
                )
                return result.rowcount or 0


class SqlSnapshotStore(SnapshotStore):

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        super().__init__()
        self._session_factory = session_factory

    async def list(self, owner_id: str) -> List[HistoricalValuePoint]:
        async with _session_scope(self._session_factory) as session:
            result = await session.execute(
                select(PortfolioSnapshot)
                .where(PortfolioSnapshot.owner_id == owner_id)
                .order_by(PortfolioSnapshot.snapshot_date)
            )
            return [
                HistoricalValuePoint(date=row.snapshot_date, value=row.total_value)
                for row in result.scalars().all()
            ]

    async def upsert_for_date(self, owner_id: str, day: date, value: Decimal) -> HistoricalValuePoint:
        async with self.write_queue:
            async with _session_scope(self._session_factory) as session:
                result = await session.execute(
                    select(PortfolioSnapshot)
                    .where(PortfolioSnapshot.owner_id == owner_id)
                    .where(PortfolioSnapshot.snapshot_date == day)
                )
                existing = result.scalar_one_or_none()
                if existing is None:
                    session.add(PortfolioSnapshot(owner_id=owner_id, snapshot_date=day, total_value=value))
                else:
                    existing.total_value = value

        return HistoricalValuePoint(date=day, value=value)
