"""
Investment model - A single holding owned by a user.
"""
from datetime import datetime, date
from decimal import Decimal
from typing import Optional
from sqlalchemy import String, Numeric, Date, DateTime, Index
from sqlalchemy.orm import Mapped, mapped_column
import enum

from invest_tracker.database import Base


class InvestmentCategory(str, enum.Enum):
    """Investment category enumeration."""
    MONEY = "Money"
    CRYPTO = "Crypto"
    STOCKS = "Stocks"
    ETF_GROWW = "ETF Groww"
    # Deprecated: still readable, never creatable, removed by the purge job
    BANK = "Bank"


class Investment(Base):
    """
    Investment model representing one holding.

    Live price, current value and profit/loss are derived on every read
    and are never stored here.
    """
    __tablename__ = "investments"

    # Primary key
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    owner_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        index=True,
        comment="Owning user"
    )

    # Kept as plain text so legacy categories survive a round trip
    category: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        comment="Money, Crypto, Stocks, ETF Groww (or legacy Bank)"
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)

    quantity: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(precision=28, scale=10),
        nullable=True,
        comment="Units held; irrelevant for Money"
    )
    total_purchase_price: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(precision=28, scale=10),
        nullable=True,
        comment="Total amount paid for the full quantity"
    )
    purchase_price_per_unit: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(precision=28, scale=10),
        nullable=True,
        comment="Legacy per-unit purchase price, used when the total is absent"
    )

    acquired_on: Mapped[Optional[date]] = mapped_column(
        Date,
        nullable=True,
        comment="Acquisition date"
    )

    # Metadata
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=datetime.utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=datetime.utcnow,
        onupdate=datetime.utcnow
    )

    __table_args__ = (
        Index("ix_investments_owner_category", "owner_id", "category"),
    )

    def __repr__(self) -> str:
        return (
            f"Investment(id={self.id!r}, "
            f"owner={self.owner_id!r}, "
            f"category={self.category!r}, "
            f"name={self.name!r}, "
            f"quantity={self.quantity!r})"
        )
