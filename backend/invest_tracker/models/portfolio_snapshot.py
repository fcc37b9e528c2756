"""
PortfolioSnapshot model - Daily snapshots of portfolio value for historical charts.
"""
from datetime import datetime, date
from decimal import Decimal
from sqlalchemy import String, Numeric, Date, DateTime, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from invest_tracker.database import Base


class PortfolioSnapshot(Base):
    """
    PortfolioSnapshot model storing one valuation per owner and calendar day.

    Saving again on the same day overwrites total_value.
    """
    __tablename__ = "portfolio_snapshots"

    # Primary key
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    owner_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    snapshot_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
        index=True,
        comment="UTC calendar date of the snapshot"
    )

    total_value: Mapped[Decimal] = mapped_column(
        Numeric(precision=20, scale=2),
        nullable=False,
        comment="Total portfolio value"
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
        UniqueConstraint("owner_id", "snapshot_date", name="uix_snapshot_owner_date"),
    )

    def __repr__(self) -> str:
        return (
            f"PortfolioSnapshot(id={self.id!r}, "
            f"owner={self.owner_id!r}, "
            f"date={self.snapshot_date!r}, "
            f"value={self.total_value!r})"
        )
