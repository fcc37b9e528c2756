"""
ManualAssetPrice model - Caller-set prices that override every feed.
"""
from datetime import datetime
from decimal import Decimal
from sqlalchemy import String, Numeric, DateTime, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from invest_tracker.database import Base


class ManualAssetPrice(Base):
    """Manual price override for one lower-cased asset name of one owner."""
    __tablename__ = "manual_asset_prices"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    owner_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    asset_name: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
        comment="Lower-cased asset name"
    )
    price: Mapped[Decimal] = mapped_column(
        Numeric(precision=28, scale=10),
        nullable=False
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=datetime.utcnow,
        onupdate=datetime.utcnow
    )

    __table_args__ = (
        UniqueConstraint("owner_id", "asset_name", name="uix_manual_price_owner_name"),
    )

    def __repr__(self) -> str:
        return f"ManualAssetPrice(owner={self.owner_id!r}, name={self.asset_name!r}, price={self.price!r})"
