"""Investment schemas."""
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from datetime import date as date_type, datetime
from decimal import Decimal
from typing import Any, Optional

from invest_tracker.models.investment import InvestmentCategory
from invest_tracker.schemas.types import JsonDecimal
from invest_tracker.utils.time_utils import parse_date_string


class CamelModel(BaseModel):
    """Base model speaking camelCase on the wire and snake_case in Python."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class InvestmentRecord(CamelModel):
    """
    A stored investment as read back from any backend.

    Numeric fields are kept as stored (they may be strings or malformed in
    legacy files); the valuation engine normalizes them.
    """
    id: int
    owner_id: str
    category: str
    name: str
    quantity: Any = None
    total_purchase_price: Any = None
    purchase_price_per_unit: Any = None
    date: Optional[date_type] = None

    @field_validator("date", mode="before")
    @classmethod
    def lenient_date(cls, v):
        """Blank or malformed legacy dates read as unknown; the record is kept."""
        if v is None or isinstance(v, date_type):
            return v.date() if isinstance(v, datetime) else v
        try:
            return parse_date_string(str(v).strip()[:10])
        except ValueError:
            return None


class InvestmentCreate(CamelModel):
    """Schema for adding an investment."""
    category: InvestmentCategory = Field(..., description="Money, Crypto, Stocks or ETF Groww")
    name: str = Field(..., min_length=1, max_length=200, description="Asset label")
    quantity: Decimal = Field(..., ge=0, description="Units held")
    date: date_type = Field(..., description="Acquisition date (YYYY-MM-DD)")
    total_purchase_price: Decimal = Field(..., ge=0, description="Total amount paid")
    manual_live_price: Optional[Decimal] = Field(
        None,
        ge=0,
        description="Optional price override, stored in the manual price table"
    )

    @field_validator("category")
    @classmethod
    def validate_category(cls, v):
        """Bank holdings are deprecated and cannot be added."""
        if v == InvestmentCategory.BANK:
            raise ValueError("Bank holdings are no longer supported")
        return v

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        """Strip surrounding whitespace; blank names are rejected."""
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v


class UpdateByNameRequest(CamelModel):
    """Set the balance of a Money holding identified by name."""
    name: str = Field(..., min_length=1)
    current_value: Decimal = Field(..., ge=0)


class ValuedInvestment(CamelModel):
    """An investment with its derived live price, value and profit/loss."""
    id: int
    owner_id: str
    category: str
    name: str
    quantity: JsonDecimal
    date: Optional[date_type] = None
    total_purchase_price: JsonDecimal
    live_price_per_unit: Optional[JsonDecimal] = None
    current_value: JsonDecimal
    profit_or_loss: JsonDecimal


class InvestmentResponse(CamelModel):
    """A stored investment as returned by create and update-by-name."""
    id: int
    owner_id: str
    category: str
    name: str
    quantity: JsonDecimal
    date: Optional[date_type] = None
    total_purchase_price: JsonDecimal
