"""Manual price schemas."""
from decimal import Decimal
from typing import Dict
from pydantic import BaseModel, Field

from invest_tracker.schemas.types import JsonDecimal

# Lower-cased asset name -> override price
ManualPriceTable = Dict[str, JsonDecimal]


class ManualPriceUpdate(BaseModel):
    """Body of PUT /api/manual-asset-prices/{name}."""
    price: Decimal = Field(..., ge=0, description="Override price per unit")
