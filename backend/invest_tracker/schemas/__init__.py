"""Pydantic schemas for request/response bodies."""
from invest_tracker.schemas.investment import (
    InvestmentRecord,
    InvestmentCreate,
    InvestmentResponse,
    UpdateByNameRequest,
    ValuedInvestment,
)
from invest_tracker.schemas.price import ManualPriceTable, ManualPriceUpdate
from invest_tracker.schemas.portfolio import HistoricalValuePoint, ErrorDetail, ErrorResponse

__all__ = [
    "InvestmentRecord",
    "InvestmentCreate",
    "InvestmentResponse",
    "UpdateByNameRequest",
    "ValuedInvestment",
    "ManualPriceTable",
    "ManualPriceUpdate",
    "HistoricalValuePoint",
    "ErrorDetail",
    "ErrorResponse",
]
