"""Portfolio history schemas."""
from pydantic import BaseModel, Field
from datetime import date as date_type
from typing import Any, Dict, Optional

from invest_tracker.schemas.types import JsonDecimal


class HistoricalValuePoint(BaseModel):
    """Single data point of the portfolio value series."""
    date: date_type = Field(..., description="Calendar date of the snapshot")
    value: JsonDecimal = Field(..., description="Total portfolio value on this date")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"date": "2025-01-15", "value": 150000.25}
            ]
        }
    }


class ErrorDetail(BaseModel):
    code: str
    message: str
    details: Optional[Dict[str, Any]] = None


class ErrorResponse(BaseModel):
    """Body returned for errors caught at the application boundary."""
    error: ErrorDetail
    timestamp: str
    path: str
    request_id: str
