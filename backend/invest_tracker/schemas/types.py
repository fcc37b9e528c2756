"""Shared field types for API schemas."""
from decimal import Decimal
from typing import Annotated

from pydantic import PlainSerializer

# Decimals travel as JSON numbers; the frontend does arithmetic on them
JsonDecimal = Annotated[
    Decimal,
    PlainSerializer(lambda v: float(v), return_type=float, when_used="json"),
]
