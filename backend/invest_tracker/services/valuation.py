"""
Valuation engine.

Turns an investment record and its resolved live price into normalized
quantity, purchase total, current value and profit/loss. Malformed numbers
degrade to zero; nothing here raises.
"""
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Optional

from invest_tracker.models.investment import InvestmentCategory


ZERO = Decimal("0")
CENT = Decimal("0.01")
# Relative, below double precision (~1.1e-16)
ROUNDING_EPSILON = Decimal("1e-17")


@dataclass(frozen=True)
class Valuation:
    """Derived figures for one investment."""
    quantity: Decimal
    total_purchase_price: Decimal
    live_price_per_unit: Optional[Decimal]
    current_value: Decimal
    profit_or_loss: Decimal


def to_decimal(value: Any) -> Decimal:
    """
    Parse a stored numeric value leniently.

    Floats go through their shortest repr so 0.1 becomes Decimal("0.1")
    rather than its full binary expansion.

    Returns:
        Decimal value, or 0 for None, booleans, unparsable or non-finite input
    """
    if value is None or isinstance(value, bool):
        return ZERO
    try:
        if isinstance(value, Decimal):
            result = value
        elif isinstance(value, (int, float)):
            result = Decimal(repr(value))
        else:
            result = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return ZERO
    if not result.is_finite():
        return ZERO
    return result


def round_half_up(value: Decimal) -> Decimal:
    """
    Round to 2 decimal places, halves away from zero.

    Floats are read through their shortest repr, then a relative epsilon is
    added in the direction of the sign, so 1234.565 -> 1234.57 and
    -1.005 -> -1.01, while 1234.5649999999998 -> 1234.56.
    """
    value = to_decimal(value)
    if value.is_zero():
        return value.quantize(CENT)
    nudged = value + value * ROUNDING_EPSILON
    return nudged.quantize(CENT, rounding=ROUND_HALF_UP)


def normalize_purchase_total(investment, quantity: Optional[Decimal] = None) -> Decimal:
    """
    Total amount paid for the full quantity, unrounded.

    Records carry either `total_purchase_price` or, in legacy data,
    `purchase_price_per_unit`, which is multiplied by the quantity.
    """
    if investment.total_purchase_price is not None:
        return to_decimal(investment.total_purchase_price)
    if investment.purchase_price_per_unit is not None:
        if quantity is None:
            quantity = to_decimal(investment.quantity)
        return to_decimal(investment.purchase_price_per_unit) * quantity
    return ZERO


def valuate(investment, resolved_price: Optional[Decimal]) -> Valuation:
    """
    Compute the valuation of one investment.

    Args:
        investment: Record exposing category, quantity, total_purchase_price
            and purchase_price_per_unit
        resolved_price: Output of the price resolver (None for Money)

    Returns:
        Valuation with price, value, P/L and purchase total rounded to cents
    """
    quantity = to_decimal(investment.quantity)
    purchase_total = normalize_purchase_total(investment, quantity)

    if investment.category == InvestmentCategory.MONEY.value:
        live_price = None
        current_value = purchase_total
        profit_or_loss = ZERO
    else:
        live_price = resolved_price
        current_value = quantity * to_decimal(resolved_price)
        profit_or_loss = current_value - purchase_total

    return Valuation(
        quantity=quantity,
        total_purchase_price=round_half_up(purchase_total),
        live_price_per_unit=round_half_up(live_price) if live_price is not None else None,
        current_value=round_half_up(current_value),
        profit_or_loss=round_half_up(profit_or_loss),
    )
