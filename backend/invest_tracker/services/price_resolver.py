"""
Price resolver - Picks one live price per investment.

Precedence (first match wins, sources are never merged):
1. Money holdings have no per-unit price -> None
2. Manual override for the lower-cased name
3. Crypto feed quote in the local currency (Crypto only)
4. Stock/ETF feed quote (Stocks and ETF Groww only)
5. Decimal 0 ("no price found", distinct from None)

Feeds are passed in already fetched; an outage simply shows up as an
empty mapping.
"""
from decimal import Decimal
from typing import Any, Dict, Iterable, Mapping, Optional
import logging

from invest_tracker.models.investment import InvestmentCategory
from invest_tracker.services.asset_mappings import crypto_id_for, ticker_for, is_stock_category
from invest_tracker.services.valuation import ZERO, to_decimal

logger = logging.getLogger(__name__)


def resolve_live_price(
    investment,
    manual_overrides: Mapping[str, Any],
    crypto_feed: Mapping[str, Mapping[str, Any]],
    stock_feed: Mapping[str, Any],
    local_currency: str = "inr",
) -> Optional[Decimal]:
    """
    Resolve the live per-unit price of one investment.

    Args:
        investment: Record exposing `category` and `name`
        manual_overrides: Lower-cased asset name -> override price
        crypto_feed: Feed id -> {currency: price}
        stock_feed: Ticker -> price
        local_currency: Key of the crypto quote to use

    Returns:
        None for Money, otherwise a Decimal (0 when nothing matched)
    """
    if investment.category == InvestmentCategory.MONEY.value:
        return None

    name = investment.name.lower()

    if name in manual_overrides:
        price = to_decimal(manual_overrides[name])
        logger.debug(f"{investment.name}: manual price {price}")
        return price

    if investment.category == InvestmentCategory.CRYPTO.value:
        coin_id = crypto_id_for(name)
        quote = crypto_feed.get(coin_id) if coin_id else None
        if quote and quote.get(local_currency) is not None:
            price = to_decimal(quote[local_currency])
            logger.debug(f"{investment.name}: crypto price {price} ({coin_id})")
            return price

    elif is_stock_category(investment.category):
        ticker = ticker_for(name)
        if ticker and stock_feed.get(ticker) is not None:
            price = to_decimal(stock_feed[ticker])
            logger.debug(f"{investment.name}: stock/ETF price {price} ({ticker})")
            return price

    logger.debug(f"{investment.name}: no price found, defaulting to 0")
    return ZERO


def resolve_prices(
    investments: Iterable,
    manual_overrides: Mapping[str, Any],
    crypto_feed: Mapping[str, Mapping[str, Any]],
    stock_feed: Mapping[str, Any],
    local_currency: str = "inr",
) -> Dict[int, Optional[Decimal]]:
    """Resolve prices for a whole portfolio, keyed by investment id."""
    return {
        inv.id: resolve_live_price(inv, manual_overrides, crypto_feed, stock_feed, local_currency)
        for inv in investments
    }
