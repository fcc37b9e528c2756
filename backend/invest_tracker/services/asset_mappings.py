"""
Asset identity mappings - Lower-cased asset names to price feed identifiers.

These tables are configuration, not user data. A name missing from the
relevant table never receives a live price from that feed.
"""
from typing import Iterable, List, Optional
import logging

from invest_tracker.models.investment import InvestmentCategory

logger = logging.getLogger(__name__)


# Crypto name -> CoinGecko coin id
CRYPTO_ID_MAPPING = {
    "btc": "bitcoin",
    "eth": "ethereum",
    "xrp": "ripple",
    "sol": "solana",
    "doge": "dogecoin",
    "trump": "maga",
}

# Stock/ETF name -> exchange ticker
STOCK_TICKER_MAPPING = {
    # Stocks
    "pateleng": "PATELENG.NS",
    "tata steel": "TATASTEEL.NS",
    "tata motors": "TATAMOTORS.NS",
    # ETFs
    "juniorbees": "JUNIORBEES.NS",
    "hdfcsml250": "HDFCSML250.NS",
    "motilal-nasdaq 100": "MON100.NS",
    "cpse etf": "CPSEETF.NS",
    "nippon etf nifty midcap 150": "MID150BEES.NS",
    "silverbees": "SILVERBEES.NS",
    "mahaktech": "MAHKTECH.NS",
    "sensexetf": "SENSEXETF.NS",
    "nippon india etf gold bees": "GOLDBEES.NS",
    "mirae asset nyse fang+etf": "MAFANG.NS",
    "niftybees": "NIFTYBEES.NS",
}

STOCK_CATEGORIES = (InvestmentCategory.STOCKS.value, InvestmentCategory.ETF_GROWW.value)


def crypto_id_for(name: str) -> Optional[str]:
    """Return the CoinGecko id for an asset name, or None if unmapped."""
    return CRYPTO_ID_MAPPING.get(name.lower())


def ticker_for(name: str) -> Optional[str]:
    """Return the exchange ticker for a stock/ETF name, or None if unmapped."""
    return STOCK_TICKER_MAPPING.get(name.lower())


def is_stock_category(category: str) -> bool:
    return category in STOCK_CATEGORIES


def collect_crypto_ids(investments: Iterable) -> List[str]:
    """
    Distinct feed ids needed to price the crypto holdings, in first-seen order.

    Args:
        investments: Records exposing `category` and `name`

    Returns:
        List of CoinGecko ids (no duplicates)
    """
    ids: List[str] = []
    for inv in investments:
        if inv.category != InvestmentCategory.CRYPTO.value:
            continue
        coin_id = crypto_id_for(inv.name)
        if coin_id and coin_id not in ids:
            ids.append(coin_id)
    return ids


def collect_stock_tickers(investments: Iterable) -> List[str]:
    """Distinct tickers needed to price the stock and ETF holdings, in first-seen order."""
    tickers: List[str] = []
    for inv in investments:
        if not is_stock_category(inv.category):
            continue
        ticker = ticker_for(inv.name)
        if ticker and ticker not in tickers:
            tickers.append(ticker)
    return tickers
