"""
Price feed clients for CoinGecko (crypto) and Financial Modeling Prep (stocks/ETFs).

This is the only layer that talks to the network. Every failure (timeout,
HTTP error, malformed body) is logged and turned into an empty mapping so
valuation carries on with whatever prices are left.
"""
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Optional, Sequence
import asyncio
import logging

import requests

from invest_tracker.config import settings
from invest_tracker.services.asset_mappings import collect_crypto_ids, collect_stock_tickers
from invest_tracker.services.cache import CacheService, cache as default_cache

logger = logging.getLogger(__name__)


@dataclass
class PriceFeeds:
    """Already-fetched feed responses for one request."""
    crypto: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    stock: Dict[str, Any] = field(default_factory=dict)


class CryptoPriceFeed:
    """
    CoinGecko simple price endpoint.

    Response format: {"bitcoin": {"inr": 6000000.0}, ...}
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        vs_currency: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
        cache_service: Optional[CacheService] = None,
    ):
        self.base_url = (base_url or settings.coingecko_api_url).rstrip("/")
        self.vs_currency = vs_currency or settings.local_currency
        self.timeout = timeout or settings.feed_timeout_seconds
        self._session = session or requests.Session()
        self._cache = cache_service or default_cache

    def fetch(self, coin_ids: Sequence[str]) -> Dict[str, Dict[str, Any]]:
        """
        Fetch current quotes for a batch of CoinGecko ids.

        Returns:
            Mapping coin id -> {currency: price}; empty on any failure
        """
        if not coin_ids:
            return {}

        cache_key = self._cache.make_key("crypto", self.vs_currency, ",".join(sorted(coin_ids)))
        cached = self._cache.get(cache_key)
        if cached is not None:
            logger.debug(f"Cache hit for crypto prices: {cache_key}")
            return cached

        url = f"{self.base_url}/simple/price"
        params = {"ids": ",".join(coin_ids), "vs_currencies": self.vs_currency}
        logger.info(f"Fetching crypto prices from CoinGecko: {params['ids']}")

        try:
            response = self._session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.error(f"Error fetching crypto prices from CoinGecko: {e}")
            return {}

        if not isinstance(data, dict):
            logger.warning(f"Unexpected response format from CoinGecko: {type(data).__name__}")
            return {}

        prices = {coin: quote for coin, quote in data.items() if isinstance(quote, dict)}
        logger.info(f"Received {len(prices)} crypto prices from CoinGecko")
        self._cache.set(cache_key, prices, settings.feed_cache_ttl)
        return prices


class StockPriceFeed:
    """
    Financial Modeling Prep quote endpoint.

    Response format: [{"symbol": "TATASTEEL.NS", "price": 150.2, ...}, ...]
    The feed is skipped entirely when no API key is configured.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
        cache_service: Optional[CacheService] = None,
    ):
        self.base_url = (base_url or settings.fmp_api_url).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.fmp_api_key
        self.timeout = timeout or settings.feed_timeout_seconds
        self._session = session or requests.Session()
        self._cache = cache_service or default_cache

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    def fetch(self, tickers: Sequence[str]) -> Dict[str, Any]:
        """
        Fetch current quotes for a batch of tickers.

        Returns:
            Mapping ticker -> price; empty when disabled or on any failure
        """
        if not tickers:
            return {}
        if not self.enabled:
            logger.info("FMP_API_KEY is not set. Skipping stock/ETF price fetch.")
            return {}

        cache_key = self._cache.make_key("stock", ",".join(sorted(tickers)))
        cached = self._cache.get(cache_key)
        if cached is not None:
            logger.debug(f"Cache hit for stock prices: {cache_key}")
            return cached

        url = f"{self.base_url}/quote/{','.join(tickers)}"
        logger.info(f"Fetching stock/ETF prices from FMP: {','.join(tickers)}")

        try:
            response = self._session.get(url, params={"apikey": self.api_key}, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            # Exception text from requests can embed the full URL, api key included
            logger.error(f"Error fetching stock/ETF prices from FMP: {type(e).__name__}")
            return {}

        if not isinstance(data, list):
            logger.warning(f"Unexpected response format from FMP: {type(data).__name__}")
            return {}

        prices = {}
        for quote in data:
            if not isinstance(quote, dict):
                continue
            symbol = quote.get("symbol")
            price = quote.get("price")
            if symbol and price is not None:
                prices[symbol] = price

        logger.info(f"Received {len(prices)} stock/ETF prices from FMP")
        self._cache.set(cache_key, prices, settings.feed_cache_ttl)
        return prices


async def _fetch_bounded(
    label: str,
    fetch: Callable[[Sequence[str]], Dict[str, Any]],
    keys: Sequence[str],
    timeout: float,
) -> Dict[str, Any]:
    """Run a blocking feed call in a worker thread, never longer than `timeout`."""
    if not keys:
        return {}
    try:
        return await asyncio.wait_for(asyncio.to_thread(fetch, keys), timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning(f"{label} price feed timed out after {timeout}s; continuing without it")
        return {}
    except Exception as e:
        logger.error(f"{label} price feed failed: {e}", exc_info=True)
        return {}


class PriceFeedService:
    """Fetches both feeds concurrently for a set of investments."""

    def __init__(
        self,
        crypto_feed: Optional[CryptoPriceFeed] = None,
        stock_feed: Optional[StockPriceFeed] = None,
        timeout: Optional[float] = None,
    ):
        self.crypto_feed = crypto_feed or CryptoPriceFeed()
        self.stock_feed = stock_feed or StockPriceFeed()
        self.timeout = timeout or settings.feed_timeout_seconds

    async def fetch_for(self, investments: Iterable) -> PriceFeeds:
        """
        Fetch the quotes needed to price `investments`.

        Only mapped names are requested. The two requests are independent:
        one failing or timing out leaves the other's result intact.
        """
        investments = list(investments)
        coin_ids = collect_crypto_ids(investments)
        tickers = collect_stock_tickers(investments)

        crypto, stock = await asyncio.gather(
            _fetch_bounded("Crypto", self.crypto_feed.fetch, coin_ids, self.timeout),
            _fetch_bounded("Stock/ETF", self.stock_feed.fetch, tickers, self.timeout),
        )
        return PriceFeeds(crypto=crypto, stock=stock)
