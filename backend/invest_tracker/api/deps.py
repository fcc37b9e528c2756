"""Shared FastAPI dependencies."""
from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header, HTTPException

from invest_tracker.config import settings
from invest_tracker.repositories import StoreBundle, get_stores, validate_owner_id
from invest_tracker.services.portfolio_service import PortfolioService
from invest_tracker.services.price_feeds import PriceFeedService


def get_owner_id(x_owner_id: Optional[str] = Header(None, alias="X-Owner-Id")) -> str:
    """
    Owner of the request, from the X-Owner-Id header.

    Falls back to DEFAULT_OWNER_ID when configured; otherwise a missing
    or malformed owner id is a 400.
    """
    owner_id = x_owner_id if x_owner_id is not None else settings.default_owner_id
    if not owner_id:
        raise HTTPException(status_code=400, detail="Missing X-Owner-Id header")
    try:
        return validate_owner_id(owner_id.strip())
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid X-Owner-Id header")


# Shared so the HTTP sessions are reused across requests
@lru_cache(maxsize=1)
def get_price_feed_service() -> PriceFeedService:
    return PriceFeedService()


def get_portfolio_service(
    stores: StoreBundle = Depends(get_stores),
    feeds: PriceFeedService = Depends(get_price_feed_service),
) -> PortfolioService:
    return PortfolioService(stores, feeds)
