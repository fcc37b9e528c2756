"""API router package."""
from invest_tracker.api.investments import router as investments_router
from invest_tracker.api.manual_prices import router as manual_prices_router
from invest_tracker.api.portfolio import router as portfolio_router

__all__ = [
    "investments_router",
    "manual_prices_router",
    "portfolio_router",
]
