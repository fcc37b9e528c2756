"""Portfolio history API endpoints."""
from fastapi import APIRouter, Depends
from typing import List

from invest_tracker.api.deps import get_owner_id, get_portfolio_service
from invest_tracker.schemas.portfolio import HistoricalValuePoint
from invest_tracker.services.portfolio_service import PortfolioService

router = APIRouter(prefix="/api", tags=["portfolio"])


@router.get("/historical-portfolio-value", response_model=List[HistoricalValuePoint])
async def get_historical_portfolio_value(
    owner_id: str = Depends(get_owner_id),
    service: PortfolioService = Depends(get_portfolio_service),
):
    """Portfolio value series, one entry per day, ascending by date."""
    return await service.historical_values(owner_id)


@router.post("/save-daily-snapshot", response_model=HistoricalValuePoint)
async def save_daily_snapshot(
    owner_id: str = Depends(get_owner_id),
    service: PortfolioService = Depends(get_portfolio_service),
):
    """
    Value the portfolio now and record it for today (UTC).

    Calling this again on the same day overwrites the day's value.
    """
    return await service.save_daily_snapshot(owner_id)
