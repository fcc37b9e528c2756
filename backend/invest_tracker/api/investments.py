"""Investment API endpoints."""
from fastapi import APIRouter, Depends, HTTPException, Response, status
from typing import List
import logging

from invest_tracker.api.deps import get_owner_id, get_portfolio_service
from invest_tracker.exceptions import ConflictError, NotFoundError
from invest_tracker.schemas.investment import (
    InvestmentCreate,
    InvestmentResponse,
    UpdateByNameRequest,
    ValuedInvestment,
)
from invest_tracker.services.portfolio_service import PortfolioService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/investments", tags=["investments"])


@router.get("", response_model=List[ValuedInvestment], response_model_by_alias=True)
async def list_investments(
    owner_id: str = Depends(get_owner_id),
    service: PortfolioService = Depends(get_portfolio_service),
):
    """
    List the owner's investments with live valuation.

    Each item carries livePricePerUnit (null for Money), currentValue and
    profitOrLoss, all rounded to 2 decimals. Price feed outages show up
    as a live price of 0, never as an error.
    """
    return await service.list_valued_investments(owner_id)


@router.post(
    "",
    response_model=InvestmentResponse,
    response_model_by_alias=True,
    status_code=status.HTTP_201_CREATED,
)
async def create_investment(
    payload: InvestmentCreate,
    owner_id: str = Depends(get_owner_id),
    service: PortfolioService = Depends(get_portfolio_service),
):
    """
    Add an investment.

    Bank holdings cannot be added. A Money holding whose name already
    exists (ignoring case) is rejected with 409.
    """
    try:
        return await service.create_investment(owner_id, payload)
    except ConflictError as e:
        logger.warning(f"Rejected duplicate investment for {owner_id}: {e}")
        raise HTTPException(status_code=409, detail=str(e))


@router.post("/update-by-name", response_model=InvestmentResponse, response_model_by_alias=True)
async def update_by_name(
    payload: UpdateByNameRequest,
    owner_id: str = Depends(get_owner_id),
    service: PortfolioService = Depends(get_portfolio_service),
):
    """Set the balance of a Money holding identified by name."""
    try:
        return await service.update_money_by_name(owner_id, payload.name, payload.current_value)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.delete("/{investment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_investment(
    investment_id: int,
    owner_id: str = Depends(get_owner_id),
    service: PortfolioService = Depends(get_portfolio_service),
):
    """Delete an investment by id."""
    try:
        await service.delete_investment(owner_id, investment_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
