"""Manual asset price API endpoints."""
from fastapi import APIRouter, Depends, HTTPException

from invest_tracker.api.deps import get_owner_id, get_portfolio_service
from invest_tracker.schemas.price import ManualPriceTable, ManualPriceUpdate
from invest_tracker.services.portfolio_service import PortfolioService

router = APIRouter(prefix="/api/manual-asset-prices", tags=["manual-prices"])


@router.get("", response_model=ManualPriceTable)
async def get_manual_prices(
    owner_id: str = Depends(get_owner_id),
    service: PortfolioService = Depends(get_portfolio_service),
):
    """The owner's manual price overrides, keyed by lower-cased asset name."""
    return await service.get_manual_prices(owner_id)


@router.put("/{name}", response_model=ManualPriceTable)
async def set_manual_price(
    name: str,
    payload: ManualPriceUpdate,
    owner_id: str = Depends(get_owner_id),
    service: PortfolioService = Depends(get_portfolio_service),
):
    """
    Set the override price for one asset name.

    The override takes precedence over any feed price for that name.
    Returns `{name: price}` for the updated entry.
    """
    asset_name = name.strip().lower()
    if not asset_name:
        raise HTTPException(status_code=400, detail="Asset name is required")

    await service.set_manual_price(owner_id, asset_name, payload.price)
    return {asset_name: payload.price}
