"""
Models package - Import all database models for easy access.
"""
from invest_tracker.models.investment import Investment, InvestmentCategory
from invest_tracker.models.manual_asset_price import ManualAssetPrice
from invest_tracker.models.portfolio_snapshot import PortfolioSnapshot

__all__ = [
    "Investment",
    "InvestmentCategory",
    "ManualAssetPrice",
    "PortfolioSnapshot",
]
