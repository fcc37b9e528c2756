"""
Pytest configuration for test suite.

Handles pytest-asyncio configuration and shared fixtures.
"""
import sys
import os
from pathlib import Path

# Settings are read at import time; keep tests off Redis, Postgres and the network
os.environ["STORAGE_BACKEND"] = "json"
os.environ["CACHE_ENABLED"] = "false"
os.environ.pop("DEFAULT_OWNER_ID", None)
os.environ.pop("FMP_API_KEY", None)

import pytest

# Add the backend directory to sys.path for imports
app_dir = Path(__file__).parent.parent
if str(app_dir) not in sys.path:
    sys.path.insert(0, str(app_dir))

from invest_tracker.repositories.base import StoreBundle
from invest_tracker.repositories.json_file import (
    JsonInvestmentRepository,
    JsonManualPriceStore,
    JsonSnapshotStore,
)
from invest_tracker.schemas.investment import InvestmentRecord
from invest_tracker.services.price_feeds import PriceFeeds


def pytest_configure(config):
    """Register custom markers dynamically."""
    config.addinivalue_line(
        "markers", "integration: integration tests that exercise a real store or the HTTP app"
    )
    config.addinivalue_line(
        "markers", "unit: unit tests with mocked dependencies"
    )


@pytest.fixture(scope="session")
def event_loop_policy():
    """Set the event loop policy for the entire session."""
    import asyncio
    import platform

    if platform.system() == "Windows":
        asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())
    return asyncio.get_event_loop_policy()


def build_record(**overrides) -> InvestmentRecord:
    """InvestmentRecord with sensible defaults for tests."""
    data = {
        "id": 1,
        "owner_id": "alice",
        "category": "Crypto",
        "name": "btc",
        "quantity": 1,
        "total_purchase_price": 1000,
        "purchase_price_per_unit": None,
        "date": None,
    }
    data.update(overrides)
    return InvestmentRecord(**data)


class FakeFeedService:
    """Stands in for PriceFeedService; returns fixed quotes and records calls."""

    def __init__(self, crypto=None, stock=None):
        self.crypto = crypto or {}
        self.stock = stock or {}
        self.calls = []

    async def fetch_for(self, investments):
        investments = list(investments)
        self.calls.append(investments)
        return PriceFeeds(crypto=dict(self.crypto), stock=dict(self.stock))


@pytest.fixture
def make_record():
    return build_record


@pytest.fixture
def make_feeds():
    return FakeFeedService


@pytest.fixture
def data_dir(tmp_path):
    return tmp_path / "data"


@pytest.fixture
def json_stores(data_dir) -> StoreBundle:
    """Fresh JSON-file store bundle rooted in a temporary directory."""
    return StoreBundle(
        investments=JsonInvestmentRepository(data_dir),
        manual_prices=JsonManualPriceStore(data_dir),
        snapshots=JsonSnapshotStore(data_dir),
    )
