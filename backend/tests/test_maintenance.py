"""Tests for the Bank data purge."""
import json
import pytest
from decimal import Decimal

from invest_tracker.services.maintenance import BANK_OVERRIDE_NAMES, purge_bank_holdings


pytestmark = pytest.mark.integration


def seed(data_dir, owner, investments, prices):
    owner_dir = data_dir / owner
    owner_dir.mkdir(parents=True, exist_ok=True)
    (owner_dir / "investments.json").write_text(json.dumps(investments), encoding="utf-8")
    (owner_dir / "manual_asset_prices.json").write_text(json.dumps(prices), encoding="utf-8")


@pytest.mark.asyncio
async def test_purge_removes_bank_data_only(json_stores, data_dir):
    seed(
        data_dir,
        "alice",
        [
            {"id": 1, "category": "Bank", "name": "PNB", "totalPurchasePrice": 1000},
            {"id": 2, "category": "Money", "name": "cash", "totalPurchasePrice": 50},
            {"id": 3, "category": "Bank", "name": "union", "totalPurchasePrice": 10},
        ],
        {"pnb": 1, "Indian Overseas": 1, "cash": 1, "btc": 5000000},
    )

    result = await purge_bank_holdings(json_stores, "alice")

    assert result.investments_removed == 2
    assert result.overrides_removed == 3
    assert [r.id for r in await json_stores.investments.list_by_owner("alice")] == [2]
    assert await json_stores.manual_prices.get("alice") == {"btc": 5000000}


@pytest.mark.asyncio
async def test_purge_is_owner_scoped(json_stores, data_dir):
    seed(data_dir, "alice", [{"id": 1, "category": "Bank", "name": "pnb"}], {"pnb": 1})
    seed(data_dir, "bob", [{"id": 1, "category": "Bank", "name": "pnb"}], {"pnb": 1})

    await purge_bank_holdings(json_stores, "alice")

    assert len(await json_stores.investments.list_by_owner("bob")) == 1
    assert await json_stores.manual_prices.get("bob") == {"pnb": 1}


@pytest.mark.asyncio
async def test_purge_with_nothing_to_remove(json_stores):
    await json_stores.manual_prices.upsert("alice", "btc", Decimal("1"))

    result = await purge_bank_holdings(json_stores, "alice")

    assert (result.investments_removed, result.overrides_removed) == (0, 0)


def test_bank_override_names():
    assert set(BANK_OVERRIDE_NAMES) == {"pnb", "psb", "indian", "union", "indian overseas", "cash"}
