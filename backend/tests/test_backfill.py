"""Tests for rebuilding the value series from acquisition dates."""
import pytest
from datetime import date
from decimal import Decimal

from invest_tracker.config import settings
from invest_tracker.schemas.investment import InvestmentCreate
from invest_tracker.services.backfill import backfill_snapshots, cost_basis_series


def new_investment(name, day, total, category="Crypto", quantity="1"):
    return InvestmentCreate(
        category=category,
        name=name,
        quantity=Decimal(quantity),
        date=date.fromisoformat(day),
        total_purchase_price=Decimal(total),
    )


@pytest.mark.unit
def test_cost_basis_series_is_cumulative(make_record):
    investments = [
        make_record(id=1, date=date(2024, 1, 2), total_purchase_price=100),
        make_record(id=2, date=date(2024, 1, 4), total_purchase_price="50.255"),
        make_record(id=3, date=None, total_purchase_price=999),
        make_record(id=4, date=date(2024, 1, 2), total_purchase_price=None,
                    purchase_price_per_unit=10, quantity=3),
    ]

    series = cost_basis_series(investments, date(2024, 1, 1), date(2024, 1, 5))

    assert series == [
        (date(2024, 1, 1), Decimal("0.00")),
        (date(2024, 1, 2), Decimal("130.00")),
        (date(2024, 1, 3), Decimal("130.00")),
        (date(2024, 1, 4), Decimal("180.26")),
        (date(2024, 1, 5), Decimal("180.26")),
    ]


@pytest.mark.integration
class TestBackfillSnapshots:

    @pytest.mark.asyncio
    async def test_defaults_to_earliest_acquisition(self, json_stores):
        await json_stores.investments.create("alice", new_investment("btc", "2024-01-03", "100"))
        await json_stores.investments.create("alice", new_investment("eth", "2024-01-05", "50"))

        result = await backfill_snapshots(json_stores, "alice", end=date(2024, 1, 6))

        assert (result.start, result.end, result.written, result.skipped) == (
            date(2024, 1, 3), date(2024, 1, 6), 4, 0
        )
        series = await json_stores.snapshots.list("alice")
        assert [(p.date, p.value) for p in series] == [
            (date(2024, 1, 3), Decimal("100")),
            (date(2024, 1, 4), Decimal("100")),
            (date(2024, 1, 5), Decimal("150")),
            (date(2024, 1, 6), Decimal("150")),
        ]

    @pytest.mark.asyncio
    async def test_existing_days_kept_unless_overwrite(self, json_stores):
        await json_stores.investments.create("alice", new_investment("btc", "2024-01-01", "100"))
        await json_stores.snapshots.upsert_for_date("alice", date(2024, 1, 2), Decimal("555.55"))

        result = await backfill_snapshots(json_stores, "alice", end=date(2024, 1, 3))
        assert (result.written, result.skipped) == (2, 1)
        values = {p.date: p.value for p in await json_stores.snapshots.list("alice")}
        assert values[date(2024, 1, 2)] == Decimal("555.55")

        result = await backfill_snapshots(json_stores, "alice", end=date(2024, 1, 3), overwrite=True)
        assert (result.written, result.skipped) == (3, 0)
        values = {p.date: p.value for p in await json_stores.snapshots.list("alice")}
        assert values[date(2024, 1, 2)] == Decimal("100")

    @pytest.mark.asyncio
    async def test_explicit_start(self, json_stores):
        await json_stores.investments.create("alice", new_investment("btc", "2024-01-05", "100"))

        result = await backfill_snapshots(json_stores, "alice", start=date(2024, 1, 4), end=date(2024, 1, 5))

        assert result.written == 2
        values = [p.value for p in await json_stores.snapshots.list("alice")]
        assert values == [Decimal("0"), Decimal("100")]

    @pytest.mark.asyncio
    async def test_nothing_to_backfill(self, json_stores):
        result = await backfill_snapshots(json_stores, "alice", end=date(2024, 1, 5))

        assert result.start is None
        assert result.written == 0
        assert await json_stores.snapshots.list("alice") == []

    @pytest.mark.asyncio
    async def test_start_after_end(self, json_stores):
        with pytest.raises(ValueError):
            await backfill_snapshots(json_stores, "alice", start=date(2024, 2, 1), end=date(2024, 1, 1))

    @pytest.mark.asyncio
    async def test_range_limit(self, json_stores, monkeypatch):
        monkeypatch.setattr(settings, "backfill_max_days", 10)

        with pytest.raises(ValueError):
            await backfill_snapshots(json_stores, "alice", start=date(2024, 1, 1), end=date(2024, 1, 11))
