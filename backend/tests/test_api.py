"""
HTTP tests for the FastAPI app.

Stores are JSON files in a temporary directory and price feeds are fixed,
injected through dependency overrides.
"""
import pytest
from fastapi.testclient import TestClient

from invest_tracker.api.deps import get_price_feed_service
from invest_tracker.config import settings
from invest_tracker.exceptions import StorageError
from invest_tracker.main import app
from invest_tracker.repositories import get_stores


pytestmark = pytest.mark.integration

ALICE = {"X-Owner-Id": "alice"}
BOB = {"X-Owner-Id": "bob"}


@pytest.fixture
def feeds(make_feeds):
    return make_feeds(crypto={"bitcoin": {"inr": 6000000}}, stock={"NIFTYBEES.NS": 260})


@pytest.fixture
def client(json_stores, feeds):
    app.dependency_overrides[get_stores] = lambda: json_stores
    app.dependency_overrides[get_price_feed_service] = lambda: feeds
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def add(client, headers=ALICE, **body):
    payload = {
        "category": "Crypto",
        "name": "btc",
        "quantity": 1,
        "date": "2024-01-10",
        "totalPurchasePrice": 1000,
    }
    payload.update(body)
    return client.post("/api/investments", json=payload, headers=headers)


def test_root_and_health(client):
    assert client.get("/").json()["health"] == "/api/health"

    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_owner_header_required(client):
    response = client.get("/api/investments")
    assert response.status_code == 400


def test_invalid_owner_header(client):
    response = client.get("/api/investments", headers={"X-Owner-Id": "../other"})
    assert response.status_code == 400


def test_default_owner_used_without_header(client, monkeypatch):
    monkeypatch.setattr(settings, "default_owner_id", "alice")
    add(client, quantity=2)

    response = client.get("/api/investments")
    assert response.status_code == 200
    assert len(response.json()) == 1


def test_create_and_list(client):
    response = add(client, quantity=2, totalPurchasePrice=9000000)
    assert response.status_code == 201
    created = response.json()
    assert created["id"] == 1
    assert created["ownerId"] == "alice"
    assert created["totalPurchasePrice"] == 9000000

    response = client.get("/api/investments", headers=ALICE)
    assert response.status_code == 200
    [item] = response.json()
    assert item["livePricePerUnit"] == 6000000
    assert item["currentValue"] == 12000000
    assert item["profitOrLoss"] == 3000000
    assert item["date"] == "2024-01-10"


def test_money_listing(client):
    add(client, category="Money", name="Savings", quantity=0, totalPurchasePrice=2500.5)

    [item] = client.get("/api/investments", headers=ALICE).json()
    assert item["livePricePerUnit"] is None
    assert item["currentValue"] == 2500.5
    assert item["profitOrLoss"] == 0


def test_owners_are_isolated(client):
    add(client)
    assert client.get("/api/investments", headers=BOB).json() == []


@pytest.mark.parametrize("override", [
    {"category": "Bank"},
    {"category": "Gold"},
    {"name": "   "},
    {"quantity": -1},
    {"totalPurchasePrice": -5},
    {"date": "not-a-date"},
    {"quantity": "lots"},
])
def test_create_validation(client, override):
    response = add(client, **override)
    assert response.status_code == 422


def test_create_missing_field(client):
    response = client.post("/api/investments", json={"category": "Crypto", "name": "btc"}, headers=ALICE)
    assert response.status_code == 422


def test_duplicate_money_conflict(client):
    assert add(client, category="Money", name="Cash", quantity=0).status_code == 201

    response = add(client, category="Money", name="cash", quantity=0)
    assert response.status_code == 409


def test_manual_live_price_on_create(client):
    add(client, category="ETF Groww", name="NiftyBees", quantity=2, manualLivePrice=300)

    assert client.get("/api/manual-asset-prices", headers=ALICE).json() == {"niftybees": 300}
    [item] = client.get("/api/investments", headers=ALICE).json()
    assert item["livePricePerUnit"] == 300
    assert item["currentValue"] == 600


def test_update_by_name(client):
    add(client, category="Money", name="Wallet", quantity=0, totalPurchasePrice=100)

    response = client.post(
        "/api/investments/update-by-name",
        json={"name": "wallet", "currentValue": 750.25},
        headers=ALICE,
    )
    assert response.status_code == 200
    assert response.json()["totalPurchasePrice"] == 750.25

    [item] = client.get("/api/investments", headers=ALICE).json()
    assert item["currentValue"] == 750.25


def test_update_by_name_non_money_is_404(client):
    add(client, category="Crypto", name="btc")

    response = client.post(
        "/api/investments/update-by-name",
        json={"name": "btc", "currentValue": 1},
        headers=ALICE,
    )
    assert response.status_code == 404


def test_update_by_name_validation(client):
    response = client.post(
        "/api/investments/update-by-name",
        json={"name": "wallet", "currentValue": "abc"},
        headers=ALICE,
    )
    assert response.status_code == 422


def test_delete(client):
    investment_id = add(client).json()["id"]

    assert client.delete(f"/api/investments/{investment_id}", headers=BOB).status_code == 404
    assert client.delete(f"/api/investments/{investment_id}", headers=ALICE).status_code == 204
    assert client.get("/api/investments", headers=ALICE).json() == []
    assert client.delete(f"/api/investments/{investment_id}", headers=ALICE).status_code == 404


def test_manual_price_override_wins(client):
    add(client, quantity=2)

    response = client.put("/api/manual-asset-prices/BTC", json={"price": 5000000}, headers=ALICE)
    assert response.status_code == 200
    assert response.json() == {"btc": 5000000}

    [item] = client.get("/api/investments", headers=ALICE).json()
    assert item["livePricePerUnit"] == 5000000
    assert item["currentValue"] == 10000000


def test_manual_price_requires_number(client):
    response = client.put("/api/manual-asset-prices/btc", json={"price": "cheap"}, headers=ALICE)
    assert response.status_code == 422

    response = client.put("/api/manual-asset-prices/btc", json={}, headers=ALICE)
    assert response.status_code == 422


def test_snapshot_and_history(client, feeds):
    add(client, quantity=0.5)
    add(client, category="Money", name="Cash", quantity=0, totalPurchasePrice=1000.255)

    first = client.post("/api/save-daily-snapshot", headers=ALICE)
    assert first.status_code == 200
    assert first.json()["value"] == 3001000.26

    feeds.crypto = {"bitcoin": {"inr": 7000000}}
    second = client.post("/api/save-daily-snapshot", headers=ALICE).json()
    assert second["date"] == first.json()["date"]
    assert second["value"] == 3501000.26

    history = client.get("/api/historical-portfolio-value", headers=ALICE).json()
    assert history == [second]
    assert client.get("/api/historical-portfolio-value", headers=BOB).json() == []


def test_feed_outage_does_not_fail_listing(client, feeds):
    feeds.crypto = {}
    add(client, quantity=2, totalPurchasePrice=100)

    response = client.get("/api/investments", headers=ALICE)
    assert response.status_code == 200
    [item] = response.json()
    assert item["livePricePerUnit"] == 0
    assert item["profitOrLoss"] == -100


class FailingInvestments:
    async def list_by_owner(self, owner_id):
        raise StorageError("disk on fire")


class ExplodingInvestments:
    async def list_by_owner(self, owner_id):
        raise RuntimeError("secret internals")


@pytest.mark.parametrize("repo", [FailingInvestments(), ExplodingInvestments()])
def test_errors_become_generic_500(json_stores, feeds, repo):
    json_stores.investments = repo
    app.dependency_overrides[get_stores] = lambda: json_stores
    app.dependency_overrides[get_price_feed_service] = lambda: feeds
    try:
        with TestClient(app, raise_server_exceptions=False) as test_client:
            response = test_client.get("/api/investments", headers=ALICE)
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 500
    body = response.json()
    assert body["error"]["code"] == "INTERNAL_SERVER_ERROR"
    assert body["request_id"]
    assert "disk on fire" not in response.text
    assert "secret internals" not in response.text
