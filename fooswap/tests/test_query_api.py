from decimal import Decimal
import pytest
from fastapi.testclient import TestClient

from fooswap.ingestion.context import IngestionContext
from fooswap.main import app
from fooswap.storage.db import get_db
from fooswap.storage.writer import insert_swap, upsert_pool


@pytest.fixture
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    # no `with`: startup would open the configured database
    yield TestClient(app)
    app.dependency_overrides.clear()
    app.state.indexer = None


@pytest.fixture
def seeded(db):
    upsert_pool(db, "0xpool", "USDC", "SUI", Decimal("1000"), Decimal("500"), 1_000)
    insert_swap(db, "0xpool", Decimal("10"), Decimal("5"), 3_000, "tx-2", sender="0xabc")
    insert_swap(db, "0xpool", Decimal("20"), Decimal("9"), 2_000, "tx-1")
    db.commit()
    return db


def test_health(client):
    resp = client.get("/health")

    assert resp.status_code == 200
    assert resp.text == "OK"


def test_pools(client, seeded):
    body = client.get("/api/pools").json()

    assert body["status"] == "ok"
    assert body["data"] == [{
        "pool_id": "0xpool",
        "token_a": "USDC",
        "token_b": "SUI",
        "reserve_a": 1000.0,
        "reserve_b": 500.0,
        "last_updated": 1_000,
    }]


def test_pools_empty(client):
    assert client.get("/api/pools").json() == {"status": "ok", "data": []}


def test_swaps_are_ascending(client, seeded):
    body = client.get("/api/swaps/0xpool").json()

    assert body["status"] == "ok"
    assert [s["tx_digest"] for s in body["data"]] == ["tx-1", "tx-2"]
    assert body["data"][1]["sender"] == "0xabc"
    assert body["data"][1]["amount_in"] == 10.0


def test_swaps_limit(client, seeded):
    body = client.get("/api/swaps/0xpool", params={"limit": 1}).json()

    assert [s["tx_digest"] for s in body["data"]] == ["tx-2"]


def test_unknown_pool_has_empty_history(client, seeded):
    resp = client.get("/api/swaps/0xnope")

    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "data": []}


def test_price(client, seeded):
    resp = client.get("/api/price", params={"pair": "USDC/SUI"})

    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "pair": "USDC/SUI", "pool_id": "0xpool", "price": 0.5}


def test_price_reversed_pair(client, seeded):
    body = client.get("/api/price", params={"pair": "SUI/USDC"}).json()

    assert body["pool_id"] == "0xpool"
    assert body["price"] == 2.0


@pytest.mark.parametrize("params", [{"pair": "USDCSUI"}, {"pair": "USDC/"}, {"pair": "A/B/C"}, {}])
def test_price_bad_pair(client, seeded, params):
    resp = client.get("/api/price", params=params)

    assert resp.status_code == 400
    assert resp.json()["status"] == "error"


def test_price_unknown_pair(client, seeded):
    resp = client.get("/api/price", params={"pair": "WETH/SUI"})

    assert resp.status_code == 404
    assert resp.json() == {"status": "error", "message": "No pool found for WETH/SUI"}


def test_price_zero_reserve(client, db):
    upsert_pool(db, "0xdry", "USDC", "SUI", Decimal("0"), Decimal("500"), 1)
    db.commit()

    resp = client.get("/api/price", params={"pair": "USDC/SUI"})

    assert resp.status_code == 422
    assert resp.json()["status"] == "error"


def test_status_without_indexer(client):
    assert client.get("/api/status").json() == {"status": "ok", "data": None}


def test_status_reports_indexer_context(client):
    class RunningIndexer:
        context = IngestionContext()

    app.state.indexer = RunningIndexer()

    body = client.get("/api/status").json()

    assert body["data"]["state"] == "idle"
    assert body["data"]["ticks"] == 0
