# tests/integration/test_batch_order_flow.py
"""Integration tests for the HTTP surface: batch placement, quotes, wallet, health.

The app is wired to the in-memory FakeChainGateway (see tests/conftest.py), so
no RPC endpoint is needed. Each test gets a freshly wired app state.
"""

from decimal import Decimal

import pytest
from httpx import AsyncClient

from src.main import app
from tests.fakes import OWNER, FakeChainGateway

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

BATCH_URL = "/api/v1/orders/batch"


def _connect(chain_id: int = 146) -> None:
    app.state.wallet_session.connect(OWNER, chain_id)


def _order(token_id: int | str = 7, price: str = "1.5", quantity: int | str = 2) -> dict:
    return {"token_id": token_id, "price": price, "quantity": quantity}


# ---------------------------------------------------------------------------
# Batch placement
# ---------------------------------------------------------------------------


class TestBatchPlacement:
    async def test_successful_batch_with_drop(
        self, client: AsyncClient, chain: FakeChainGateway
    ) -> None:
        _connect()
        resp = await client.post(
            BATCH_URL,
            json={"orders": [_order(7, "1.5", 2), _order(8, "2", 20)]},
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["code"] == 0
        data = body["data"]
        assert data["result"]["success"] is True
        assert data["result"]["tx_hash"] == "0xbatch1"
        assert data["result"]["orders_created"] == 1
        assert data["result"]["note"] is None
        assert data["explorer_url"] == "https://sonicscan.org/tx/0xbatch1"
        assert [d["index"] for d in data["dropped"]] == [1]
        assert "Insufficient balance" in data["dropped"][0]["reason"]

        # approval was granted once, then the single order went out as a sell
        assert len(chain.approval_txs) == 1
        submitted, gas_limit = chain.submissions[0]
        assert gas_limit == 120_000
        assert submitted[0].price_wei == int(Decimal("1.5") * 10**18)

    @pytest.mark.parametrize(
        "bad_order",
        [
            {"token_id": 1.5, "price": "1", "quantity": 1},
            {"token_id": None, "price": "1", "quantity": 1},
            {"token_id": True, "price": "1", "quantity": 1},
            {"token_id": 7, "price": "1", "quantity": 1, "side": 3},
            {"price": "1", "quantity": 1},
        ],
    )
    async def test_malformed_order_dropped_not_fatal(
        self, client: AsyncClient, chain: FakeChainGateway, bad_order: dict
    ) -> None:
        _connect()
        resp = await client.post(BATCH_URL, json={"orders": [bad_order, _order(7, "1.5", 2)]})
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["result"]["success"] is True
        assert data["result"]["orders_created"] == 1
        assert [d["index"] for d in data["dropped"]] == [0]
        assert data["dropped"][0]["token_id"] in (7, None)
        submitted, _ = chain.submissions[0]
        assert [o.token_id for o in submitted] == [7]

    async def test_all_invalid_is_failed_result(
        self, client: AsyncClient, chain: FakeChainGateway
    ) -> None:
        _connect()
        resp = await client.post(BATCH_URL, json={"orders": [_order(7, "-1", 1)]})
        assert resp.status_code == 200
        result = resp.json()["data"]["result"]
        assert result["success"] is False
        assert result["error"] == "No valid orders to create"
        assert chain.submissions == []

    async def test_buy_side_fallback(self, client: AsyncClient, chain: FakeChainGateway) -> None:
        _connect()
        chain.submit_failures = 3
        resp = await client.post(BATCH_URL, json={"orders": [_order()]})
        result = resp.json()["data"]["result"]
        assert result["success"] is True
        assert result["note"] == "used buy-side fallback"
        assert chain.submissions[-1][0][0].side_code == 1

    async def test_all_attempts_fail(self, client: AsyncClient, chain: FakeChainGateway) -> None:
        _connect()
        chain.submit_failures = None
        resp = await client.post(BATCH_URL, json={"orders": [_order()]})
        result = resp.json()["data"]["result"]
        assert result["success"] is False
        assert result["error"].startswith("All transaction attempts failed")
        assert len(chain.submissions) == 6
        assert resp.json()["data"]["explorer_url"] is None


class TestBatchRejections:
    async def test_wallet_not_connected(self, client: AsyncClient) -> None:
        resp = await client.post(BATCH_URL, json={"orders": [_order()]})
        assert resp.status_code == 409
        assert resp.json()["code"] == 3003

    async def test_wrong_network(self, client: AsyncClient) -> None:
        _connect(chain_id=1)
        resp = await client.post(BATCH_URL, json={"orders": [_order()]})
        assert resp.status_code == 409
        assert resp.json()["code"] == 3004

    async def test_batch_too_large(self, client: AsyncClient, chain: FakeChainGateway) -> None:
        _connect()
        resp = await client.post(BATCH_URL, json={"orders": [_order()] * 51})
        assert resp.status_code == 422
        body = resp.json()
        assert body["code"] == 1002
        assert body["data"] is None
        assert chain.balance_reads == []

    async def test_rate_limited_with_retry_after(self, client: AsyncClient) -> None:
        _connect()
        for _ in range(2):
            ok = await client.post(BATCH_URL, json={"orders": [_order()]})
            assert ok.status_code == 200
        resp = await client.post(BATCH_URL, json={"orders": [_order()]})
        assert resp.status_code == 429
        assert resp.json()["code"] == 9001
        assert 0 < int(resp.headers["Retry-After"]) <= 60

    async def test_malformed_body(self, client: AsyncClient) -> None:
        _connect()
        resp = await client.post(BATCH_URL, json={"orders": "nope"})
        assert resp.status_code == 422


# ---------------------------------------------------------------------------
# Quotes, wallet, health
# ---------------------------------------------------------------------------


class TestReadEndpoints:
    async def test_quote(self, client: AsyncClient, chain: FakeChainGateway) -> None:
        chain.asks[7] = 2 * 10**18
        resp = await client.get("/api/v1/markets/7/quote")
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data == {"token_id": 7, "lowest_ask": "2", "highest_bid": None}

    async def test_quote_rejects_zero_token(self, client: AsyncClient) -> None:
        resp = await client.get("/api/v1/markets/0/quote")
        assert resp.status_code == 422

    async def test_wallet_state(self, client: AsyncClient) -> None:
        _connect()
        resp = await client.get("/api/v1/wallet")
        data = resp.json()["data"]
        assert data["address"] == OWNER
        assert data["is_connected"] is True
        assert data["is_on_correct_network"] is True
        assert data["expected_chain_id"] == 146

    async def test_health(self, client: AsyncClient) -> None:
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"


class TestRequestId:
    async def test_generated_request_id_matches_envelope(self, client: AsyncClient) -> None:
        resp = await client.get("/api/v1/wallet")
        assert resp.headers["X-Request-ID"] == resp.json()["request_id"]

    @pytest.mark.parametrize("supplied", ["trace-123", "x" * 64])
    async def test_client_request_id_reused(self, client: AsyncClient, supplied: str) -> None:
        resp = await client.get("/api/v1/wallet", headers={"X-Request-ID": supplied})
        assert resp.headers["X-Request-ID"] == supplied

    async def test_oversized_request_id_replaced(self, client: AsyncClient) -> None:
        resp = await client.get("/api/v1/wallet", headers={"X-Request-ID": "x" * 65})
        assert resp.headers["X-Request-ID"].startswith("req_")
