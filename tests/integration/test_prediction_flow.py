"""Integration tests for rounds and bets (requires running PG + Redis).

Pre-condition: alembic upgrade head, and an oracle price in Redis for any
test that promotes or closes a round. These tests only create and bet on the
Bidding round, which needs no price.
"""

import uuid

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio(loop_scope="session")


async def _funded_player(client: AsyncClient, amount: int = 10_000) -> dict[str, str]:
    user = {"username": f"player_{uuid.uuid4().hex[:8]}", "password": "TestPass1"}
    await client.post("/api/v1/auth/register", json=user)
    resp = await client.post("/api/v1/auth/login", json=user)
    headers = {"Authorization": f"Bearer {resp.json()['data']['access_token']}"}
    await client.post("/api/v1/account/deposit", json={"amount": amount}, headers=headers)
    return headers


async def _bidding_round_id(client: AsyncClient, headers: dict[str, str]) -> int:
    await client.post("/api/v1/rounds/advance", headers=headers)
    status = await client.get("/api/v1/market/status")
    return int(status.json()["data"]["bidding_round"]["id"])


class TestMarketRead:
    async def test_config_is_public(self, client: AsyncClient) -> None:
        resp = await client.get("/api/v1/market/config")
        assert resp.status_code == 200
        assert {"round_seconds", "minimum_bet", "fee_bps"} <= resp.json()["data"].keys()

    async def test_unknown_round_is_404(self, client: AsyncClient) -> None:
        resp = await client.get("/api/v1/rounds/999999999")
        assert resp.status_code == 404
        assert resp.json()["code"] == 3004


class TestPlaceBet:
    async def test_bet_moves_stake_into_custody(self, client: AsyncClient) -> None:
        headers = await _funded_player(client)
        round_id = await _bidding_round_id(client, headers)

        resp = await client.post(
            "/api/v1/bets",
            json={"round_id": round_id, "direction": "BULL", "amount": 1_000},
            headers=headers,
        )

        assert resp.status_code == 200
        assert resp.json()["data"]["bet"]["round_id"] == round_id
        balance = await client.get("/api/v1/account/balance", headers=headers)
        assert balance.json()["data"]["balance"] == 9_000

        position = await client.get("/api/v1/bets/position", headers=headers)
        data = position.json()["data"]
        assert data["next_round_id"] == round_id
        assert data["next_bull_amount"] == resp.json()["data"]["bet"]["amount"]

    async def test_second_bet_same_round_rejected(self, client: AsyncClient) -> None:
        headers = await _funded_player(client)
        round_id = await _bidding_round_id(client, headers)
        bet = {"round_id": round_id, "direction": "BEAR", "amount": 500}
        await client.post("/api/v1/bets", json=bet, headers=headers)

        resp = await client.post("/api/v1/bets", json=bet, headers=headers)

        assert resp.status_code == 409
        assert resp.json()["code"] == 4004

    async def test_unfunded_bet_leaves_nothing_behind(self, client: AsyncClient) -> None:
        headers = await _funded_player(client, amount=50)
        round_id = await _bidding_round_id(client, headers)

        resp = await client.post(
            "/api/v1/bets",
            json={"round_id": round_id, "direction": "BULL", "amount": 100},
            headers=headers,
        )

        assert resp.status_code == 422
        assert resp.json()["code"] == 2001
        bets = await client.get("/api/v1/bets", headers=headers)
        assert bets.json()["data"]["items"] == []

    async def test_page_limit_over_maximum(self, client: AsyncClient) -> None:
        headers = await _funded_player(client)
        resp = await client.get("/api/v1/bets", params={"limit": 31}, headers=headers)
        assert resp.status_code == 422
        assert resp.json()["code"] == 4005
