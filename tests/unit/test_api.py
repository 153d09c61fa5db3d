"""HTTP surface tests: routing, auth gates and AppError → status mapping.

Database, current user and engine are swapped through FastAPI dependency
overrides; the engine runs on the in-memory repositories.
"""
from unittest.mock import AsyncMock

import pytest
from httpx import AsyncClient

from src.pp_common.database import get_db_session
from src.pp_engine.application.service import get_prediction_engine
from src.pp_engine.engine import PredictionEngine
from src.pp_gateway.auth.dependencies import get_current_user
from src.pp_gateway.user.db_models import UserModel


async def _no_event(event_type, round_id, payload, now, db) -> None:
    return None


def _user(user_id: str, is_admin: bool = False) -> UserModel:
    return UserModel(id=user_id, username=user_id, is_active=True, is_admin=is_admin)


@pytest.fixture
def engine(market_repo, bet_repo, transfers, price_feed, clock) -> PredictionEngine:
    return PredictionEngine(
        price_feed=price_feed,
        market_repo=market_repo,
        bet_repo=bet_repo,
        transfers=transfers,
        clock=clock,
        event_writer=_no_event,
    )


@pytest.fixture
def override(engine):
    from src.main import app

    current = {"user": _user("alice")}
    app.dependency_overrides[get_db_session] = lambda: AsyncMock()
    app.dependency_overrides[get_current_user] = lambda: current["user"]
    app.dependency_overrides[get_prediction_engine] = lambda: engine
    yield current
    app.dependency_overrides.clear()


class TestRounds:
    async def test_advance_creates_first_round(self, client: AsyncClient, override) -> None:
        resp = await client.post("/api/v1/rounds/advance")

        assert resp.status_code == 200
        body = resp.json()
        assert body["code"] == 0
        assert body["data"]["changed"] is True
        assert body["data"]["bidding_round"]["id"] == 0
        assert body["data"]["events"] == ["ROUND_CREATED"]

    async def test_second_advance_is_noop(self, client: AsyncClient, override) -> None:
        await client.post("/api/v1/rounds/advance")
        resp = await client.post("/api/v1/rounds/advance")

        assert resp.status_code == 200
        assert resp.json()["message"] == "Nothing to advance"
        assert resp.json()["data"]["changed"] is False


    async def test_advance_needs_no_login(self, client: AsyncClient, override) -> None:
        from src.main import app

        app.dependency_overrides.pop(get_current_user)

        resp = await client.post("/api/v1/rounds/advance")

        assert resp.status_code == 200
        assert resp.json()["data"]["bidding_round"]["id"] == 0


class TestBets:
    async def test_place_bet(self, client: AsyncClient, override, transfers) -> None:
        await client.post("/api/v1/rounds/advance")

        resp = await client.post(
            "/api/v1/bets", json={"round_id": 0, "direction": "BULL", "amount": 1_000}
        )

        assert resp.status_code == 200
        data = resp.json()["data"]
        assert (data["gross"], data["fee"], data["bull_amount"]) == (1_000, 10, 990)
        assert transfers.balances["alice"] == 9_000

    async def test_wrong_round_is_422(self, client: AsyncClient, override) -> None:
        await client.post("/api/v1/rounds/advance")

        resp = await client.post(
            "/api/v1/bets", json={"round_id": 5, "direction": "BEAR", "amount": 100}
        )

        assert resp.status_code == 422
        assert resp.json()["code"] == 4001
        assert resp.json()["data"] is None

    async def test_duplicate_is_409(self, client: AsyncClient, override) -> None:
        await client.post("/api/v1/rounds/advance")
        bet = {"round_id": 0, "direction": "BULL", "amount": 100}
        await client.post("/api/v1/bets", json=bet)

        resp = await client.post("/api/v1/bets", json=bet)

        assert resp.status_code == 409
        assert resp.json()["code"] == 4004

    async def test_bad_direction_rejected_by_schema(self, client: AsyncClient, override) -> None:
        resp = await client.post(
            "/api/v1/bets", json={"round_id": 0, "direction": "SIDEWAYS", "amount": 100}
        )
        assert resp.status_code == 422

    async def test_amount_above_bigint_is_422(
        self, client: AsyncClient, override, transfers
    ) -> None:
        await client.post("/api/v1/rounds/advance")

        resp = await client.post(
            "/api/v1/bets", json={"round_id": 0, "direction": "BULL", "amount": 2**63}
        )

        assert resp.status_code == 422
        assert transfers.balances["alice"] == 10_000

    async def test_nothing_to_collect_is_409(self, client: AsyncClient, override) -> None:
        resp = await client.post("/api/v1/bets/collect")
        assert resp.status_code == 409
        assert resp.json()["code"] == 4006


class TestAdmin:
    async def test_non_admin_is_403(self, client: AsyncClient, override) -> None:
        resp = await client.post("/api/v1/admin/pause")
        assert resp.status_code == 403
        assert resp.json()["code"] == 1006

    async def test_pause_blocks_bets_with_423(self, client: AsyncClient, override) -> None:
        await client.post("/api/v1/rounds/advance")
        override["user"] = _user("root", is_admin=True)
        assert (await client.post("/api/v1/admin/pause")).status_code == 200

        override["user"] = _user("alice")
        resp = await client.post(
            "/api/v1/bets", json={"round_id": 0, "direction": "BULL", "amount": 100}
        )

        assert resp.status_code == 423
        assert resp.json()["code"] == 3002

    async def test_invalid_config_is_422(self, client: AsyncClient, override) -> None:
        override["user"] = _user("root", is_admin=True)

        resp = await client.put(
            "/api/v1/admin/config",
            json={"round_seconds": 0, "minimum_bet": 1, "fee_bps": 100},
        )

        assert resp.status_code == 422
        assert resp.json()["code"] == 3005


async def test_request_id_is_echoed(client: AsyncClient) -> None:
    resp = await client.get("/health", headers={"X-Request-ID": "req_fixed"})
    assert resp.status_code == 200
    assert resp.headers["X-Request-ID"] == "req_fixed"
