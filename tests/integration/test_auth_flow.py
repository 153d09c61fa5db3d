"""Integration tests for auth flow (requires running PG + Redis).

Run: pytest tests/integration/test_auth_flow.py -v
Pre-condition: alembic upgrade head
"""

import uuid

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio(loop_scope="session")


def unique_user() -> dict[str, str]:
    uid = uuid.uuid4().hex[:8]
    return {"username": f"testuser_{uid}", "password": "TestPass1"}


class TestRegister:
    async def test_register_success(self, client: AsyncClient) -> None:
        user = unique_user()
        resp = await client.post("/api/v1/auth/register", json=user)
        assert resp.status_code == 201
        body = resp.json()
        assert body["code"] == 0
        assert body["data"]["username"] == user["username"]
        assert "user_id" in body["data"]
        assert "request_id" in body

    async def test_register_duplicate_username(self, client: AsyncClient) -> None:
        user = unique_user()
        await client.post("/api/v1/auth/register", json=user)
        resp = await client.post("/api/v1/auth/register", json=user)
        assert resp.status_code == 409
        assert resp.json()["code"] == 1001

    async def test_register_weak_password(self, client: AsyncClient) -> None:
        resp = await client.post(
            "/api/v1/auth/register", json={**unique_user(), "password": "weak"}
        )
        assert resp.status_code == 422


class TestLogin:
    async def test_login_success(self, client: AsyncClient) -> None:
        user = unique_user()
        await client.post("/api/v1/auth/register", json=user)
        resp = await client.post("/api/v1/auth/login", json=user)
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["token_type"] == "Bearer"
        assert data["user"]["is_admin"] is False

    async def test_login_wrong_password(self, client: AsyncClient) -> None:
        user = unique_user()
        await client.post("/api/v1/auth/register", json=user)
        resp = await client.post(
            "/api/v1/auth/login", json={**user, "password": "WrongPass1"}
        )
        assert resp.status_code == 401
        assert resp.json()["code"] == 1003


class TestRefresh:
    async def test_refresh_success(self, client: AsyncClient) -> None:
        user = unique_user()
        await client.post("/api/v1/auth/register", json=user)
        login = await client.post("/api/v1/auth/login", json=user)

        resp = await client.post(
            "/api/v1/auth/refresh",
            json={"refresh_token": login.json()["data"]["refresh_token"]},
        )
        assert resp.status_code == 200
        assert len(resp.json()["data"]["access_token"]) > 20

    async def test_refresh_with_access_token_fails(self, client: AsyncClient) -> None:
        user = unique_user()
        await client.post("/api/v1/auth/register", json=user)
        login = await client.post("/api/v1/auth/login", json=user)

        resp = await client.post(
            "/api/v1/auth/refresh",
            json={"refresh_token": login.json()["data"]["access_token"]},
        )
        assert resp.status_code == 401
        assert resp.json()["code"] == 1005


class TestProtectedRoute:
    async def test_without_token_fails(self, client: AsyncClient) -> None:
        resp = await client.get("/api/v1/account/balance")
        assert resp.status_code == 401

    async def test_admin_route_rejects_player(self, client: AsyncClient) -> None:
        user = unique_user()
        await client.post("/api/v1/auth/register", json=user)
        login = await client.post("/api/v1/auth/login", json=user)
        token = login.json()["data"]["access_token"]

        resp = await client.post(
            "/api/v1/admin/pause", headers={"Authorization": f"Bearer {token}"}
        )
        assert resp.status_code == 403
        assert resp.json()["code"] == 1006
