"""Rate limit enforcement tests against the real auth routes.

The autouse fixture in conftest disables the shared limiter; these tests
build an app with RATE_LIMIT_ENABLED=true, which switches it back on for
the duration of the test.
"""

import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from tests.conftest import TEST_BASE_URL

_LOGIN_LIMIT = 10
_REGISTER_LIMIT = 5


@pytest_asyncio.fixture
async def limited_client(app_factory):
    application: FastAPI = await app_factory(rate_limit_enabled=True)
    async with AsyncClient(
        transport=ASGITransport(app=application), base_url=TEST_BASE_URL
    ) as ac:
        yield ac


class TestLoginLimit:
    async def test_blocks_after_limit(self, limited_client: AsyncClient):
        body = {"email": "nobody@example.com", "password": "whatever"}
        for _ in range(_LOGIN_LIMIT):
            resp = await limited_client.post("/auth/login", json=body)
            assert resp.status_code == 401

        resp = await limited_client.post("/auth/login", json=body)

        assert resp.status_code == 429
        assert resp.json()["code"] == "RATE_LIMITED"
        assert "Retry-After" in resp.headers


class TestRegisterLimit:
    async def test_blocks_after_limit(self, limited_client: AsyncClient):
        statuses = []
        for i in range(_REGISTER_LIMIT + 1):
            resp = await limited_client.post(
                "/auth/register",
                json={
                    "email": f"user{i}@example.com",
                    "name": "User",
                    "password": "123456",
                },
            )
            statuses.append(resp.status_code)

        assert statuses == [201] * _REGISTER_LIMIT + [429]

    async def test_unlimited_routes_unaffected(self, limited_client: AsyncClient):
        for _ in range(_LOGIN_LIMIT + 5):
            resp = await limited_client.get("/health")
            assert resp.status_code == 200


class TestProcessWideSwitch:
    async def test_last_app_built_sets_shared_limiter(self, app_factory):
        from weatherdesk.core.rate_limiting import limiter

        first = await app_factory(rate_limit_enabled=True)
        assert limiter.enabled is True

        await app_factory(rate_limit_enabled=False)

        assert limiter.enabled is False
        assert first.state.limiter is limiter
