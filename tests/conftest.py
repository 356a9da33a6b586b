"""Shared test fixtures.

Every test that touches the database gets its own SQLite file under
tmp_path and its own application (and so its own SessionRegistry).
"""

from collections.abc import AsyncGenerator, Awaitable, Callable, Iterator
from pathlib import Path
from typing import Any

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from pydantic import SecretStr
from sqlalchemy.ext.asyncio import AsyncSession

from weatherdesk.adapters.weather.base import WeatherProvider
from weatherdesk.adapters.weather.openweather import OpenWeatherProvider
from weatherdesk.core.config import Settings
from weatherdesk.core.database import init_models
from weatherdesk.main import create_app

TEST_BASE_URL = "http://test"
TEST_API_KEY = "test-openweather-key"  # nosec B105
TEST_PASSWORD = "correct-horse"  # nosec B105
TEST_EMAIL = "alice@example.com"


def make_settings(tmp_path: Path, **overrides: Any) -> Settings:
    """Settings pointing at a throwaway SQLite file, ignoring .env."""
    values: dict[str, Any] = {
        "database_url": f"sqlite+aiosqlite:///{tmp_path / 'test.sqlite'}",
        "environment": "test",
        "openweather_api_key": SecretStr(TEST_API_KEY),
        "expose_reset_token": True,
        "rate_limit_enabled": False,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


# =============================================================================
# Application / Database
# =============================================================================


AppFactory = Callable[..., Awaitable[FastAPI]]


@pytest_asyncio.fixture
async def app_factory(tmp_path: Path) -> AsyncGenerator[AppFactory, None]:
    """Build apps with custom settings; engines are disposed after the test.

    ASGITransport does not run the lifespan, so tables are created here.
    """
    apps: list[FastAPI] = []

    async def _build(**overrides: Any) -> FastAPI:
        application = create_app(make_settings(tmp_path, **overrides))
        await init_models(application.state.engine)
        apps.append(application)
        return application

    yield _build

    for application in apps:
        await application.state.engine.dispose()


@pytest_asyncio.fixture
async def app(app_factory: AppFactory) -> FastAPI:
    """Application with default test settings."""
    return await app_factory()


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Unauthenticated HTTP client for app."""
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url=TEST_BASE_URL
    ) as ac:
        yield ac


@pytest_asyncio.fixture
async def db_session(app: FastAPI) -> AsyncGenerator[AsyncSession, None]:
    """Database session on the app's engine."""
    async with app.state.session_factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def registered(client: AsyncClient) -> dict:
    """Register TEST_EMAIL and return the /auth/register body."""
    resp = await client.post(
        "/auth/register",
        json={"email": TEST_EMAIL, "name": "Alice", "password": TEST_PASSWORD},
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


@pytest.fixture
def auth_headers(registered: dict) -> dict[str, str]:
    """Authorization header for the registered user."""
    return {"Authorization": f"Bearer {registered['token']}"}


# =============================================================================
# Upstream weather provider
# =============================================================================


class StubWeatherProvider(OpenWeatherProvider):
    """OpenWeather normalization with canned payloads instead of HTTP.

    Attributes:
        calls: (endpoint, city, lang) for every fetch.
    """

    def __init__(
        self,
        *,
        current: dict[str, Any] | None = None,
        forecast: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(api_key=TEST_API_KEY, base_url="http://stub", timeout=1.0)
        self._current = current or {}
        self._forecast = forecast or {}
        self.calls: list[tuple[str, str, str]] = []

    async def fetch_current(self, city: str, lang: str) -> dict[str, Any]:
        self.calls.append(("weather", city, lang))
        return self._current

    async def fetch_forecast(self, city: str, lang: str) -> dict[str, Any]:
        self.calls.append(("forecast", city, lang))
        return self._forecast


def use_provider(application: FastAPI, provider: WeatherProvider) -> None:
    """Route the app's weather endpoints to provider."""
    from weatherdesk.api.deps import get_weather_provider

    application.dependency_overrides[get_weather_provider] = lambda: provider


# =============================================================================
# Autouse Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def disable_rate_limiting() -> Iterator[None]:
    """Disable rate limiting during tests.

    Rate limiting is tested separately; disable for other tests
    to avoid flaky failures from rate limit triggers.
    """
    from weatherdesk.core.rate_limiting import limiter

    original_enabled = limiter.enabled
    limiter.enabled = False

    yield

    limiter.enabled = original_enabled
    limiter.reset()
