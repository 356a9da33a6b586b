"""Shared dependencies for API endpoints.

Auth: a request is authenticated when its Authorization: Bearer token
resolves in the app's SessionRegistry. The registry, settings and weather
provider all hang off app.state; nothing here reads module-level state.

Tests swap the weather provider via app.dependency_overrides.
"""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from weatherdesk.adapters.weather import OpenWeatherProvider, WeatherProvider
from weatherdesk.core.config import Settings
from weatherdesk.core.database import get_db
from weatherdesk.core.errors import ConfigurationError, UnauthorizedError
from weatherdesk.core.rate_limiting import bearer_token
from weatherdesk.core.sessions import SessionRegistry
from weatherdesk.models import User
from weatherdesk.repositories.user_repository import UserRepository


def get_settings(request: Request) -> Settings:
    """Settings the application was created with."""
    return request.app.state.settings


def get_session_registry(request: Request) -> SessionRegistry:
    """The application's session registry."""
    return request.app.state.sessions


AppSettings = Annotated[Settings, Depends(get_settings)]
Sessions = Annotated[SessionRegistry, Depends(get_session_registry)]
DbSession = Annotated[AsyncSession, Depends(get_db)]


def get_bearer_token(request: Request) -> str:
    """Bearer token from the Authorization header, or "" when absent."""
    return bearer_token(request)


BearerToken = Annotated[str, Depends(get_bearer_token)]


def get_current_user_id(token: BearerToken, sessions: Sessions) -> int:
    """Resolve the caller's session.

    Security: the 401 never says why (missing header, unknown or revoked
    token).

    Raises:
        UnauthorizedError: No resolvable bearer token.
    """
    user_id = sessions.resolve(token)
    if user_id is None:
        raise UnauthorizedError()
    return user_id


CurrentUserId = Annotated[int, Depends(get_current_user_id)]


async def get_current_user(user_id: CurrentUserId, db: DbSession) -> User:
    """Get the full User row for the current session.

    Raises:
        UnauthorizedError: Session points at a user that no longer exists.
    """
    user = await UserRepository.get_by_id(db, user_id)
    if user is None:
        raise UnauthorizedError()
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]


def get_weather_provider(settings: AppSettings) -> WeatherProvider:
    """Build the upstream weather provider from settings.

    Raises:
        ConfigurationError: OPENWEATHER_API_KEY is not set.
    """
    if not settings.openweather_configured:
        raise ConfigurationError(settings.missing_api_key_message)
    return OpenWeatherProvider(
        api_key=settings.openweather_api_key.get_secret_value().strip(),
        base_url=settings.openweather_base_url,
        timeout=settings.upstream_timeout_seconds,
    )


Weather = Annotated[WeatherProvider, Depends(get_weather_provider)]
