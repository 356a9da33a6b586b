"""Pydantic request/response schemas for API endpoints."""

from weatherdesk.schemas.account import (
    HistoryCreateRequest,
    HistoryItem,
    HistoryResponse,
    MeResponse,
    ThemeResponse,
    ThemeUpdateRequest,
)
from weatherdesk.schemas.auth import (
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    RequestResetRequest,
    RequestResetResponse,
    ResetPasswordRequest,
    UserOut,
)
from weatherdesk.schemas.weather import (
    CurrentWeatherResponse,
    ForecastDayOut,
    ForecastResponse,
)

__all__ = [
    # Auth
    "AuthResponse",
    "LoginRequest",
    "RegisterRequest",
    "RequestResetRequest",
    "RequestResetResponse",
    "ResetPasswordRequest",
    "UserOut",
    # Account
    "HistoryCreateRequest",
    "HistoryItem",
    "HistoryResponse",
    "MeResponse",
    "ThemeResponse",
    "ThemeUpdateRequest",
    # Weather
    "CurrentWeatherResponse",
    "ForecastDayOut",
    "ForecastResponse",
]
