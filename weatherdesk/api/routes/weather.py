"""Weather endpoints proxying the upstream provider.

Both endpoints check provider configuration before validating the query,
so an unconfigured server answers 500 CONFIGURATION_ERROR even for a
request without a city.
"""

from fastapi import APIRouter

from weatherdesk.api.deps import AppSettings, Weather
from weatherdesk.core.errors import ValidationError
from weatherdesk.schemas.weather import (
    CurrentWeatherResponse,
    ForecastDayOut,
    ForecastResponse,
)
from weatherdesk.services.forecast_aggregation import aggregate_forecast

router = APIRouter()

_DEFAULT_LANG = "en"


def _require_city(city: str | None) -> str:
    cleaned = (city or "").strip()
    if not cleaned:
        raise ValidationError("city is required")
    return cleaned


def _normalize_lang(lang: str | None) -> str:
    return (lang or "").strip() or _DEFAULT_LANG


@router.get("/weather")
async def current_weather(
    provider: Weather,
    city: str | None = None,
    lang: str | None = None,
) -> CurrentWeatherResponse:
    """Current conditions for a city."""
    city_name = _require_city(city)
    raw = await provider.fetch_current(city_name, _normalize_lang(lang))
    conditions = provider.normalize_current(raw, fallback_city=city_name)
    return CurrentWeatherResponse.model_validate(conditions.to_dict())


@router.get("/forecast")
async def forecast(
    provider: Weather,
    settings: AppSettings,
    city: str | None = None,
    lang: str | None = None,
) -> ForecastResponse:
    """Daily forecast summaries for a city, at most FORECAST_MAX_DAYS long."""
    city_name = _require_city(city)
    raw = await provider.fetch_forecast(city_name, _normalize_lang(lang))
    days = aggregate_forecast(
        provider.normalize_forecast(raw),
        max_days=settings.forecast_max_days,
    )
    return ForecastResponse(
        city=city_name,
        forecast=[ForecastDayOut.model_validate(day.to_dict()) for day in days],
    )
