"""Weather response schemas."""

from pydantic import BaseModel


class CurrentWeatherResponse(BaseModel):
    """Body returned by GET /api/weather.

    Temperatures are null when the provider omitted them.
    """

    city: str
    temp: float | None
    feels_like: float | None
    description: str
    icon: str


class ForecastDayOut(BaseModel):
    """Daily summary. An all-zero min/max means the provider sent no temperatures."""

    date: str
    min: float
    max: float
    description: str
    icon: str


class ForecastResponse(BaseModel):
    """Body returned by GET /api/forecast."""

    city: str
    forecast: list[ForecastDayOut]
