"""Abstract base class and types for upstream weather providers.

A provider exposes two read-only calls keyed by city name and language tag,
returning the provider-native JSON, plus normalize helpers that turn that
JSON into the service's own types.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from weatherdesk.services.forecast_aggregation import ForecastSample


@dataclass(frozen=True)
class CurrentConditions:
    """Current weather for one city.

    Attributes:
        city: City name as the provider resolved it.
        temp: Temperature, or None when the provider omitted it.
        feels_like: Apparent temperature, or None.
        description: Condition text ("" when absent).
        icon: Provider icon code ("" when absent).
    """

    city: str
    temp: float | None
    feels_like: float | None
    description: str
    icon: str

    def to_dict(self) -> dict:
        return {
            "city": self.city,
            "temp": self.temp,
            "feels_like": self.feels_like,
            "description": self.description,
            "icon": self.icon,
        }


class WeatherProvider(ABC):
    """Abstract base class for weather providers.

    Implementations fetch raw payloads and normalize them; the API layer
    only sees the normalized types.
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the display name used in error messages."""
        ...

    @abstractmethod
    async def fetch_current(self, city: str, lang: str) -> dict[str, Any]:
        """Fetch current conditions.

        Raises:
            UpstreamError: On timeout, transport failure or non-2xx status.
        """
        ...

    @abstractmethod
    async def fetch_forecast(self, city: str, lang: str) -> dict[str, Any]:
        """Fetch the multi-day forecast in fine-grained samples.

        Raises:
            UpstreamError: On timeout, transport failure or non-2xx status.
        """
        ...

    @abstractmethod
    def normalize_current(
        self, raw_response: dict[str, Any], *, fallback_city: str
    ) -> CurrentConditions:
        """Convert a current-conditions payload to CurrentConditions."""
        ...

    @abstractmethod
    def normalize_forecast(self, raw_response: dict[str, Any]) -> list[ForecastSample]:
        """Convert a forecast payload to ForecastSample objects, in order."""
        ...
