"""OpenWeather adapter.

Uses the 2.5 REST API:
- GET {base}/weather   current conditions
- GET {base}/forecast  5-day forecast in 3-hour samples

Both calls send units=metric and the caller's language tag.
"""

import math
from typing import Any

import httpx
import structlog

from weatherdesk.adapters.weather.base import CurrentConditions, WeatherProvider
from weatherdesk.core.errors import NonFatalError, UpstreamError, report_non_fatal
from weatherdesk.services.forecast_aggregation import ForecastSample

logger = structlog.get_logger()

# Upstream error bodies are echoed into UpstreamError messages; keep them short
_MAX_ERROR_BODY_CHARS = 200


def _as_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _as_text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _as_epoch(value: Any) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def _first_condition(payload: dict[str, Any]) -> dict[str, Any]:
    conditions = payload.get("weather")
    if isinstance(conditions, list) and conditions and isinstance(conditions[0], dict):
        return conditions[0]
    return {}


def _main_block(payload: dict[str, Any]) -> dict[str, Any]:
    main = payload.get("main")
    return main if isinstance(main, dict) else {}


class OpenWeatherProvider(WeatherProvider):
    """Adapter for the OpenWeather 2.5 API.

    A fresh httpx.AsyncClient is opened per call. Pass transport to route
    requests somewhere other than the network (tests use httpx.MockTransport).
    """

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str,
        timeout: float,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    @property
    def provider_name(self) -> str:
        """Return 'OpenWeather'."""
        return "OpenWeather"

    async def fetch_current(self, city: str, lang: str) -> dict[str, Any]:
        """Fetch current conditions for city."""
        return await self._get("weather", city=city, lang=lang)

    async def fetch_forecast(self, city: str, lang: str) -> dict[str, Any]:
        """Fetch the 5-day / 3-hour forecast for city."""
        return await self._get("forecast", city=city, lang=lang)

    async def _get(self, endpoint: str, *, city: str, lang: str) -> dict[str, Any]:
        """GET an OpenWeather endpoint and return its JSON body.

        Args:
            endpoint: Path under the base URL ("weather" or "forecast").
            city: City query.
            lang: Language tag.

        Returns:
            Parsed JSON object.

        Raises:
            UpstreamError: Timeout, transport error, non-2xx status, or a
                body that is not a JSON object.
        """
        url = f"{self._base_url}/{endpoint}"
        params = {
            "q": city,
            "appid": self._api_key,
            "units": "metric",
            "lang": lang,
        }

        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                resp = await client.get(url, params=params)
        except httpx.TimeoutException as exc:
            logger.warning(
                "Upstream timeout",
                provider=self.provider_name,
                endpoint=endpoint,
            )
            raise UpstreamError(
                f"{self.provider_name} error: request timed out"
            ) from exc
        except httpx.HTTPError as exc:
            logger.warning(
                "Upstream unreachable",
                provider=self.provider_name,
                endpoint=endpoint,
                error_type=type(exc).__name__,
            )
            raise UpstreamError(f"{self.provider_name} error: unreachable") from exc

        if resp.is_error:
            body = self._error_body(resp)
            logger.warning(
                "Upstream error status",
                provider=self.provider_name,
                endpoint=endpoint,
                status=resp.status_code,
            )
            message = f"{self.provider_name} error: {resp.status_code} {body}".rstrip()
            raise UpstreamError(message, upstream_status=resp.status_code)

        try:
            data = resp.json()
        except ValueError as exc:
            raise UpstreamError(
                f"{self.provider_name} error: invalid JSON response"
            ) from exc
        if not isinstance(data, dict):
            raise UpstreamError(
                f"{self.provider_name} error: unexpected response shape"
            )
        return data

    def _error_body(self, resp: httpx.Response) -> str:
        """Best-effort read of an error body for the UpstreamError message."""
        try:
            return resp.text[:_MAX_ERROR_BODY_CHARS]
        except (UnicodeDecodeError, LookupError) as exc:
            report_non_fatal(
                NonFatalError(f"Unreadable upstream error body: {exc}"),
                provider=self.provider_name,
            )
            return ""

    def normalize_current(
        self, raw_response: dict[str, Any], *, fallback_city: str
    ) -> CurrentConditions:
        """Convert an OpenWeather /weather payload to CurrentConditions.

        Args:
            raw_response: Raw /weather JSON. Expected fields:
                - name: Resolved city name
                - main.temp, main.feels_like: Temperatures (metric)
                - weather[0].description, weather[0].icon
            fallback_city: City to report when the payload has no name.

        Returns:
            Normalized CurrentConditions. Absent temperatures are None,
            absent text fields are "".
        """
        main = _main_block(raw_response)
        condition = _first_condition(raw_response)
        return CurrentConditions(
            city=_as_text(raw_response.get("name")) or fallback_city,
            temp=_as_float(main.get("temp")),
            feels_like=_as_float(main.get("feels_like")),
            description=_as_text(condition.get("description")),
            icon=_as_text(condition.get("icon")),
        )

    def normalize_forecast(self, raw_response: dict[str, Any]) -> list[ForecastSample]:
        """Convert an OpenWeather /forecast payload to ForecastSample objects.

        Args:
            raw_response: Raw /forecast JSON. Expected fields:
                - list[]: 3-hour samples, each with dt (epoch seconds),
                  dt_txt ("YYYY-MM-DD HH:MM:SS"), main.temp / temp_min /
                  temp_max and weather[0].description / icon

        Returns:
            Samples in provider order. Non-object entries are skipped.
        """
        items = raw_response.get("list")
        if not isinstance(items, list):
            return []

        samples: list[ForecastSample] = []
        for item in items:
            if not isinstance(item, dict):
                continue
            main = _main_block(item)
            condition = _first_condition(item)
            samples.append(
                ForecastSample(
                    timestamp=_as_text(item.get("dt_txt")) or None,
                    epoch_seconds=_as_epoch(item.get("dt")),
                    temp=_as_float(main.get("temp")),
                    temp_min=_as_float(main.get("temp_min")),
                    temp_max=_as_float(main.get("temp_max")),
                    description=_as_text(condition.get("description")),
                    icon=_as_text(condition.get("icon")),
                )
            )
        return samples
