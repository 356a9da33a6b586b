"""Upstream weather provider adapters.

This module provides:
- WeatherProvider base class and CurrentConditions
- OpenWeatherProvider for the OpenWeather 2.5 API
"""

from weatherdesk.adapters.weather.base import CurrentConditions, WeatherProvider
from weatherdesk.adapters.weather.openweather import OpenWeatherProvider

__all__ = [
    "CurrentConditions",
    "OpenWeatherProvider",
    "WeatherProvider",
]
