"""Weather provider client."""

from .base import WeatherProvider
from .openweather_client import (
    OpenWeatherProvider,
    fetch_current_payload,
    fetch_forecast_payload,
    parse_observation,
)

__all__ = [
    "WeatherProvider",
    "OpenWeatherProvider",
    "fetch_current_payload",
    "fetch_forecast_payload",
    "parse_observation",
]
