"""Helpers for fetching current conditions and forecasts from the OpenWeatherMap API."""
from __future__ import annotations

import math
from typing import Any, Dict

import requests

from weathermon.errors import MalformedUpstreamData, UpstreamUnavailable
from weathermon.models import Observation, recorded_at_from
from weathermon.units import to_display_unit
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="openweather_client")

session = requests.Session()

DEFAULT_BASE_URL = "https://api.openweathermap.org/data/2.5"
CURRENT_PATH = "/weather"
FORECAST_PATH = "/forecast"


def _get_json(url: str, *, location: str, params: Dict[str, Any], timeout: float) -> Any:
    """GET `url` and decode JSON, translating transport and decode errors."""
    try:
        resp = session.get(url, params=params, timeout=timeout)
        resp.raise_for_status()
    except requests.RequestException as exc:
        raise UpstreamUnavailable(f"OpenWeatherMap request for {location} failed: {exc}") from exc
    try:
        return resp.json()
    except ValueError as exc:
        raise MalformedUpstreamData(f"OpenWeatherMap returned invalid JSON for {location}: {exc}") from exc


def fetch_current_payload(
    location: str,
    *,
    api_key: str,
    country_code: str = "IN",
    base_url: str = DEFAULT_BASE_URL,
    timeout: float = 10.0,
) -> Dict[str, Any]:
    """Fetch the raw current-conditions payload (temperatures in Kelvin)."""
    params = {"q": f"{location},{country_code}", "appid": api_key}
    logger.debug("Requesting current conditions", extra={"location": location})
    return _get_json(f"{base_url}{CURRENT_PATH}", location=location, params=params, timeout=timeout)


def fetch_forecast_payload(
    location: str,
    *,
    api_key: str,
    country_code: str = "IN",
    base_url: str = DEFAULT_BASE_URL,
    timeout: float = 10.0,
) -> Dict[str, Any]:
    """Fetch the raw multi-day forecast payload; returned as-is."""
    params = {"q": f"{location},{country_code}", "appid": api_key}
    logger.debug("Requesting forecast", extra={"location": location})
    payload = _get_json(f"{base_url}{FORECAST_PATH}", location=location, params=params, timeout=timeout)
    if not isinstance(payload, dict):
        raise MalformedUpstreamData(f"OpenWeatherMap forecast for {location} is not an object")
    return payload


def parse_observation(location: str, payload: Any) -> Observation:
    """Build an Observation from a current-conditions payload, converting Kelvin to °C."""
    try:
        condition = payload["weather"][0]["main"]
        main = payload["main"]
        temp = float(main["temp"])
        feels_like = float(main["feels_like"])
        humidity = float(main["humidity"])
        wind_speed = float(payload["wind"]["speed"])
        observed_at = int(payload["dt"])
        recorded_at_from(observed_at)
    except (KeyError, IndexError, TypeError, ValueError, OverflowError, OSError) as exc:
        raise MalformedUpstreamData(
            f"Unexpected OpenWeatherMap payload for {location}: missing or invalid {exc}"
        ) from exc

    if not isinstance(condition, str) or not condition:
        raise MalformedUpstreamData(f"Unexpected OpenWeatherMap payload for {location}: bad weather condition")
    numbers = {"temp": temp, "feels_like": feels_like, "humidity": humidity, "wind_speed": wind_speed}
    for name, value in numbers.items():
        if not math.isfinite(value):
            raise MalformedUpstreamData(f"Non-finite {name} for {location}: {value}")
    if not 0 <= humidity <= 100:
        raise MalformedUpstreamData(f"Humidity out of range for {location}: {humidity}")
    if wind_speed < 0:
        raise MalformedUpstreamData(f"Negative wind speed for {location}: {wind_speed}")

    return Observation(
        location=location,
        condition=condition,
        temperature=to_display_unit(temp),
        feels_like=to_display_unit(feels_like),
        humidity=humidity,
        wind_speed=wind_speed,
        observed_at=observed_at,
    )


class OpenWeatherProvider:
    """Binds API credentials and request options for the fetcher."""

    def __init__(
        self,
        api_key: str | None,
        *,
        country_code: str = "IN",
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 10.0,
    ) -> None:
        self.api_key = api_key
        self.country_code = country_code
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings) -> "OpenWeatherProvider":
        if not settings.openweather_api_key:
            logger.warning("WEATHER_OPENWEATHER_API_KEY is not set; provider calls will fail")
        return cls(
            settings.openweather_api_key,
            country_code=settings.country_code,
            base_url=settings.openweather_base_url,
            timeout=settings.provider_timeout_seconds,
        )

    def _require_key(self) -> str:
        if not self.api_key:
            raise UpstreamUnavailable("OpenWeatherMap API key is not configured")
        return self.api_key

    def current(self, location: str) -> Observation:
        """Return the current observation for `location`."""
        payload = fetch_current_payload(
            location,
            api_key=self._require_key(),
            country_code=self.country_code,
            base_url=self.base_url,
            timeout=self.timeout,
        )
        return parse_observation(location, payload)

    def forecast(self, location: str) -> Dict[str, Any]:
        """Return the provider's forecast payload for `location`."""
        return fetch_forecast_payload(
            location,
            api_key=self._require_key(),
            country_code=self.country_code,
            base_url=self.base_url,
            timeout=self.timeout,
        )
