"""Cache-aside access to current conditions and forecasts."""
from __future__ import annotations

import json
from typing import Any, Dict, Iterable, Optional

from weathermon.cache_store import CacheStore
from weathermon.errors import InvalidLocation
from weathermon.models import Observation
from weathermon.providers import WeatherProvider
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="fetcher")

CURRENT_KEY = "weather:{location}"
FORECAST_KEY = "forecast:{location}"
CURRENT_TTL_SECONDS = 300
FORECAST_TTL_SECONDS = 1800


class WeatherFetcher:
    """Resolve observations and forecasts, consulting the cache before the provider.

    Provider errors (UpstreamUnavailable, MalformedUpstreamData) propagate
    unchanged and are never retried here. Cache problems only cost a
    provider call.
    """

    def __init__(
        self,
        provider: WeatherProvider,
        cache: CacheStore,
        locations: Iterable[str],
        *,
        current_ttl_seconds: int = CURRENT_TTL_SECONDS,
        forecast_ttl_seconds: int = FORECAST_TTL_SECONDS,
    ) -> None:
        self.provider = provider
        self.cache = cache
        self.locations = tuple(locations)
        self.current_ttl_seconds = current_ttl_seconds
        self.forecast_ttl_seconds = forecast_ttl_seconds

    def check_location(self, location: str) -> None:
        if location not in self.locations:
            raise InvalidLocation(location)

    def _cached_json(self, key: str) -> Optional[Any]:
        """Return the decoded cache entry, treating corrupt entries as misses."""
        raw = self.cache.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError as exc:
            logger.warning("Ignoring corrupt cache entry %s: %s", key, exc)
            return None

    def _store_json(self, key: str, value: Any, ttl_seconds: int) -> None:
        if not self.cache.set(key, json.dumps(value), ttl_seconds):
            logger.warning("Cache write for %s did not happen", key)

    def fetch(self, location: str) -> Observation:
        """Return the current observation for a monitored location."""
        self.check_location(location)
        key = CURRENT_KEY.format(location=location)

        cached = self._cached_json(key)
        if cached is not None:
            try:
                observation = Observation.from_dict(cached)
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Ignoring unusable cache entry %s: %s", key, exc)
            else:
                logger.debug("Cache hit for %s", key)
                return observation

        logger.debug("Cache miss for %s; calling provider", key)
        observation = self.provider.current(location)
        self._store_json(key, observation.to_dict(), self.current_ttl_seconds)
        return observation

    def fetch_forecast(self, location: str) -> Dict[str, Any]:
        """Return the provider forecast payload for a monitored location."""
        self.check_location(location)
        key = FORECAST_KEY.format(location=location)

        cached = self._cached_json(key)
        if isinstance(cached, dict):
            logger.debug("Cache hit for %s", key)
            return cached

        logger.debug("Cache miss for %s; calling provider", key)
        forecast = self.provider.forecast(location)
        self._store_json(key, forecast, self.forecast_ttl_seconds)
        return forecast
