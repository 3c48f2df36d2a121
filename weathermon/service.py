"""Request-facing operations used by the HTTP API."""
from __future__ import annotations

import datetime as dt
import re
from typing import Any, Dict, List

from weathermon.aggregator import DailyAggregator
from weathermon.errors import InvalidInput, InvalidLocation, NotFound
from weathermon.fetcher import WeatherFetcher
from weathermon.models import DailySummary, Observation
from weathermon.observation_store import ObservationStore
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="service")

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_day(value: str) -> dt.date:
    """Parse a YYYY-MM-DD string, raising InvalidInput for anything else."""
    if not isinstance(value, str) or not DATE_PATTERN.match(value):
        raise InvalidInput(f"Invalid date {value!r}; expected YYYY-MM-DD")
    try:
        return dt.date.fromisoformat(value)
    except ValueError as exc:
        raise InvalidInput(f"Invalid date {value!r}: {exc}") from exc


class WeatherService:
    """Latest reading, daily summary and forecast for monitored locations."""

    def __init__(
        self,
        locations: List[str],
        store: ObservationStore,
        aggregator: DailyAggregator,
        fetcher: WeatherFetcher,
    ) -> None:
        self._locations = list(locations)
        self.store = store
        self.aggregator = aggregator
        self.fetcher = fetcher

    def locations(self) -> List[str]:
        return list(self._locations)

    def _check_location(self, location: str) -> None:
        if location not in self._locations:
            raise InvalidLocation(location)

    def get_latest(self, location: str) -> Observation:
        self._check_location(location)
        observation = self.store.latest(location)
        if observation is None:
            raise NotFound(f"No observations stored for {location} yet")
        return observation

    def get_summary(self, location: str, date: str) -> DailySummary:
        self._check_location(location)
        return self.aggregator.summarize(location, parse_day(date))

    def get_forecast(self, location: str) -> Dict[str, Any]:
        return self.fetcher.fetch_forecast(location)
