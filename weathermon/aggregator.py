"""Daily summary statistics computed from stored observations."""
from __future__ import annotations

import datetime as dt
from collections import Counter
from typing import Iterable, List, Sequence
from zoneinfo import ZoneInfo

from weathermon.errors import NoDataForWindow
from weathermon.models import DailySummary, Observation
from weathermon.observation_store import ObservationStore
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="aggregator")


def most_frequent(values: Sequence[str]) -> str:
    """Return the most frequent value.

    Values are stable-sorted by ascending frequency and the last one wins, so
    among equally frequent values the one whose last occurrence is latest is
    returned: ["Rain", "Clear", "Rain", "Clear"] -> "Clear".
    """
    if not values:
        raise ValueError("most_frequent() of an empty sequence")
    counts = Counter(values)
    return sorted(values, key=lambda v: counts[v])[-1]


def _mean(values: Iterable[float]) -> float:
    values = list(values)
    return sum(values) / len(values)


def day_window(day: dt.date, tz: ZoneInfo) -> tuple[dt.datetime, dt.datetime]:
    """Inclusive [00:00:00.000, 23:59:59.999] bounds of `day` in `tz`."""
    start = dt.datetime.combine(day, dt.time(0, 0, 0, 0), tzinfo=tz)
    end = dt.datetime.combine(day, dt.time(23, 59, 59, 999000), tzinfo=tz)
    return start, end


def summarize_observations(
    location: str, day: dt.date, start: dt.datetime, end: dt.datetime, observations: List[Observation]
) -> DailySummary:
    """Compute the summary for an already-selected, non-empty window."""
    if not observations:
        raise NoDataForWindow(location, day)
    temperatures = [obs.temperature for obs in observations]
    avg_temp = _mean(temperatures)
    max_temp = max(temperatures)
    min_temp = min(temperatures)
    # float summation can land a hair outside [min, max] when all values are equal
    avg_temp = min(max(avg_temp, min_temp), max_temp)
    return DailySummary(
        location=location,
        date=day,
        start=start,
        end=end,
        avg_temp=avg_temp,
        max_temp=max_temp,
        min_temp=min_temp,
        dominant_condition=most_frequent([obs.condition for obs in observations]),
        avg_humidity=_mean(obs.humidity for obs in observations),
        avg_wind_speed=_mean(obs.wind_speed for obs in observations),
        sample_count=len(observations),
    )


class DailyAggregator:
    """Summarize one location's observations for one local calendar day."""

    def __init__(self, store: ObservationStore, timezone: str = "UTC") -> None:
        self.store = store
        self.tz = ZoneInfo(timezone)

    def summarize(self, location: str, day: dt.date) -> DailySummary:
        start, end = day_window(day, self.tz)
        observations = self.store.between(location, start, end)
        logger.debug("Summarizing %d observations for %s on %s", len(observations), location, day)
        return summarize_observations(location, day, start, end, observations)
