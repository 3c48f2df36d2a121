"""Observation and daily-summary records shared across the pipeline."""
from __future__ import annotations

import datetime as dt
from dataclasses import asdict, dataclass
from typing import Any, Dict


def recorded_at_from(observed_at: int) -> dt.datetime:
    """Wall-clock UTC instant for a provider timestamp (whole seconds since epoch)."""
    return dt.datetime.fromtimestamp(int(observed_at), tz=dt.timezone.utc)


@dataclass(frozen=True)
class Observation:
    """One normalized reading for one location; temperatures in °C."""
    location: str
    condition: str
    temperature: float
    feels_like: float
    humidity: float
    wind_speed: float
    observed_at: int

    @property
    def recorded_at(self) -> dt.datetime:
        return recorded_at_from(self.observed_at)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-safe dict, used for cache entries and API responses."""
        data = asdict(self)
        data["recorded_at"] = self.recorded_at.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Observation":
        """Rebuild an observation from `to_dict()` output; derived fields are ignored."""
        return cls(
            location=data["location"],
            condition=data["condition"],
            temperature=float(data["temperature"]),
            feels_like=float(data["feels_like"]),
            humidity=float(data["humidity"]),
            wind_speed=float(data["wind_speed"]),
            observed_at=int(data["observed_at"]),
        )


@dataclass(frozen=True)
class DailySummary:
    """Statistics over one location's observations for one local calendar day."""
    location: str
    date: dt.date
    start: dt.datetime  # timezone-aware, inclusive
    end: dt.datetime  # timezone-aware, inclusive
    avg_temp: float
    max_temp: float
    min_temp: float
    dominant_condition: str
    avg_humidity: float
    avg_wind_speed: float
    sample_count: int
