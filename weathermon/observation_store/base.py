"""Shared protocol for durable observation stores."""

import datetime as dt
from typing import List, Optional, Protocol

from weathermon.models import Observation


class ObservationStore(Protocol):
    """Append-only history of observations, queryable by location and time."""

    def save(self, observation: Observation) -> None:
        """Append one observation. Backend errors propagate."""

    def latest(self, location: str) -> Optional[Observation]:
        """Return the observation with the highest `observed_at`, or None."""

    def between(self, location: str, start: dt.datetime, end: dt.datetime) -> List[Observation]:
        """Observations with `start <= recorded_at <= end`, oldest first.

        `start` and `end` must be timezone-aware.
        """
