"""In-memory observation store, intended for development and tests."""

import datetime as dt
import threading
from typing import List, Optional

from weathermon.models import Observation
from weathermon.observation_store.base import ObservationStore
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="observation_store/in_memory")


class InMemoryObservationStore(ObservationStore):
    """Thread-safe list of observations in insertion order (dev/test)."""

    def __init__(self) -> None:
        logger.debug("Initializing InMemoryObservationStore")
        self._rows: List[Observation] = []
        self._lock = threading.Lock()

    def save(self, observation: Observation) -> None:
        with self._lock:
            self._rows.append(observation)

    def latest(self, location: str) -> Optional[Observation]:
        with self._lock:
            matches = [row for row in self._rows if row.location == location]
        if not matches:
            return None
        # max() keeps the first of equal keys; reversed() makes the newest insert win
        return max(reversed(matches), key=lambda row: row.observed_at)

    def between(self, location: str, start: dt.datetime, end: dt.datetime) -> List[Observation]:
        with self._lock:
            rows = list(self._rows)
        matches = [row for row in rows if row.location == location and start <= row.recorded_at <= end]
        return sorted(matches, key=lambda row: row.recorded_at)

    def clear(self) -> None:
        with self._lock:
            self._rows.clear()
