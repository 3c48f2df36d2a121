"""Consecutive-breach alert tracking."""
from __future__ import annotations

import threading
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="alerts")

DEFAULT_THRESHOLD_CELSIUS = 35.0
DEFAULT_REQUIRED_CONSECUTIVE = 2


class AlertDecision(str, Enum):
    NO_ALERT = "no_alert"
    ALERT = "alert"


@dataclass(frozen=True)
class Alert:
    """Payload handed to the notifier when an alert fires."""
    location: str
    temperature: float
    threshold: float
    required_consecutive: int

    def subject(self) -> str:
        return f"Weather Alert for {self.location}"

    def message(self) -> str:
        return (
            f"The temperature in {self.location} has exceeded {self.threshold:g}°C for "
            f"{self.required_consecutive} consecutive readings. "
            f"Current temperature: {self.temperature:.1f}°C"
        )


class AlertTracker:
    """Per-location count of consecutive readings strictly above the threshold.

    A reading at or below the threshold resets the count. When the count
    reaches `required_consecutive` the tracker answers ALERT and starts over,
    so a fresh run of breaches is needed to alert again. Counts live in
    memory only and are lost on restart.
    """

    def __init__(
        self,
        threshold: float = DEFAULT_THRESHOLD_CELSIUS,
        required_consecutive: int = DEFAULT_REQUIRED_CONSECUTIVE,
    ) -> None:
        if required_consecutive < 1:
            raise ValueError("required_consecutive must be at least 1")
        self.threshold = threshold
        self.required_consecutive = required_consecutive
        self._counts: Dict[str, int] = {}
        self._lock = threading.Lock()

    def observe(self, location: str, temperature: float) -> AlertDecision:
        with self._lock:
            if not temperature > self.threshold:
                # anything else, NaN included, breaks the streak
                self._counts[location] = 0
                return AlertDecision.NO_ALERT
            count = self._counts.get(location, 0) + 1
            if count >= self.required_consecutive:
                self._counts[location] = 0
                logger.info(
                    "Alert threshold reached",
                    extra={"location": location, "temperature": temperature, "threshold": self.threshold},
                )
                return AlertDecision.ALERT
            self._counts[location] = count
            return AlertDecision.NO_ALERT

    def alert_for(self, location: str, temperature: float) -> Alert:
        return Alert(location, temperature, self.threshold, self.required_consecutive)

    def count(self, location: str) -> int:
        with self._lock:
            return self._counts.get(location, 0)

    def reset(self, location: Optional[str] = None) -> None:
        """Forget one location's streak, or every streak when `location` is None."""
        with self._lock:
            if location is None:
                self._counts.clear()
            else:
                self._counts.pop(location, None)
