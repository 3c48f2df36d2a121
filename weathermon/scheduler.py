"""Fixed-interval polling loop over the monitored locations."""
from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from weathermon.alerts import Alert, AlertDecision, AlertTracker
from weathermon.fetcher import WeatherFetcher
from weathermon.notifier import Notifier
from weathermon.writer import ObservationWriter
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="scheduler")

DEFAULT_INTERVAL_SECONDS = 300.0


@dataclass
class SweepReport:
    """Outcome of one pass over every location."""
    processed: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)
    alerts: List[Alert] = field(default_factory=list)


class PollScheduler:
    """Run fetch -> persist -> alert for each location, once per interval.

    A failure for one location is logged and recorded in the SweepReport;
    the sweep moves on to the next location. Sweeps never overlap.
    """

    def __init__(
        self,
        locations: Iterable[str],
        fetcher: WeatherFetcher,
        writer: ObservationWriter,
        tracker: AlertTracker,
        notifier: Notifier,
        *,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
        poll_on_start: bool = True,
    ) -> None:
        self.locations = tuple(locations)
        self.fetcher = fetcher
        self.writer = writer
        self.tracker = tracker
        self.notifier = notifier
        self.interval_seconds = interval_seconds
        self.poll_on_start = poll_on_start
        self._sweep_lock = threading.Lock()
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def _notify(self, alert: Alert) -> None:
        """Deliver an alert; failures are logged and dropped."""
        try:
            result = self.notifier.send(alert)
        except Exception as exc:
            logger.error("Notifier raised for %s: %s", alert.location, exc)
            return
        if not result.ok:
            logger.error("Failed to send alert for %s: %s", alert.location, result.error)

    def process_location(self, location: str, report: SweepReport) -> None:
        """Run one location's pipeline, recording failures in `report`."""
        try:
            observation = self.fetcher.fetch(location)
        except Exception as exc:
            logger.warning("Fetch failed for %s: %s", location, exc)
            report.failed[location] = str(exc)
            return

        # persist and alert evaluation are independent consumers of the reading
        try:
            self.writer.persist(observation)
        except Exception as exc:
            logger.error("Persist failed for %s: %s", location, exc)
            report.failed[location] = str(exc)

        if self.tracker.observe(location, observation.temperature) is AlertDecision.ALERT:
            alert = self.tracker.alert_for(location, observation.temperature)
            report.alerts.append(alert)
            self._notify(alert)

        if location not in report.failed:
            report.processed.append(location)

    def run_sweep(self) -> SweepReport:
        """Process every location once, in configured order."""
        report = SweepReport()
        with self._sweep_lock:
            for location in self.locations:
                try:
                    self.process_location(location, report)
                except Exception as exc:
                    logger.exception("Unexpected error processing %s", location)
                    report.failed[location] = str(exc)
        logger.info(
            "Sweep finished",
            extra={"processed": len(report.processed), "failed": len(report.failed), "alerts": len(report.alerts)},
        )
        return report

    def run_forever(self, stop_event: Optional[threading.Event] = None) -> None:
        """Sweep every `interval_seconds` until `stop_event` is set."""
        stop_event = stop_event or self._stop
        logger.info("Poller started", extra={"interval_seconds": self.interval_seconds, "locations": list(self.locations)})
        if self.poll_on_start and not stop_event.is_set():
            self.run_sweep()
        while not stop_event.wait(self.interval_seconds):
            self.run_sweep()
        logger.info("Poller stopped")

    def start(self) -> None:
        """Run the loop on a daemon thread."""
        if self._thread and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self.run_forever, args=(self._stop,), name="weather-poller", daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        if self._thread:
            self._thread.join(timeout)
            self._thread = None
