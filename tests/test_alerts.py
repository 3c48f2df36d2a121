import threading
import unittest

from weathermon.alerts import Alert, AlertDecision, AlertTracker


class TestAlertTracker(unittest.TestCase):
    def _run(self, tracker, temps, location="Kolkata"):
        return [tracker.observe(location, t) for t in temps]

    def test_two_consecutive_breaches_alert_then_reset(self):
        tracker = AlertTracker(threshold=35, required_consecutive=2)
        self.assertEqual(self._run(tracker, [36, 37]), [AlertDecision.NO_ALERT, AlertDecision.ALERT])
        self.assertEqual(tracker.count("Kolkata"), 0)
        self.assertEqual(self._run(tracker, [36]), [AlertDecision.NO_ALERT])
        self.assertEqual(tracker.count("Kolkata"), 1)

    def test_reading_at_or_below_threshold_breaks_streak(self):
        tracker = AlertTracker(threshold=35, required_consecutive=2)
        self.assertEqual(self._run(tracker, [36, 10, 36]), [AlertDecision.NO_ALERT] * 3)
        self.assertEqual(self._run(AlertTracker(), [36, 35, 36]), [AlertDecision.NO_ALERT] * 3)

    def test_threshold_is_strict(self):
        tracker = AlertTracker(threshold=35, required_consecutive=1)
        self.assertEqual(tracker.observe("Delhi", 35.0), AlertDecision.NO_ALERT)
        self.assertEqual(tracker.observe("Delhi", 35.01), AlertDecision.ALERT)

    def test_nan_reading_breaks_streak(self):
        tracker = AlertTracker(threshold=35, required_consecutive=2)
        nan = float("nan")
        self.assertEqual(self._run(tracker, [nan, nan]), [AlertDecision.NO_ALERT] * 2)
        self.assertEqual(self._run(tracker, [36, nan, 36]), [AlertDecision.NO_ALERT] * 3)
        self.assertEqual(tracker.count("Kolkata"), 1)

    def test_long_run_alerts_every_nth_reading(self):
        tracker = AlertTracker(threshold=35, required_consecutive=2)
        decisions = self._run(tracker, [40] * 5)
        self.assertEqual(
            decisions,
            [AlertDecision.NO_ALERT, AlertDecision.ALERT, AlertDecision.NO_ALERT, AlertDecision.ALERT, AlertDecision.NO_ALERT],
        )

    def test_locations_are_independent(self):
        tracker = AlertTracker()
        tracker.observe("Delhi", 36)
        tracker.observe("Mumbai", 20)
        self.assertEqual(tracker.observe("Delhi", 36), AlertDecision.ALERT)
        self.assertEqual(tracker.count("Mumbai"), 0)

    def test_reset(self):
        tracker = AlertTracker()
        tracker.observe("Delhi", 36)
        tracker.observe("Mumbai", 36)
        tracker.reset("Delhi")
        self.assertEqual(tracker.count("Delhi"), 0)
        self.assertEqual(tracker.count("Mumbai"), 1)
        tracker.reset()
        self.assertEqual(tracker.count("Mumbai"), 0)

    def test_invalid_required_consecutive(self):
        with self.assertRaises(ValueError):
            AlertTracker(required_consecutive=0)

    def test_concurrent_updates_fire_expected_number_of_alerts(self):
        tracker = AlertTracker(threshold=35, required_consecutive=2)
        alerts = []
        lock = threading.Lock()

        def worker():
            for _ in range(500):
                if tracker.observe("Delhi", 40) is AlertDecision.ALERT:
                    with lock:
                        alerts.append(1)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        self.assertEqual(len(alerts), 1000)

    def test_alert_message(self):
        alert = AlertTracker().alert_for("Delhi", 36.04)
        self.assertEqual(alert, Alert("Delhi", 36.04, 35.0, 2))
        self.assertEqual(alert.subject(), "Weather Alert for Delhi")
        self.assertEqual(
            alert.message(),
            "The temperature in Delhi has exceeded 35°C for 2 consecutive readings. Current temperature: 36.0°C",
        )


if __name__ == "__main__":
    unittest.main()
