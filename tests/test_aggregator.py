import datetime as dt
import math
import unittest
from zoneinfo import ZoneInfo

from weathermon.aggregator import DailyAggregator, day_window, most_frequent
from weathermon.errors import NoDataForWindow
from weathermon.models import Observation
from weathermon.observation_store import InMemoryObservationStore

UTC = dt.timezone.utc


def _obs(hour, temperature, condition="Clear", humidity=50.0, wind_speed=2.0, day=1, location="Delhi"):
    observed_at = int(dt.datetime(2024, 6, day, hour, tzinfo=UTC).timestamp())
    return Observation(location, condition, temperature, temperature, humidity, wind_speed, observed_at)


class TestMostFrequent(unittest.TestCase):
    def test_clear_winner(self):
        self.assertEqual(most_frequent(["Haze", "Haze", "Clear"]), "Haze")
        self.assertEqual(most_frequent(["Clear", "Rain", "Rain", "Rain", "Clear"]), "Rain")

    def test_ties_go_to_latest_last_occurrence(self):
        self.assertEqual(most_frequent(["Rain", "Clear", "Rain", "Clear"]), "Clear")
        self.assertEqual(most_frequent(["Clear", "Rain", "Rain", "Clear"]), "Clear")
        self.assertEqual(most_frequent(["Clear", "Clear", "Rain", "Rain"]), "Rain")
        self.assertEqual(most_frequent(["Clouds", "Rain", "Haze"]), "Haze")

    def test_single_value(self):
        self.assertEqual(most_frequent(["Mist"]), "Mist")

    def test_empty_raises(self):
        with self.assertRaises(ValueError):
            most_frequent([])

    def test_input_is_not_mutated(self):
        values = ["Rain", "Clear", "Rain"]
        most_frequent(values)
        self.assertEqual(values, ["Rain", "Clear", "Rain"])


class TestDayWindow(unittest.TestCase):
    def test_bounds_cover_whole_day_inclusive(self):
        tz = ZoneInfo("Asia/Kolkata")
        start, end = day_window(dt.date(2024, 6, 1), tz)
        self.assertEqual(start, dt.datetime(2024, 6, 1, 0, 0, 0, 0, tzinfo=tz))
        self.assertEqual(end, dt.datetime(2024, 6, 1, 23, 59, 59, 999000, tzinfo=tz))


class TestDailyAggregator(unittest.TestCase):
    def setUp(self):
        self.store = InMemoryObservationStore()
        self.aggregator = DailyAggregator(self.store, "UTC")

    def test_summary_statistics(self):
        for obs in (
            _obs(6, 30.0, "Clear", humidity=40.0, wind_speed=1.0),
            _obs(12, 38.0, "Haze", humidity=20.0, wind_speed=4.0),
            _obs(18, 34.0, "Haze", humidity=30.0, wind_speed=2.5),
            _obs(12, 99.0, "Rain", day=2),
            _obs(12, 99.0, "Rain", location="Mumbai"),
        ):
            self.store.save(obs)

        summary = self.aggregator.summarize("Delhi", dt.date(2024, 6, 1))

        self.assertEqual(summary.location, "Delhi")
        self.assertEqual(summary.date, dt.date(2024, 6, 1))
        self.assertEqual(summary.sample_count, 3)
        self.assertAlmostEqual(summary.avg_temp, 34.0)
        self.assertEqual(summary.max_temp, 38.0)
        self.assertEqual(summary.min_temp, 30.0)
        self.assertEqual(summary.dominant_condition, "Haze")
        self.assertAlmostEqual(summary.avg_humidity, 30.0)
        self.assertAlmostEqual(summary.avg_wind_speed, 2.5)

    def test_min_avg_max_ordering_holds(self):
        temps = [0.1, 0.1, 0.1, 0.1, 0.1, 0.1, 0.1]
        for hour, temp in enumerate(temps):
            self.store.save(_obs(hour, temp))
        summary = self.aggregator.summarize("Delhi", dt.date(2024, 6, 1))
        self.assertLessEqual(summary.min_temp, summary.avg_temp)
        self.assertLessEqual(summary.avg_temp, summary.max_temp)

    def test_dominant_condition_tie_break_follows_time_order(self):
        # saved out of order; the window is read oldest first
        self.store.save(_obs(9, 30.0, "Clear"))
        self.store.save(_obs(3, 30.0, "Rain"))
        self.store.save(_obs(6, 30.0, "Clear"))
        self.store.save(_obs(12, 30.0, "Rain"))
        summary = self.aggregator.summarize("Delhi", dt.date(2024, 6, 1))
        self.assertEqual(summary.dominant_condition, "Rain")

    def test_empty_window_raises(self):
        self.store.save(_obs(12, 30.0, day=2))
        with self.assertRaises(NoDataForWindow):
            self.aggregator.summarize("Delhi", dt.date(2024, 6, 1))

    def test_local_timezone_shifts_the_window(self):
        # 20:00 UTC on June 1 is 01:30 on June 2 in Kolkata
        self.store.save(_obs(20, 31.0))
        kolkata = DailyAggregator(self.store, "Asia/Kolkata")

        june_2 = kolkata.summarize("Delhi", dt.date(2024, 6, 2))
        self.assertEqual(june_2.sample_count, 1)
        self.assertEqual(june_2.start.utcoffset(), dt.timedelta(hours=5, minutes=30))
        with self.assertRaises(NoDataForWindow):
            kolkata.summarize("Delhi", dt.date(2024, 6, 1))

    def test_never_returns_nan(self):
        self.store.save(_obs(1, 25.0))
        summary = self.aggregator.summarize("Delhi", dt.date(2024, 6, 1))
        for value in (summary.avg_temp, summary.avg_humidity, summary.avg_wind_speed):
            self.assertFalse(math.isnan(value))


if __name__ == "__main__":
    unittest.main()
