import datetime as dt
import unittest
from zoneinfo import ZoneInfo

from rainwatch.domain import AnalysisWindow, HourlySeries, NextHoursReport


def _times(n: int, tz=dt.timezone.utc):
    base = dt.datetime(2024, 1, 1, 0, 0, tzinfo=tz)
    return [base + dt.timedelta(hours=i) for i in range(n)]


class TestHourlySeries(unittest.TestCase):
    def test_rejects_mismatched_lengths(self):
        with self.assertRaises(ValueError):
            HourlySeries(time=_times(3), precipitation=[0.0, 0.0], temperature=[1.0] * 3, wind_speed=[1.0] * 3)

    def test_rejects_short_optional_series(self):
        with self.assertRaises(ValueError):
            HourlySeries(
                time=_times(3),
                precipitation=[0.0] * 3,
                temperature=[1.0] * 3,
                wind_speed=[1.0] * 3,
                humidity=[50.0],
            )

    def test_absent_optional_series_stays_none(self):
        series = HourlySeries(time=_times(2), precipitation=[0.0] * 2, temperature=[1.0] * 2, wind_speed=[1.0] * 2)
        self.assertIsNone(series.humidity)
        self.assertIsNone(series.select(AnalysisWindow(0, 1)).humidity)

    def test_select_cuts_every_series(self):
        series = HourlySeries(
            time=_times(5),
            precipitation=[0.0, 0.1, 0.2, 0.3, 0.4],
            temperature=[10.0, 11.0, 12.0, 13.0, 14.0],
            wind_speed=[1.0, 2.0, 3.0, 4.0, 5.0],
            humidity=[50.0, 51.0, 52.0, 53.0, 54.0],
            wind_direction=[0.0, 90.0, 180.0, 270.0, 360.0],
        )
        sub = series.select(AnalysisWindow(1, 3))
        self.assertEqual(len(sub), 2)
        self.assertEqual(sub.precipitation, (0.1, 0.2))
        self.assertEqual(sub.humidity, (51.0, 52.0))
        self.assertEqual(sub.wind_direction, (90.0, 180.0))

    def test_precipitation_nulls_count_as_zero(self):
        series = HourlySeries(time=_times(2), precipitation=[None, 0.4], temperature=[1.0] * 2, wind_speed=[1.0] * 2)
        self.assertEqual(series.precipitation_mm(), [0.0, 0.4])

    def test_point_is_reported_in_utc(self):
        tz = ZoneInfo("Europe/Madrid")
        series = HourlySeries(time=_times(1, tz), precipitation=[0.2], temperature=[9.0], wind_speed=[3.0])
        point = series.point(0)
        self.assertEqual(point.time, dt.datetime(2023, 12, 31, 23, 0, tzinfo=dt.timezone.utc))
        dumped = point.model_dump(mode="json", by_alias=True)
        self.assertEqual(dumped["windSpeed"], 3.0)
        self.assertIsNone(dumped["windDirection"])


class TestReportSerialization(unittest.TestCase):
    def test_camel_case_keys(self):
        report = NextHoursReport(
            will_rain=False,
            max_precipitation_mm=0.0,
            hours_analyzed=1,
            threshold_mm=0.1,
            rain_probability=0,
            points=[],
        )
        dumped = report.model_dump(mode="json", by_alias=True)
        self.assertEqual(dumped["mode"], "next_hours")
        for key in ("willRain", "maxPrecipitationMm", "hoursAnalyzed", "thresholdMm", "rainProbability"):
            self.assertIn(key, dumped)


if __name__ == "__main__":
    unittest.main()
