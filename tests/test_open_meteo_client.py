import datetime as dt
import unittest

from rainwatch.data_sources import open_meteo_client
from rainwatch.errors import BadGateway, UpstreamError


class DummyResp:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        return self._payload


class RecordingSession:
    def __init__(self, resp):
        self.resp = resp
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append({"url": url, "params": params, "timeout": timeout})
        return self.resp


def _make_payload(n=3, timezone="Europe/Madrid"):
    times = [f"2024-05-01T{h:02d}:00" for h in range(n)]
    return {
        "latitude": 40.4,
        "longitude": -3.7,
        "timezone": timezone,
        "utc_offset_seconds": 7200,
        "hourly_units": {
            "time": "iso8601",
            "precipitation": "mm",
            "temperature_2m": "°C",
            "relative_humidity_2m": "%",
            "wind_speed_10m": "km/h",
            "wind_direction_10m": "°",
        },
        "hourly": {
            "time": times,
            "precipitation": [0.0, 0.4, None][:n],
            "temperature_2m": [12.0, 13.5, 14.0][:n],
            "relative_humidity_2m": [70, 75, 80][:n],
            "wind_speed_10m": [5.0, 6.0, 7.0][:n],
            "wind_direction_10m": [180, 190, 200][:n],
        },
    }


class TestBuildParams(unittest.TestCase):
    def test_without_dates(self):
        params = open_meteo_client.build_forecast_params(1.5, 2.5, ["precipitation", "temperature_2m"])
        self.assertEqual(params, {
            "latitude": 1.5,
            "longitude": 2.5,
            "hourly": "precipitation,temperature_2m",
            "timezone": "auto",
        })

    def test_with_dates(self):
        params = open_meteo_client.build_forecast_params(
            1.5, 2.5, ["precipitation"], start_date="2024-05-01", end_date="2024-05-02"
        )
        self.assertEqual(params["start_date"], "2024-05-01")
        self.assertEqual(params["end_date"], "2024-05-02")


class TestFetch(unittest.TestCase):
    def setUp(self):
        self._orig_session = open_meteo_client.session

    def tearDown(self):
        open_meteo_client.session = self._orig_session

    def test_fetch_forecast_payload_returns_body(self):
        payload = _make_payload()
        fake = RecordingSession(DummyResp(payload))
        open_meteo_client.session = fake

        body = open_meteo_client.fetch_forecast_payload(40.4, -3.7, timeout=5)
        self.assertIs(body, payload)
        self.assertEqual(fake.calls[0]["url"], open_meteo_client.OPEN_METEO_WEATHER_URL)
        self.assertEqual(fake.calls[0]["params"]["hourly"], "precipitation,temperature_2m")
        self.assertEqual(fake.calls[0]["timeout"], 5)

    def test_fetch_forecast_payload_raises_upstream_error(self):
        open_meteo_client.session = RecordingSession(DummyResp({"error": True}, status_code=503))

        with self.assertRaises(UpstreamError) as ctx:
            open_meteo_client.fetch_forecast_payload(40.4, -3.7)
        self.assertEqual(ctx.exception.status_code, 503)
        self.assertEqual(ctx.exception.message, "weather provider error")

    def test_fetch_hourly_series_requests_analysis_vars(self):
        fake = RecordingSession(DummyResp(_make_payload()))
        open_meteo_client.session = fake

        series = open_meteo_client.fetch_hourly_series(40.4, -3.7, start_date="2024-05-01", end_date="2024-05-01")
        params = fake.calls[0]["params"]
        self.assertEqual(params["hourly"].split(","), open_meteo_client.ANALYSIS_HOURLY_VARS)
        self.assertEqual(params["start_date"], "2024-05-01")
        self.assertEqual(len(series), 3)
        self.assertEqual(series.precipitation, (0.0, 0.4, None))
        self.assertEqual(series.humidity, (70, 75, 80))


class TestParseHourlySeries(unittest.TestCase):
    def test_localizes_times_to_payload_timezone(self):
        series = open_meteo_client.parse_hourly_series(_make_payload())
        first = series.time[0]
        self.assertEqual(first.astimezone(dt.timezone.utc), dt.datetime(2024, 4, 30, 22, 0, tzinfo=dt.timezone.utc))

    def test_falls_back_to_utc_offset(self):
        payload = _make_payload(timezone="Not/AZone")
        series = open_meteo_client.parse_hourly_series(payload)
        self.assertEqual(series.time[0].utcoffset(), dt.timedelta(hours=2))

    def test_optional_series_absent(self):
        payload = _make_payload()
        del payload["hourly"]["relative_humidity_2m"]
        del payload["hourly"]["wind_direction_10m"]
        series = open_meteo_client.parse_hourly_series(payload)
        self.assertIsNone(series.humidity)
        self.assertIsNone(series.wind_direction)

    def test_missing_hourly_block(self):
        with self.assertRaises(BadGateway):
            open_meteo_client.parse_hourly_series({"latitude": 1.0})

    def test_missing_required_array(self):
        payload = _make_payload()
        del payload["hourly"]["precipitation"]
        with self.assertRaises(BadGateway) as ctx:
            open_meteo_client.parse_hourly_series(payload)
        self.assertEqual(ctx.exception.status_code, 502)

    def test_empty_time_array(self):
        payload = _make_payload()
        for key in payload["hourly"]:
            payload["hourly"][key] = []
        with self.assertRaises(BadGateway):
            open_meteo_client.parse_hourly_series(payload)

    def test_mismatched_lengths(self):
        payload = _make_payload()
        payload["hourly"]["temperature_2m"] = [1.0]
        with self.assertRaises(BadGateway):
            open_meteo_client.parse_hourly_series(payload)

    def test_unparseable_time(self):
        payload = _make_payload()
        payload["hourly"]["time"][0] = "yesterday"
        with self.assertRaises(BadGateway):
            open_meteo_client.parse_hourly_series(payload)


if __name__ == "__main__":
    unittest.main()
