"""Helpers for fetching hourly forecasts from the Open-Meteo API."""
from __future__ import annotations

import datetime as dt
from typing import Any, Dict, List, Optional, Sequence
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import requests

from rainwatch.domain import HourlySeries
from rainwatch.errors import BadGateway, UpstreamError
from rainwatch.logging_utils import get_tagged_logger
logger = get_tagged_logger(__name__, tag="open_meteo_client")

session = requests.Session()

OPEN_METEO_WEATHER_URL = "https://api.open-meteo.com/v1/forecast"

# Variables requested by the raw passthrough endpoint.
PASSTHROUGH_HOURLY_VARS = ["precipitation", "temperature_2m"]

# Variables requested for rain/temperature/wind analysis.
ANALYSIS_HOURLY_VARS = [
    "precipitation",
    "temperature_2m",
    "relative_humidity_2m",
    "wind_speed_10m",
    "wind_direction_10m",
]

REQUIRED_HOURLY_FIELDS = ("time", "precipitation", "temperature_2m", "wind_speed_10m")

EXPECTED_HOURLY_UNITS = {
    "precipitation": "mm",
    "temperature_2m": "°C",
    "relative_humidity_2m": "%",
    "wind_speed_10m": "km/h",
    "wind_direction_10m": "°",
}

# Acceptable alternative spellings that should not trigger warnings.
ALLOWED_UNIT_SYNONYMS = {
    "relative_humidity_2m": {"%", "percent"},
    "wind_direction_10m": {"°", "deg", "degrees"},
}


def _warn_on_unexpected_units(units: Optional[dict], *, context: str):
    """Log a warning if Open-Meteo returns units the evaluators do not assume."""
    if not units:
        return
    for field, expected in EXPECTED_HOURLY_UNITS.items():
        actual = units.get(field)
        if actual and actual != expected and actual not in ALLOWED_UNIT_SYNONYMS.get(field, set()):
            logger.warning(
                "Unexpected Open-Meteo unit",
                extra={"context": context, "field": field, "unit": actual, "expected": expected},
            )


def build_forecast_params(
    latitude: float | str,
    longitude: float | str,
    hourly_vars: Sequence[str],
    *,
    timezone: str = "auto",
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
) -> Dict[str, Any]:
    """Build the query-string parameters for a forecast request."""
    params: Dict[str, Any] = {
        "latitude": latitude,
        "longitude": longitude,
        "hourly": ",".join(hourly_vars),
        "timezone": timezone,
    }
    if start_date:
        params["start_date"] = start_date
    if end_date:
        params["end_date"] = end_date
    return params


def fetch_forecast_payload(
    latitude: float | str,
    longitude: float | str,
    *,
    hourly_vars: Sequence[str] = PASSTHROUGH_HOURLY_VARS,
    timezone: str = "auto",
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    base_url: str = OPEN_METEO_WEATHER_URL,
    timeout: Optional[float] = None,
) -> Dict[str, Any]:
    """
    Request the forecast and return the decoded JSON body as-is.

    Raises UpstreamError carrying the provider status on a non-2xx response.
    Transport failures (DNS, connection reset, timeout) propagate unchanged.
    """
    params = build_forecast_params(
        latitude,
        longitude,
        hourly_vars,
        timezone=timezone,
        start_date=start_date,
        end_date=end_date,
    )
    logger.debug("Requesting Open-Meteo forecast", extra={"params": params})

    resp = session.get(base_url, params=params, timeout=timeout)
    if not resp.ok:
        logger.warning(
            "Open-Meteo returned an error status",
            extra={"status_code": resp.status_code, "params": params},
        )
        raise UpstreamError(resp.status_code)
    return resp.json()


def resolve_zone(payload: Dict[str, Any]) -> dt.tzinfo:
    """Timezone of the local timestamps in a forecast payload."""
    name = payload.get("timezone")
    if name:
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError):
            logger.debug("Unknown timezone name in payload; using utc_offset_seconds", extra={"timezone": name})
    offset = payload.get("utc_offset_seconds") or 0
    return dt.timezone(dt.timedelta(seconds=int(offset)))


def _iso_to_dt_with_tz(s: str, tz: dt.tzinfo) -> dt.datetime:
    """Interpret an Open-Meteo local time string as being in `tz`."""
    parsed = dt.datetime.fromisoformat(s)
    if parsed.tzinfo is not None:
        return parsed
    return parsed.replace(tzinfo=tz)


def _optional_series(hourly: Dict[str, Any], key: str) -> Optional[List[Optional[float]]]:
    values = hourly.get(key)
    return list(values) if isinstance(values, list) else None


def parse_hourly_series(payload: Any) -> HourlySeries:
    """
    Convert a forecast payload into an HourlySeries.

    Raises BadGateway when the hourly block, one of the required arrays, or
    the equal-length guarantee is missing.
    """
    hourly = payload.get("hourly") if isinstance(payload, dict) else None
    if not isinstance(hourly, dict):
        raise BadGateway()
    for key in REQUIRED_HOURLY_FIELDS:
        if not isinstance(hourly.get(key), list):
            logger.warning("Open-Meteo payload missing hourly field", extra={"field": key})
            raise BadGateway()
    if not hourly["time"]:
        logger.warning("Open-Meteo payload has an empty hourly time array")
        raise BadGateway()

    _warn_on_unexpected_units(payload.get("hourly_units"), context="weather_hourly")
    tz = resolve_zone(payload)

    try:
        return HourlySeries(
            time=[_iso_to_dt_with_tz(t, tz) for t in hourly["time"]],
            precipitation=hourly["precipitation"],
            temperature=hourly["temperature_2m"],
            wind_speed=hourly["wind_speed_10m"],
            humidity=_optional_series(hourly, "relative_humidity_2m"),
            wind_direction=_optional_series(hourly, "wind_direction_10m"),
        )
    except (TypeError, ValueError) as exc:
        logger.warning("Malformed Open-Meteo hourly block", extra={"error": str(exc)})
        raise BadGateway() from exc


def fetch_hourly_series(
    latitude: float | str,
    longitude: float | str,
    *,
    timezone: str = "auto",
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    base_url: str = OPEN_METEO_WEATHER_URL,
    timeout: Optional[float] = None,
) -> HourlySeries:
    """Fetch the analysis variables and return them as an HourlySeries."""
    payload = fetch_forecast_payload(
        latitude,
        longitude,
        hourly_vars=ANALYSIS_HOURLY_VARS,
        timezone=timezone,
        start_date=start_date,
        end_date=end_date,
        base_url=base_url,
        timeout=timeout,
    )
    series = parse_hourly_series(payload)
    logger.debug("Parsed hourly series", extra={"samples": len(series)})
    return series
