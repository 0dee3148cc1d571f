"""Turn query parameters and an hourly forecast into rain/temperature/wind reports."""
from __future__ import annotations

import datetime as dt
import math
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Sequence, TypeVar

from rainwatch.data_sources import ForecastDataSource, PASSTHROUGH_HOURLY_VARS
from rainwatch.domain import (
    HourlySeries,
    NextHoursReport,
    SpecificInstantReport,
)
from rainwatch.errors import BadRequest
from rainwatch.evaluators import evaluate_temperature, evaluate_wind, rain_probability
from rainwatch.window_selector import (
    DEFAULT_CONTEXT_HOURS,
    MAX_HOURS,
    clamp_hours,
    context_window,
    forward_window,
    max_precipitation,
    will_rain,
)
from rainwatch.logging_utils import get_tagged_logger
logger = get_tagged_logger(__name__, tag="forecast_service")

DEFAULT_HOURS = 12
DEFAULT_THRESHOLD_MM = 0.1

_INT_PREFIX = re.compile(r"\s*[+-]?\d+")
_FLOAT_PREFIX = re.compile(r"\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")

T = TypeVar("T")


@dataclass(frozen=True)
class WillItRainQuery:
    """Validated parameters for a will-it-rain request."""
    latitude: float
    longitude: float
    target: Optional[dt.datetime]
    hours: int
    threshold_mm: float

    @property
    def target_day(self) -> Optional[str]:
        """Calendar day of the target as written by the caller (YYYY-MM-DD)."""
        return self.target.date().isoformat() if self.target else None


def parse_hours(raw: Optional[str], *, default: int = DEFAULT_HOURS, max_hours: int = MAX_HOURS) -> int:
    """Leading integer of `raw`, clamped to [1, max_hours]; default when missing, non-numeric or zero."""
    match = _INT_PREFIX.match(raw or "")
    value = int(match.group()) if match else 0
    return clamp_hours(value or default, upper=max_hours)


def parse_threshold(raw: Optional[str], *, default: float = DEFAULT_THRESHOLD_MM) -> float:
    """Leading number of `raw` in mm; default when missing, non-numeric, infinite or not positive."""
    match = _FLOAT_PREFIX.match(raw or "")
    value = float(match.group()) if match else 0.0
    return value if math.isfinite(value) and value > 0 else default


def parse_coordinates(lat: Optional[str], lon: Optional[str]) -> tuple[float, float]:
    """Parse latitude/longitude, raising BadRequest when missing or out of range."""
    if not lat or not lon:
        raise BadRequest("lat and lon are required")
    try:
        latitude, longitude = float(lat), float(lon)
    except ValueError:
        raise BadRequest("lat and lon must be numeric")
    if not (-90.0 <= latitude <= 90.0 and -180.0 <= longitude <= 180.0):
        raise BadRequest("lat and lon out of range")
    return latitude, longitude


def parse_target_instant(raw: Optional[str]) -> Optional[dt.datetime]:
    """Parse an ISO-8601 date or date-time; None when not supplied."""
    if not raw:
        return None
    try:
        return dt.datetime.fromisoformat(raw.strip())
    except ValueError:
        raise BadRequest("invalid date")


def parse_will_it_rain_query(
    lat: Optional[str],
    lon: Optional[str],
    date: Optional[str] = None,
    hours: Optional[str] = None,
    threshold: Optional[str] = None,
    *,
    default_hours: int = DEFAULT_HOURS,
    max_hours: int = MAX_HOURS,
    default_threshold_mm: float = DEFAULT_THRESHOLD_MM,
) -> WillItRainQuery:
    """Validate raw query-string values for the will-it-rain endpoint."""
    hours_num = parse_hours(hours, default=default_hours, max_hours=max_hours)
    threshold_mm = parse_threshold(threshold, default=default_threshold_mm)
    latitude, longitude = parse_coordinates(lat, lon)
    target = parse_target_instant(date)
    return WillItRainQuery(
        latitude=latitude,
        longitude=longitude,
        target=target,
        hours=hours_num,
        threshold_mm=threshold_mm,
    )


def _summarize(evaluator: Callable[[Sequence[Optional[float]]], T], values: Sequence[Optional[float]]) -> Optional[T]:
    """Run an evaluator unless every sample is null."""
    if not any(v is not None for v in values):
        return None
    return evaluator(values)


def analyze_specific_instant(
    series: HourlySeries,
    target: dt.datetime,
    threshold_mm: float = DEFAULT_THRESHOLD_MM,
    *,
    context_hours: int = DEFAULT_CONTEXT_HOURS,
) -> SpecificInstantReport:
    """
    Report on the hour nearest `target` plus the surrounding context window.

    `will_rain`/`precipitation_mm`/`temperature_c` come from the target hour
    alone; the probability and the temperature/wind summaries cover the whole
    window. A naive `target` is taken to be in the series' own timezone.
    """
    if target.tzinfo is None:
        target = target.replace(tzinfo=series.time[0].tzinfo)

    window = context_window(series, target, context_hours=context_hours)
    idx = window.anchor
    sub = series.select(window)

    precip = series.precipitation_mm()[idx]
    report = SpecificInstantReport(
        requested_date=target.astimezone(dt.timezone.utc),
        will_rain=precip >= threshold_mm,
        precipitation_mm=precip,
        temperature_c=series.temperature[idx],
        threshold_mm=threshold_mm,
        rain_probability=rain_probability(sub.precipitation, sub.humidity, len(window)),
        temperature=_summarize(evaluate_temperature, sub.temperature),
        wind=_summarize(evaluate_wind, sub.wind_speed),
        context_hours=[series.point(i) for i in window.indices()],
    )
    logger.info(
        "Analyzed specific instant",
        extra={
            "target": target.isoformat(),
            "matched": series.time[idx].isoformat(),
            "window": [window.start, window.end],
            "will_rain": report.will_rain,
        },
    )
    return report


def analyze_next_hours(
    series: HourlySeries,
    now: dt.datetime,
    hours: int = DEFAULT_HOURS,
    threshold_mm: float = DEFAULT_THRESHOLD_MM,
    *,
    max_hours: int = MAX_HOURS,
) -> NextHoursReport:
    """Report on up to `hours` samples starting at the first one at or after `now`."""
    window = forward_window(series, now, hours, max_hours=max_hours)
    sub = series.select(window)
    precip = sub.precipitation_mm()

    report = NextHoursReport(
        will_rain=will_rain(precip, threshold_mm),
        max_precipitation_mm=max_precipitation(precip),
        hours_analyzed=len(window),
        threshold_mm=threshold_mm,
        rain_probability=rain_probability(precip, sub.humidity, len(window)),
        temperature=_summarize(evaluate_temperature, sub.temperature),
        wind=_summarize(evaluate_wind, sub.wind_speed),
        points=[series.point(i) for i in window.indices()],
    )
    logger.info(
        "Analyzed next hours",
        extra={
            "now": now.isoformat(),
            "window": [window.start, window.end],
            "will_rain": report.will_rain,
        },
    )
    return report


def get_will_it_rain_report(
    query: WillItRainQuery,
    *,
    data_source: ForecastDataSource,
    timezone: str = "auto",
    context_hours: int = DEFAULT_CONTEXT_HOURS,
    max_hours: int = MAX_HOURS,
    now: Optional[dt.datetime] = None,
) -> SpecificInstantReport | NextHoursReport:
    """
    Fetch the hourly series for `query` and build the matching report.

    With a target instant only that calendar day is requested; otherwise the
    provider's default forecast range is used and analysis starts at `now`.
    """
    day = query.target_day
    logger.info(
        "Fetching hourly series",
        extra={
            "latitude": query.latitude,
            "longitude": query.longitude,
            "day": day,
            "hours": query.hours,
            "threshold_mm": query.threshold_mm,
        },
    )
    series = data_source.fetch_hourly_series(
        query.latitude,
        query.longitude,
        timezone=timezone,
        start_date=day,
        end_date=day,
    )

    if query.target is not None:
        return analyze_specific_instant(
            series,
            query.target,
            query.threshold_mm,
            context_hours=context_hours,
        )

    now = now or dt.datetime.now(tz=dt.timezone.utc)
    return analyze_next_hours(series, now, query.hours, query.threshold_mm, max_hours=max_hours)


def get_raw_forecast(
    lat: Optional[str],
    lon: Optional[str],
    start: Optional[str] = None,
    end: Optional[str] = None,
    *,
    data_source: ForecastDataSource,
    timezone: str = "auto",
) -> Dict[str, Any]:
    """Proxy the provider's hourly precipitation/temperature payload unchanged."""
    latitude, longitude = parse_coordinates(lat, lon)
    logger.info(
        "Fetching raw forecast",
        extra={"latitude": latitude, "longitude": longitude, "start": start, "end": end},
    )
    return data_source.fetch_forecast_payload(
        latitude,
        longitude,
        hourly_vars=PASSTHROUGH_HOURLY_VARS,
        timezone=timezone,
        start_date=start,
        end_date=end,
    )
