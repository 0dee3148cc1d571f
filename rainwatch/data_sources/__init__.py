"""Data source factories for plugging different forecast backends."""

from .base import CallableForecastDataSource, ForecastDataSource
from .factory import build_data_source
from .open_meteo_client import (
    ANALYSIS_HOURLY_VARS,
    PASSTHROUGH_HOURLY_VARS,
    fetch_forecast_payload,
    fetch_hourly_series,
    parse_hourly_series,
)

__all__ = [
    "build_data_source",
    "ForecastDataSource",
    "CallableForecastDataSource",
    "ANALYSIS_HOURLY_VARS",
    "PASSTHROUGH_HOURLY_VARS",
    "fetch_forecast_payload",
    "fetch_hourly_series",
    "parse_hourly_series",
]
