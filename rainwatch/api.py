"""HTTP API for the rain forecast proxy."""

from typing import Any, Dict, Optional, Union

from fastapi import APIRouter

from .config import settings
from .data_sources import build_data_source
from .domain import NextHoursReport, SpecificInstantReport
from .errors import InternalError, WeatherApiError
from .forecast_service import get_raw_forecast, get_will_it_rain_report, parse_will_it_rain_query
from .logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="rainwatch/api")

router = APIRouter()
DATA_SOURCE = build_data_source(settings)


@router.get("/weather")
def weather(
    lat: Optional[str] = None,
    lon: Optional[str] = None,
    start: Optional[str] = None,
    end: Optional[str] = None,
) -> Dict[str, Any]:
    """Pass the provider's hourly precipitation/temperature payload through."""
    try:
        return get_raw_forecast(
            lat,
            lon,
            start,
            end,
            data_source=DATA_SOURCE,
            timezone=settings.forecast_timezone,
        )
    except WeatherApiError:
        raise
    except Exception as exc:
        logger.exception("Unhandled error in /weather")
        raise InternalError() from exc


@router.get(
    "/willitrain",
    response_model=Union[SpecificInstantReport, NextHoursReport],
)
def will_it_rain(
    lat: Optional[str] = None,
    lon: Optional[str] = None,
    date: Optional[str] = None,
    hours: Optional[str] = None,
    threshold: Optional[str] = None,
):
    """
    Answer whether it will rain at `date`, or over the next `hours` hours.

    Query values arrive as raw strings so malformed numbers fall back to
    defaults instead of failing validation.
    """
    try:
        query = parse_will_it_rain_query(
            lat,
            lon,
            date,
            hours,
            threshold,
            default_hours=settings.default_hours,
            max_hours=settings.max_hours,
            default_threshold_mm=settings.default_threshold_mm,
        )
        return get_will_it_rain_report(
            query,
            data_source=DATA_SOURCE,
            timezone=settings.forecast_timezone,
            context_hours=settings.context_hours,
            max_hours=settings.max_hours,
        )
    except WeatherApiError:
        raise
    except Exception as exc:
        logger.exception("Unhandled error in /willitrain")
        raise InternalError() from exc
