"""Interfaces and helpers for forecast data sources."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Protocol, Sequence

from rainwatch.domain import HourlySeries


class ForecastDataSource(Protocol):
    """Interface for anything that can provide hourly forecast data."""

    def fetch_forecast_payload(
        self,
        latitude: float | str,
        longitude: float | str,
        *,
        hourly_vars: Sequence[str] = ...,
        timezone: str = "auto",
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Return the provider's raw JSON body."""
        ...

    def fetch_hourly_series(
        self,
        latitude: float | str,
        longitude: float | str,
        *,
        timezone: str = "auto",
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> HourlySeries:
        """Return the analysis variables as an HourlySeries."""
        ...


@dataclass
class CallableForecastDataSource(ForecastDataSource):
    """Wrap two callables so they can be swapped for different backends."""

    forecast_payload: Callable[..., Dict[str, Any]]
    hourly_series: Callable[..., HourlySeries]

    def fetch_forecast_payload(self, *args, **kwargs) -> Dict[str, Any]:
        """Delegate to the configured raw-payload callable."""
        return self.forecast_payload(*args, **kwargs)

    def fetch_hourly_series(self, *args, **kwargs) -> HourlySeries:
        """Delegate to the configured hourly-series callable."""
        return self.hourly_series(*args, **kwargs)
