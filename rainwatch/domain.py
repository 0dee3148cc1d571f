"""Domain vocabulary and response schemas for rain/temperature/wind reports.

The hourly series and analysis window are plain frozen dataclasses used by the
computation core. The assessments and reports are Pydantic models that the
API serializes with camelCase keys. No interpretation logic lives here.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import List, Literal, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class TemperatureStatus(str, Enum):
    """Temperature bracket for a window."""
    MUY_BAJA = "muy_baja"
    BAJA = "baja"
    NORMAL = "normal"
    ALTA = "alta"
    MUY_ALTA = "muy_alta"


class WindStatus(str, Enum):
    """Wind bracket for a window."""
    POCO = "Poco"
    COMUN = "Común"
    MUCHO = "Mucho"


def _as_tuple(values: Optional[Sequence]) -> Optional[tuple]:
    return None if values is None else tuple(values)


@dataclass(frozen=True)
class HourlySeries:
    """Parallel hourly arrays for one location, ordered by time.

    `humidity` and `wind_direction` are optional and are None when the
    provider did not return them. Individual samples may be None where the
    provider sent null.
    """
    time: Tuple[datetime, ...]
    precipitation: Tuple[Optional[float], ...]
    temperature: Tuple[Optional[float], ...]
    wind_speed: Tuple[Optional[float], ...]
    humidity: Optional[Tuple[Optional[float], ...]] = None
    wind_direction: Optional[Tuple[Optional[float], ...]] = None

    def __post_init__(self):
        for name in ("time", "precipitation", "temperature", "wind_speed", "humidity", "wind_direction"):
            object.__setattr__(self, name, _as_tuple(getattr(self, name)))

        expected = len(self.time)
        for name in ("precipitation", "temperature", "wind_speed", "humidity", "wind_direction"):
            values = getattr(self, name)
            if values is not None and len(values) != expected:
                raise ValueError(f"{name} has {len(values)} samples, expected {expected}")

    def __len__(self) -> int:
        return len(self.time)

    def select(self, window: "AnalysisWindow") -> "HourlySeries":
        """Return the sub-series covered by `window`."""
        sl = slice(window.start, window.end)

        def _cut(values):
            return None if values is None else values[sl]

        return HourlySeries(
            time=self.time[sl],
            precipitation=self.precipitation[sl],
            temperature=self.temperature[sl],
            wind_speed=self.wind_speed[sl],
            humidity=_cut(self.humidity),
            wind_direction=_cut(self.wind_direction),
        )

    def precipitation_mm(self) -> List[float]:
        """Precipitation with provider nulls counted as 0 mm."""
        return [float(p) if p is not None else 0.0 for p in self.precipitation]

    def point(self, idx: int) -> "HourPoint":
        """Serialize one sample of the series."""
        return HourPoint(
            time=self.time[idx].astimezone(timezone.utc),
            precipitation=self.precipitation[idx],
            temperature=self.temperature[idx],
            humidity=self.humidity[idx] if self.humidity is not None else None,
            wind_speed=self.wind_speed[idx],
            wind_direction=self.wind_direction[idx] if self.wind_direction is not None else None,
        )


@dataclass(frozen=True)
class AnalysisWindow:
    """Half-open index range [start, end) into an HourlySeries."""
    start: int
    end: int
    anchor: Optional[int] = field(default=None, compare=False)  # target index in specific-instant mode

    def __post_init__(self):
        if not 0 <= self.start < self.end:
            raise ValueError(f"invalid window [{self.start}, {self.end})")

    def __len__(self) -> int:
        return self.end - self.start

    def indices(self) -> range:
        return range(self.start, self.end)


class _CamelModel(BaseModel):
    """Base model serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class TemperatureAssessment(_CamelModel):
    """Temperature summary over a window (deg C)."""
    average: float
    max: float
    min: float
    status: TemperatureStatus


class WindAssessment(_CamelModel):
    """Wind-speed summary over a window."""
    average: float
    max: float
    status: WindStatus


class HourPoint(_CamelModel):
    """A single hourly sample as returned to callers."""
    time: datetime  # UTC
    precipitation: Optional[float] = None
    temperature: Optional[float] = None
    humidity: Optional[float] = None
    wind_speed: Optional[float] = None
    wind_direction: Optional[float] = None


class RainAssessment(_CamelModel):
    """Rain fields shared by both report modes."""
    rain_probability: int
    will_rain: bool
    threshold_mm: float


class SpecificInstantReport(RainAssessment):
    """Report anchored to a caller-supplied instant.

    `precipitation_mm`/`temperature_c` describe the target hour only, while
    `rain_probability`, `temperature` and `wind` summarize the context window
    around it.
    """
    mode: Literal["specific_date"] = "specific_date"
    requested_date: datetime
    precipitation_mm: float
    temperature_c: Optional[float] = None
    temperature: Optional[TemperatureAssessment] = None
    wind: Optional[WindAssessment] = None
    context_hours: List[HourPoint]


class NextHoursReport(RainAssessment):
    """Report for the next N hours from now."""
    mode: Literal["next_hours"] = "next_hours"
    max_precipitation_mm: float
    hours_analyzed: int
    temperature: Optional[TemperatureAssessment] = None
    wind: Optional[WindAssessment] = None
    points: List[HourPoint]
