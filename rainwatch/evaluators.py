"""Deterministic metric evaluators for an hourly window.

Pure functions: each takes plain numeric sequences and returns a number or an
assessment model. Selecting which samples to feed in is the window selector's
job.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Sequence

from rainwatch.domain import (
    TemperatureAssessment,
    TemperatureStatus,
    WindAssessment,
    WindStatus,
)

RAIN_HOUR_MM = 0.1  # a sample above this counts as a rainy hour
HUMIDITY_HIGH_PCT = 80.0
HUMIDITY_MODERATE_PCT = 60.0
HUMIDITY_HIGH_BONUS = 10
HUMIDITY_MODERATE_BONUS = 5

TEMP_VERY_HIGH_C = 35.0
TEMP_HIGH_C = 30.0
TEMP_LOW_C = 5.0
TEMP_VERY_LOW_C = 0.0

WIND_STRONG_MAX = 20.0
WIND_COMMON_AVG = 10.0


def round_half_up(value: float, places: int = 1) -> float:
    """Round half away from zero at `places` decimals (2.25 -> 2.3, -2.25 -> -2.3)."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values)


def _present(values: Optional[Sequence[Optional[float]]]) -> list[float]:
    """Drop provider nulls from a sample sequence."""
    if values is None:
        return []
    return [float(v) for v in values if v is not None]


def humidity_bonus(humidity: Optional[Sequence[Optional[float]]]) -> int:
    """Extra rain likelihood from average relative humidity (0 when absent)."""
    samples = _present(humidity)
    if not samples:
        return 0
    avg = _mean(samples)
    if avg > HUMIDITY_HIGH_PCT:
        return HUMIDITY_HIGH_BONUS
    if avg > HUMIDITY_MODERATE_PCT:
        return HUMIDITY_MODERATE_BONUS
    return 0


def rain_probability(
    precipitation: Sequence[Optional[float]],
    humidity: Optional[Sequence[Optional[float]]],
    hours: int,
) -> int:
    """
    Estimate the chance of rain over a window as an integer percentage.

    The base is the share of hours with more than 0.1 mm, scaled to 0-100,
    plus a humidity bonus (+10 above 80 %, +5 above 60 %). Capped at 100.
    """
    if hours <= 0:
        raise ValueError("hours must be positive")

    rain_hours = sum(1 for p in precipitation if p is not None and p > RAIN_HOUR_MM)
    base = rain_hours / hours * 100
    total = min(100.0, base + humidity_bonus(humidity))
    return int(round_half_up(total, 0))


def classify_temperature(max_c: float, min_c: float) -> TemperatureStatus:
    """First matching bracket wins; extremes are checked before mild brackets."""
    if max_c > TEMP_VERY_HIGH_C:
        return TemperatureStatus.MUY_ALTA
    if min_c < TEMP_VERY_LOW_C:
        return TemperatureStatus.MUY_BAJA
    if max_c > TEMP_HIGH_C:
        return TemperatureStatus.ALTA
    if min_c < TEMP_LOW_C:
        return TemperatureStatus.BAJA
    return TemperatureStatus.NORMAL


def evaluate_temperature(temperatures: Sequence[Optional[float]]) -> TemperatureAssessment:
    """Summarize a temperature series (deg C). Raises ValueError when empty."""
    samples = _present(temperatures)
    if not samples:
        raise ValueError("temperature series is empty")

    hi, lo = max(samples), min(samples)
    return TemperatureAssessment(
        average=round_half_up(_mean(samples)),
        max=round_half_up(hi),
        min=round_half_up(lo),
        status=classify_temperature(hi, lo),
    )


def classify_wind(max_speed: float, avg_speed: float) -> WindStatus:
    if max_speed > WIND_STRONG_MAX:
        return WindStatus.MUCHO
    if avg_speed > WIND_COMMON_AVG:
        return WindStatus.COMUN
    return WindStatus.POCO


def evaluate_wind(speeds: Sequence[Optional[float]]) -> WindAssessment:
    """Summarize a wind-speed series. Raises ValueError when empty."""
    samples = _present(speeds)
    if not samples:
        raise ValueError("wind speed series is empty")

    hi, avg = max(samples), _mean(samples)
    return WindAssessment(
        average=round_half_up(avg),
        max=round_half_up(hi),
        status=classify_wind(hi, avg),
    )
