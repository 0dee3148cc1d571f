"""Pick the slice of an hourly series that a report should summarize.

Two modes:
- specific instant: the sample closest to a target time, plus up to
  `context_hours` samples on each side;
- forward: the first sample at or after "now" and the following hours.

Series from the provider hold a few hundred samples at most, so both searches
are plain linear scans. Ties go to the earliest sample.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from rainwatch.domain import AnalysisWindow, HourlySeries

DEFAULT_CONTEXT_HOURS = 6
MIN_HOURS = 1
MAX_HOURS = 168


def nearest_index(times: Sequence[datetime], target: datetime) -> int:
    """Index of the sample closest to `target` (exact match if there is one)."""
    if not times:
        raise ValueError("cannot search an empty series")

    best_idx, best_diff = 0, None
    for i, t in enumerate(times):
        diff = abs((t - target).total_seconds())
        if diff == 0:
            return i
        if best_diff is None or diff < best_diff:
            best_idx, best_diff = i, diff
    return best_idx


def first_index_at_or_after(times: Sequence[datetime], reference: datetime) -> int:
    """Index of the first sample at or after `reference`, else the last sample."""
    if not times:
        raise ValueError("cannot search an empty series")

    for i, t in enumerate(times):
        if t >= reference:
            return i
    return len(times) - 1


def clamp_hours(hours: int, *, lower: int = MIN_HOURS, upper: int = MAX_HOURS) -> int:
    return max(lower, min(upper, hours))


def context_window(
    series: HourlySeries,
    target: datetime,
    *,
    context_hours: int = DEFAULT_CONTEXT_HOURS,
) -> AnalysisWindow:
    """Window around the sample nearest `target`, clipped to the series bounds."""
    idx = nearest_index(series.time, target)
    start = max(0, idx - context_hours)
    end = min(len(series), idx + context_hours + 1)
    return AnalysisWindow(start=start, end=end, anchor=idx)


def forward_window(
    series: HourlySeries,
    reference: datetime,
    hours: int,
    *,
    max_hours: int = MAX_HOURS,
) -> AnalysisWindow:
    """Window of up to `hours` samples starting at the first one >= `reference`."""
    start = first_index_at_or_after(series.time, reference)
    end = min(len(series), start + clamp_hours(hours, upper=max_hours))
    return AnalysisWindow(start=start, end=end)


def will_rain(precipitation: Sequence[Optional[float]], threshold_mm: float) -> bool:
    """True if any sample reaches the threshold."""
    return any(p is not None and p >= threshold_mm for p in precipitation)


def max_precipitation(precipitation: Sequence[Optional[float]]) -> float:
    """Largest sample in mm; 0 for an all-dry or all-null window."""
    return max((p for p in precipitation if p is not None), default=0.0)
