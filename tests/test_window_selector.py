import datetime as dt

import pytest

from rainwatch.domain import AnalysisWindow, HourlySeries
from rainwatch.window_selector import (
    clamp_hours,
    context_window,
    first_index_at_or_after,
    forward_window,
    max_precipitation,
    nearest_index,
    will_rain,
)

UTC = dt.timezone.utc
BASE = dt.datetime(2024, 5, 1, 0, 0, tzinfo=UTC)


def _series(n: int = 24) -> HourlySeries:
    return HourlySeries(
        time=[BASE + dt.timedelta(hours=i) for i in range(n)],
        precipitation=[0.0] * n,
        temperature=[15.0] * n,
        wind_speed=[5.0] * n,
    )


def test_nearest_index_exact_match():
    times = _series().time
    idx = nearest_index(times, BASE + dt.timedelta(hours=5))
    assert idx == 5
    assert times[idx] - (BASE + dt.timedelta(hours=5)) == dt.timedelta(0)


@pytest.mark.parametrize(
    "offset, expected",
    [
        (dt.timedelta(hours=5, minutes=20), 5),
        (dt.timedelta(hours=5, minutes=40), 6),
        (dt.timedelta(hours=5, minutes=30), 5),  # tie goes to the earlier sample
        (dt.timedelta(hours=-3), 0),
        (dt.timedelta(days=3), 23),
    ],
)
def test_nearest_index_minimizes_difference(offset, expected):
    times = _series().time
    target = BASE + offset
    idx = nearest_index(times, target)
    assert idx == expected
    best = min(abs((t - target).total_seconds()) for t in times)
    assert abs((times[idx] - target).total_seconds()) == best


def test_nearest_index_empty_series():
    with pytest.raises(ValueError):
        nearest_index([], BASE)


def test_first_index_at_or_after():
    times = _series().time
    assert first_index_at_or_after(times, BASE - dt.timedelta(hours=2)) == 0
    assert first_index_at_or_after(times, BASE + dt.timedelta(hours=3, minutes=30)) == 4
    assert first_index_at_or_after(times, BASE + dt.timedelta(hours=7)) == 7
    # past the end falls back to the last sample
    assert first_index_at_or_after(times, BASE + dt.timedelta(days=5)) == 23


def test_context_window_clipped_at_start():
    window = context_window(_series(), BASE)
    assert (window.start, window.end, window.anchor) == (0, 7, 0)


def test_context_window_clipped_at_end():
    series = _series()
    window = context_window(series, BASE + dt.timedelta(hours=23))
    assert (window.start, window.end, window.anchor) == (17, 24, 23)
    assert window.end == len(series)


def test_context_window_full_width():
    window = context_window(_series(), BASE + dt.timedelta(hours=10))
    assert (window.start, window.end) == (4, 17)
    assert len(window) == 13


def test_context_window_custom_width():
    window = context_window(_series(), BASE + dt.timedelta(hours=10), context_hours=2)
    assert (window.start, window.end) == (8, 13)


def test_forward_window_basic():
    window = forward_window(_series(), BASE + dt.timedelta(minutes=30), 12)
    assert (window.start, window.end) == (1, 13)


def test_forward_window_short_series():
    window = forward_window(_series(5), BASE, 12)
    assert (window.start, window.end) == (0, 5)


def test_forward_window_after_series_uses_last_sample():
    window = forward_window(_series(), BASE + dt.timedelta(days=2), 12)
    assert (window.start, window.end) == (23, 24)


def test_forward_window_clamps_hours():
    series = _series(200)
    assert len(forward_window(series, BASE, 500)) == 168
    assert len(forward_window(series, BASE, 0)) == 1


def test_forward_window_honours_configured_cap():
    series = _series(240)
    assert len(forward_window(series, BASE, 200, max_hours=300)) == 200
    assert len(forward_window(series, BASE, 200, max_hours=24)) == 24


def test_clamp_hours():
    assert clamp_hours(-4) == 1
    assert clamp_hours(12) == 12
    assert clamp_hours(1000) == 168


def test_will_rain_matches_max_precipitation():
    for precip, threshold in [([0.0, 0.05, 0.1], 0.1), ([0.0, 0.09], 0.1), ([0.0, 2.0], 1.5), ([None, 0.0], 0.1)]:
        assert will_rain(precip, threshold) == (max_precipitation(precip) >= threshold)


def test_max_precipitation_of_dry_window():
    assert max_precipitation([]) == 0.0
    assert max_precipitation([None, None]) == 0.0
    assert max_precipitation([0.0, 0.5, 0.2]) == 0.5


def test_analysis_window_rejects_empty_range():
    with pytest.raises(ValueError):
        AnalysisWindow(start=3, end=3)
