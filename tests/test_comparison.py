from __future__ import annotations

import pandas as pd
import pytest

from widget_engine.transforms.comparison import (
    compare_periods,
    compare_single_point,
    period_offset,
)


def test_period_offsets() -> None:
    assert period_offset("yoy") == pd.Timedelta(days=365)
    assert period_offset("mom") == pd.Timedelta(days=30)
    assert period_offset("wow") == pd.Timedelta(days=7)
    assert period_offset("dod") == pd.Timedelta(days=1)
    assert period_offset("custom", 3) == pd.Timedelta(days=3)


def test_custom_offset_requires_periods() -> None:
    with pytest.raises(ValueError):
        period_offset("custom")
    with pytest.raises(ValueError):
        period_offset("none")


def test_yoy_exact_match_fills_changes() -> None:
    points = compare_periods(["2023-01-01", "2024-01-01"], [100, 150], "yoy")

    assert points[0].previous_value is None
    assert points[0].percent_change is None
    assert points[1].date == pd.Timestamp("2024-01-01")
    assert points[1].previous_value == pytest.approx(100.0)
    assert points[1].absolute_change == pytest.approx(50.0)
    assert points[1].percent_change == pytest.approx(50.0)


def test_yoy_without_match_leaves_changes_empty() -> None:
    points = compare_periods(["2023-06-01", "2024-01-01"], [100, 150], "yoy")

    assert all(point.previous_value is None for point in points)
    assert all(point.absolute_change is None for point in points)
    assert all(point.percent_change is None for point in points)


def test_match_within_tolerance() -> None:
    points = compare_periods(["2024-01-01", "2024-01-31T06:00:00"], [80, 100], "mom")

    assert points[1].previous_value == pytest.approx(80.0)
    assert points[1].percent_change == pytest.approx(25.0)


def test_first_versus_nearest_match() -> None:
    dates = ["2024-01-01T02:00:00", "2024-01-01T14:00:00", "2024-01-02T12:00:00"]
    values = [5, 7, 10]

    first = compare_periods(dates, values, "dod", match="first")
    nearest = compare_periods(dates, values, "dod", match="nearest")

    assert first[2].previous_value == pytest.approx(5.0)
    assert nearest[2].previous_value == pytest.approx(7.0)


def test_tolerance_is_configurable() -> None:
    dates = ["2024-01-01", "2024-01-31T06:00:00"]

    points = compare_periods(dates, [80, 100], "mom", tolerance=pd.Timedelta(hours=1))

    assert points[1].previous_value is None


def test_zero_previous_value_has_no_percent_change() -> None:
    points = compare_periods(["2024-01-01", "2024-01-02"], [0, 10], "dod")

    assert points[1].absolute_change == pytest.approx(10.0)
    assert points[1].percent_change is None


def test_unparseable_dates_are_not_compared() -> None:
    points = compare_periods(["soon", "2024-01-02"], [1, 2], "dod")

    assert points[0].date is None
    assert points[0].value == pytest.approx(1.0)
    assert points[0].previous_value is None


def test_single_point_picks_closest_history() -> None:
    comparison = compare_single_point(
        "2024-02-01",
        120,
        [("2024-01-01", 100), {"date": "2024-01-02", "value": 90}],
        "mom",
    )

    assert comparison.previous_date == pd.Timestamp("2024-01-02")
    assert comparison.previous_value == pytest.approx(90.0)
    assert comparison.absolute_change == pytest.approx(30.0)
    assert comparison.percent_change == pytest.approx(100.0 / 3.0)


def test_single_point_without_match() -> None:
    comparison = compare_single_point("2024-02-01", 120, [("2023-01-01", 100)], "mom")

    assert comparison.previous_date is None
    assert comparison.previous_value is None
    assert comparison.absolute_change is None
    assert comparison.percent_change is None
