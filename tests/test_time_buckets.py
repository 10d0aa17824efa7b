from __future__ import annotations

import pandas as pd
import pytest

from widget_engine.transforms.time_buckets import (
    aggregate_buckets,
    aggregate_by_granularity,
    bucket_key,
    bucket_keys,
    is_time_axis,
    parse_date,
)


def test_parse_date_handles_strings_and_epoch_millis() -> None:
    assert parse_date("2024-01-01") == pd.Timestamp("2024-01-01")
    assert parse_date(1704067200000) == pd.Timestamp("2024-01-01")
    assert parse_date("not a date") is None
    assert parse_date("") is None
    assert parse_date(None) is None
    assert parse_date(True) is None
    assert parse_date(float("nan")) is None


def test_parse_date_out_of_range_epoch_is_dropped() -> None:
    assert parse_date(1e20) is None
    assert parse_date(-1e20) is None
    assert parse_date(10**20) is None


def test_parse_date_converts_aware_timestamps_to_settings_zone() -> None:
    utc = parse_date("2024-01-15T03:00:00Z")
    new_york = parse_date("2024-01-15T03:00:00Z", timezone="America/New_York")

    assert utc == pd.Timestamp("2024-01-15 03:00:00")
    assert utc.tzinfo is None
    assert new_york == pd.Timestamp("2024-01-14 22:00:00")
    assert bucket_keys(["2024-01-15T03:00:00Z"], "day", "America/New_York") == ["2024-01-14"]


@pytest.mark.parametrize(
    ("value", "granularity", "expected"),
    [
        ("2024-01-01 13:45", "hour", "2024-01-01 13:00"),
        ("2024-01-01 13:45", "day", "2024-01-01"),
        ("2024-01-03", "week", "2024-01-01"),
        ("2024-01-07", "week", "2024-01-01"),
        ("2024-01-08", "week", "2024-01-08"),
        ("2024-01-01", "week", "2024-01-01"),
        ("2024-05-01", "month", "2024-05"),
        ("2024-05-01", "quarter", "2024 Q2"),
        ("2024-12-31", "quarter", "2024 Q4"),
        ("2024-05-01", "year", "2024"),
    ],
)
def test_bucket_key_formats(value: str, granularity: str, expected: str) -> None:
    assert bucket_key(pd.Timestamp(value), granularity) == expected


def test_week_bucket_crosses_year_boundary() -> None:
    assert bucket_key(pd.Timestamp("2025-01-01"), "week") == "2024-12-30"


def test_bucket_key_rejects_unknown_granularity() -> None:
    with pytest.raises(ValueError, match="Unsupported granularity"):
        bucket_key(pd.Timestamp("2024-01-01"), "decade")


def test_bucket_keys_sort_chronologically() -> None:
    dates = pd.date_range("2023-11-20", "2024-03-10", freq="5D")
    for granularity in ("hour", "day", "week", "month", "quarter", "year"):
        keys = [key for key in bucket_keys(list(dates), granularity) if key is not None]
        assert keys == sorted(keys)


def test_aggregate_buckets_groups_and_drops_missing_keys() -> None:
    keys = ["2024-01-02", "2024-01-01", None, "2024-01-01"]
    values = [[1, 2, 3, 4], [10, "x", 30, None]]

    x, (first, second) = aggregate_buckets(keys, values, "sum")

    assert x == ["2024-01-01", "2024-01-02"]
    assert first == [6.0, 1.0]
    assert second == [0.0, 10.0]


def test_aggregate_buckets_supports_each_aggregation() -> None:
    keys = ["b", "a", "a"]
    values = [[1, 2, 4]]

    assert aggregate_buckets(keys, values, "avg")[1] == [[3.0, 1.0]]
    assert aggregate_buckets(keys, values, "min")[1] == [[2.0, 1.0]]
    assert aggregate_buckets(keys, values, "max")[1] == [[4.0, 1.0]]
    assert aggregate_buckets(keys, values, "count")[1] == [[2.0, 1.0]]


def test_aggregate_buckets_rejects_unknown_aggregation() -> None:
    with pytest.raises(ValueError, match="Unsupported aggregation"):
        aggregate_buckets(["a"], [[1]], "median")


def test_aggregate_buckets_all_unparseable() -> None:
    assert aggregate_buckets([None, None], [[1, 2]], "sum") == ([], [[]])


def test_aggregate_by_granularity_monthly_sum() -> None:
    bucketed = aggregate_by_granularity(
        ["2024-01-15", "2024-02-01", "2024-01-20", "bad"],
        [1, 2, 3, 4],
        granularity="month",
    )

    assert bucketed.x == ["2024-01", "2024-02"]
    assert bucketed.y == [4.0, 2.0]


def test_is_time_axis_parses_values() -> None:
    assert is_time_axis(["2024-01-01", 1704067200000, None]) is True
    assert is_time_axis(["north", "south", "2024-01-01"]) is False
    assert is_time_axis([None]) is False
