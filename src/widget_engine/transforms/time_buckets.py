from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

import numpy as np
import pandas as pd

from widget_engine.config import Aggregation, Granularity
from widget_engine.transforms.series import to_number_or_zero

AGGREGATIONS: dict[str, str] = {
    "sum": "sum",
    "avg": "mean",
    "min": "min",
    "max": "max",
}


@dataclass(frozen=True)
class BucketedSeries:
    x: list[str]
    y: list[float]


def parse_date(value: Any, timezone: str = "UTC") -> pd.Timestamp | None:
    """Parse a date-like cell; numbers are epoch milliseconds.

    Timezone-aware inputs are converted to ``timezone`` and returned naive so
    that bucket keys reflect wall-clock time in that zone.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, np.integer, np.floating)):
        if not math.isfinite(float(value)):
            return None
        try:
            parsed = pd.to_datetime(value, unit="ms", errors="coerce")
        except (TypeError, ValueError, OverflowError):
            return None
    elif isinstance(value, (str, datetime, date, pd.Timestamp, np.datetime64)):
        if isinstance(value, str) and not value.strip():
            return None
        try:
            parsed = pd.to_datetime(value, errors="coerce")
        except (TypeError, ValueError, OverflowError):
            return None
    else:
        return None

    if parsed is None or pd.isna(parsed):
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.tz_convert(timezone).tz_localize(None)
    return parsed


def is_time_axis(values: Sequence[Any], sample_size: int = 5, timezone: str = "UTC") -> bool:
    """True when most of the first non-null values parse as dates."""
    date_count = 0
    check_count = 0
    for value in values:
        if value is None:
            continue
        if check_count >= sample_size:
            break
        if parse_date(value, timezone) is not None:
            date_count += 1
        check_count += 1
    if check_count == 0:
        return False
    return date_count > check_count / 2


def bucket_key(timestamp: pd.Timestamp, granularity: Granularity) -> str:
    year = f"{timestamp.year:04d}"
    month = f"{timestamp.month:02d}"
    day = f"{timestamp.day:02d}"

    if granularity == "hour":
        return f"{year}-{month}-{day} {timestamp.hour:02d}:00"
    if granularity == "day":
        return f"{year}-{month}-{day}"
    if granularity == "week":
        monday = timestamp.normalize() - pd.Timedelta(days=int(timestamp.dayofweek))
        return f"{monday.year:04d}-{monday.month:02d}-{monday.day:02d}"
    if granularity == "month":
        return f"{year}-{month}"
    if granularity == "quarter":
        return f"{year} Q{(timestamp.month - 1) // 3 + 1}"
    if granularity == "year":
        return year
    raise ValueError(f"Unsupported granularity: {granularity}")


def bucket_keys(
    x_values: Sequence[Any],
    granularity: Granularity,
    timezone: str = "UTC",
) -> list[str | None]:
    keys: list[str | None] = []
    for value in x_values:
        parsed = parse_date(value, timezone)
        keys.append(None if parsed is None else bucket_key(parsed, granularity))
    return keys


def aggregate_buckets(
    keys: Sequence[str | None],
    value_columns: Sequence[Sequence[Any]],
    aggregation: Aggregation = "sum",
) -> tuple[list[str], list[list[float]]]:
    """Group parallel value columns by bucket key and reduce each group.

    Rows whose key is ``None`` (unparseable date) are dropped. Keys come back
    sorted lexicographically.
    """
    if aggregation != "count" and aggregation not in AGGREGATIONS:
        raise ValueError(f"Unsupported aggregation: {aggregation}")

    frame = pd.DataFrame({"bucket": pd.Series(list(keys), dtype=object)})
    labels: list[str] = []
    for position, values in enumerate(value_columns):
        label = f"value_{position}"
        frame[label] = [
            to_number_or_zero(values[row]) if row < len(values) else 0.0
            for row in range(len(frame))
        ]
        labels.append(label)

    frame = frame.dropna(subset=["bucket"])
    if frame.empty:
        return [], [[] for _ in labels]

    grouped = frame.groupby("bucket", sort=True)
    if aggregation == "count" or not labels:
        sizes = grouped.size()
        counts = [float(count) for count in sizes.to_numpy()]
        return [str(key) for key in sizes.index], [list(counts) for _ in labels]

    reduced = grouped[labels].agg(AGGREGATIONS[aggregation])
    return (
        [str(key) for key in reduced.index],
        [[float(value) for value in reduced[label].to_numpy()] for label in labels],
    )


def aggregate_by_granularity(
    x_values: Sequence[Any],
    y_values: Sequence[Any],
    granularity: Granularity = "day",
    aggregation: Aggregation = "sum",
    timezone: str = "UTC",
) -> BucketedSeries:
    keys = bucket_keys(x_values, granularity, timezone)
    bucket_x, (bucket_y,) = aggregate_buckets(keys, [y_values], aggregation)
    return BucketedSeries(x=bucket_x, y=bucket_y)

