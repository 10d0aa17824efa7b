from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

import pandas as pd

from widget_engine.config import MatchStrategy, PeriodComparisonType
from widget_engine.transforms.series import to_number
from widget_engine.transforms.time_buckets import parse_date

DEFAULT_TOLERANCE = pd.Timedelta(hours=12)

PERIOD_OFFSET_DAYS: dict[str, int] = {
    "yoy": 365,
    "mom": 30,
    "wow": 7,
    "dod": 1,
}


@dataclass(frozen=True)
class ComparisonPoint:
    date: pd.Timestamp | None
    value: float | None
    previous_value: float | None
    absolute_change: float | None
    percent_change: float | None


@dataclass(frozen=True)
class SinglePointComparison:
    previous_date: pd.Timestamp | None
    previous_value: float | None
    absolute_change: float | None
    percent_change: float | None


def period_offset(comparison: PeriodComparisonType, custom_periods: int | None = None) -> pd.Timedelta:
    if comparison == "custom":
        if custom_periods is None or custom_periods < 1:
            raise ValueError("custom comparison requires custom_periods >= 1")
        return pd.Timedelta(days=int(custom_periods))
    days = PERIOD_OFFSET_DAYS.get(comparison)
    if days is None:
        raise ValueError(f"Unsupported comparison type: {comparison}")
    return pd.Timedelta(days=days)


def _changes(current: float | None, previous: float | None) -> tuple[float | None, float | None]:
    if current is None or previous is None:
        return None, None
    absolute = current - previous
    if previous == 0:
        return absolute, None
    return absolute, absolute / previous * 100.0


def _match_within_tolerance(
    history: Mapping[pd.Timestamp, float | None],
    target: pd.Timestamp,
    tolerance: pd.Timedelta,
    match: MatchStrategy,
) -> pd.Timestamp | None:
    best: pd.Timestamp | None = None
    best_distance: pd.Timedelta | None = None
    for candidate in history:
        distance = abs(candidate - target)
        if distance > tolerance:
            continue
        if match == "first":
            return candidate
        if best_distance is None or distance < best_distance:
            best, best_distance = candidate, distance
    return best


def compare_periods(
    dates: Sequence[Any],
    values: Sequence[Any],
    comparison: PeriodComparisonType,
    custom_periods: int | None = None,
    match: MatchStrategy = "first",
    tolerance: pd.Timedelta = DEFAULT_TOLERANCE,
    timezone: str = "UTC",
) -> list[ComparisonPoint]:
    """Pair every row with the value one comparison period earlier.

    An exact timestamp hit wins. Otherwise ``match="first"`` takes the first
    row (in input order) within ``tolerance`` of the target, which is not
    necessarily the closest one; ``match="nearest"`` takes the closest.
    """
    offset = period_offset(comparison, custom_periods)
    parsed = [parse_date(value, timezone) for value in dates]
    numbers = [to_number(values[row]) if row < len(values) else None for row in range(len(dates))]

    history: dict[pd.Timestamp, float | None] = {}
    for timestamp, number in zip(parsed, numbers):
        if timestamp is not None:
            history[timestamp] = number

    points: list[ComparisonPoint] = []
    for timestamp, number in zip(parsed, numbers):
        if timestamp is None:
            points.append(ComparisonPoint(None, number, None, None, None))
            continue
        target = timestamp - offset
        matched = target if target in history else None
        if matched is None:
            matched = _match_within_tolerance(history, target, tolerance, match)
        previous = history[matched] if matched is not None else None
        absolute, percent = _changes(number, previous)
        points.append(ComparisonPoint(timestamp, number, previous, absolute, percent))
    return points


def _history_pairs(history: Iterable[Any]) -> Iterable[tuple[Any, Any]]:
    for item in history:
        if isinstance(item, Mapping):
            yield item.get("date"), item.get("value")
        else:
            date_value, value = item
            yield date_value, value


def compare_single_point(
    current_date: Any,
    current_value: Any,
    history: Iterable[Any],
    comparison: PeriodComparisonType,
    custom_periods: int | None = None,
    tolerance: pd.Timedelta = DEFAULT_TOLERANCE,
    timezone: str = "UTC",
) -> SinglePointComparison:
    """Compare one KPI value to the historical point closest to one period earlier."""
    empty = SinglePointComparison(None, None, None, None)
    current_timestamp = parse_date(current_date, timezone)
    if current_timestamp is None:
        return empty

    target = current_timestamp - period_offset(comparison, custom_periods)
    best_date: pd.Timestamp | None = None
    best_value: float | None = None
    best_distance: pd.Timedelta | None = None
    for raw_date, raw_value in _history_pairs(history):
        timestamp = parse_date(raw_date, timezone)
        if timestamp is None:
            continue
        distance = abs(timestamp - target)
        if distance > tolerance:
            continue
        if best_distance is None or distance < best_distance:
            best_date, best_value, best_distance = timestamp, to_number(raw_value), distance

    if best_date is None:
        return empty
    absolute, percent = _changes(to_number(current_value), best_value)
    return SinglePointComparison(best_date, best_value, absolute, percent)
