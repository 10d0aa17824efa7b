from __future__ import annotations

import math
from collections.abc import Sequence
from typing import Any

import numpy as np

from widget_engine.models import FiveNumberSummary
from widget_engine.transforms.series import to_number

OUTLIER_IQR_MULTIPLIER = 1.5


def percentile(sorted_values: Sequence[float], p: float) -> float:
    """Linear-interpolation percentile over an ascending sample."""
    n = len(sorted_values)
    if n == 0:
        raise ValueError("percentile of an empty sample is undefined")
    rank = (p / 100.0) * (n - 1)
    lower = math.floor(rank)
    upper = math.ceil(rank)
    if lower == upper:
        return float(sorted_values[lower])
    fraction = rank - lower
    return float(sorted_values[lower]) * (1.0 - fraction) + float(sorted_values[upper]) * fraction


def five_number_summary(values: Sequence[float]) -> FiveNumberSummary:
    ordered = np.sort(np.asarray(values, dtype=float))
    n = ordered.size
    if n == 0:
        return FiveNumberSummary(0.0, 0.0, 0.0, 0.0, 0.0, [])
    if n == 1:
        only = float(ordered[0])
        return FiveNumberSummary(only, only, only, only, only, [])

    q1 = percentile(ordered, 25)
    median = percentile(ordered, 50)
    q3 = percentile(ordered, 75)
    iqr = q3 - q1
    lower_bound = q1 - OUTLIER_IQR_MULTIPLIER * iqr
    upper_bound = q3 + OUTLIER_IQR_MULTIPLIER * iqr

    outside = (ordered < lower_bound) | (ordered > upper_bound)
    inside = ordered[~outside]
    if inside.size:
        whisker_min, whisker_max = float(inside.min()), float(inside.max())
    else:
        whisker_min, whisker_max = q1, q3
    return FiveNumberSummary(
        min=whisker_min,
        q1=q1,
        median=median,
        q3=q3,
        max=whisker_max,
        outliers=[float(value) for value in ordered[outside]],
    )


def group_numeric_values(categories: Sequence[Any], values: Sequence[Any]) -> dict[str, list[float]]:
    """Collect numeric values per category label; non-numeric values are dropped."""
    groups: dict[str, list[float]] = {}
    for category, value in zip(categories, values):
        number = to_number(value)
        if number is None:
            continue
        groups.setdefault(str(category), []).append(number)
    return groups


def summarize_groups(
    categories: Sequence[Any],
    values: Sequence[Any],
) -> dict[str, FiveNumberSummary]:
    groups = group_numeric_values(categories, values)
    return {category: five_number_summary(groups[category]) for category in sorted(groups)}
