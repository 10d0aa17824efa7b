from __future__ import annotations

import math
from typing import Any

from widget_engine.models import QueryResult, ResolvedAxis, Series


def to_number(value: Any) -> float | None:
    """Coerce a cell to float, returning ``None`` for anything non-numeric."""
    if value is None:
        return None
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        try:
            number = float(value)
        except (TypeError, ValueError):
            return None
    if math.isnan(number):
        return None
    return number


def to_number_or_zero(value: Any) -> float:
    number = to_number(value)
    if number is None or math.isinf(number):
        return 0.0
    return number


def extract_series(result: QueryResult, axis: ResolvedAxis) -> list[Series]:
    return [
        Series(
            name=name,
            values=[to_number(value) for value in result.column_values(index)],
        )
        for index, name in zip(axis.y_indices, axis.y_names)
    ]
