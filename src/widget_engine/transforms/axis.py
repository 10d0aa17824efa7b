from __future__ import annotations

import re
from collections.abc import Sequence
from datetime import date
from typing import Any

import numpy as np

from widget_engine.models import QueryResult, ResolvedAxis

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}|^\d{2}/\d{2}/\d{4}")
TIME_AXIS_SAMPLE_SIZE = 5


def is_date_like(value: Any) -> bool:
    # datetime and pandas.Timestamp are both date subclasses
    if isinstance(value, (date, np.datetime64)):
        return True
    if isinstance(value, str):
        return DATE_PATTERN.match(value) is not None
    return False


def detect_time_axis(values: Sequence[Any], sample_size: int = TIME_AXIS_SAMPLE_SIZE) -> bool:
    date_like = 0
    checked = 0
    for value in values:
        if value is None:
            continue
        if checked >= sample_size:
            break
        if is_date_like(value):
            date_like += 1
        checked += 1
    if checked == 0:
        return False
    return date_like > checked / 2


def resolve_axis(
    result: QueryResult,
    x_column: str | None = None,
    y_columns: str | Sequence[str] | None = None,
    sample_size: int = TIME_AXIS_SAMPLE_SIZE,
) -> ResolvedAxis:
    """Map configured axis names onto column positions.

    Absent names resolve to index ``-1``; downstream code reads those as
    all-``None`` columns instead of failing.
    """
    columns = result.columns
    x_name = x_column or (columns[0] if columns else None)
    x_index = result.column_index(x_name)

    if isinstance(y_columns, str) and y_columns:
        y_names: list[str | None] = [y_columns]
    elif y_columns and not isinstance(y_columns, str):
        y_names = list(y_columns)
    else:
        y_names = [columns[1] if len(columns) > 1 else None]
    y_indices = [result.column_index(name) for name in y_names]

    x_values = result.column_values(x_index)
    return ResolvedAxis(
        x_index=x_index,
        x_name=x_name,
        y_indices=y_indices,
        y_names=y_names,
        x_values=x_values,
        is_time_axis=detect_time_axis(x_values, sample_size),
    )
