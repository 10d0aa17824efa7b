from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

import pandas as pd

from widget_engine.config import Aggregation
from widget_engine.transforms.series import to_number_or_zero

PANDAS_AGGREGATIONS: dict[str, str] = {
    "sum": "sum",
    "count": "count",
    "avg": "mean",
    "min": "min",
    "max": "max",
}


@dataclass(frozen=True)
class PivotTable:
    row_keys: list[str]
    col_keys: list[str]
    cells: dict[str, dict[str, float]]
    row_totals: dict[str, float]
    col_totals: dict[str, float]
    grand_total: float
    aggregation: str


def _label(value: Any) -> str:
    return "" if value is None else str(value)


def _cell(row: Sequence[Any], index: int) -> Any:
    return row[index] if 0 <= index < len(row) else None


def build_pivot(
    rows: Sequence[Sequence[Any]],
    row_index: int,
    col_index: int,
    value_index: int,
    aggregation: Aggregation = "sum",
) -> PivotTable:
    """Cross-tabulate rows; totals aggregate the raw values, not the cell results."""
    how = PANDAS_AGGREGATIONS.get(aggregation)
    if how is None:
        raise ValueError(f"Unsupported aggregation: {aggregation}")

    frame = pd.DataFrame(
        {
            "row_key": [_label(_cell(row, row_index)) for row in rows],
            "col_key": [_label(_cell(row, col_index)) for row in rows],
            "value": [to_number_or_zero(_cell(row, value_index)) for row in rows],
        }
    )
    if frame.empty:
        return PivotTable([], [], {}, {}, {}, 0.0, aggregation)

    row_keys = sorted(frame["row_key"].unique())
    col_keys = sorted(frame["col_key"].unique())
    table = (
        frame.pivot_table(index="row_key", columns="col_key", values="value", aggfunc=how)
        .reindex(index=row_keys, columns=col_keys)
        .fillna(0.0)
    )
    cells = {
        row_key: {col_key: float(table.at[row_key, col_key]) for col_key in col_keys}
        for row_key in row_keys
    }
    row_totals = frame.groupby("row_key")["value"].agg(how)
    col_totals = frame.groupby("col_key")["value"].agg(how)
    return PivotTable(
        row_keys=row_keys,
        col_keys=col_keys,
        cells=cells,
        row_totals={key: float(row_totals[key]) for key in row_keys},
        col_totals={key: float(col_totals[key]) for key in col_keys},
        grand_total=float(frame["value"].agg(how)),
        aggregation=aggregation,
    )
