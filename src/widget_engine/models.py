from __future__ import annotations

import json
import math
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator


class QueryResult(BaseModel):
    """Tabular query result: ordered column names plus positionally aligned rows."""

    model_config = ConfigDict(frozen=True)

    columns: list[str]
    rows: list[list[Any]]

    @model_validator(mode="after")
    def _check_row_widths(self) -> QueryResult:
        width = len(self.columns)
        for position, row in enumerate(self.rows):
            if len(row) != width:
                raise ValueError(
                    f"row {position} has {len(row)} values but result has {width} columns"
                )
        return self

    def column_index(self, name: str | None) -> int:
        if name is None:
            return -1
        try:
            return self.columns.index(name)
        except ValueError:
            return -1

    def column_values(self, index: int) -> list[Any]:
        if index < 0 or index >= len(self.columns):
            return [None] * len(self.rows)
        return [row[index] for row in self.rows]


def load_query_result(path: Path) -> QueryResult:
    with path.open("r", encoding="utf-8") as handle:
        data = json.load(handle)
    return QueryResult.model_validate(data)


@dataclass(frozen=True)
class ResolvedAxis:
    x_index: int
    x_name: str | None
    y_indices: list[int]
    y_names: list[str | None]
    x_values: list[Any]
    is_time_axis: bool


@dataclass(frozen=True)
class Series:
    name: str | None
    values: list[float | None]


@dataclass(frozen=True)
class FiveNumberSummary:
    min: float
    q1: float
    median: float
    q3: float
    max: float
    outliers: list[float] = field(default_factory=list)

    def box(self) -> list[float]:
        return [self.min, self.q1, self.median, self.q3, self.max]


@dataclass
class HierarchyNode:
    """Tree node for treemap/sunburst data.

    Only leaves carry ``value``. Internal nodes leave it unset and expose the
    sum of their descendant leaves through :meth:`total`.
    """

    name: str
    value: float | None = None
    children: list[HierarchyNode] | None = None

    def total(self) -> float:
        if not self.children:
            return float(self.value or 0.0)
        return float(sum(child.total() for child in self.children))

    def to_dict(self) -> dict[str, Any]:
        node: dict[str, Any] = {"name": self.name}
        if self.value is not None:
            node["value"] = self.value
        if self.children is not None:
            node["children"] = [child.to_dict() for child in self.children]
        return node


@dataclass(frozen=True)
class ChartData:
    chart_type: str
    summary: dict[str, Any]
    payload: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return _jsonable(asdict(self))


def _jsonable(value: Any) -> Any:
    if isinstance(value, dict):
        return {str(key): _jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return value
