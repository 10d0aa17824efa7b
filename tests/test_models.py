from __future__ import annotations

import json
from datetime import date
from pathlib import Path

import pandas as pd
import pytest
from pydantic import ValidationError

from widget_engine.models import (
    ChartData,
    FiveNumberSummary,
    HierarchyNode,
    QueryResult,
    load_query_result,
)


def test_query_result_rejects_ragged_rows() -> None:
    with pytest.raises(ValidationError, match="row 1 has 1 values"):
        QueryResult(columns=["a", "b"], rows=[[1, 2], [3]])


def test_ragged_rows_are_value_errors() -> None:
    with pytest.raises(ValueError):
        QueryResult.model_validate({"columns": ["a"], "rows": [[1, 2]]})


def test_column_lookup_degrades_to_missing() -> None:
    result = QueryResult(columns=["day", "sales"], rows=[["2024-01-01", 5], ["2024-01-02", 7]])

    assert result.column_index("sales") == 1
    assert result.column_index("missing") == -1
    assert result.column_index(None) == -1
    assert result.column_values(1) == [5, 7]
    assert result.column_values(-1) == [None, None]
    assert result.column_values(9) == [None, None]


def test_load_query_result_reads_json(tmp_path: Path) -> None:
    path = tmp_path / "result.json"
    path.write_text(json.dumps({"columns": ["x", "y"], "rows": [["a", 1]]}), encoding="utf-8")

    result = load_query_result(path)

    assert result.columns == ["x", "y"]
    assert result.rows == [["a", 1]]


def test_hierarchy_node_total_sums_leaves() -> None:
    node = HierarchyNode(
        name="Electronics",
        children=[HierarchyNode("Phones", 500.0), HierarchyNode("Laptops", 300.0)],
    )

    assert node.value is None
    assert node.total() == pytest.approx(800.0)
    assert node.to_dict() == {
        "name": "Electronics",
        "children": [{"name": "Phones", "value": 500.0}, {"name": "Laptops", "value": 300.0}],
    }


def test_five_number_summary_box_order() -> None:
    summary = FiveNumberSummary(1.0, 2.0, 3.0, 4.0, 5.0)

    assert summary.box() == [1.0, 2.0, 3.0, 4.0, 5.0]
    assert summary.outliers == []


def test_chart_data_to_dict_serializes_dates() -> None:
    chart = ChartData(
        chart_type="line",
        summary={"rows": 1},
        payload={"points": [(pd.Timestamp("2024-01-01"), 1.0)], "day": date(2024, 2, 1)},
    )

    data = chart.to_dict()

    assert data["payload"]["points"] == [["2024-01-01T00:00:00", 1.0]]
    assert data["payload"]["day"] == "2024-02-01"
    json.dumps(data)


def test_chart_data_to_dict_nulls_non_finite_numbers() -> None:
    chart = ChartData(
        chart_type="bar",
        summary={},
        payload={"values": [1.0, float("inf"), float("-inf"), float("nan")]},
    )

    data = chart.to_dict()

    assert data["payload"]["values"] == [1.0, None, None, None]
    assert "Infinity" not in json.dumps(data)
