from __future__ import annotations

import json

import pytest

from widget_engine import render_chart
from widget_engine.config import EngineSettings, LineChartConfig
from widget_engine.models import ChartData


def test_render_chart_from_plain_mappings() -> None:
    chart = render_chart(
        {"columns": ["region", "sales"], "rows": [["north", 3], ["south", 1]]},
        {"chartType": "pie", "xAxis": "region"},
        "bar",
    )

    assert isinstance(chart, ChartData)
    assert chart.chart_type == "bar"
    assert chart.payload["series"][0]["values"] == [3.0, 1.0]


def test_render_chart_accepts_config_models() -> None:
    chart = render_chart(
        {"columns": ["day", "sales"], "rows": [["2024-01-01", 1], ["2024-01-02", 2]]},
        LineChartConfig(y_axis="sales"),
        "line",
    )

    assert chart.payload["x_axis_type"] == "time"


def test_render_chart_without_config_uses_defaults() -> None:
    chart = render_chart({"columns": ["value"], "rows": [[42]]}, None, "gauge")

    assert chart.payload["min"] == 0.0
    assert chart.payload["max"] == 100.0
    assert chart.payload["value"] == pytest.approx(42.0)


def test_render_chart_result_is_json_ready() -> None:
    chart = render_chart(
        {"columns": ["day", "sales"], "rows": [["2023-01-01", 100], ["2024-01-01", 150]]},
        {"periodComparison": {"type": "yoy"}},
        "line",
    )

    json.dumps(chart.to_dict())


def test_render_chart_rejects_unknown_chart_type() -> None:
    with pytest.raises(KeyError):
        render_chart({"columns": [], "rows": []}, {}, "radar")


def test_render_chart_rejects_ragged_rows() -> None:
    with pytest.raises(ValueError):
        render_chart({"columns": ["a", "b"], "rows": [["x"]]}, {}, "bar")


def test_render_chart_buckets_in_settings_timezone() -> None:
    chart = render_chart(
        {"columns": ["ts", "hits"], "rows": [["2024-01-15T03:00:00Z", 1], ["2024-01-15T20:00:00Z", 2]]},
        {"timeSeriesConfig": {"granularity": "day"}},
        "line",
        settings=EngineSettings(timezone="America/New_York"),
    )

    assert chart.payload["x"] == ["2024-01-14", "2024-01-15"]
    assert chart.payload["series"][0]["values"] == [1.0, 2.0]


def test_empty_result_degrades_quietly() -> None:
    chart = render_chart({"columns": [], "rows": []}, {}, "line")

    assert chart.payload["x"] == []
    assert chart.payload["series"] == [{"name": None, "values": [], "stack": None}]
