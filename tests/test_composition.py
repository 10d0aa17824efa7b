from __future__ import annotations

import pytest

from widget_engine.builders.composition import (
    DonutChartBuilder,
    FunnelChartBuilder,
    PieChartBuilder,
    SunburstChartBuilder,
    TreemapChartBuilder,
)
from widget_engine.config import resolve_chart_config
from widget_engine.models import QueryResult


def _products() -> QueryResult:
    return QueryResult(
        columns=["category", "product", "sales"],
        rows=[
            ["Electronics", "Phones", 500],
            ["Electronics", "Laptops", 300],
            ["Garden", "Hoses", 50],
        ],
    )


def test_pie_slices() -> None:
    result = QueryResult(columns=["region", "sales"], rows=[["north", 5], [None, "3"]])

    chart = PieChartBuilder().build(result, resolve_chart_config("pie"))

    assert chart.payload["slices"] == [
        {"name": "north", "value": 5.0},
        {"name": "", "value": 3.0},
    ]
    assert chart.payload["total"] == pytest.approx(8.0)


def test_donut_uses_configured_columns() -> None:
    chart = DonutChartBuilder().build(
        _products(), resolve_chart_config("donut", {"xAxis": "product", "yAxis": "sales"})
    )

    assert chart.chart_type == "donut"
    assert [item["name"] for item in chart.payload["slices"]] == ["Phones", "Laptops", "Hoses"]


def test_funnel_sorts_descending_with_percent_of_max() -> None:
    result = QueryResult(
        columns=["stage", "users"],
        rows=[["visit", 100], ["signup", 40], ["buy", 10], ["cart", 60]],
    )

    chart = FunnelChartBuilder().build(result, resolve_chart_config("funnel"))

    stages = chart.payload["stages"]
    assert [stage["name"] for stage in stages] == ["visit", "cart", "signup", "buy"]
    assert [stage["percent_of_max"] for stage in stages] == pytest.approx([100.0, 60.0, 40.0, 10.0])
    assert chart.payload["max_value"] == pytest.approx(100.0)


def test_funnel_keeps_query_order_when_unsorted() -> None:
    result = QueryResult(columns=["stage", "users"], rows=[["a", 0], ["b", 0]])
    config = resolve_chart_config("funnel", {"funnelConfig": {"sortOrder": "none"}})

    chart = FunnelChartBuilder().build(result, config)

    assert [stage["name"] for stage in chart.payload["stages"]] == ["a", "b"]
    assert [stage["percent_of_max"] for stage in chart.payload["stages"]] == [0.0, 0.0]


def test_treemap_builds_hierarchy() -> None:
    config = resolve_chart_config(
        "treemap",
        {"treemapConfig": {"hierarchyColumns": ["category", "product"], "valueColumn": "sales"}},
    )

    chart = TreemapChartBuilder().build(_products(), config)

    nodes = chart.payload["nodes"]
    assert [node["name"] for node in nodes] == ["Electronics", "Garden"]
    assert "value" not in nodes[0]
    assert nodes[0]["children"] == [
        {"name": "Phones", "value": 500.0},
        {"name": "Laptops", "value": 300.0},
    ]
    assert chart.payload["total"] == pytest.approx(850.0)
    assert chart.summary["depth"] == 2


def test_sunburst_falls_back_to_flat_nodes() -> None:
    config = resolve_chart_config("sunburst", {"xAxis": "product", "valueColumn": "sales"})

    chart = SunburstChartBuilder().build(_products(), config)

    assert chart.payload["nodes"] == [
        {"name": "Phones", "value": 500.0},
        {"name": "Laptops", "value": 300.0},
        {"name": "Hoses", "value": 50.0},
    ]
    assert chart.summary["depth"] == 1
