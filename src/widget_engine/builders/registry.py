from __future__ import annotations

from widget_engine.builders.base import ChartBuilder
from widget_engine.builders.cartesian import (
    AreaChartBuilder,
    BarChartBuilder,
    ComboChartBuilder,
    LineChartBuilder,
    ScatterChartBuilder,
)
from widget_engine.builders.composition import (
    DonutChartBuilder,
    FunnelChartBuilder,
    PieChartBuilder,
    SunburstChartBuilder,
    TreemapChartBuilder,
)
from widget_engine.builders.distribution import (
    BoxplotChartBuilder,
    BubbleChartBuilder,
    HeatmapChartBuilder,
)
from widget_engine.builders.kpi import CounterChartBuilder, GaugeChartBuilder, ProgressChartBuilder
from widget_engine.builders.table import PivotChartBuilder
from widget_engine.config import EngineSettings

BUILDER_CLASSES: tuple[type[ChartBuilder], ...] = (
    LineChartBuilder,
    AreaChartBuilder,
    BarChartBuilder,
    ComboChartBuilder,
    ScatterChartBuilder,
    PieChartBuilder,
    DonutChartBuilder,
    FunnelChartBuilder,
    TreemapChartBuilder,
    SunburstChartBuilder,
    BoxplotChartBuilder,
    HeatmapChartBuilder,
    BubbleChartBuilder,
    GaugeChartBuilder,
    ProgressChartBuilder,
    CounterChartBuilder,
    PivotChartBuilder,
)


def default_builders(settings: EngineSettings | None = None) -> list[ChartBuilder]:
    return [builder_class(settings) for builder_class in BUILDER_CLASSES]


def chart_types() -> list[str]:
    return [builder_class.name for builder_class in BUILDER_CLASSES]


def get_builder(chart_type: str, settings: EngineSettings | None = None) -> ChartBuilder:
    for builder in default_builders(settings):
        if builder.name == chart_type:
            return builder
    raise KeyError(f"Unknown chart type: {chart_type}")
