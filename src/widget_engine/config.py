from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Annotated, Any, Literal, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

LOGGER = logging.getLogger(__name__)

Granularity = Literal["hour", "day", "week", "month", "quarter", "year"]
Aggregation = Literal["sum", "avg", "min", "max", "count"]
RollingFunction = Literal["mean", "sum", "min", "max"]
StackingMode = Literal["none", "normal", "percent"]
PeriodComparisonType = Literal["none", "yoy", "mom", "wow", "dod", "custom"]
CounterComparisonType = Literal[
    "none", "previous_row", "target", "yoy", "mom", "wow", "dod", "custom"
]
MatchStrategy = Literal["first", "nearest"]
RuleCondition = Literal["gt", "lt", "eq", "gte", "lte", "between"]


class _SubConfig(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class RollingWindowConfig(_SubConfig):
    enabled: bool = False
    periods: int = Field(default=7, ge=1)
    function: RollingFunction = "mean"


class CumulativeConfig(_SubConfig):
    enabled: bool = False


class TimeSeriesConfig(_SubConfig):
    granularity: Granularity | None = None
    aggregation: Aggregation = "sum"
    rolling_window: RollingWindowConfig = Field(default_factory=RollingWindowConfig)
    cumulative: CumulativeConfig = Field(default_factory=CumulativeConfig)


class PeriodComparisonConfig(_SubConfig):
    type: PeriodComparisonType = "none"
    custom_periods: int | None = Field(default=None, ge=1)
    match: MatchStrategy = "first"


class CartesianConfig(_SubConfig):
    stacking: StackingMode = "none"


class ComboConfig(_SubConfig):
    series_types: dict[str, Literal["bar", "line", "area"]] = Field(default_factory=dict)
    dual_y_axis: bool = False


class HeatmapConfig(_SubConfig):
    x_column: str | None = None
    y_column: str | None = None
    value_column: str | None = None
    color_scheme: str | None = None
    show_values: bool = True


class BubbleConfig(_SubConfig):
    x_column: str | None = None
    y_column: str | None = None
    size_column: str | None = None
    color_column: str | None = None
    min_bubble_size: float = Field(default=5.0, ge=0.0)
    max_bubble_size: float = Field(default=50.0, ge=0.0)


class BoxplotConfig(_SubConfig):
    category_column: str | None = None
    value_column: str | None = None
    show_outliers: bool = True


class HierarchyConfig(_SubConfig):
    hierarchy_columns: list[str] = Field(min_length=1)
    value_column: str


class FunnelConfig(_SubConfig):
    label_column: str | None = None
    value_column: str | None = None
    sort_order: Literal["descending", "ascending", "none"] = "descending"
    label_position: Literal["left", "right", "inside"] = "inside"
    show_percentage: bool = True


class GaugeRange(_SubConfig):
    to: float
    color: str


class GaugeConfig(_SubConfig):
    min: float = 0.0
    max: float = 100.0
    show_pointer: bool = True
    ranges: list[GaugeRange] = Field(default_factory=list)


class ProgressConfig(_SubConfig):
    target_value: float = 100.0
    show_percentage: bool = True


class ComparisonConfig(_SubConfig):
    type: CounterComparisonType = "none"
    target_value: float | None = None
    show_percent_change: bool = True
    invert_colors: bool = False
    date_column: str | None = None
    custom_periods: int | None = Field(default=None, ge=1)


class SparklineConfig(_SubConfig):
    enabled: bool = False
    type: Literal["line", "bar", "area"] = "line"
    column: str | None = None


class ConditionalFormatRule(_SubConfig):
    condition: RuleCondition
    value: float | tuple[float, float]
    background_color: str | None = None
    text_color: str | None = None


class ConditionalFormatGroup(_SubConfig):
    column: str | None = None
    rules: list[ConditionalFormatRule] = Field(default_factory=list)


class BaseChartConfig(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        frozen=True,
    )

    chart_type: str
    title: str | None = None
    legend: bool = True


class AxisChartConfig(BaseChartConfig):
    x_axis: str | None = None
    y_axis: str | list[str] | None = None


class LineChartConfig(AxisChartConfig):
    chart_type: Literal["line"] = "line"
    time_series_config: TimeSeriesConfig = Field(default_factory=TimeSeriesConfig)
    period_comparison: PeriodComparisonConfig = Field(default_factory=PeriodComparisonConfig)


class AreaChartConfig(AxisChartConfig):
    chart_type: Literal["area"] = "area"
    cartesian_config: CartesianConfig = Field(default_factory=CartesianConfig)
    time_series_config: TimeSeriesConfig = Field(default_factory=TimeSeriesConfig)
    period_comparison: PeriodComparisonConfig = Field(default_factory=PeriodComparisonConfig)


class BarChartConfig(AxisChartConfig):
    chart_type: Literal["bar"] = "bar"
    cartesian_config: CartesianConfig = Field(default_factory=CartesianConfig)


class ComboChartConfig(AxisChartConfig):
    chart_type: Literal["combo"] = "combo"
    combo_config: ComboConfig = Field(default_factory=ComboConfig)


class ScatterChartConfig(AxisChartConfig):
    chart_type: Literal["scatter"] = "scatter"


class PieChartConfig(AxisChartConfig):
    chart_type: Literal["pie"] = "pie"


class DonutChartConfig(AxisChartConfig):
    chart_type: Literal["donut"] = "donut"


class HeatmapChartConfig(AxisChartConfig):
    chart_type: Literal["heatmap"] = "heatmap"
    heatmap_config: HeatmapConfig = Field(default_factory=HeatmapConfig)


class BubbleChartConfig(AxisChartConfig):
    chart_type: Literal["bubble"] = "bubble"
    bubble_config: BubbleConfig = Field(default_factory=BubbleConfig)


class BoxplotChartConfig(AxisChartConfig):
    chart_type: Literal["boxplot"] = "boxplot"
    boxplot_config: BoxplotConfig = Field(default_factory=BoxplotConfig)


class TreemapChartConfig(AxisChartConfig):
    chart_type: Literal["treemap"] = "treemap"
    value_column: str | None = None
    treemap_config: HierarchyConfig | None = None


class SunburstChartConfig(AxisChartConfig):
    chart_type: Literal["sunburst"] = "sunburst"
    value_column: str | None = None
    sunburst_config: HierarchyConfig | None = None


class FunnelChartConfig(AxisChartConfig):
    chart_type: Literal["funnel"] = "funnel"
    value_column: str | None = None
    funnel_config: FunnelConfig = Field(default_factory=FunnelConfig)


class GaugeChartConfig(BaseChartConfig):
    chart_type: Literal["gauge"] = "gauge"
    value_column: str | None = None
    counter_label: str | None = None
    gauge_config: GaugeConfig = Field(default_factory=GaugeConfig)


class ProgressChartConfig(BaseChartConfig):
    chart_type: Literal["progress"] = "progress"
    value_column: str | None = None
    counter_label: str | None = None
    progress_config: ProgressConfig = Field(default_factory=ProgressConfig)


class CounterChartConfig(BaseChartConfig):
    chart_type: Literal["counter"] = "counter"
    value_column: str | None = None
    counter_label: str | None = None
    counter_prefix: str = ""
    counter_suffix: str = ""
    comparison: ComparisonConfig = Field(default_factory=ComparisonConfig)
    sparkline: SparklineConfig = Field(default_factory=SparklineConfig)
    conditional_formatting: list[ConditionalFormatGroup] = Field(default_factory=list)


class PivotChartConfig(BaseChartConfig):
    chart_type: Literal["pivot"] = "pivot"
    row_group_column: str | None = None
    col_group_column: str | None = None
    value_agg_column: str | None = None
    aggregation: Aggregation = "sum"


ChartConfig = Annotated[
    Union[
        LineChartConfig,
        AreaChartConfig,
        BarChartConfig,
        ComboChartConfig,
        ScatterChartConfig,
        PieChartConfig,
        DonutChartConfig,
        HeatmapChartConfig,
        BubbleChartConfig,
        BoxplotChartConfig,
        TreemapChartConfig,
        SunburstChartConfig,
        FunnelChartConfig,
        GaugeChartConfig,
        ProgressChartConfig,
        CounterChartConfig,
        PivotChartConfig,
    ],
    Field(discriminator="chart_type"),
]

CHART_CONFIG_MODELS: dict[str, type[BaseChartConfig]] = {
    "line": LineChartConfig,
    "area": AreaChartConfig,
    "bar": BarChartConfig,
    "combo": ComboChartConfig,
    "scatter": ScatterChartConfig,
    "pie": PieChartConfig,
    "donut": DonutChartConfig,
    "heatmap": HeatmapChartConfig,
    "bubble": BubbleChartConfig,
    "boxplot": BoxplotChartConfig,
    "treemap": TreemapChartConfig,
    "sunburst": SunburstChartConfig,
    "funnel": FunnelChartConfig,
    "gauge": GaugeChartConfig,
    "progress": ProgressChartConfig,
    "counter": CounterChartConfig,
    "pivot": PivotChartConfig,
}

_CHART_TYPE_KEYS = ("chart_type", "chartType")


def _known_keys(model: type[BaseModel]) -> set[str]:
    keys: set[str] = set()
    for name, info in model.model_fields.items():
        keys.add(name)
        if info.alias:
            keys.add(info.alias)
    return keys


def resolve_chart_config(
    chart_type: str,
    raw: Mapping[str, Any] | BaseChartConfig | None = None,
) -> BaseChartConfig:
    """Build the fully populated config for ``chart_type``.

    ``raw`` may be the shared widget config bag used by the dashboard UI
    (camelCase or snake_case keys). Keys that belong to other chart types are
    dropped here so each builder only sees its own sub-configuration.
    """
    model = CHART_CONFIG_MODELS.get(chart_type)
    if model is None:
        raise KeyError(f"Unknown chart type: {chart_type}")
    if isinstance(raw, BaseChartConfig):
        if raw.chart_type != chart_type:
            raise ValueError(
                f"Config is for chart type {raw.chart_type!r}, not {chart_type!r}"
            )
        return raw

    data = dict(raw or {})
    for key in _CHART_TYPE_KEYS:
        data.pop(key, None)
    known = _known_keys(model)
    selected = {key: value for key, value in data.items() if key in known}
    ignored = sorted(set(data) - set(selected))
    if ignored:
        LOGGER.debug("Ignoring config keys not used by %s charts: %s", chart_type, ignored)
    selected["chart_type"] = chart_type
    return model.model_validate(selected)


def load_chart_config(path: Path, chart_type: str | None = None) -> BaseChartConfig:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Chart config in {path} must be a mapping")

    declared = next((data[key] for key in _CHART_TYPE_KEYS if data.get(key)), None)
    resolved_type = chart_type or declared
    if not resolved_type:
        raise ValueError(f"Chart config in {path} does not declare chart_type")
    if declared and chart_type and declared != chart_type:
        raise ValueError(
            f"Chart config in {path} declares {declared!r} but {chart_type!r} was requested"
        )
    return resolve_chart_config(resolved_type, data)


class EngineSettings(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    timezone: str = "UTC"
    comparison_tolerance_hours: float = Field(default=12.0, gt=0.0)
    time_axis_sample_size: int = Field(default=5, ge=1)


DEFAULT_SETTINGS_PATH = Path("configs/default.yaml")
TIMEZONE_ENV = "WIDGET_ENGINE_TIMEZONE"


def load_settings(path: Path | None = None) -> EngineSettings:
    data: dict[str, Any] = {}
    if path is not None:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}

    env_timezone = os.getenv(TIMEZONE_ENV)
    if env_timezone:
        data["timezone"] = env_timezone
    return EngineSettings.model_validate(data)
