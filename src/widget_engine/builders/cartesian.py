from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Any

import pandas as pd

from widget_engine.builders.base import ChartBuilder, series_payload
from widget_engine.config import (
    AreaChartConfig,
    AxisChartConfig,
    BarChartConfig,
    ComboChartConfig,
    LineChartConfig,
    EngineSettings,
    PeriodComparisonConfig,
    ScatterChartConfig,
    StackingMode,
    TimeSeriesConfig,
)
from widget_engine.models import ChartData, QueryResult, ResolvedAxis, Series
from widget_engine.transforms.axis import resolve_axis
from widget_engine.transforms.comparison import compare_periods
from widget_engine.transforms.series import extract_series, to_number
from widget_engine.transforms.stacking import normalize_stacking
from widget_engine.transforms.time_buckets import aggregate_buckets, bucket_keys, is_time_axis
from widget_engine.transforms.time_series import (
    apply_time_series_transform,
    transformed_series_name,
)

LOGGER = logging.getLogger(__name__)


class _TimeSeriesChartBuilder(ChartBuilder):
    """Shared pipeline for line and area charts.

    axis -> series -> [granularity buckets -> cumulative/rolling] -> stacking
    """

    def _stacking(self, config: AxisChartConfig) -> StackingMode:
        return "none"

    def build(self, result: QueryResult, config: AxisChartConfig) -> ChartData:
        settings = self.settings
        axis = resolve_axis(result, config.x_axis, config.y_axis, settings.time_axis_sample_size)
        series = extract_series(result, axis)
        time_series: TimeSeriesConfig = config.time_series_config
        x_is_time = is_time_axis(axis.x_values, settings.time_axis_sample_size, settings.timezone)

        x_values: list[Any] = list(axis.x_values)
        dropped_rows = 0
        bucketed = False
        if time_series.granularity and x_is_time:
            keys = bucket_keys(axis.x_values, time_series.granularity, settings.timezone)
            dropped_rows = sum(1 for key in keys if key is None)
            x_values, columns = aggregate_buckets(
                keys, [item.values for item in series], time_series.aggregation
            )
            series = [
                Series(name=item.name, values=list(values))
                for item, values in zip(series, columns)
            ]
            bucketed = True
            if dropped_rows:
                LOGGER.debug("Dropped %d rows with unparseable dates", dropped_rows)

        if time_series.cumulative.enabled or time_series.rolling_window.enabled:
            series = [
                Series(
                    name=transformed_series_name(item.name, time_series),
                    values=apply_time_series_transform(item.values, time_series),
                )
                for item in series
            ]

        stacking = self._stacking(config)
        series = normalize_stacking(series, stacking)

        payload: dict[str, Any] = {
            "x_axis_type": "time" if x_is_time and not time_series.granularity else "category",
            "x": x_values,
            "series": [
                series_payload(item.name, item.values, stack="total" if stacking != "none" else None)
                for item in series
            ],
            "stacking": stacking,
        }
        comparisons = _period_comparisons(result, axis, config.period_comparison, settings)
        if comparisons is not None:
            payload["comparisons"] = comparisons

        return ChartData(
            chart_type=self.name,
            summary={
                "rows": len(result.rows),
                "series": len(series),
                "time_axis": axis.is_time_axis,
                "bucketed": bucketed,
                "dropped_rows": dropped_rows,
            },
            payload=payload,
        )


def _period_comparisons(
    result: QueryResult,
    axis: ResolvedAxis,
    comparison: PeriodComparisonConfig,
    settings: EngineSettings,
) -> dict[str, list[dict[str, Any]]] | None:
    if comparison.type == "none":
        return None
    output: dict[str, list[dict[str, Any]]] = {}
    for index, name in zip(axis.y_indices, axis.y_names):
        points = compare_periods(
            axis.x_values,
            result.column_values(index),
            comparison.type,
            custom_periods=comparison.custom_periods,
            match=comparison.match,
            tolerance=pd.Timedelta(hours=settings.comparison_tolerance_hours),
            timezone=settings.timezone,
        )
        output[str(name)] = [asdict(point) for point in points]
    return output


class LineChartBuilder(_TimeSeriesChartBuilder):
    name = "line"

    def build(self, result: QueryResult, config: LineChartConfig) -> ChartData:
        return super().build(result, config)


class AreaChartBuilder(_TimeSeriesChartBuilder):
    name = "area"

    def _stacking(self, config: AreaChartConfig) -> StackingMode:
        return config.cartesian_config.stacking

    def build(self, result: QueryResult, config: AreaChartConfig) -> ChartData:
        return super().build(result, config)


class BarChartBuilder(ChartBuilder):
    name = "bar"

    def build(self, result: QueryResult, config: BarChartConfig) -> ChartData:
        axis = resolve_axis(
            result, config.x_axis, config.y_axis, self.settings.time_axis_sample_size
        )
        stacking = config.cartesian_config.stacking
        series = normalize_stacking(extract_series(result, axis), stacking)
        return ChartData(
            chart_type=self.name,
            summary={"rows": len(result.rows), "series": len(series)},
            payload={
                "x_axis_type": "category",
                "x": list(axis.x_values),
                "series": [
                    series_payload(
                        item.name, item.values, stack="total" if stacking != "none" else None
                    )
                    for item in series
                ],
                "stacking": stacking,
            },
        )


class ComboChartBuilder(ChartBuilder):
    name = "combo"

    def build(self, result: QueryResult, config: ComboChartConfig) -> ChartData:
        axis = resolve_axis(
            result, config.x_axis, config.y_axis, self.settings.time_axis_sample_size
        )
        combo = config.combo_config
        series_out = []
        for position, item in enumerate(extract_series(result, axis)):
            default_type = "bar" if position == 0 else "line"
            series_out.append(
                series_payload(
                    item.name,
                    item.values,
                    type=combo.series_types.get(str(item.name), default_type),
                    y_axis_index=1 if combo.dual_y_axis and position > 0 else 0,
                )
            )
        y_axes = [axis.y_names[0]] if axis.y_names else []
        if combo.dual_y_axis:
            y_axes = [axis.y_names[0] if axis.y_names else None]
            y_axes.append(axis.y_names[1] if len(axis.y_names) > 1 else "")
        return ChartData(
            chart_type=self.name,
            summary={"rows": len(result.rows), "series": len(series_out)},
            payload={
                "x": list(axis.x_values),
                "series": series_out,
                "y_axes": y_axes,
                "dual_y_axis": combo.dual_y_axis,
            },
        )


class ScatterChartBuilder(ChartBuilder):
    name = "scatter"

    def build(self, result: QueryResult, config: ScatterChartConfig) -> ChartData:
        axis = resolve_axis(
            result, config.x_axis, config.y_axis, self.settings.time_axis_sample_size
        )
        y_index = axis.y_indices[0] if axis.y_indices else -1
        x_values = axis.x_values
        y_values = result.column_values(y_index)
        points = [[to_number(x), to_number(y)] for x, y in zip(x_values, y_values)]
        return ChartData(
            chart_type=self.name,
            summary={"rows": len(result.rows)},
            payload={"name": axis.y_names[0] if axis.y_names else None, "points": points},
        )
