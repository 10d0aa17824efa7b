from __future__ import annotations

import logging
from typing import Any

import pandas as pd

from widget_engine.builders.base import ChartBuilder, column_name, column_or_default
from widget_engine.config import (
    ComparisonConfig,
    CounterChartConfig,
    GaugeChartConfig,
    ProgressChartConfig,
)
from widget_engine.models import ChartData, QueryResult
from widget_engine.transforms.comparison import compare_single_point
from widget_engine.transforms.formatting import (
    evaluate_conditional_format,
    format_compact_number,
    format_percent,
)
from widget_engine.transforms.series import to_number_or_zero

LOGGER = logging.getLogger(__name__)

PERIOD_COMPARISONS = frozenset({"yoy", "mom", "wow", "dod", "custom"})


def first_row_value(result: QueryResult, index: int) -> Any:
    if not result.rows or index < 0:
        return None
    return result.rows[0][index]


def _value_label(result: QueryResult, config: Any, value_index: int) -> str | None:
    return config.counter_label or column_name(result, value_index)


class GaugeChartBuilder(ChartBuilder):
    name = "gauge"

    def build(self, result: QueryResult, config: GaugeChartConfig) -> ChartData:
        gauge = config.gauge_config
        value_index = column_or_default(result, config.value_column, position=0)
        value = to_number_or_zero(first_row_value(result, value_index))
        span = (gauge.max - gauge.min) or 1.0
        return ChartData(
            chart_type=self.name,
            summary={"rows": len(result.rows)},
            payload={
                "value": value,
                "label": _value_label(result, config, value_index),
                "min": gauge.min,
                "max": gauge.max,
                "show_pointer": gauge.show_pointer,
                "range_stops": [
                    [(item.to - gauge.min) / span, item.color] for item in gauge.ranges
                ],
            },
        )


class ProgressChartBuilder(ChartBuilder):
    name = "progress"

    def build(self, result: QueryResult, config: ProgressChartConfig) -> ChartData:
        progress = config.progress_config
        value_index = column_or_default(result, config.value_column, position=0)
        value = to_number_or_zero(first_row_value(result, value_index))
        if progress.target_value:
            percent = min(100.0, max(0.0, value / progress.target_value * 100.0))
        else:
            percent = 0.0
        return ChartData(
            chart_type=self.name,
            summary={"rows": len(result.rows)},
            payload={
                "value": value,
                "label": _value_label(result, config, value_index),
                "target_value": progress.target_value,
                "percent": percent,
                "show_percentage": progress.show_percentage,
            },
        )


def counter_comparison(
    result: QueryResult,
    value_index: int,
    current: float,
    comparison: ComparisonConfig,
) -> dict[str, Any] | None:
    """Change against the second row or a fixed target.

    Returns ``None`` when there is nothing to compare against, including a
    zero baseline.
    """
    previous: float | None = None
    if comparison.type == "previous_row" and len(result.rows) > 1 and value_index >= 0:
        previous = to_number_or_zero(result.rows[1][value_index]) or None
    elif comparison.type == "target":
        previous = comparison.target_value

    if not previous:
        return None
    change = current - previous
    percent = change / abs(previous) * 100.0
    return {
        "type": comparison.type,
        "previous_value": previous,
        "change": change,
        "percent_change": percent,
        "percent_label": format_percent(percent) if comparison.show_percent_change else None,
        "is_positive": change < 0 if comparison.invert_colors else change > 0,
    }


class CounterChartBuilder(ChartBuilder):
    name = "counter"

    def build(self, result: QueryResult, config: CounterChartConfig) -> ChartData:
        value_index = column_or_default(result, config.value_column, position=0)
        raw_value = first_row_value(result, value_index)
        value = to_number_or_zero(raw_value)

        if config.comparison.type in PERIOD_COMPARISONS:
            comparison = self._period_comparison(result, value_index, config.comparison)
        else:
            comparison = counter_comparison(result, value_index, value, config.comparison)

        return ChartData(
            chart_type=self.name,
            summary={"rows": len(result.rows)},
            payload={
                "value": value,
                "display_value": (
                    f"{config.counter_prefix}{format_compact_number(raw_value)}"
                    f"{config.counter_suffix}"
                ),
                "label": _value_label(result, config, value_index),
                "comparison": comparison,
                "sparkline": self._sparkline(result, config, value_index),
                "style": self._style(value, config),
            },
        )

    def _period_comparison(
        self,
        result: QueryResult,
        value_index: int,
        comparison: ComparisonConfig,
    ) -> dict[str, Any] | None:
        if not result.rows or value_index < 0:
            return None
        date_index = column_or_default(result, comparison.date_column, position=0)
        if date_index < 0:
            LOGGER.debug("Counter period comparison skipped: no date column")
            return None
        dates = result.column_values(date_index)
        values = result.column_values(value_index)
        point = compare_single_point(
            dates[0],
            values[0],
            list(zip(dates[1:], values[1:])),
            comparison.type,
            custom_periods=comparison.custom_periods,
            tolerance=pd.Timedelta(hours=self.settings.comparison_tolerance_hours),
            timezone=self.settings.timezone,
        )
        if point.previous_value is None:
            return None
        change = point.absolute_change
        percent = point.percent_change
        return {
            "type": comparison.type,
            "previous_date": point.previous_date,
            "previous_value": point.previous_value,
            "change": change,
            "percent_change": percent,
            "percent_label": (
                format_percent(percent)
                if comparison.show_percent_change and percent is not None
                else None
            ),
            "is_positive": (
                None
                if change is None
                else (change < 0 if comparison.invert_colors else change > 0)
            ),
        }

    def _sparkline(
        self,
        result: QueryResult,
        config: CounterChartConfig,
        value_index: int,
    ) -> dict[str, Any] | None:
        sparkline = config.sparkline
        if not sparkline.enabled:
            return None
        index = result.column_index(sparkline.column) if sparkline.column else value_index
        if index < 0:
            return None
        # rows arrive newest first
        values = [to_number_or_zero(value) for value in reversed(result.column_values(index))]
        return {"type": sparkline.type, "values": values}

    def _style(self, value: float, config: CounterChartConfig) -> dict[str, str]:
        rules = [rule for group in config.conditional_formatting for rule in group.rules]
        return evaluate_conditional_format(value, rules)
