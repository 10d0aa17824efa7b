from __future__ import annotations

from typing import Any

from widget_engine.builders.base import ChartBuilder, column_name, column_or_default, first_name
from widget_engine.config import (
    AxisChartConfig,
    FunnelChartConfig,
    HierarchyConfig,
    SunburstChartConfig,
    TreemapChartConfig,
)
from widget_engine.models import ChartData, QueryResult
from widget_engine.transforms.hierarchy import build_flat_nodes, build_hierarchy
from widget_engine.transforms.series import to_number_or_zero


class PieChartBuilder(ChartBuilder):
    name = "pie"

    def build(self, result: QueryResult, config: AxisChartConfig) -> ChartData:
        label_index = column_or_default(result, config.x_axis, position=0)
        value_index = column_or_default(result, first_name(config.y_axis), position=1)
        slices = [
            {"name": "" if label is None else str(label), "value": to_number_or_zero(value)}
            for label, value in zip(
                result.column_values(label_index), result.column_values(value_index)
            )
        ]
        return ChartData(
            chart_type=self.name,
            summary={"rows": len(result.rows), "slices": len(slices)},
            payload={
                "name": column_name(result, value_index),
                "slices": slices,
                "total": float(sum(item["value"] for item in slices)),
            },
        )


class DonutChartBuilder(PieChartBuilder):
    name = "donut"


SORT_DIRECTIONS = {"descending": True, "ascending": False}


class FunnelChartBuilder(ChartBuilder):
    name = "funnel"

    def build(self, result: QueryResult, config: FunnelChartConfig) -> ChartData:
        funnel = config.funnel_config
        label_index = column_or_default(result, funnel.label_column, config.x_axis, position=0)
        value_index = column_or_default(
            result,
            funnel.value_column,
            config.value_column,
            first_name(config.y_axis),
            position=1,
        )
        stages: list[dict[str, Any]] = [
            {"name": "" if label is None else str(label), "value": to_number_or_zero(value)}
            for label, value in zip(
                result.column_values(label_index), result.column_values(value_index)
            )
        ]
        if funnel.sort_order in SORT_DIRECTIONS:
            # sorted() is stable, so ties keep query order
            stages = sorted(
                stages,
                key=lambda stage: stage["value"],
                reverse=SORT_DIRECTIONS[funnel.sort_order],
            )
        peak = max((stage["value"] for stage in stages), default=0.0)
        for stage in stages:
            stage["percent_of_max"] = stage["value"] / peak * 100.0 if peak else 0.0

        return ChartData(
            chart_type=self.name,
            summary={"rows": len(result.rows), "stages": len(stages)},
            payload={
                "stages": stages,
                "max_value": peak,
                "sort_order": funnel.sort_order,
                "label_position": funnel.label_position,
                "show_percentage": funnel.show_percentage,
            },
        )


class _HierarchyChartBuilder(ChartBuilder):
    """Treemap and sunburst share one tree builder.

    Without hierarchy columns the chart falls back to one flat level of
    ``label -> value`` nodes.
    """

    def _hierarchy(self, config: Any) -> HierarchyConfig | None:
        raise NotImplementedError

    def build(self, result: QueryResult, config: Any) -> ChartData:
        hierarchy = self._hierarchy(config)
        if hierarchy is not None:
            indices = [result.column_index(name) for name in hierarchy.hierarchy_columns]
            value_index = result.column_index(hierarchy.value_column)
            top_level = build_hierarchy(result.rows, indices, value_index).children or []
            depth = len(indices)
        else:
            label_index = column_or_default(result, config.x_axis, position=0)
            value_index = column_or_default(
                result, config.value_column, first_name(config.y_axis), position=1
            )
            top_level = build_flat_nodes(result.rows, label_index, value_index)
            depth = 1

        return ChartData(
            chart_type=self.name,
            summary={"rows": len(result.rows), "top_level_nodes": len(top_level), "depth": depth},
            payload={
                "nodes": [node.to_dict() for node in top_level],
                "total": float(sum(node.total() for node in top_level)),
            },
        )


class TreemapChartBuilder(_HierarchyChartBuilder):
    name = "treemap"

    def _hierarchy(self, config: TreemapChartConfig) -> HierarchyConfig | None:
        return config.treemap_config


class SunburstChartBuilder(_HierarchyChartBuilder):
    name = "sunburst"

    def _hierarchy(self, config: SunburstChartConfig) -> HierarchyConfig | None:
        return config.sunburst_config
