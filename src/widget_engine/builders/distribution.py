from __future__ import annotations

from dataclasses import asdict

from widget_engine.builders.base import ChartBuilder, column_name, column_or_default, first_name
from widget_engine.config import BoxplotChartConfig, BubbleChartConfig, HeatmapChartConfig
from widget_engine.models import ChartData, QueryResult
from widget_engine.transforms.grid import build_bubbles, build_heatmap
from widget_engine.transforms.stats import summarize_groups


class BoxplotChartBuilder(ChartBuilder):
    name = "boxplot"

    def build(self, result: QueryResult, config: BoxplotChartConfig) -> ChartData:
        boxplot = config.boxplot_config
        category_index = column_or_default(
            result, boxplot.category_column, config.x_axis, position=0
        )
        value_index = column_or_default(
            result, boxplot.value_column, first_name(config.y_axis), position=1
        )
        summaries = summarize_groups(
            result.column_values(category_index), result.column_values(value_index)
        )
        categories = list(summaries)
        outliers: list[list[float]] = []
        if boxplot.show_outliers:
            outliers = [
                [float(position), value]
                for position, category in enumerate(categories)
                for value in summaries[category].outliers
            ]
        return ChartData(
            chart_type=self.name,
            summary={
                "rows": len(result.rows),
                "categories": len(categories),
                "outliers": sum(len(item.outliers) for item in summaries.values()),
            },
            payload={
                "name": column_name(result, value_index),
                "categories": categories,
                "boxes": [summaries[category].box() for category in categories],
                "outliers": outliers,
            },
        )


class HeatmapChartBuilder(ChartBuilder):
    name = "heatmap"

    def build(self, result: QueryResult, config: HeatmapChartConfig) -> ChartData:
        heatmap = config.heatmap_config
        grid = build_heatmap(
            result.rows,
            column_or_default(result, heatmap.x_column, config.x_axis, position=0),
            column_or_default(result, heatmap.y_column, position=1),
            column_or_default(result, heatmap.value_column, position=2),
        )
        return ChartData(
            chart_type=self.name,
            summary={
                "rows": len(result.rows),
                "x_categories": len(grid.x_categories),
                "y_categories": len(grid.y_categories),
            },
            payload={
                "x_categories": grid.x_categories,
                "y_categories": grid.y_categories,
                "cells": [list(cell) for cell in grid.cells],
                "min_value": grid.min_value,
                "max_value": grid.max_value,
                "color_scheme": heatmap.color_scheme,
                "show_values": heatmap.show_values,
            },
        )


class BubbleChartBuilder(ChartBuilder):
    name = "bubble"

    def build(self, result: QueryResult, config: BubbleChartConfig) -> ChartData:
        bubble = config.bubble_config
        color_index = result.column_index(bubble.color_column) if bubble.color_column else None
        groups = build_bubbles(
            result.rows,
            column_or_default(result, bubble.x_column, config.x_axis, position=0),
            column_or_default(result, bubble.y_column, first_name(config.y_axis), position=1),
            column_or_default(result, bubble.size_column, position=2),
            color_index=color_index,
            min_bubble_size=bubble.min_bubble_size,
            max_bubble_size=bubble.max_bubble_size,
        )
        return ChartData(
            chart_type=self.name,
            summary={"rows": len(result.rows), "groups": len(groups)},
            payload={"groups": [asdict(group) for group in groups]},
        )
