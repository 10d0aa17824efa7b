from __future__ import annotations

from widget_engine.builders.base import ChartBuilder, column_name, column_or_default
from widget_engine.config import PivotChartConfig
from widget_engine.models import ChartData, QueryResult
from widget_engine.transforms.pivot import build_pivot


class PivotChartBuilder(ChartBuilder):
    name = "pivot"

    def build(self, result: QueryResult, config: PivotChartConfig) -> ChartData:
        row_index = column_or_default(result, config.row_group_column, position=0)
        col_index = column_or_default(result, config.col_group_column, position=1)
        value_index = column_or_default(result, config.value_agg_column, position=2)
        table = build_pivot(result.rows, row_index, col_index, value_index, config.aggregation)
        return ChartData(
            chart_type=self.name,
            summary={
                "rows": len(result.rows),
                "row_keys": len(table.row_keys),
                "col_keys": len(table.col_keys),
            },
            payload={
                "row_label": config.row_group_column or column_name(result, row_index),
                "col_label": config.col_group_column or column_name(result, col_index),
                "row_keys": table.row_keys,
                "col_keys": table.col_keys,
                "cells": table.cells,
                "row_totals": table.row_totals,
                "col_totals": table.col_totals,
                "grand_total": table.grand_total,
                "aggregation": table.aggregation,
            },
        )
