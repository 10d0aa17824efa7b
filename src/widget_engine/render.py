from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from widget_engine.builders.registry import get_builder
from widget_engine.config import BaseChartConfig, EngineSettings, resolve_chart_config
from widget_engine.models import ChartData, QueryResult

LOGGER = logging.getLogger(__name__)


def render_chart(
    query_result: QueryResult | Mapping[str, Any],
    chart_config: Mapping[str, Any] | BaseChartConfig | None,
    chart_type: str,
    settings: EngineSettings | None = None,
) -> ChartData:
    """Turn one query result into chart-ready data for ``chart_type``.

    Raises ``KeyError`` for an unknown chart type and ``ValueError`` (pydantic
    ``ValidationError``) for malformed results or configs.
    """
    builder = get_builder(chart_type, settings)
    result = (
        query_result
        if isinstance(query_result, QueryResult)
        else QueryResult.model_validate(query_result)
    )
    config = resolve_chart_config(chart_type, chart_config)
    LOGGER.debug(
        "Rendering %s chart from %d rows x %d columns",
        chart_type,
        len(result.rows),
        len(result.columns),
    )
    return builder.build(result, config)
