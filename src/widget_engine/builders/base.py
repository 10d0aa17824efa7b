from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from widget_engine.config import BaseChartConfig, EngineSettings
from widget_engine.models import ChartData, QueryResult


class ChartBuilder:
    name: str

    def __init__(self, settings: EngineSettings | None = None) -> None:
        self.settings = settings or EngineSettings()

    def build(self, result: QueryResult, config: BaseChartConfig) -> ChartData:
        raise NotImplementedError


def column_or_default(result: QueryResult, *candidates: str | None, position: int) -> int:
    """Index of the first configured column name, else of the column at ``position``."""
    for name in candidates:
        if name:
            return result.column_index(name)
    if position < len(result.columns):
        return position
    return -1


def column_name(result: QueryResult, index: int) -> str | None:
    if 0 <= index < len(result.columns):
        return result.columns[index]
    return None


def first_name(value: str | Sequence[str] | None) -> str | None:
    if isinstance(value, str) or value is None:
        return value or None
    return value[0] if value else None


def series_payload(name: str | None, values: Sequence[Any], **extra: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {"name": name, "values": list(values)}
    payload.update(extra)
    return payload
