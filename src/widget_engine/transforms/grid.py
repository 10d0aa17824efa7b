from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from widget_engine.transforms.series import to_number_or_zero

DEFAULT_GROUP = "default"


@dataclass(frozen=True)
class HeatmapGrid:
    x_categories: list[str]
    y_categories: list[str]
    cells: list[tuple[int, int, float]]
    min_value: float
    max_value: float


@dataclass(frozen=True)
class BubblePoint:
    x: float
    y: float
    size: float
    symbol_size: float


@dataclass(frozen=True)
class BubbleGroup:
    name: str
    points: list[BubblePoint] = field(default_factory=list)


def _cell(row: Sequence[Any], index: int) -> Any:
    return row[index] if 0 <= index < len(row) else None


def _label(value: Any) -> str:
    return "" if value is None else str(value)


def build_heatmap(
    rows: Sequence[Sequence[Any]],
    x_index: int,
    y_index: int,
    value_index: int,
) -> HeatmapGrid:
    """Build ``(x_index, y_index, value)`` cells over first-seen category order."""
    # dicts keep insertion order, so keys double as first-seen ordered sets
    x_positions: dict[str, int] = {}
    y_positions: dict[str, int] = {}
    cells: list[tuple[int, int, float]] = []
    min_value: float | None = None
    max_value: float | None = None

    for row in rows:
        x_label = _label(_cell(row, x_index))
        y_label = _label(_cell(row, y_index))
        value = to_number_or_zero(_cell(row, value_index))
        x_position = x_positions.setdefault(x_label, len(x_positions))
        y_position = y_positions.setdefault(y_label, len(y_positions))
        cells.append((x_position, y_position, value))
        min_value = value if min_value is None else min(min_value, value)
        max_value = value if max_value is None else max(max_value, value)

    return HeatmapGrid(
        x_categories=list(x_positions),
        y_categories=list(y_positions),
        cells=cells,
        min_value=0.0 if min_value is None else min_value,
        max_value=0.0 if max_value is None else max_value,
    )


def scale_size(
    value: float,
    min_observed: float,
    observed_range: float,
    min_bubble_size: float,
    max_bubble_size: float,
) -> float:
    normalized = (value - min_observed) / (observed_range or 1.0)
    return min_bubble_size + normalized * (max_bubble_size - min_bubble_size)


def build_bubbles(
    rows: Sequence[Sequence[Any]],
    x_index: int,
    y_index: int,
    size_index: int,
    color_index: int | None = None,
    min_bubble_size: float = 5.0,
    max_bubble_size: float = 50.0,
) -> list[BubbleGroup]:
    sizes = [to_number_or_zero(_cell(row, size_index)) for row in rows]
    if not sizes:
        return []
    min_observed = min(sizes)
    observed_range = max(sizes) - min_observed

    grouped: dict[str, list[BubblePoint]] = {}
    for row, size in zip(rows, sizes):
        if color_index is not None and color_index >= 0:
            group = str(_cell(row, color_index))
        else:
            group = DEFAULT_GROUP
        grouped.setdefault(group, []).append(
            BubblePoint(
                x=to_number_or_zero(_cell(row, x_index)),
                y=to_number_or_zero(_cell(row, y_index)),
                size=size,
                symbol_size=scale_size(
                    size, min_observed, observed_range, min_bubble_size, max_bubble_size
                ),
            )
        )
    return [BubbleGroup(name=name, points=points) for name, points in grouped.items()]
