from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from widget_engine.models import HierarchyNode
from widget_engine.transforms.series import to_number_or_zero

ROOT_NAME = "root"
MISSING_CATEGORY = "Unknown"


def _category(row: Sequence[Any], index: int) -> str:
    value = row[index] if 0 <= index < len(row) else None
    return MISSING_CATEGORY if value is None else str(value)


def _cell(row: Sequence[Any], index: int) -> Any:
    return row[index] if 0 <= index < len(row) else None


def build_hierarchy(
    rows: Sequence[Sequence[Any]],
    hierarchy_indices: Sequence[int],
    value_index: int,
) -> HierarchyNode:
    """Fold flat rows into a tree, outermost hierarchy column first.

    Nodes are looked up through a path-keyed arena. Leaves sum the value
    column across rows sharing a full path; internal nodes keep no value.
    """
    root = HierarchyNode(name=ROOT_NAME, children=[])
    if not hierarchy_indices:
        return root

    depth = len(hierarchy_indices)
    arena: dict[tuple[str, ...], HierarchyNode] = {(): root}
    for row in rows:
        path: tuple[str, ...] = ()
        parent = root
        for level, column_index in enumerate(hierarchy_indices):
            path = path + (_category(row, column_index),)
            node = arena.get(path)
            is_leaf = level == depth - 1
            if node is None:
                node = HierarchyNode(
                    name=path[-1],
                    value=0.0 if is_leaf else None,
                    children=None if is_leaf else [],
                )
                arena[path] = node
                if parent.children is None:
                    parent.children = []
                parent.children.append(node)
            if is_leaf:
                node.value = (node.value or 0.0) + to_number_or_zero(_cell(row, value_index))
            parent = node
    return root


def build_flat_nodes(
    rows: Sequence[Sequence[Any]],
    label_index: int,
    value_index: int,
) -> list[HierarchyNode]:
    return [
        HierarchyNode(
            name=str(_cell(row, label_index)),
            value=to_number_or_zero(_cell(row, value_index)),
        )
        for row in rows
    ]
