from __future__ import annotations

import pytest

from widget_engine.transforms.hierarchy import build_flat_nodes, build_hierarchy


def test_leaves_roll_up_into_one_parent() -> None:
    rows = [["Electronics", "Phones", 500], ["Electronics", "Laptops", 300]]

    root = build_hierarchy(rows, [0, 1], 2)

    assert root.children is not None
    assert len(root.children) == 1
    electronics = root.children[0]
    assert electronics.name == "Electronics"
    assert electronics.value is None
    assert electronics.total() == pytest.approx(800.0)
    assert [(child.name, child.value) for child in electronics.children or []] == [
        ("Phones", 500.0),
        ("Laptops", 300.0),
    ]


def test_rows_sharing_a_path_accumulate() -> None:
    rows = [["A", "x", 1], ["B", "y", 2], ["A", "x", 4], ["A", "z", "bad"]]

    root = build_hierarchy(rows, [0, 1], 2)

    assert [child.name for child in root.children or []] == ["A", "B"]
    first = root.children[0]
    assert [(child.name, child.value) for child in first.children or []] == [
        ("x", 5.0),
        ("z", 0.0),
    ]
    assert root.total() == pytest.approx(7.0)


def test_missing_categories_become_unknown() -> None:
    root = build_hierarchy([[None, "x", 1]], [0, 1], 2)

    assert root.children[0].name == "Unknown"


def test_no_hierarchy_columns_gives_empty_root() -> None:
    root = build_hierarchy([["A", 1]], [], 1)

    assert root.children == []
    assert root.total() == 0.0


def test_three_levels_deep() -> None:
    rows = [["EU", "FR", "Paris", 3], ["EU", "FR", "Lyon", 2], ["EU", "DE", "Berlin", 4]]

    root = build_hierarchy(rows, [0, 1, 2], 3)

    europe = root.to_dict()["children"][0]
    assert europe["name"] == "EU"
    assert "value" not in europe
    assert [country["name"] for country in europe["children"]] == ["FR", "DE"]
    assert europe["children"][0]["children"] == [
        {"name": "Paris", "value": 3.0},
        {"name": "Lyon", "value": 2.0},
    ]


def test_flat_nodes() -> None:
    nodes = build_flat_nodes([["a", 1], ["b", "2"]], 0, 1)

    assert [node.to_dict() for node in nodes] == [
        {"name": "a", "value": 1.0},
        {"name": "b", "value": 2.0},
    ]
