"""Unit tests for the tree flattener."""

from menugate.domain.entities import MenuNode
from menugate.domain.services import build_tree, flatten, flatten_with


def test_flatten_is_preorder(sample_nodes):
    tree = build_tree(sample_nodes)

    assert [node.id for node in flatten(tree)] == [1, 2, 3, 4, 5, 6, 7, 8, 9]


def test_flatten_is_idempotent_and_does_not_consume_tree(sample_nodes):
    tree = build_tree(sample_nodes)

    first = flatten(tree)
    second = flatten(tree)

    assert first == second
    assert len(tree) == len(sample_nodes)


def test_round_trip_rebuilds_equal_tree(sample_nodes):
    """Rebuilding from the flattened sequence gives a structurally equal tree."""
    tree = build_tree(sample_nodes)

    rebuilt = build_tree(flatten(tree))

    assert rebuilt == tree
    assert flatten(rebuilt) == flatten(tree)


def test_round_trip_matches_stable_sort_within_siblings():
    """Siblings come out in (order, id) order whatever order they went in."""
    nodes = [
        MenuNode(id=5, name="Late", order=9),
        MenuNode(id=4, name="Child B", order=2, parent_id=1),
        MenuNode(id=3, name="Child A", order=2, parent_id=1),
        MenuNode(id=1, name="Top", order=0),
        MenuNode(id=2, name="Grandchild", order=0, parent_id=3),
    ]

    assert [node.id for node in flatten(build_tree(nodes))] == [1, 3, 2, 4, 5]


def test_flatten_subtree(sample_nodes):
    tree = build_tree(sample_nodes)

    assert [node.id for node in flatten(tree, root_id=7)] == [7, 8, 9]


def test_flatten_with_adds_depth_and_decoration(sample_nodes):
    tree = build_tree(sample_nodes)

    items = flatten_with(tree, lambda node: {"label": node.name.upper()})

    assert [(item["id"], item["depth"]) for item in items[:4]] == [(1, 0), (2, 0), (3, 1), (4, 1)]
    assert items[2]["parent_id"] == 2
    assert items[2]["label"] == "INVOICES"
