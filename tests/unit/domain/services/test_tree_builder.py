"""Unit tests for the tree builder."""

import random

import pytest

from menugate.domain.entities import MenuNode
from menugate.domain.exceptions import ValidationError
from menugate.domain.services import MenuTree, build_tree, flatten


class TestBuildTree:
    """Test suite for build_tree."""

    def test_roots_and_children_sorted_by_order(self, sample_nodes):
        """Roots and child lists follow (order, id)."""
        tree = build_tree(sample_nodes)

        assert tree.root_ids == [1, 2, 5, 7]
        assert tree.child_ids(2) == [3, 4]
        assert tree.child_ids(7) == [8, 9]
        assert len(tree) == 9
        assert not tree.report.has_anomalies

    def test_input_order_does_not_matter(self, sample_nodes):
        shuffled = list(sample_nodes)
        random.Random(7).shuffle(shuffled)

        assert build_tree(shuffled) == build_tree(sample_nodes)

    def test_ties_broken_by_id(self):
        nodes = [
            MenuNode(id=12, name="B", order=0),
            MenuNode(id=11, name="A", order=0),
            MenuNode(id=10, name="C", order=1),
        ]
        assert build_tree(nodes).root_ids == [11, 12, 10]

    def test_orphan_promoted_to_root(self):
        """A node whose parent is missing becomes a root and is reported."""
        nodes = [
            MenuNode(id=1, name="Root", order=1),
            MenuNode(id=2, name="Orphan", order=0, parent_id=99),
            MenuNode(id=3, name="Child of orphan", parent_id=2),
        ]
        tree = build_tree(nodes)

        assert tree.root_ids == [2, 1]
        assert tree.child_ids(2) == [3]
        assert tree.report.orphan_ids == [2]
        assert tree.parent_id_of(2) is None
        # The node itself still remembers its declared parent
        assert tree.get(2).parent_id == 99

    def test_cycle_members_and_descendants_excluded(self):
        """Nodes on a parent cycle and everything below them are left out."""
        nodes = [
            MenuNode(id=1, name="Root"),
            MenuNode(id=2, name="A", parent_id=3),
            MenuNode(id=3, name="B", parent_id=2),
            MenuNode(id=4, name="Below cycle", parent_id=3),
            MenuNode(id=5, name="Fine", parent_id=1),
        ]
        tree = build_tree(nodes)

        assert sorted(node.id for node in tree.nodes()) == [1, 5]
        assert tree.report.cyclic_ids == [2, 3]
        assert tree.report.detached_ids == [4]
        assert tree.report.excluded_ids == [2, 3, 4]
        assert 3 not in tree
        assert tree.child_ids(3) == []

    def test_self_parent_is_a_cycle(self):
        tree = build_tree([MenuNode(id=1, name="Loop", parent_id=1), MenuNode(id=2, name="Ok")])

        assert tree.root_ids == [2]
        assert tree.report.cyclic_ids == [1]

    def test_duplicate_id_rejected(self):
        with pytest.raises(ValidationError):
            build_tree([MenuNode(id=1, name="A"), MenuNode(id=1, name="B")])

    def test_empty_input(self):
        tree = build_tree([])

        assert tree.is_empty
        assert tree.root_ids == []
        assert flatten(tree) == []


class TestMenuTree:
    """Test suite for MenuTree navigation helpers."""

    def test_ancestors_and_descendants(self, sample_nodes):
        tree = build_tree(sample_nodes)

        assert tree.ancestor_ids(8) == [7]
        assert tree.ancestor_ids(7) == []
        assert tree.descendant_ids(2) == [3, 4]
        assert tree.subtree_ids(7) == [7, 8, 9]
        assert tree.subtree_ids(404) == []

    def test_would_create_cycle(self, sample_nodes):
        tree = build_tree(sample_nodes)

        assert tree.would_create_cycle(7, 8) is True
        assert tree.would_create_cycle(7, 7) is True
        assert tree.would_create_cycle(8, 2) is False
        assert tree.would_create_cycle(8, None) is False

    def test_restrict_drops_subtrees_of_dropped_nodes(self, sample_nodes):
        tree = build_tree(sample_nodes)

        restricted = tree.restrict({1, 3, 7, 8})

        # 3 is kept but its parent 2 is not, so 3 goes too
        assert sorted(node.id for node in restricted.nodes()) == [1, 7, 8]
        assert restricted.root_ids == [1, 7]
        assert len(tree) == 9

    def test_to_forest_nests_children(self, sample_nodes):
        forest = build_tree(sample_nodes).to_forest(lambda node: {"depth_hint": node.id})

        assert [item["id"] for item in forest] == [1, 2, 5, 7]
        sales = forest[1]
        assert [child["id"] for child in sales["children"]] == [3, 4]
        assert sales["children"][0]["children"] == []
        assert sales["depth_hint"] == 2

    def test_to_forest_handles_deep_chains(self):
        depth = 5000
        nodes = [
            MenuNode(id=i, name=f"Level {i}", parent_id=i - 1 if i > 1 else None)
            for i in range(1, depth + 1)
        ]

        forest = build_tree(nodes).to_forest()

        ids = []
        level = forest
        while level:
            assert len(level) == 1
            ids.append(level[0]["id"])
            level = level[0]["children"]
        assert ids == list(range(1, depth + 1))

    def test_equality_ignores_report(self, sample_nodes):
        assert build_tree(sample_nodes) == build_tree(sample_nodes)
        assert build_tree(sample_nodes) != build_tree(sample_nodes[:3])
        assert isinstance(build_tree([]), MenuTree)
