"""
Tests for GraphModel - the node forest.

Tests cover:
1. Adding nodes and duplicate ids
2. Connecting, reparenting and cycle refusal
3. Disconnecting in either direction
4. Subtree removal
5. Traversal helpers (depth, roots, descendants)
6. Cloning and z-order
"""

import pytest

from mindmap_core import GraphModel, Node, ValidationError
from mindmap_core.graph import CLONE_OFFSET


class TestAddNode:
    """Tests for adding nodes."""

    def test_add_appends_on_top(self, graph):
        a = graph.add_node(Node(id="a"))
        b = graph.add_node(Node(id="b"))
        assert graph.nodes == [a, b]
        assert len(graph) == 2

    def test_duplicate_id_rejected(self, graph):
        graph.add_node(Node(id="a"))
        with pytest.raises(ValidationError):
            graph.add_node(Node(id="a"))
        assert len(graph) == 1

    def test_contains_by_node_or_id(self, graph):
        node = graph.add_node(Node(id="a"))
        assert node in graph
        assert "a" in graph
        assert "missing" not in graph

    def test_generated_ids_are_unique(self):
        ids = {Node().id for _ in range(200)}
        assert len(ids) == 200


class TestConnect:
    """Tests for parent/child links."""

    def test_connect_updates_both_sides(self, graph):
        p = graph.add_node(Node(id="p"))
        c = graph.add_node(Node(id="c"))
        assert graph.connect(p, c) is True
        assert c.parent_id == "p"
        assert p.child_ids == ["c"]

    def test_children_keep_insertion_order(self, small_tree):
        g, n = small_tree
        assert [c.id for c in g.get_children(n["R"])] == ["A", "B"]

    def test_connect_twice_is_noop(self, small_tree):
        g, n = small_tree
        assert g.connect(n["R"], n["A"]) is True
        assert n["R"].child_ids == ["A", "B"]

    def test_reparent_detaches_from_old_parent(self, small_tree):
        g, n = small_tree
        assert g.connect(n["B"], n["C"]) is True
        assert n["C"].parent_id == "B"
        assert "C" not in n["A"].child_ids
        assert n["B"].child_ids == ["C"]

    def test_self_link_refused(self, graph):
        a = graph.add_node(Node(id="a"))
        assert graph.connect(a, a) is False
        assert a.parent_id is None
        assert a.child_ids == []

    def test_cycle_refused(self, small_tree):
        g, n = small_tree
        assert g.connect(n["C"], n["R"]) is False
        assert n["R"].parent_id is None
        assert n["C"].child_ids == []

    def test_connect_foreign_node_refused(self, graph):
        a = graph.add_node(Node(id="a"))
        assert graph.connect(a, Node(id="outsider")) is False


class TestDisconnect:
    """Tests for removing edges."""

    def test_disconnect_parent_child(self, small_tree):
        g, n = small_tree
        assert g.disconnect(n["R"], n["A"]) is True
        assert n["A"].parent_id is None
        assert n["R"].child_ids == ["B"]

    def test_disconnect_reverse_order(self, small_tree):
        g, n = small_tree
        assert g.disconnect(n["C"], n["A"]) is True
        assert n["C"].parent_id is None
        assert n["A"].child_ids == []

    def test_disconnect_unrelated_returns_false(self, small_tree):
        g, n = small_tree
        assert g.disconnect(n["A"], n["B"]) is False
        assert len(g) == 4


class TestRemoveNode:
    """Tests for subtree removal."""

    def test_removes_subtree(self, small_tree):
        g, n = small_tree
        removed = g.remove_node(n["A"])
        assert [x.id for x in removed] == ["A", "C"]
        assert [x.id for x in g] == ["R", "B"]
        assert n["R"].child_ids == ["B"]

    def test_remove_root_clears_graph(self, small_tree):
        g, n = small_tree
        g.remove_node(n["R"])
        assert len(g) == 0
        assert g.get_node("C") is None

    def test_remove_missing_is_noop(self, small_tree):
        g, _ = small_tree
        assert g.remove_node(Node(id="ghost")) == []
        assert len(g) == 4


class TestTraversal:
    """Tests for lookups and traversal helpers."""

    def test_depth_and_root(self, small_tree):
        g, n = small_tree
        assert g.depth(n["R"]) == 0
        assert g.depth(n["C"]) == 2
        assert g.root_of(n["C"]) is n["R"]

    def test_roots_in_paint_order(self, small_tree):
        g, _ = small_tree
        extra = g.add_node(Node(id="X"))
        assert [r.id for r in g.roots()] == ["R", "X"]
        assert extra.is_root

    def test_descendants_preorder(self, small_tree):
        g, n = small_tree
        assert [d.id for d in g.get_all_descendants(n["R"])] == ["A", "C", "B"]

    def test_deep_chain_does_not_recurse(self, graph):
        previous = graph.add_node(Node(id="n0"))
        for i in range(1, 1500):
            node = graph.add_node(Node(id=f"n{i}"))
            graph.connect(previous, node)
            previous = node
        assert len(graph.get_all_descendants(graph.get_node("n0"))) == 1499
        assert graph.depth(previous) == 1499

    def test_height(self, small_tree):
        g, n = small_tree
        assert g.height(n["R"]) == 2
        assert g.height(n["A"]) == 1
        assert g.height(n["C"]) == 0

    def test_connection_count(self, small_tree):
        g, _ = small_tree
        assert g.connection_count() == 3


class TestCloneAndZOrder:
    """Tests for cloning and paint order."""

    def test_clone_offsets_and_detaches(self, small_tree):
        g, n = small_tree
        n["A"].color = "#123456"
        n["A"].icon = "star"
        copy = g.clone(n["A"])
        assert copy.id != "A"
        assert (copy.x, copy.y) == (n["A"].x + CLONE_OFFSET, n["A"].y + CLONE_OFFSET)
        assert copy.color == "#123456"
        assert copy.icon == "star"
        assert copy.text == "A"
        assert copy.parent_id is None
        assert copy.child_ids == []
        assert copy not in g

    def test_bring_to_front(self, small_tree):
        g, n = small_tree
        assert g.bring_to_front(n["R"]) is True
        assert g.nodes[-1] is n["R"]

    def test_send_to_back(self, small_tree):
        g, n = small_tree
        assert g.send_to_back(n["C"]) is True
        assert g.nodes[0] is n["C"]

    def test_zorder_missing_node(self, graph):
        assert graph.bring_to_front(Node(id="ghost")) is False
        assert graph.send_to_back(Node(id="ghost")) is False


def test_nodes_property_is_a_copy():
    g = GraphModel()
    g.add_node(Node(id="a"))
    g.nodes.clear()
    assert len(g) == 1
