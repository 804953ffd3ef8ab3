"""Tests for generation coloring."""

from mindmap_core import GraphModel, Node, child_color, generation_color
from mindmap_core.coloring import (
    COLOR_PALETTES,
    COLOR_POOL,
    colors_from_json,
    colors_to_json,
    find_palette,
    pick_color,
)


class TestPickColor:
    """Tests for palette lookup."""

    def test_default_root_palette(self):
        assert [pick_color(d, "#6366f1") for d in range(5)] == list(COLOR_PALETTES[0])

    def test_palette_found_by_any_member(self):
        assert find_palette("#dc2626") is COLOR_PALETTES[0]

    def test_past_palette_skips_palette_colors(self):
        palette = COLOR_PALETTES[0]
        color = pick_color(len(palette), "#6366f1")
        assert color not in palette
        assert color in COLOR_POOL

    def test_unknown_root_uses_pool(self):
        assert pick_color(3, "#000000") == COLOR_POOL[3]
        assert pick_color(19, "#000000") == COLOR_POOL[3]


class TestGenerationColor:
    """Tests for the per-depth memo."""

    def test_first_assignment_sticks(self):
        assigned = {}
        first = generation_color(1, "#6366f1", assigned)
        # A different root color later does not change depth 1
        assert generation_color(1, "#ef4444", assigned) == first
        assert assigned == {1: first}

    def test_child_color_uses_parent_depth(self):
        g = GraphModel()
        root = g.add_node(Node(color="#6366f1"))
        mid = g.add_node(Node())
        g.connect(root, mid)
        assigned = {0: "#6366f1"}
        assert child_color(g, root, assigned) == "#dc2626"
        assert child_color(g, mid, assigned) == "#059669"


class TestJsonForm:
    """Tests for JSON conversion."""

    def test_to_json_sorted_string_keys(self):
        assert list(colors_to_json({2: "#b", 0: "#a"}).items()) == [("0", "#a"), ("2", "#b")]

    def test_from_json_lenient(self):
        data = {"0": "#a", "-1": "#b", "two": "#c", "3": 7}
        assert colors_from_json(data) == {0: "#a"}
        assert colors_from_json(None) == {}
