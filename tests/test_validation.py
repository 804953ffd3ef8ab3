"""Tests for mind-map validation."""

from mindmap_core import GraphModel, IssueSeverity, Node, validate_mindmap, validation_summary
from mindmap_core.validation import find_cycle_members


def _errors(issues):
    return [i for i in issues if i.severity == IssueSeverity.ERROR]


class TestValidateMindmap:
    """Tests for validate_mindmap."""

    def test_empty_is_info(self, graph):
        issues = validate_mindmap(graph)
        assert len(issues) == 1
        assert issues[0].severity == IssueSeverity.INFO

    def test_clean_tree(self, small_tree):
        g, _ = small_tree
        assert validate_mindmap(g) == []
        assert validation_summary(validate_mindmap(g))["valid"] is True

    def test_default_text_warns(self, graph):
        graph.add_node(Node())
        issues = validate_mindmap(graph)
        assert [i.severity for i in issues] == [IssueSeverity.WARNING]

    def test_dangling_parent_reference(self, graph):
        graph.add_node(Node(id="a", text="A", parent_id="ghost"))
        issues = _errors(validate_mindmap(graph))
        assert issues[0].node_id == "a"
        assert "ghost" in issues[0].message

    def test_one_sided_link(self, graph):
        graph.add_node(Node(id="p", text="P", child_ids=["c"]))
        graph.add_node(Node(id="c", text="C"))
        assert len(_errors(validate_mindmap(graph))) == 1

    def test_cycle_detected(self, graph):
        # Built by hand; connect() would refuse this
        graph.add_node(Node(id="a", text="A", parent_id="b", child_ids=["b"]))
        graph.add_node(Node(id="b", text="B", parent_id="a", child_ids=["a"]))
        assert find_cycle_members(graph) == ["a", "b"]
        assert validation_summary(validate_mindmap(graph))["valid"] is False

    def test_issue_to_dict(self, graph):
        graph.add_node(Node(id="a"))
        result = validate_mindmap(graph)[0].to_dict()
        assert result == {"type": "warning", "message": "Node has default or empty text", "node_id": "a"}


def test_summary_counts():
    g = GraphModel()
    g.add_node(Node(id="a"))
    g.add_node(Node(id="b", text="B", parent_id="ghost"))
    summary = validation_summary(validate_mindmap(g))
    assert summary == {"total": 2, "errors": 1, "warnings": 1, "info": 0, "valid": False}
