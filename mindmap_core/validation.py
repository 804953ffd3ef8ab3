"""
Mind-map validation - Check a node forest for structural issues.

Used by the HTTP API and the CLI to report problems in loaded or edited
mind maps. Validation only reads the graph.
"""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from .models import DEFAULT_NODE_TEXT

if TYPE_CHECKING:
    from .graph import GraphModel


class IssueSeverity(str, Enum):
    """Severity levels for validation issues."""
    ERROR = "error"      # Invalid state, must be fixed
    WARNING = "warning"  # Potential problem, should review
    INFO = "info"        # Informational, may be intentional


@dataclass
class ValidationIssue:
    """A single validation issue found in a mind map."""
    severity: IssueSeverity
    message: str
    node_id: str | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        result = {
            "type": self.severity.value,
            "message": self.message
        }
        if self.node_id:
            result["node_id"] = self.node_id
        return result


def validate_mindmap(graph: "GraphModel") -> list[ValidationIssue]:
    """
    Validate a mind map and return a list of issues.

    Checks for:
    - Empty mind map - INFO
    - Parent or child references to missing nodes - ERROR
    - Parent/child links that only exist on one side - ERROR
    - Nodes on a parent cycle - ERROR
    - Non-positive node size - ERROR
    - Repeated child entries - WARNING
    - Default or empty text - WARNING

    Args:
        graph: The graph to validate

    Returns:
        List of ValidationIssue objects
    """
    issues: list[ValidationIssue] = []

    nodes = graph.nodes
    if not nodes:
        issues.append(ValidationIssue(
            severity=IssueSeverity.INFO,
            message="Mind map has no nodes"
        ))
        return issues

    for node in nodes:
        # Parent side
        if node.parent_id is not None:
            parent = graph.get_node(node.parent_id)
            if parent is None:
                issues.append(ValidationIssue(
                    severity=IssueSeverity.ERROR,
                    message=f"Node references non-existent parent: {node.parent_id}",
                    node_id=node.id
                ))
            elif node.id not in parent.child_ids:
                issues.append(ValidationIssue(
                    severity=IssueSeverity.ERROR,
                    message=f"Parent {parent.id} does not list this node as a child",
                    node_id=node.id
                ))

        # Child side
        seen: set[str] = set()
        for child_id in node.child_ids:
            if child_id in seen:
                issues.append(ValidationIssue(
                    severity=IssueSeverity.WARNING,
                    message=f"Child {child_id} is listed more than once",
                    node_id=node.id
                ))
                continue
            seen.add(child_id)

            child = graph.get_node(child_id)
            if child is None:
                issues.append(ValidationIssue(
                    severity=IssueSeverity.ERROR,
                    message=f"Node references non-existent child: {child_id}",
                    node_id=node.id
                ))
            elif child.parent_id != node.id:
                issues.append(ValidationIssue(
                    severity=IssueSeverity.ERROR,
                    message=f"Child {child_id} has a different parent",
                    node_id=node.id
                ))

        if node.width <= 0 or node.height <= 0:
            issues.append(ValidationIssue(
                severity=IssueSeverity.ERROR,
                message="Node has a non-positive size",
                node_id=node.id
            ))

        if not node.text or node.text.strip() == "" or node.text == DEFAULT_NODE_TEXT:
            issues.append(ValidationIssue(
                severity=IssueSeverity.WARNING,
                message="Node has default or empty text",
                node_id=node.id
            ))

    for node_id in find_cycle_members(graph):
        issues.append(ValidationIssue(
            severity=IssueSeverity.ERROR,
            message="Node is part of a parent cycle",
            node_id=node_id
        ))

    return issues


def find_cycle_members(graph: "GraphModel") -> list[str]:
    """
    Ids of nodes that are their own ancestor.

    Follows each parent chain once; chains already known to end at a root
    are not walked again.
    """
    safe: set[str] = set()
    on_cycle: set[str] = set()

    for node in graph.nodes:
        path: list[str] = []
        in_path: set[str] = set()
        current = node
        while current is not None and current.id not in safe and current.id not in on_cycle:
            if current.id in in_path:
                start = path.index(current.id)
                on_cycle.update(path[start:])
                break
            path.append(current.id)
            in_path.add(current.id)
            current = graph.get_parent(current)
        safe.update(i for i in path if i not in on_cycle)

    return [n.id for n in graph.nodes if n.id in on_cycle]


def validation_summary(issues: list[ValidationIssue]) -> dict:
    """
    Create a summary of validation issues.

    Args:
        issues: List of validation issues

    Returns:
        Dictionary with counts by severity
    """
    errors = len([i for i in issues if i.severity == IssueSeverity.ERROR])
    return {
        "total": len(issues),
        "errors": errors,
        "warnings": len([i for i in issues if i.severity == IssueSeverity.WARNING]),
        "info": len([i for i in issues if i.severity == IssueSeverity.INFO]),
        "valid": errors == 0
    }
