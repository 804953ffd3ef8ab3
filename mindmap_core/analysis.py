"""
Mind-map analysis - Structure and summary utilities.

Provides read-only statistics about a mind map for the HTTP API, the CLI
and the editor's status bar.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .models import NodeShape

if TYPE_CHECKING:
    from .graph import GraphModel


@dataclass
class TreeInfo:
    """One tree of the forest."""
    root_id: str
    root_text: str
    node_ids: list[str] = field(default_factory=list)
    depth: int = 0

    @property
    def size(self) -> int:
        return len(self.node_ids)


@dataclass
class MindMapSummary:
    """Complete summary of a mind map's structure."""
    title: str
    total_nodes: int
    total_connections: int
    root_count: int
    max_depth: int
    nodes_by_shape: dict[str, int]
    tags_in_use: list[str]
    largest_trees: list[TreeInfo]

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "title": self.title,
            "total_nodes": self.total_nodes,
            "total_connections": self.total_connections,
            "root_count": self.root_count,
            "max_depth": self.max_depth,
            "nodes_by_shape": self.nodes_by_shape,
            "tags_in_use": self.tags_in_use,
            "largest_trees": [
                {
                    "root_id": t.root_id,
                    "root_text": t.root_text,
                    "size": t.size,
                    "depth": t.depth
                }
                for t in self.largest_trees
            ]
        }


def find_trees(graph: "GraphModel") -> list[TreeInfo]:
    """
    Split the forest into its trees, one per root.

    Args:
        graph: The graph to analyze

    Returns:
        List of TreeInfo objects in root paint order
    """
    trees: list[TreeInfo] = []
    for root in graph.roots():
        info = TreeInfo(root_id=root.id, root_text=root.text, node_ids=[root.id])
        # (node, depth) pairs, depth-first
        stack = [(child, 1) for child in reversed(graph.get_children(root))]
        while stack:
            node, depth = stack.pop()
            info.node_ids.append(node.id)
            info.depth = max(info.depth, depth)
            stack.extend((c, depth + 1) for c in reversed(graph.get_children(node)))
        trees.append(info)
    return trees


def summarize_mindmap(graph: "GraphModel", title: str = "", top_n: int = 5) -> MindMapSummary:
    """
    Generate a summary of a mind map.

    Args:
        graph: The graph to summarize
        title: Mind-map title to report
        top_n: Number of largest trees to include

    Returns:
        MindMapSummary object with all analysis results
    """
    nodes = graph.nodes

    # Count by shape
    shape_counts: dict[str, int] = defaultdict(int)
    for node in nodes:
        shape_counts[NodeShape(node.shape).value] += 1

    # Collect all tags
    all_tags: set[str] = set()
    for node in nodes:
        all_tags.update(node.tags)

    trees = find_trees(graph)
    largest = sorted(trees, key=lambda t: t.size, reverse=True)[:top_n]

    return MindMapSummary(
        title=title,
        total_nodes=len(nodes),
        total_connections=graph.connection_count(),
        root_count=len(trees),
        max_depth=max((t.depth for t in trees), default=0),
        nodes_by_shape=dict(shape_counts),
        tags_in_use=sorted(all_tags),
        largest_trees=largest
    )
