"""
Graph model - the node forest behind a mind map.

The GraphModel is the sole owner of its nodes:
- An ordered list gives paint order (last = topmost)
- An id index gives O(1) lookups
- Parent links are ids, never object references

Every parent/child change goes through connect/disconnect/remove_node so
`parent_id` and the parent's `child_ids` are always updated together.
"""

import logging
from typing import Iterator, Optional

from .errors import ValidationError
from .models import Node

logger = logging.getLogger(__name__)

CLONE_OFFSET = 20


class GraphModel:
    """Ordered set of nodes linked into a forest of parent/child edges."""

    def __init__(self):
        self._nodes: list[Node] = []
        self._index: dict[str, Node] = {}

    # --- Container protocol ---

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[Node]:
        return iter(self._nodes)

    def __contains__(self, item) -> bool:
        node_id = item.id if isinstance(item, Node) else item
        return node_id in self._index

    @property
    def nodes(self) -> list[Node]:
        """Snapshot of the node sequence in paint order."""
        return list(self._nodes)

    # --- Lookups ---

    def get_node(self, node_id: str) -> Optional[Node]:
        """Get a node by ID (O(1) lookup)."""
        return self._index.get(node_id)

    def get_parent(self, node: Node) -> Optional[Node]:
        if node.parent_id is None:
            return None
        return self._index.get(node.parent_id)

    def get_children(self, node: Node) -> list[Node]:
        return [self._index[cid] for cid in node.child_ids if cid in self._index]

    def roots(self) -> list[Node]:
        """Nodes without a parent, in paint order."""
        return [n for n in self._nodes if n.parent_id is None]

    def depth(self, node: Node) -> int:
        """Number of edges between `node` and its root."""
        depth = 0
        current = node
        while current.parent_id is not None:
            parent = self._index.get(current.parent_id)
            if parent is None:
                break
            depth += 1
            current = parent
        return depth

    def root_of(self, node: Node) -> Node:
        current = node
        while current.parent_id is not None:
            parent = self._index.get(current.parent_id)
            if parent is None:
                break
            current = parent
        return current

    def is_ancestor(self, ancestor: Node, node: Node) -> bool:
        """True if `ancestor` lies on the parent chain above `node`."""
        current = self.get_parent(node)
        while current is not None:
            if current.id == ancestor.id:
                return True
            current = self.get_parent(current)
        return False

    def connection_count(self) -> int:
        return sum(len(n.child_ids) for n in self._nodes)

    # --- Mutation ---

    def add_node(self, node: Node) -> Node:
        """Append a node on top of the paint order."""
        if node.id in self._index:
            raise ValidationError(f"Duplicate node id: {node.id}", node_id=node.id)
        self._nodes.append(node)
        self._index[node.id] = node
        return node

    def remove_node(self, node: Node) -> list[Node]:
        """
        Remove a node together with its whole subtree.

        The node is detached from its parent first; descendants are collected
        pre-order. Removing a node that is not in the graph does nothing.

        Returns:
            The removed nodes (node first, then its descendants)
        """
        if node.id not in self._index:
            return []

        node = self._index[node.id]
        parent = self.get_parent(node)
        if parent is not None:
            self._unlink(parent, node)

        removed = self.subtree(node)
        removed_ids = {n.id for n in removed}
        self._nodes = [n for n in self._nodes if n.id not in removed_ids]
        for node_id in removed_ids:
            self._index.pop(node_id, None)
        return removed

    def connect(self, parent: Node, child: Node) -> bool:
        """
        Make `child` the last child of `parent`.

        A child that already hangs under another parent is moved. Links that
        would close a cycle (including self-links) are refused.

        Returns:
            True if the edge exists afterwards, False if it was refused
        """
        parent = self._index.get(parent.id)
        child = self._index.get(child.id)
        if parent is None or child is None:
            logger.warning("connect: both nodes must belong to the graph")
            return False
        if parent.id == child.id or self.is_ancestor(child, parent):
            logger.warning("connect: refusing %s -> %s, it would create a cycle",
                           parent.id, child.id)
            return False
        if child.parent_id == parent.id:
            return True

        old_parent = self.get_parent(child)
        if old_parent is not None:
            self._unlink(old_parent, child)

        child.parent_id = parent.id
        parent.child_ids.append(child.id)
        return True

    def disconnect(self, a: Node, b: Node) -> bool:
        """
        Remove the direct edge between two nodes, in whichever direction it runs.

        Returns:
            True if an edge was removed, False if the nodes are not adjacent
        """
        a = self._index.get(a.id)
        b = self._index.get(b.id)
        if a is None or b is None:
            return False
        if b.parent_id == a.id:
            self._unlink(a, b)
            return True
        if a.parent_id == b.id:
            self._unlink(b, a)
            return True
        logger.debug("disconnect: no direct connection between %s and %s", a.id, b.id)
        return False

    def _unlink(self, parent: Node, child: Node):
        if child.id in parent.child_ids:
            parent.child_ids.remove(child.id)
        child.parent_id = None

    # --- Traversal ---

    def get_all_descendants(self, node: Node) -> list[Node]:
        """All descendants of `node`, depth-first pre-order."""
        descendants: list[Node] = []
        stack = list(reversed(self.get_children(node)))
        while stack:
            current = stack.pop()
            descendants.append(current)
            stack.extend(reversed(self.get_children(current)))
        return descendants

    def subtree(self, node: Node) -> list[Node]:
        return [node] + self.get_all_descendants(node)

    def height(self, node: Node) -> int:
        """Edges on the longest downward path from `node` (0 for a leaf)."""
        height = 0
        stack = [(node, 0)]
        while stack:
            current, level = stack.pop()
            height = max(height, level)
            stack.extend((child, level + 1) for child in self.get_children(current))
        return height

    # --- Copies and z-order ---

    def clone(self, node: Node) -> Node:
        """
        Create a detached copy of a node with a fresh id.

        The copy is offset by (+20, +20) and keeps the visual style and text,
        but not the hierarchy. It is not added to the graph.
        """
        return Node(
            x=node.x + CLONE_OFFSET,
            y=node.y + CLONE_OFFSET,
            text=node.text,
            shape=node.shape,
            color=node.color,
            text_color=node.text_color,
            font_size=node.font_size,
            font_weight=node.font_weight,
            icon=node.icon,
        )

    def bring_to_front(self, node: Node) -> bool:
        node = self._index.get(node.id)
        if node is None:
            return False
        self._nodes.remove(node)
        self._nodes.append(node)
        return True

    def send_to_back(self, node: Node) -> bool:
        node = self._index.get(node.id)
        if node is None:
            return False
        self._nodes.remove(node)
        self._nodes.insert(0, node)
        return True
