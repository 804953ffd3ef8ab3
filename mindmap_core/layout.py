"""
Layout algorithms for mind-map nodes.

Provides the layout strategies used by the editor:
- Tree: Recursive subtree placement fanning out from a root
- Radial: Concentric rings around a center node, one ring per depth
- Force: Force-directed layout using repulsion and parent/child springs

All layout functions move nodes in place. None of them change the
hierarchy, and none of them yield or stop early.
"""

import logging
import math
from collections import deque
from typing import TYPE_CHECKING, Iterable, NamedTuple, Optional

if TYPE_CHECKING:
    from .graph import GraphModel
    from .models import Node

logger = logging.getLogger(__name__)


# Tree layout parameters (sibling spacing, level spacing) per orientation
HORIZONTAL_SPACING = (200, 150)
VERTICAL_SPACING = (150, 200)

RADIAL_RING_SPACING = 150

# Force-directed parameters
FORCE_ITERATIONS = 50
FORCE_REPULSION = 5000
FORCE_ATTRACTION = 0.01
FORCE_DAMPING = 0.9
FORCE_MIN_DISTANCE = 1


class Footprint(NamedTuple):
    """Space claimed by a laid-out subtree."""
    width: float
    height: float


def apply_tree_layout(
    graph: "GraphModel",
    root: "Node",
    horizontal: bool = True
) -> Footprint:
    """
    Arrange a subtree as a tree growing away from its root.

    The root keeps its position. Each node's children are placed one level
    further out and centered on the parent's axis, `spacing` apart, in
    child order. Positions are assigned top-down (pre-order) and footprints
    are summed bottom-up afterwards; both passes use an explicit stack, so
    chain depth is not limited by the recursion limit.

    Args:
        graph: Graph owning the nodes
        root: Subtree root (not moved)
        horizontal: Grow left-to-right (True) or top-to-bottom (False)

    Returns:
        The footprint of the whole subtree
    """
    spacing, level_spacing = HORIZONTAL_SPACING if horizontal else VERTICAL_SPACING

    placed: list["Node"] = []
    stack = [(root, root.x, root.y)]
    while stack:
        node, x, y = stack.pop()
        node.x = x
        node.y = y
        placed.append(node)

        children = graph.get_children(node)
        first_offset = (len(children) - 1) * spacing / 2
        positions = []
        for index, child in enumerate(children):
            fan = index * spacing - first_offset
            if horizontal:
                positions.append((child, x + level_spacing, y + fan))
            else:
                positions.append((child, x + fan, y + level_spacing))
        stack.extend(reversed(positions))

    # Children always come after their parent in `placed`
    footprints: dict[str, Footprint] = {}
    for node in reversed(placed):
        children = graph.get_children(node)
        if not children:
            footprints[node.id] = Footprint(spacing, level_spacing)
            continue
        sizes = [footprints[child.id] for child in children]
        footprints[node.id] = Footprint(
            max(spacing, sum(s.width for s in sizes)),
            max(level_spacing, level_spacing + max(s.height for s in sizes)),
        )

    return footprints[root.id]


def build_layers(graph: "GraphModel", center: "Node") -> list[list["Node"]]:
    """
    Group the subtree under `center` by depth, breadth-first.

    Each node is taken once even if it is reachable along several paths.
    """
    layers: list[list["Node"]] = []
    visited: set[str] = {center.id}
    queue = deque([(center, 0)])

    while queue:
        node, layer = queue.popleft()
        if layer == len(layers):
            layers.append([])
        layers[layer].append(node)
        for child in graph.get_children(node):
            if child.id in visited:
                continue
            visited.add(child.id)
            queue.append((child, layer + 1))

    return layers


def apply_radial_layout(graph: "GraphModel", center: "Node") -> list[list["Node"]]:
    """
    Place each depth of a subtree on a ring around its center node.

    Ring k has radius k * 150; its nodes are spread at equal angles
    starting from angle 0. The center node stays where it is.

    Returns:
        The layers that were placed (layer 0 is the center)
    """
    layers = build_layers(graph, center)

    for layer_index, layer in enumerate(layers):
        if layer_index == 0:
            continue
        radius = layer_index * RADIAL_RING_SPACING
        angle_step = 2 * math.pi / len(layer)
        for node_index, node in enumerate(layer):
            angle = node_index * angle_step
            node.x = center.x + math.cos(angle) * radius
            node.y = center.y + math.sin(angle) * radius

    return layers


def apply_force_directed_layout(
    graph: "GraphModel",
    nodes: Optional[Iterable["Node"]] = None,
    iterations: int = FORCE_ITERATIONS,
    repulsion: float = FORCE_REPULSION,
    attraction: float = FORCE_ATTRACTION,
    damping: float = FORCE_DAMPING
) -> list["Node"]:
    """
    Arrange nodes by simulating repulsion and parent/child springs.

    Simulates physical forces:
    - Every node pushes every other node away (repulsion / distance^2)
    - Each parent/child edge pulls its endpoints together (linear spring)

    The accumulated force is applied directly as this step's displacement
    (scaled by `damping`); there is no velocity and no convergence check.

    Args:
        graph: Graph owning the nodes
        nodes: Nodes to move (all graph nodes if None)
        iterations: Number of simulation steps
        repulsion: Repulsion constant
        attraction: Spring constant along edges
        damping: Displacement scale per step

    Returns:
        The nodes that were moved
    """
    nodes = list(graph) if nodes is None else list(nodes)
    if not nodes:
        return nodes

    members = {n.id for n in nodes}

    for _ in range(iterations):
        for node in nodes:
            node.fx = 0.0
            node.fy = 0.0

        for node in nodes:
            # Repulsion from every other node
            for other in nodes:
                if other is node:
                    continue
                dx = node.x - other.x
                dy = node.y - other.y
                distance = max(FORCE_MIN_DISTANCE, math.sqrt(dx * dx + dy * dy))
                force = repulsion / (distance * distance)
                node.fx += dx / distance * force
                node.fy += dy / distance * force

            # Springs toward children
            for child in graph.get_children(node):
                if child.id not in members:
                    continue
                dx = child.x - node.x
                dy = child.y - node.y
                node.fx += dx * attraction
                node.fy += dy * attraction
                child.fx -= dx * attraction
                child.fy -= dy * attraction

        for node in nodes:
            node.x += node.fx * damping
            node.y += node.fy * damping

    for node in nodes:
        node.fx = 0.0
        node.fy = 0.0

    return nodes


def auto_layout(graph: "GraphModel") -> Optional[str]:
    """
    Pick and apply a layout for the whole graph.

    A single root gets a horizontal tree layout; a forest (or a graph with
    no root at all) gets the force-directed layout over every node.

    Returns:
        "tree", "force", or None for an empty graph
    """
    if len(graph) == 0:
        return None

    roots = graph.roots()
    if len(roots) == 1:
        apply_tree_layout(graph, roots[0], horizontal=True)
        strategy = "tree"
    else:
        apply_force_directed_layout(graph)
        strategy = "force"

    logger.debug("auto_layout applied %s layout to %d nodes", strategy, len(graph))
    return strategy
