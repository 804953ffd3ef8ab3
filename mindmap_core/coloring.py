"""
Generation coloring - one color per depth level.

A depth gets its color the first time a node is created at that depth and
keeps it for the lifetime of the mind map. The assignment lives in a plain
`dict[int, str]` owned by the session; it is passed in explicitly and
saved with every snapshot so colors stay stable across undo/redo/reload.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .graph import GraphModel
    from .models import Node


# Each palette is the color sequence for depths 0..4 of a tree whose root
# uses the palette's first color (or any color it contains).
COLOR_PALETTES: tuple[tuple[str, ...], ...] = (
    ("#6366f1", "#dc2626", "#059669", "#d97706", "#7c3aed"),
    ("#ef4444", "#3b82f6", "#10b981", "#f59e0b", "#8b5cf6"),
    ("#10b981", "#f59e0b", "#ef4444", "#6366f1", "#06b6d4"),
    ("#3b82f6", "#dc2626", "#059669", "#7c3aed", "#ea580c"),
    ("#f59e0b", "#10b981", "#ef4444", "#06b6d4", "#8b5cf6"),
    ("#06b6d4", "#dc2626", "#059669", "#f59e0b", "#6366f1"),
    ("#8b5cf6", "#10b981", "#dc2626", "#f59e0b", "#3b82f6"),
    ("#f97316", "#3b82f6", "#10b981", "#8b5cf6", "#dc2626"),
)

# Shared pool for depths past the end of a palette
COLOR_POOL: tuple[str, ...] = (
    "#6366f1",  # Purple
    "#dc2626",  # Red
    "#059669",  # Green
    "#d97706",  # Orange
    "#7c3aed",  # Violet
    "#0891b2",  # Sky Blue
    "#be185d",  # Pink
    "#166534",  # Dark Green
    "#ea580c",  # Dark Orange
    "#4338ca",  # Indigo
    "#be123c",  # Rose
    "#047857",  # Emerald
    "#c2410c",  # Red-Orange
    "#5b21b6",  # Purple-Violet
    "#0369a1",  # Light Blue
    "#a21caf",  # Magenta
)


def find_palette(root_color: str) -> tuple[str, ...] | None:
    """Return the first palette containing `root_color`, if any."""
    for palette in COLOR_PALETTES:
        if root_color in palette:
            return palette
    return None


def pick_color(depth: int, root_color: str) -> str:
    """Compute the color for a depth without consulting any memo."""
    palette = find_palette(root_color)
    if palette is None:
        return COLOR_POOL[depth % len(COLOR_POOL)]
    if depth < len(palette):
        return palette[depth]

    # Past the palette: cycle through pool colors the palette does not use
    available = [c for c in COLOR_POOL if c not in palette]
    return available[(depth - len(palette)) % len(available)]


def generation_color(depth: int, root_color: str, assigned: dict[int, str]) -> str:
    """
    Get the color for a generation, assigning it on first use.

    Args:
        depth: Distance in edges from the root
        root_color: Color of the depth-0 ancestor
        assigned: Depth -> color memo, updated in place

    Returns:
        The color for this depth
    """
    if depth not in assigned:
        assigned[depth] = pick_color(depth, root_color)
    return assigned[depth]


def child_color(graph: "GraphModel", parent: "Node", assigned: dict[int, str]) -> str:
    """Color for a new child created under `parent`."""
    depth = graph.depth(parent) + 1
    root = graph.root_of(parent)
    return generation_color(depth, root.color, assigned)


def colors_to_json(assigned: dict[int, str]) -> dict[str, str]:
    """JSON objects only have string keys."""
    return {str(depth): color for depth, color in sorted(assigned.items())}


def colors_from_json(data) -> dict[int, str]:
    """Parse a `generationColors` object, ignoring entries that do not fit."""
    colors: dict[int, str] = {}
    if not isinstance(data, dict):
        return colors
    for key, value in data.items():
        try:
            depth = int(key)
        except (TypeError, ValueError):
            continue
        if isinstance(value, str) and depth >= 0:
            colors[depth] = value
    return colors
