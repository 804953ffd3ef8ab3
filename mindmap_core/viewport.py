"""
Viewport math - mapping between world and screen coordinates.

screen = world * zoom + offset. Every function here is pure: it takes a
ViewportState and returns a new one; nothing is stored.
"""

from typing import Iterable, Optional

from .models import MAX_ZOOM, MIN_ZOOM, Bounds, Node, ViewportState

ZOOM_STEP_IN = 1.1
ZOOM_STEP_OUT = 0.9
FIT_PADDING = 50


def clamp_zoom(zoom: float) -> float:
    """Clamp a zoom factor to the supported range."""
    return max(MIN_ZOOM, min(MAX_ZOOM, zoom))


def world_to_screen(view: ViewportState, x: float, y: float) -> tuple[float, float]:
    return (x * view.zoom + view.offset_x, y * view.zoom + view.offset_y)


def screen_to_world(view: ViewportState, x: float, y: float) -> tuple[float, float]:
    return ((x - view.offset_x) / view.zoom, (y - view.offset_y) / view.zoom)


def zoom_at(view: ViewportState, factor: float, screen_x: float, screen_y: float) -> ViewportState:
    """
    Zoom by `factor` while keeping the world point under (screen_x, screen_y) fixed.

    Args:
        view: Current viewport
        factor: Multiplicative zoom change (> 1 zooms in)
        screen_x: Anchor point on screen
        screen_y: Anchor point on screen

    Returns:
        The new viewport state
    """
    world_x, world_y = screen_to_world(view, screen_x, screen_y)
    zoom = clamp_zoom(view.zoom * factor)
    return ViewportState(
        offset_x=screen_x - world_x * zoom,
        offset_y=screen_y - world_y * zoom,
        zoom=zoom,
    )


def zoom_in(view: ViewportState) -> ViewportState:
    """Toolbar zoom in: scale around the world origin, offset untouched."""
    return view.model_copy(update={"zoom": clamp_zoom(view.zoom * ZOOM_STEP_IN)})


def zoom_out(view: ViewportState) -> ViewportState:
    return view.model_copy(update={"zoom": clamp_zoom(view.zoom * ZOOM_STEP_OUT)})


def pan(view: ViewportState, dx: float, dy: float) -> ViewportState:
    """Shift the view by a screen-space delta."""
    return view.model_copy(update={
        "offset_x": view.offset_x + dx,
        "offset_y": view.offset_y + dy,
    })


def zoom_percent(view: ViewportState) -> int:
    return round(view.zoom * 100)


def bounding_box(nodes: Iterable[Node]) -> Optional[Bounds]:
    """Union of all node bounds, or None when there are no nodes."""
    boxes = [n.bounds() for n in nodes]
    if not boxes:
        return None
    return Bounds(
        min(b.left for b in boxes),
        min(b.top for b in boxes),
        max(b.right for b in boxes),
        max(b.bottom for b in boxes),
    )


def fit_to_screen(
    nodes: Iterable[Node],
    screen_width: float,
    screen_height: float,
    padding: float = FIT_PADDING
) -> Optional[ViewportState]:
    """
    Compute a view that shows every node with `padding` pixels to spare.

    Never zooms in past 100%. The bounding box is centered on screen.

    Returns:
        The fitted viewport, or None when there are no nodes
    """
    box = bounding_box(nodes)
    if box is None:
        return None

    width = box.right - box.left
    height = box.bottom - box.top
    center_x = (box.left + box.right) / 2
    center_y = (box.top + box.bottom) / 2

    scale_x = (screen_width - padding * 2) / width
    scale_y = (screen_height - padding * 2) / height
    zoom = clamp_zoom(min(scale_x, scale_y, 1.0))

    return ViewportState(
        offset_x=screen_width / 2 - center_x * zoom,
        offset_y=screen_height / 2 - center_y * zoom,
        zoom=zoom,
    )
