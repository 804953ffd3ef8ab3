"""
Core data models for mind maps.

These models define the canonical in-memory schema:
- Nodes with geometry, presentation and content fields
- Viewport state (pan offset and zoom)
- Request models used by the HTTP API

Geometry Convention:
- Node `x`/`y` is the CENTER of the node in world coordinates
- Bounds extend `width / 2` and `height / 2` around that center

Hierarchy Convention:
- A node refers to its parent by id (`parent_id`) and lists its children
  by id (`child_ids`, insertion order significant)
- Only GraphModel rewrites these two fields, always on both sides at once
"""

from enum import Enum
from typing import NamedTuple, Optional
from pydantic import BaseModel, ConfigDict, Field
import uuid


MIN_ZOOM = 0.1
MAX_ZOOM = 3.0

DEFAULT_NODE_COLOR = "#6366f1"
DEFAULT_NODE_TEXT = "New Node"


class NodeShape(str, Enum):
    """Visual shapes for nodes on the canvas."""
    RECTANGLE = "rectangle"
    ROUNDED = "rounded"
    CIRCLE = "circle"
    DIAMOND = "diamond"
    HEXAGON = "hexagon"
    CLOUD = "cloud"


class BorderStyle(str, Enum):
    """Border styles for nodes."""
    SOLID = "solid"
    DASHED = "dashed"
    DOTTED = "dotted"


def generate_node_id() -> str:
    """Generate a unique node ID."""
    return f"node_{uuid.uuid4().hex[:12]}"


class Bounds(NamedTuple):
    """Axis-aligned rectangle in world coordinates."""
    left: float
    top: float
    right: float
    bottom: float

    def contains(self, x: float, y: float) -> bool:
        return self.left <= x <= self.right and self.top <= y <= self.bottom

    def inside(self, other: "Bounds") -> bool:
        """True if this rectangle lies fully within `other`."""
        return (self.left >= other.left and self.right <= other.right and
                self.top >= other.top and self.bottom <= other.bottom)


class Node(BaseModel):
    """A node in the mind map."""
    id: str = Field(default_factory=generate_node_id)
    x: float = 0
    y: float = 0
    width: float = Field(default=150, gt=0)
    height: float = Field(default=60, gt=0)
    text: str = DEFAULT_NODE_TEXT
    shape: NodeShape = NodeShape.ROUNDED
    color: str = DEFAULT_NODE_COLOR
    text_color: str = "#ffffff"
    border_style: BorderStyle = BorderStyle.SOLID
    border_color: str = "rgba(0, 0, 0, 0.1)"
    border_width: float = 2
    font_size: float = 14
    font_weight: str = "500"
    icon: Optional[str] = None
    z_index: int = 0
    notes: str = ""
    metadata: dict[str, str] = Field(default_factory=dict)
    tags: list[str] = Field(default_factory=list)
    links: list = Field(default_factory=list)
    attachments: list = Field(default_factory=list)
    collapsed: bool = False
    # Hierarchy (managed by GraphModel)
    parent_id: Optional[str] = None
    child_ids: list[str] = Field(default_factory=list)
    # Presentation state, never persisted
    selected: bool = Field(default=False, exclude=True)
    fx: float = Field(default=0.0, exclude=True)
    fy: float = Field(default=0.0, exclude=True)

    def bounds(self) -> Bounds:
        """Get the bounding box around the node's center."""
        half_w = self.width / 2
        half_h = self.height / 2
        return Bounds(self.x - half_w, self.y - half_h, self.x + half_w, self.y + half_h)

    def contains_point(self, x: float, y: float) -> bool:
        """Check whether a world point falls inside the bounds (edges included)."""
        return self.bounds().contains(x, y)

    @property
    def is_root(self) -> bool:
        return self.parent_id is None


class ViewportState(BaseModel):
    """Screen-space pan offset and zoom factor."""
    model_config = ConfigDict(frozen=True)

    offset_x: float = 0.0
    offset_y: float = 0.0
    zoom: float = Field(default=1.0, gt=0)


# --- API Request/Response Models ---

class CreateNodeRequest(BaseModel):
    """Request to create a free-standing node."""
    x: Optional[float] = None  # None = center of the current view
    y: Optional[float] = None
    text: str = DEFAULT_NODE_TEXT
    shape: Optional[NodeShape] = None


class UpdateNodeRequest(BaseModel):
    """Request to update an existing node (partial update)."""
    text: Optional[str] = None
    notes: Optional[str] = None
    x: Optional[float] = None
    y: Optional[float] = None
    width: Optional[float] = Field(default=None, gt=0)
    height: Optional[float] = Field(default=None, gt=0)
    shape: Optional[NodeShape] = None
    color: Optional[str] = None
    text_color: Optional[str] = None
    border_style: Optional[BorderStyle] = None
    border_color: Optional[str] = None
    border_width: Optional[float] = None
    font_size: Optional[float] = None
    font_weight: Optional[str] = None
    icon: Optional[str] = None
    collapsed: Optional[bool] = None
    tags: Optional[list[str]] = None
    metadata: Optional[dict[str, str]] = None


class ConnectRequest(BaseModel):
    """Request to link or unlink two nodes."""
    parent_id: str
    child_id: str


class NodeIdsRequest(BaseModel):
    """Request carrying a list of node ids (delete, z-order, copy)."""
    node_ids: list[str] = Field(default_factory=list)


class SelectRequest(BaseModel):
    node_id: str
    multi: bool = False


class BoxSelectRequest(BaseModel):
    """Selection rectangle in world coordinates (corners in any order)."""
    x1: float
    y1: float
    x2: float
    y2: float


class ZoomRequest(BaseModel):
    """Zoom by a factor anchored at a screen point."""
    factor: float = Field(gt=0)
    screen_x: float = 0
    screen_y: float = 0


class PanRequest(BaseModel):
    dx: float = 0
    dy: float = 0


class ResizeRequest(BaseModel):
    width: float = Field(gt=0)
    height: float = Field(gt=0)


class MindMapInfoRequest(BaseModel):
    """Request to create or rename a mind map."""
    title: Optional[str] = None
