"""
Mind-map core - Graph model, layouts, viewport math and history.

This package provides the editing engine used by both the HTTP API and the
command-line tool, ensuring a single source of truth for all mind-map logic.
"""

from .models import (
    # Enums
    NodeShape,
    BorderStyle,
    # Core models
    Node,
    Bounds,
    ViewportState,
    # Request models (for API)
    CreateNodeRequest,
    UpdateNodeRequest,
    ConnectRequest,
    NodeIdsRequest,
    SelectRequest,
    BoxSelectRequest,
    ZoomRequest,
    PanRequest,
    ResizeRequest,
    MindMapInfoRequest,
)

from .errors import MindMapError, ValidationError, ParseError, LimitExceeded
from .config import EngineConfig, get_config, reload_config, configure_logging
from .graph import GraphModel
from .coloring import generation_color, child_color
from .layout import (
    apply_tree_layout,
    apply_radial_layout,
    apply_force_directed_layout,
    auto_layout,
)
from .viewport import world_to_screen, screen_to_world, zoom_at, fit_to_screen, clamp_zoom
from .hit_test import node_at, node_at_screen, nodes_in_box
from .history import HistoryManager, HistorySnapshot
from .serialization import (
    LoadedDocument,
    serialize_document,
    deserialize_document,
    loads_document,
    dumps_document,
)
from .validation import validate_mindmap, validation_summary, ValidationIssue, IssueSeverity
from .analysis import summarize_mindmap, find_trees

__all__ = [
    # Enums
    "NodeShape",
    "BorderStyle",
    # Models
    "Node",
    "Bounds",
    "ViewportState",
    # Request models
    "CreateNodeRequest",
    "UpdateNodeRequest",
    "ConnectRequest",
    "NodeIdsRequest",
    "SelectRequest",
    "BoxSelectRequest",
    "ZoomRequest",
    "PanRequest",
    "ResizeRequest",
    "MindMapInfoRequest",
    # Errors
    "MindMapError",
    "ValidationError",
    "ParseError",
    "LimitExceeded",
    # Config
    "EngineConfig",
    "get_config",
    "reload_config",
    "configure_logging",
    # Graph
    "GraphModel",
    # Coloring
    "generation_color",
    "child_color",
    # Layout
    "apply_tree_layout",
    "apply_radial_layout",
    "apply_force_directed_layout",
    "auto_layout",
    # Viewport
    "world_to_screen",
    "screen_to_world",
    "zoom_at",
    "fit_to_screen",
    "clamp_zoom",
    # Hit testing
    "node_at",
    "node_at_screen",
    "nodes_in_box",
    # History
    "HistoryManager",
    "HistorySnapshot",
    # Serialization
    "LoadedDocument",
    "serialize_document",
    "deserialize_document",
    "loads_document",
    "dumps_document",
    # Validation
    "validate_mindmap",
    "validation_summary",
    "ValidationIssue",
    "IssueSeverity",
    # Analysis
    "summarize_mindmap",
    "find_trees",
]
