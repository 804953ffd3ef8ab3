"""
Mind-map session - Editor state, history and persistence.

This module implements:
- Single mind-map state management (one mind map open at a time)
- Editing commands that end with a history snapshot
- Linear undo/redo history using full snapshots
- Selection, clipboard and z-order commands
- Viewport commands (zoom, pan, fit)
- JSON import/export and file persistence
- Layout operations delegated to mindmap_core.layout
"""

import logging
import math
import random
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Optional

from mindmap_core.coloring import child_color
from mindmap_core.config import EngineConfig, get_config
from mindmap_core.graph import GraphModel
from mindmap_core.hit_test import node_at_screen, nodes_in_box
from mindmap_core.history import HistoryManager, HistorySnapshot
from mindmap_core.layout import (
    apply_force_directed_layout,
    apply_radial_layout,
    apply_tree_layout,
    auto_layout as core_auto_layout,
)
from mindmap_core.models import BorderStyle, Node, NodeShape, ViewportState
from mindmap_core.serialization import (
    DEFAULT_TITLE,
    LoadedDocument,
    deserialize_document,
    dumps_document,
    loads_document,
    serialize_document,
)
from mindmap_core import viewport

logger = logging.getLogger(__name__)

ROOT_COLOR = "#6366f1"
CHILD_DISTANCE = 150
SIBLING_OFFSET = 150

# Fields a caller may not set through update_node
_PROTECTED_FIELDS = {"id", "parent_id", "child_ids", "selected", "fx", "fy"}
_NUMERIC_FIELDS = {"x", "y", "width", "height", "font_size", "border_width"}
_POSITIVE_FIELDS = {"width", "height", "font_size"}


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


class MindMapSession:
    """
    Owns a single mind map's state, history and persistence.

    Features:
    - Every editing command records a snapshot when it changes something
    - Undo/redo rebuild a fresh graph from a snapshot
    - Generation colors are part of every snapshot
    - Change callbacks for front ends

    View changes (zoom, pan, fit) and selection are not recorded in the
    history on their own; they ride along with the next snapshot.
    """

    def __init__(self, config: Optional[EngineConfig] = None, rng: Optional[random.Random] = None):
        self._config = config or get_config()
        self._rng = rng or random.Random()
        self._graph = GraphModel()
        self._view = ViewportState()
        self._screen_width = self._config.screen_width
        self._screen_height = self._config.screen_height
        self._title = DEFAULT_TITLE
        self._generation_colors: dict[int, str] = {}
        self._history = HistoryManager(self._config.history_capacity)
        self._selected: list[str] = []
        self._clipboard: list[Node] = []
        self._file_path: Optional[Path] = None
        self._dirty = False
        self._on_change_callbacks: list[Callable] = []

        self.new_mindmap()

    # --- Properties ---

    @property
    def graph(self) -> GraphModel:
        return self._graph

    @property
    def view(self) -> ViewportState:
        return self._view

    @property
    def title(self) -> str:
        return self._title

    @property
    def generation_colors(self) -> dict[int, str]:
        return dict(self._generation_colors)

    @property
    def screen_size(self) -> tuple[float, float]:
        return (self._screen_width, self._screen_height)

    @property
    def file_path(self) -> Optional[Path]:
        return self._file_path

    @property
    def is_dirty(self) -> bool:
        """Check if there are unsaved changes."""
        return self._dirty

    @property
    def can_undo(self) -> bool:
        return self._history.can_undo

    @property
    def can_redo(self) -> bool:
        return self._history.can_redo

    @property
    def selected_nodes(self) -> list[Node]:
        return [self._graph.get_node(i) for i in self._selected if i in self._graph]

    # --- Change Callbacks ---

    def on_change(self, callback: Callable):
        """Register a callback for mind-map changes."""
        self._on_change_callbacks.append(callback)

    def _notify_change(self):
        for callback in self._on_change_callbacks:
            callback()

    # --- History Management ---

    def save_state(self):
        """Record the current state as a new history entry."""
        snapshot = HistorySnapshot.capture(
            self._graph, self._view, self._generation_colors, self._title
        )
        self._history.push(snapshot)
        self._dirty = True
        self._notify_change()

    def _restore(self, snapshot: HistorySnapshot):
        self._selected = []
        self._graph = snapshot.restore()
        self._view = snapshot.view
        self._title = snapshot.title
        self._generation_colors = snapshot.colors()
        self._notify_change()

    def _apply_loaded(self, loaded: LoadedDocument):
        self._selected = []
        self._graph = loaded.graph
        self._view = loaded.view
        self._title = loaded.title
        self._generation_colors = dict(loaded.generation_colors)

    def undo(self) -> bool:
        """Step back one snapshot. Returns False if there is nothing to undo."""
        snapshot = self._history.undo()
        if snapshot is None:
            return False
        self._restore(snapshot)
        self._dirty = True
        return True

    def redo(self) -> bool:
        """Step forward one snapshot. Returns False if there is nothing to redo."""
        snapshot = self._history.redo()
        if snapshot is None:
            return False
        self._restore(snapshot)
        self._dirty = True
        return True

    # --- Mind Map Lifecycle ---

    def new_mindmap(self, title: Optional[str] = None) -> GraphModel:
        """Start over with a single root topic in the middle of the screen."""
        self._graph = GraphModel()
        self._view = ViewportState()
        self._title = self._clean_title(title)
        self._selected = []
        self._file_path = None

        center_x, center_y = viewport.screen_to_world(
            self._view, self._screen_width / 2, self._screen_height / 2
        )
        root = Node(
            x=center_x,
            y=center_y,
            text="Main Topic",
            shape=NodeShape.ROUNDED,
            color=ROOT_COLOR,
            font_size=18,
            font_weight="600",
            width=180,
            height=70,
        )
        self._graph.add_node(root)
        self._generation_colors = {0: root.color}

        self._history.clear()
        self.save_state()
        self._dirty = False
        return self._graph

    def set_title(self, title: str) -> str:
        self._title = self._clean_title(title)
        self.save_state()
        return self._title

    def _clean_title(self, title: Optional[str]) -> str:
        if not title:
            return DEFAULT_TITLE
        return title[:self._config.max_title_length]

    # --- Node Operations ---

    def get_node(self, node_id: str) -> Optional[Node]:
        return self._graph.get_node(node_id)

    def add_node_at(
        self,
        x: float,
        y: float,
        text: str = "New Node",
        shape: Optional[NodeShape] = None
    ) -> Node:
        """Add a free-standing node at a world position and select it."""
        node = Node(x=x, y=y, text=text[:self._config.max_text_length] or "New Node")
        if shape is not None:
            node.shape = NodeShape(shape)
        self._graph.add_node(node)
        self._select_only([node])
        self.save_state()
        return node

    def add_node(self, text: str = "New Node", shape: Optional[NodeShape] = None) -> Node:
        """Add a node at the world point under the center of the screen."""
        x, y = viewport.screen_to_world(
            self._view, self._screen_width / 2, self._screen_height / 2
        )
        return self.add_node_at(x, y, text=text, shape=shape)

    def add_child_node(self, parent_id: str) -> Optional[Node]:
        """
        Add a child under `parent_id` in a random direction.

        The child is colored by its generation and becomes the selection.
        Nothing changes if the parent already sits at the maximum depth.
        """
        parent = self._graph.get_node(parent_id)
        if parent is None:
            return None
        if not self._fits_depth(parent, 0):
            return None

        angle = self._rng.random() * math.pi * 2
        child = Node(
            x=parent.x + math.cos(angle) * CHILD_DISTANCE,
            y=parent.y + math.sin(angle) * CHILD_DISTANCE,
            text="Child Node",
            color=child_color(self._graph, parent, self._generation_colors),
        )
        self._graph.add_node(child)
        self._graph.connect(parent, child)
        self._select_only([child])
        self.save_state()
        return child

    def add_sibling_node(self, node_id: str) -> Optional[Node]:
        """Add a node next to `node_id` under the same parent. Roots have no siblings."""
        node = self._graph.get_node(node_id)
        if node is None:
            return None
        parent = self._graph.get_parent(node)
        if parent is None:
            return None

        sibling = Node(x=node.x + SIBLING_OFFSET, y=node.y, text="Sibling Node", color=node.color)
        self._graph.add_node(sibling)
        self._graph.connect(parent, sibling)
        self._select_only([sibling])
        self.save_state()
        return sibling

    def update_node(self, node_id: str, **kwargs) -> Optional[Node]:
        """
        Update fields of an existing node.

        None values and unknown or structural fields are ignored. Text and
        notes are truncated to their limits. Values of the wrong type or
        outside their enum are skipped with a warning.
        """
        node = self._graph.get_node(node_id)
        if node is None:
            return None

        changed = False
        for key, value in kwargs.items():
            if value is None or key in _PROTECTED_FIELDS or key not in Node.model_fields:
                continue
            try:
                value = self._clean_value(key, value)
            except (TypeError, ValueError) as e:
                logger.warning("Ignoring %s for node %s: %s", key, node_id, e)
                continue
            setattr(node, key, value)
            changed = True

        if changed:
            self.save_state()
        return node

    def _clean_value(self, key: str, value: Any) -> Any:
        """Coerce an update value to its field type or raise TypeError/ValueError."""
        if key in ("text", "notes"):
            if not isinstance(value, str):
                raise TypeError(f"{key} must be a string")
            limit = self._config.max_text_length if key == "text" else self._config.max_notes_length
            return value[:limit]
        if key == "shape":
            return NodeShape(value)
        if key == "border_style":
            return BorderStyle(value)
        if key in _NUMERIC_FIELDS:
            if not _is_number(value):
                raise TypeError(f"{key} must be a number")
            if key in _POSITIVE_FIELDS and value <= 0:
                raise ValueError(f"{key} must be positive")
        return value

    def move_node(self, node_id: str, x: float, y: float) -> Optional[Node]:
        return self.update_node(node_id, x=x, y=y)

    def delete_nodes(self, node_ids: Optional[list[str]] = None) -> int:
        """
        Delete nodes (the selection by default) with all their descendants.

        Returns:
            Number of nodes removed
        """
        ids = list(self._selected) if node_ids is None else list(node_ids)
        removed = 0
        for node_id in ids:
            node = self._graph.get_node(node_id)
            if node is None:
                continue  # already gone with an ancestor
            removed += len(self._graph.remove_node(node))

        self.clear_selection()
        if removed:
            self.save_state()
        return removed

    def connect_nodes(self, parent_id: str, child_id: str) -> bool:
        parent = self._graph.get_node(parent_id)
        child = self._graph.get_node(child_id)
        if parent is None or child is None:
            return False
        if not self._fits_depth(parent, self._graph.height(child)):
            return False
        if not self._graph.connect(parent, child):
            return False
        self.save_state()
        return True

    def _fits_depth(self, parent: Node, subtree_height: int) -> bool:
        """Whether a subtree of the given height may hang under `parent`."""
        deepest = self._graph.depth(parent) + 1 + subtree_height
        if deepest > self._config.max_depth:
            logger.warning("Refusing to nest below %s: depth %d exceeds %d",
                           parent.id, deepest, self._config.max_depth)
            return False
        return True

    def disconnect_nodes(self, a_id: str, b_id: str) -> bool:
        a = self._graph.get_node(a_id)
        b = self._graph.get_node(b_id)
        if a is None or b is None:
            return False
        if not self._graph.disconnect(a, b):
            return False
        self.save_state()
        return True

    # --- Selection ---

    def _select_only(self, nodes: list[Node]):
        self.clear_selection()
        for node in nodes:
            self._add_to_selection(node)

    def _add_to_selection(self, node: Node):
        if node.id not in self._selected:
            self._selected.append(node.id)
            node.selected = True

    def select_node(self, node_id: str, multi: bool = False) -> bool:
        node = self._graph.get_node(node_id)
        if node is None:
            return False
        if not multi:
            self.clear_selection()
        self._add_to_selection(node)
        return True

    def clear_selection(self):
        for node in self.selected_nodes:
            node.selected = False
        self._selected = []

    def select_all(self) -> list[Node]:
        self._select_only(self._graph.nodes)
        return self.selected_nodes

    def select_in_box(self, x1: float, y1: float, x2: float, y2: float) -> list[Node]:
        """Select the nodes lying fully inside a world-space rectangle."""
        self._select_only(nodes_in_box(self._graph, x1, y1, x2, y2))
        return self.selected_nodes

    def search_nodes(self, query: str) -> list[Node]:
        """Select every node whose text contains `query` (case-insensitive)."""
        if not query:
            self.clear_selection()
            return []
        lowered = query.lower()
        self._select_only([n for n in self._graph if lowered in n.text.lower()])
        return self.selected_nodes

    def node_at_screen(self, screen_x: float, screen_y: float) -> Optional[Node]:
        return node_at_screen(self._graph, self._view, screen_x, screen_y)

    # --- Clipboard ---

    def _targets(self, node_ids: Optional[list[str]]) -> list[Node]:
        if node_ids is None:
            return self.selected_nodes
        return [n for n in (self._graph.get_node(i) for i in node_ids) if n is not None]

    def copy(self, node_ids: Optional[list[str]] = None) -> int:
        """Put copies of the nodes on the clipboard. Hierarchy is not copied."""
        targets = self._targets(node_ids)
        if not targets:
            return 0
        self._clipboard = [n.model_copy(deep=True) for n in targets]
        return len(self._clipboard)

    def cut(self, node_ids: Optional[list[str]] = None) -> int:
        targets = self._targets(node_ids)
        copied = self.copy([n.id for n in targets])
        if copied:
            self.delete_nodes([n.id for n in targets])
        return copied

    def paste(self) -> list[Node]:
        """Add detached clones of the clipboard (fresh ids, +20 offset) and select them."""
        if not self._clipboard:
            return []
        pasted = [self._graph.add_node(self._graph.clone(n)) for n in self._clipboard]
        self._select_only(pasted)
        self.save_state()
        return pasted

    def duplicate(self, node_ids: Optional[list[str]] = None) -> list[Node]:
        targets = self._targets(node_ids)
        if not targets:
            return []
        clones = [self._graph.add_node(self._graph.clone(n)) for n in targets]
        self._select_only(clones)
        self.save_state()
        return clones

    # --- Z-order ---

    def bring_to_front(self, node_ids: Optional[list[str]] = None) -> int:
        return sum(1 for n in self._targets(node_ids) if self._graph.bring_to_front(n))

    def send_to_back(self, node_ids: Optional[list[str]] = None) -> int:
        return sum(1 for n in self._targets(node_ids) if self._graph.send_to_back(n))

    # --- View Operations ---

    def zoom_in(self) -> ViewportState:
        self._view = viewport.zoom_in(self._view)
        return self._view

    def zoom_out(self) -> ViewportState:
        self._view = viewport.zoom_out(self._view)
        return self._view

    def zoom_at(self, factor: float, screen_x: float, screen_y: float) -> ViewportState:
        self._view = viewport.zoom_at(self._view, factor, screen_x, screen_y)
        return self._view

    def pan(self, dx: float, dy: float) -> ViewportState:
        self._view = viewport.pan(self._view, dx, dy)
        return self._view

    def resize(self, width: float, height: float):
        if width <= 0 or height <= 0:
            raise ValueError("Screen size must be positive")
        self._screen_width = width
        self._screen_height = height

    def fit_to_screen(self) -> bool:
        fitted = viewport.fit_to_screen(self._graph, self._screen_width, self._screen_height)
        if fitted is None:
            return False
        self._view = fitted
        return True

    # --- Layout Operations (delegated to mindmap_core.layout) ---

    def auto_layout(self) -> Optional[str]:
        """
        Arrange the whole mind map, then fit it to the screen.

        A single tree gets the tree layout, a forest the force-directed one.
        """
        strategy = core_auto_layout(self._graph)
        if strategy is None:
            return None
        self.save_state()
        self.fit_to_screen()
        return strategy

    def tree_layout(self, root_id: str, horizontal: bool = True) -> bool:
        root = self._graph.get_node(root_id)
        if root is None:
            return False
        apply_tree_layout(self._graph, root, horizontal=horizontal)
        self.save_state()
        return True

    def radial_layout(self, center_id: str) -> bool:
        center = self._graph.get_node(center_id)
        if center is None:
            return False
        apply_radial_layout(self._graph, center)
        self.save_state()
        return True

    def force_layout(self, iterations: int = 50) -> bool:
        if len(self._graph) == 0:
            return False
        apply_force_directed_layout(self._graph, iterations=iterations)
        self.save_state()
        return True

    # --- Import / Export ---

    def export_document(self) -> dict:
        document = serialize_document(
            self._graph, self._view, self._title, self._generation_colors
        )
        document["created"] = datetime.now(timezone.utc).isoformat()
        return document

    def export_json(self) -> str:
        return dumps_document(self.export_document())

    def import_document(self, data: Any) -> LoadedDocument:
        """
        Replace the mind map with a parsed document.

        The document is fully built before anything is swapped in, so a
        ParseError or LimitExceeded leaves the session untouched.
        """
        loaded = deserialize_document(data, self._config)
        self._install(loaded)
        return loaded

    def import_json(self, payload: str | bytes) -> LoadedDocument:
        loaded = loads_document(payload, self._config)
        self._install(loaded)
        return loaded

    def _install(self, loaded: LoadedDocument):
        self._apply_loaded(loaded)
        self.save_state()
        if not loaded.has_view:
            self.fit_to_screen()
        logger.info("Imported mind map %r with %d nodes", self._title, len(self._graph))

    # --- File Operations ---

    def open_file(self, file_path: str | Path) -> LoadedDocument:
        """Open a mind map from a JSON file."""
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"Mind map file not found: {path}")

        loaded = self.import_json(path.read_bytes())
        self._file_path = path
        self._dirty = False
        return loaded

    def save_file(self, file_path: Optional[str | Path] = None) -> Path:
        """
        Save the mind map to a JSON file.

        If file_path is provided, save to that path (Save As).
        Otherwise, save to the current file_path.
        """
        if file_path:
            path = Path(file_path)
        elif self._file_path:
            path = self._file_path
        else:
            raise ValueError("No file path specified and no current file path")

        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.export_json(), encoding="utf-8")

        self._file_path = path
        self._dirty = False
        return path

    # --- State ---

    def stats(self) -> dict:
        return {
            "node_count": len(self._graph),
            "connection_count": self._graph.connection_count(),
        }

    def get_state(self) -> dict:
        """Get the full current state for API responses."""
        return {
            "mindmap": serialize_document(
                self._graph, self._view, self._title, self._generation_colors
            ),
            "selected": list(self._selected),
            "file_path": str(self._file_path) if self._file_path else None,
            "is_dirty": self._dirty,
            "can_undo": self.can_undo,
            "can_redo": self.can_redo,
            "zoom_percent": viewport.zoom_percent(self._view),
            "stats": self.stats(),
        }
