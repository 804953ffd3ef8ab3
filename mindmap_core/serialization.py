"""
Mind-map documents - JSON round-tripping of the node forest.

Document shape:
    {
      "version": "1.0",
      "title": "...",
      "nodes": [NodeRecord, ...],          # roots; children nest inside
      "viewOffset": {"x": 0, "y": 0},
      "zoom": 1,
      "generationColors": {"1": "#dc2626"}
    }

Loading rules:
- The payload size, the number of node records and their nesting depth
  are capped; going over aborts the load with LimitExceeded before anything is built
- Roots are not stored. A top-level record is a root unless some record
  lists it in a `children` array; files that repeat every node at top level
  therefore load the same as files that only list roots
- A record without a non-empty `text` or numeric `x`/`y`, or with an id
  already loaded, is skipped together with its subtree and logged
- Over-long text, notes and title are truncated, not rejected

Traversals here are iterative so deep chains do not hit the recursion limit.
"""

import json
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Optional

from .coloring import colors_from_json, colors_to_json
from .config import EngineConfig, get_config
from .errors import LimitExceeded, ParseError, ValidationError
from .graph import GraphModel
from .models import DEFAULT_NODE_COLOR, Node, NodeShape, ViewportState, generate_node_id
from .viewport import clamp_zoom

logger = logging.getLogger(__name__)

DOCUMENT_VERSION = "1.0"
DEFAULT_TITLE = "Untitled Mind Map"


@dataclass
class LoadedDocument:
    """Result of reading a document; nothing here is shared with a live session."""
    graph: GraphModel
    view: ViewportState
    title: str = DEFAULT_TITLE
    generation_colors: dict[int, str] = field(default_factory=dict)
    has_view: bool = False
    skipped: int = 0


# --- Writing ---

def node_to_record(node: Node) -> dict:
    """Flat record for one node, with an empty `children` list."""
    return {
        "id": node.id,
        "x": node.x,
        "y": node.y,
        "text": node.text,
        "shape": NodeShape(node.shape).value,
        "color": node.color,
        "textColor": node.text_color,
        "fontSize": node.font_size,
        "fontWeight": node.font_weight,
        "icon": node.icon,
        "width": node.width,
        "height": node.height,
        "notes": node.notes,
        "tags": list(node.tags),
        "collapsed": node.collapsed,
        "metadata": dict(node.metadata),
        "children": [],
    }


def serialize_node(graph: GraphModel, node: Node) -> dict:
    """Record for `node` with its whole subtree nested under `children`."""
    root_record = node_to_record(node)
    stack = [(node, root_record)]
    while stack:
        current, record = stack.pop()
        for child in graph.get_children(current):
            child_record = node_to_record(child)
            record["children"].append(child_record)
            stack.append((child, child_record))
    return root_record


def serialize_document(
    graph: GraphModel,
    view: ViewportState,
    title: str = DEFAULT_TITLE,
    generation_colors: Optional[dict[int, str]] = None
) -> dict:
    """Build the JSON-ready document for a graph and its view."""
    document = {
        "version": DOCUMENT_VERSION,
        "title": title,
        "nodes": [serialize_node(graph, root) for root in graph.roots()],
        "viewOffset": {"x": view.offset_x, "y": view.offset_y},
        "zoom": view.zoom,
    }
    if generation_colors is not None:
        document["generationColors"] = colors_to_json(generation_colors)
    return document


def dumps_document(document: dict, indent: int = 2) -> str:
    """
    Pretty JSON text for a document.

    Produces the same text as `json.dumps(document, indent=indent)`, but
    containers are opened and closed from an explicit stack, so deeply
    nested `children` never reach the recursion limit.
    """
    out: list[str] = []
    # Items are literal text or (value, nesting level) pairs still to encode
    stack: list[Any] = [(document, 0)]
    while stack:
        item = stack.pop()
        if isinstance(item, str):
            out.append(item)
            continue

        value, level = item
        if isinstance(value, dict) and value:
            opener, closer = "{", "}"
            entries = [(json.dumps(str(k)) + ": ", v) for k, v in value.items()]
        elif isinstance(value, (list, tuple)) and value:
            opener, closer = "[", "]"
            entries = [("", v) for v in value]
        else:
            out.append(json.dumps(value))
            continue

        pad = "\n" + " " * (indent * (level + 1))
        work: list[Any] = []
        for index, (prefix, child) in enumerate(entries):
            if index:
                work.append(",")
            work.append(pad + prefix)
            work.append((child, level + 1))
        work.append("\n" + " " * (indent * level) + closer)

        out.append(opener)
        stack.extend(reversed(work))

    return "".join(out)


# --- Reading ---

def _is_number(value: Any) -> bool:
    return (isinstance(value, (int, float)) and not isinstance(value, bool)
            and math.isfinite(value))


def _truncate(value: Any, limit: int, default: str = "") -> str:
    if not isinstance(value, str):
        return default
    return value[:limit]


def _iter_records(records: list) -> list[dict]:
    """Every dict record at any nesting depth, pre-order."""
    found: list[dict] = []
    stack = list(reversed(records))
    while stack:
        record = stack.pop()
        if not isinstance(record, dict):
            continue
        found.append(record)
        children = record.get("children")
        if isinstance(children, list):
            stack.extend(reversed(children))
    return found


def count_records(records: list) -> int:
    """Distinct node records in a document (repeated ids count once)."""
    ids: set[str] = set()
    anonymous = 0
    for record in _iter_records(records):
        record_id = record.get("id")
        if isinstance(record_id, str) and record_id:
            ids.add(record_id)
        else:
            anonymous += 1
    return len(ids) + anonymous


def max_record_depth(records: list) -> int:
    """Deepest nesting level of any record (top-level records are level 0)."""
    deepest = 0
    stack = [(r, 0) for r in records]
    while stack:
        record, level = stack.pop()
        if not isinstance(record, dict):
            continue
        deepest = max(deepest, level)
        children = record.get("children")
        if isinstance(children, list):
            stack.extend((child, level + 1) for child in children)
    return deepest


def find_root_records(records: list) -> list[dict]:
    """
    Top-level records that no record lists as a child.

    One pass collects every child id, then the top level is filtered.
    """
    child_ids: set[str] = set()
    for record in _iter_records(records):
        children = record.get("children")
        if not isinstance(children, list):
            continue
        for child in children:
            if isinstance(child, dict) and isinstance(child.get("id"), str):
                child_ids.add(child["id"])

    return [
        r for r in records
        if isinstance(r, dict) and r.get("id") not in child_ids
    ]


def record_to_node(record: Any, config: EngineConfig) -> Node:
    """
    Build a detached node from a record.

    Raises:
        ValidationError: If required fields are missing or malformed
    """
    if not isinstance(record, dict):
        raise ValidationError("Node record is not an object")

    text = record.get("text")
    if not isinstance(text, str) or not text:
        raise ValidationError("Node record needs a non-empty text", node_id=record.get("id"))
    if not _is_number(record.get("x")) or not _is_number(record.get("y")):
        raise ValidationError("Node record needs numeric x and y", node_id=record.get("id"))

    node_id = record.get("id")
    if not isinstance(node_id, str) or not node_id:
        node_id = generate_node_id()

    shape = record.get("shape", NodeShape.ROUNDED.value)
    try:
        shape = NodeShape(shape)
    except ValueError:
        logger.warning("Unknown shape %r on node %s, using rounded", shape, node_id)
        shape = NodeShape.ROUNDED

    metadata = record.get("metadata")
    if isinstance(metadata, dict):
        metadata = {k: v for k, v in metadata.items()
                    if isinstance(k, str) and isinstance(v, str)}
    else:
        metadata = {}

    tags = record.get("tags")
    tags = [t for t in tags if isinstance(t, str)] if isinstance(tags, list) else []

    icon = record.get("icon")
    width = record.get("width")
    height = record.get("height")
    font_size = record.get("fontSize")
    font_weight = record.get("fontWeight")

    return Node(
        id=node_id,
        x=record["x"],
        y=record["y"],
        text=text[:config.max_text_length],
        shape=shape,
        color=_truncate(record.get("color"), 64, DEFAULT_NODE_COLOR) or DEFAULT_NODE_COLOR,
        text_color=_truncate(record.get("textColor"), 64, "#ffffff") or "#ffffff",
        font_size=font_size if _is_number(font_size) and font_size > 0 else 14,
        font_weight=str(font_weight) if isinstance(font_weight, (str, int)) and font_weight else "500",
        icon=icon if isinstance(icon, str) and icon else None,
        width=width if _is_number(width) and width > 0 else 150,
        height=height if _is_number(height) and height > 0 else 60,
        notes=_truncate(record.get("notes"), config.max_notes_length),
        metadata=metadata,
        tags=tags,
        collapsed=record.get("collapsed") is True,
    )


def _read_view(data: dict) -> ViewportState:
    offset = data.get("viewOffset")
    offset_x = offset_y = 0.0
    if isinstance(offset, dict):
        if _is_number(offset.get("x")):
            offset_x = offset["x"]
        if _is_number(offset.get("y")):
            offset_y = offset["y"]

    zoom = data.get("zoom")
    zoom = clamp_zoom(zoom) if _is_number(zoom) and zoom > 0 else 1.0
    return ViewportState(offset_x=offset_x, offset_y=offset_y, zoom=zoom)


def deserialize_document(data: Any, config: Optional[EngineConfig] = None) -> LoadedDocument:
    """
    Rebuild a graph from a parsed document.

    Args:
        data: Parsed JSON document
        config: Limits to apply (global config if None)

    Raises:
        ParseError: If `data` is not a document with a `nodes` list
        LimitExceeded: If the document holds more node records than allowed
            or nests them deeper than allowed
    """
    config = config or get_config()

    if not isinstance(data, dict) or not isinstance(data.get("nodes"), list):
        raise ParseError("Invalid mind map format: missing nodes array")

    records = data["nodes"]
    total = count_records(records)
    if total > config.max_nodes:
        raise LimitExceeded("nodes", config.max_nodes, total)
    depth = max_record_depth(records)
    if depth > config.max_depth:
        raise LimitExceeded("levels", config.max_depth, depth)

    graph = GraphModel()
    skipped = 0

    # (record, parent node) pairs; reversed so siblings load in order
    stack: list[tuple[Any, Optional[Node]]] = [
        (r, None) for r in reversed(find_root_records(records))
    ]
    while stack:
        record, parent = stack.pop()
        try:
            node = record_to_node(record, config)
            graph.add_node(node)
        except ValidationError as e:
            skipped += 1
            logger.warning("Skipping invalid node record: %s", e)
            continue

        if parent is not None:
            graph.connect(parent, node)

        children = record.get("children")
        if isinstance(children, list):
            stack.extend((child, node) for child in reversed(children))

    title = data.get("title")
    title = title[:config.max_title_length] if isinstance(title, str) and title else DEFAULT_TITLE

    if skipped:
        logger.warning("Loaded %d nodes, skipped %d invalid records", len(graph), skipped)

    return LoadedDocument(
        graph=graph,
        view=_read_view(data),
        title=title,
        generation_colors=colors_from_json(data.get("generationColors")),
        has_view="viewOffset" in data or "zoom" in data,
        skipped=skipped,
    )


def loads_document(payload: str | bytes, config: Optional[EngineConfig] = None) -> LoadedDocument:
    """
    Parse JSON text into a document.

    Raises:
        LimitExceeded: If the payload is larger than the configured cap
        ParseError: If the text is not valid JSON or not a document
    """
    config = config or get_config()

    size = len(payload.encode("utf-8")) if isinstance(payload, str) else len(payload)
    if size > config.max_payload_bytes:
        raise LimitExceeded("bytes", config.max_payload_bytes, size)

    try:
        data = json.loads(payload)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ParseError(f"Error reading JSON: {e}") from e
    except RecursionError as e:
        raise ParseError("Error reading JSON: nested too deeply") from e

    return deserialize_document(data, config)
