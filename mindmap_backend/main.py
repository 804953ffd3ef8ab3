"""
Mind-map backend - FastAPI Application

This is the HTTP entry point for the mind-map engine.
It provides:
- REST API for node editing, hierarchy links, clipboard and z-order
- Undo/redo, JSON import/export and file persistence
- Layout, viewport and hit-testing endpoints
- Validation and summary reports
- CORS configuration for local front-end development
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from mindmap_core import (
    BoxSelectRequest, ConnectRequest, CreateNodeRequest, MindMapInfoRequest,
    NodeIdsRequest, PanRequest, ResizeRequest, SelectRequest,
    UpdateNodeRequest, ZoomRequest, NodeShape, Node,
    LimitExceeded, MindMapError,
    configure_logging, summarize_mindmap, validate_mindmap, validation_summary,
)
from mindmap_core.viewport import zoom_percent
from mindmap_backend.session import MindMapSession

logger = logging.getLogger(__name__)

session = MindMapSession()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan handler for startup tasks."""
    configure_logging()
    logger.info("Mind-map backend started with %d nodes", len(session.graph))
    yield


# --- FastAPI App ---

app = FastAPI(
    title="Mind Map API",
    description="Backend API for the mind-map editor engine",
    version="1.0.0",
    lifespan=lifespan
)

# CORS for local development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://localhost:3000", "http://127.0.0.1:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _node_dict(node: Node) -> dict:
    return node.model_dump(mode="json")


def _require_node(node_id: str) -> Node:
    node = session.get_node(node_id)
    if node is None:
        raise HTTPException(status_code=404, detail=f"Node not found: {node_id}")
    return node


def _load_error(e: MindMapError) -> HTTPException:
    """Map a failed load to an HTTP error (413 for size caps, 400 otherwise)."""
    if isinstance(e, LimitExceeded):
        return HTTPException(status_code=413, detail=str(e))
    return HTTPException(status_code=400, detail=str(e))


# --- Health Check ---

@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok", "nodes": len(session.graph)}


# --- Mind Map State ---

@app.get("/api/mindmap")
async def get_mindmap():
    """Get the current mind-map state."""
    return session.get_state()


@app.patch("/api/mindmap")
async def update_mindmap(request: MindMapInfoRequest):
    """Rename the mind map."""
    title = session.set_title(request.title or "")
    return {"success": True, "title": title}


@app.post("/api/mindmap/new")
async def new_mindmap(request: MindMapInfoRequest):
    """Start a new mind map with a single root topic."""
    session.new_mindmap(title=request.title)
    return {"success": True, **session.get_state()}


# --- Import / Export ---

@app.post("/api/mindmap/import")
async def import_mindmap(request: Request):
    """Replace the mind map with a JSON document sent as the request body."""
    payload = await request.body()
    try:
        loaded = session.import_json(payload)
    except MindMapError as e:
        raise _load_error(e)
    return {
        "success": True,
        "skipped": loaded.skipped,
        **session.get_state()
    }


@app.get("/api/mindmap/export")
async def export_mindmap():
    """Export the mind map as a JSON document."""
    return session.export_document()


class OpenFileRequest(BaseModel):
    file_path: str


@app.post("/api/mindmap/open")
async def open_mindmap(request: OpenFileRequest):
    """Open a mind map from a JSON file."""
    try:
        session.open_file(request.file_path)
    except FileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except MindMapError as e:
        raise _load_error(e)
    return {"success": True, **session.get_state()}


class SaveFileRequest(BaseModel):
    file_path: Optional[str] = None


@app.post("/api/mindmap/save")
async def save_mindmap(request: SaveFileRequest):
    """Save the mind map to a JSON file."""
    try:
        path = session.save_file(request.file_path)
        return {"success": True, "file_path": str(path)}
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except OSError as e:
        raise HTTPException(status_code=500, detail=f"Failed to save: {e}")


# --- Undo/Redo ---

@app.post("/api/undo")
async def undo():
    """Undo the last action."""
    if session.undo():
        return {"success": True, **session.get_state()}
    return {"success": False, "message": "Nothing to undo"}


@app.post("/api/redo")
async def redo():
    """Redo the last undone action."""
    if session.redo():
        return {"success": True, **session.get_state()}
    return {"success": False, "message": "Nothing to redo"}


# --- Node Operations ---

@app.post("/api/nodes")
async def create_node(request: CreateNodeRequest):
    """Create a free-standing node (at the view center if no position is given)."""
    if request.x is not None and request.y is not None:
        node = session.add_node_at(request.x, request.y, text=request.text, shape=request.shape)
    else:
        node = session.add_node(text=request.text, shape=request.shape)
    return {"success": True, "node": _node_dict(node)}


@app.get("/api/nodes/search")
async def search_nodes(q: str = Query(default="")):
    """Select and return the nodes whose text contains the query."""
    matches = session.search_nodes(q)
    return {
        "success": True,
        "nodes": [_node_dict(n) for n in matches],
        "count": len(matches)
    }


@app.post("/api/nodes/delete")
async def delete_nodes(request: NodeIdsRequest):
    """Delete several nodes with their subtrees (the selection if no ids are given)."""
    removed = session.delete_nodes(request.node_ids or None)
    return {"success": True, "removed": removed}


@app.post("/api/nodes/duplicate")
async def duplicate_nodes(request: NodeIdsRequest):
    nodes = session.duplicate(request.node_ids or None)
    return {"success": True, "nodes": [_node_dict(n) for n in nodes]}


@app.post("/api/nodes/front")
async def bring_to_front(request: NodeIdsRequest):
    moved = session.bring_to_front(request.node_ids or None)
    return {"success": True, "moved": moved}


@app.post("/api/nodes/back")
async def send_to_back(request: NodeIdsRequest):
    moved = session.send_to_back(request.node_ids or None)
    return {"success": True, "moved": moved}


@app.get("/api/nodes/{node_id}")
async def get_node(node_id: str):
    node = _require_node(node_id)
    return {"success": True, "node": _node_dict(node)}


@app.patch("/api/nodes/{node_id}")
async def update_node(node_id: str, request: UpdateNodeRequest):
    """Update an existing node. Only fields present in the body change."""
    _require_node(node_id)
    node = session.update_node(node_id, **request.model_dump(exclude_none=True))
    return {"success": True, "node": _node_dict(node)}


@app.delete("/api/nodes/{node_id}")
async def delete_node(node_id: str):
    """Delete a node and all of its descendants."""
    _require_node(node_id)
    removed = session.delete_nodes([node_id])
    return {"success": True, "removed": removed}


@app.post("/api/nodes/{node_id}/child")
async def add_child(node_id: str):
    _require_node(node_id)
    child = session.add_child_node(node_id)
    if child is None:
        raise HTTPException(status_code=400, detail="Node is already at the maximum depth")
    return {"success": True, "node": _node_dict(child)}


@app.post("/api/nodes/{node_id}/sibling")
async def add_sibling(node_id: str):
    """Add a sibling next to a node. Root nodes have no siblings."""
    _require_node(node_id)
    sibling = session.add_sibling_node(node_id)
    if sibling is None:
        raise HTTPException(status_code=400, detail="Root nodes cannot have siblings")
    return {"success": True, "node": _node_dict(sibling)}


# --- Clipboard ---

@app.post("/api/clipboard/copy")
async def copy_nodes(request: NodeIdsRequest):
    count = session.copy(request.node_ids or None)
    return {"success": count > 0, "copied": count}


@app.post("/api/clipboard/cut")
async def cut_nodes(request: NodeIdsRequest):
    count = session.cut(request.node_ids or None)
    return {"success": count > 0, "cut": count}


@app.post("/api/clipboard/paste")
async def paste_nodes():
    nodes = session.paste()
    return {"success": bool(nodes), "nodes": [_node_dict(n) for n in nodes]}


# --- Connections ---

@app.post("/api/connections")
async def connect_nodes(request: ConnectRequest):
    """Make child_id a child of parent_id (moving it from any previous parent)."""
    _require_node(request.parent_id)
    _require_node(request.child_id)
    if not session.connect_nodes(request.parent_id, request.child_id):
        raise HTTPException(status_code=400, detail="Connection would create a cycle or nest too deeply")
    return {"success": True, "stats": session.stats()}


@app.delete("/api/connections/{parent_id}/{child_id}")
async def disconnect_nodes(parent_id: str, child_id: str):
    _require_node(parent_id)
    _require_node(child_id)
    if not session.disconnect_nodes(parent_id, child_id):
        return {"success": False, "message": "Nodes are not connected"}
    return {"success": True, "stats": session.stats()}


# --- Selection ---

@app.post("/api/selection")
async def select_node(request: SelectRequest):
    _require_node(request.node_id)
    session.select_node(request.node_id, multi=request.multi)
    return {"success": True, "selected": [n.id for n in session.selected_nodes]}


@app.post("/api/selection/all")
async def select_all():
    nodes = session.select_all()
    return {"success": True, "selected": [n.id for n in nodes]}


@app.post("/api/selection/box")
async def select_box(request: BoxSelectRequest):
    """Select nodes lying fully inside a world-space rectangle."""
    nodes = session.select_in_box(request.x1, request.y1, request.x2, request.y2)
    return {"success": True, "selected": [n.id for n in nodes]}


@app.delete("/api/selection")
async def clear_selection():
    session.clear_selection()
    return {"success": True, "selected": []}


@app.get("/api/hit")
async def hit_test(screen_x: float, screen_y: float):
    """Return the topmost node under a screen point, if any."""
    node = session.node_at_screen(screen_x, screen_y)
    return {"success": True, "node": _node_dict(node) if node else None}


# --- Layout ---

@app.post("/api/layout/auto")
async def auto_layout():
    """Lay out the whole mind map and fit it to the screen."""
    strategy = session.auto_layout()
    return {"success": strategy is not None, "strategy": strategy, **session.get_state()}


@app.post("/api/layout/tree/{root_id}")
async def tree_layout(root_id: str, horizontal: bool = Query(default=True)):
    _require_node(root_id)
    session.tree_layout(root_id, horizontal=horizontal)
    return {"success": True, **session.get_state()}


@app.post("/api/layout/radial/{center_id}")
async def radial_layout(center_id: str):
    _require_node(center_id)
    session.radial_layout(center_id)
    return {"success": True, **session.get_state()}


@app.post("/api/layout/force")
async def force_layout(iterations: int = Query(default=50, ge=1, le=500)):
    done = session.force_layout(iterations=iterations)
    return {"success": done, **session.get_state()}


# --- Viewport ---

def _view_dict() -> dict:
    view = session.view
    return {
        "offset_x": view.offset_x,
        "offset_y": view.offset_y,
        "zoom": view.zoom,
        "zoom_percent": zoom_percent(view),
    }


@app.post("/api/view/zoom")
async def zoom(request: ZoomRequest):
    """Zoom by a factor, keeping the world point under the screen anchor fixed."""
    session.zoom_at(request.factor, request.screen_x, request.screen_y)
    return {"success": True, "view": _view_dict()}


@app.post("/api/view/zoom-in")
async def zoom_in():
    session.zoom_in()
    return {"success": True, "view": _view_dict()}


@app.post("/api/view/zoom-out")
async def zoom_out():
    session.zoom_out()
    return {"success": True, "view": _view_dict()}


@app.post("/api/view/pan")
async def pan(request: PanRequest):
    session.pan(request.dx, request.dy)
    return {"success": True, "view": _view_dict()}


@app.post("/api/view/fit")
async def fit():
    fitted = session.fit_to_screen()
    return {"success": fitted, "view": _view_dict()}


@app.post("/api/view/resize")
async def resize(request: ResizeRequest):
    session.resize(request.width, request.height)
    return {"success": True, "screen": {"width": request.width, "height": request.height}}


# --- Reference ---

@app.get("/api/shapes")
async def list_shapes():
    """Get available node shapes."""
    return {"shapes": [s.value for s in NodeShape]}


# --- Analysis ---

@app.get("/api/validate")
async def validate():
    """Check the mind map for structural issues."""
    issues = validate_mindmap(session.graph)
    return {
        "success": True,
        "issues": [issue.to_dict() for issue in issues],
        "summary": validation_summary(issues)
    }


@app.get("/api/summary")
async def summary():
    result = summarize_mindmap(session.graph, title=session.title)
    return {"success": True, "summary": result.to_dict()}


def run(host: str = "127.0.0.1", port: int = 8765):
    """Run the API with uvicorn."""
    import uvicorn

    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    run()
