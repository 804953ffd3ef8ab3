"""Tests for the HTTP API."""

import json
import random

import pytest
from fastapi.testclient import TestClient

from mindmap_core import EngineConfig
from mindmap_backend import main
from mindmap_backend.main import app
from mindmap_backend.session import MindMapSession

client = TestClient(app)


@pytest.fixture(autouse=True)
def fresh_session(monkeypatch):
    """Give every test its own session."""
    session = MindMapSession(config=EngineConfig(), rng=random.Random(7))
    monkeypatch.setattr(main, "session", session)
    return session


def _root_id():
    return client.get("/api/mindmap").json()["mindmap"]["nodes"][0]["id"]


def test_health():
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "nodes": 1}


def test_get_state():
    data = client.get("/api/mindmap").json()
    assert data["stats"]["node_count"] == 1
    assert data["can_undo"] is False
    assert data["mindmap"]["title"] == "Untitled Mind Map"


def test_new_and_rename():
    response = client.post("/api/mindmap/new", json={"title": "Roadmap"})
    assert response.json()["mindmap"]["title"] == "Roadmap"
    response = client.patch("/api/mindmap", json={"title": "Plan"})
    assert response.json()["title"] == "Plan"


class TestNodes:
    """Tests for node endpoints."""

    def test_create_at_position(self):
        response = client.post("/api/nodes", json={"x": 10, "y": 20, "text": "Idea", "shape": "diamond"})
        node = response.json()["node"]
        assert (node["x"], node["y"]) == (10, 20)
        assert node["shape"] == "diamond"

    def test_create_invalid_shape(self):
        response = client.post("/api/nodes", json={"shape": "star"})
        assert response.status_code == 422

    def test_get_update_delete(self):
        root_id = _root_id()
        assert client.get(f"/api/nodes/{root_id}").json()["node"]["text"] == "Main Topic"

        response = client.patch(f"/api/nodes/{root_id}", json={"text": "Vision", "color": "#000000"})
        assert response.json()["node"]["text"] == "Vision"
        assert response.json()["node"]["color"] == "#000000"

        response = client.delete(f"/api/nodes/{root_id}")
        assert response.json() == {"success": True, "removed": 1}

    def test_unknown_node_is_404(self):
        assert client.get("/api/nodes/ghost").status_code == 404
        assert client.patch("/api/nodes/ghost", json={"text": "x"}).status_code == 404
        assert client.delete("/api/nodes/ghost").status_code == 404
        assert client.post("/api/nodes/ghost/child").status_code == 404

    def test_child_and_sibling(self):
        root_id = _root_id()
        child = client.post(f"/api/nodes/{root_id}/child").json()["node"]
        assert child["parent_id"] == root_id

        sibling = client.post(f"/api/nodes/{child['id']}/sibling").json()["node"]
        assert sibling["parent_id"] == root_id

        assert client.post(f"/api/nodes/{root_id}/sibling").status_code == 400

    def test_search(self):
        client.post("/api/nodes", json={"text": "Quarterly budget"})
        data = client.get("/api/nodes/search", params={"q": "BUDGET"}).json()
        assert data["count"] == 1
        assert data["nodes"][0]["text"] == "Quarterly budget"

    def test_bulk_delete_and_duplicate(self):
        root_id = _root_id()
        duplicated = client.post("/api/nodes/duplicate", json={"node_ids": [root_id]}).json()
        assert len(duplicated["nodes"]) == 1
        response = client.post("/api/nodes/delete", json={"node_ids": [root_id]})
        assert response.json()["removed"] == 1


class TestHistory:
    """Tests for undo/redo endpoints."""

    def test_nothing_to_undo(self):
        assert client.post("/api/undo").json() == {"success": False, "message": "Nothing to undo"}

    def test_undo_redo(self):
        client.post(f"/api/nodes/{_root_id()}/child")
        assert client.post("/api/undo").json()["stats"]["node_count"] == 1
        assert client.post("/api/redo").json()["stats"]["node_count"] == 2


class TestConnections:
    """Tests for link endpoints."""

    def test_connect_disconnect(self):
        root_id = _root_id()
        other = client.post("/api/nodes", json={"text": "Other"}).json()["node"]
        response = client.post("/api/connections", json={"parent_id": root_id, "child_id": other["id"]})
        assert response.json()["stats"]["connection_count"] == 1

        response = client.delete(f"/api/connections/{root_id}/{other['id']}")
        assert response.json()["stats"]["connection_count"] == 0

    def test_cycle_is_400(self):
        root_id = _root_id()
        child = client.post(f"/api/nodes/{root_id}/child").json()["node"]
        response = client.post("/api/connections", json={"parent_id": child["id"], "child_id": root_id})
        assert response.status_code == 400


class TestImportExport:
    """Tests for document endpoints."""

    def test_export_import_roundtrip(self):
        client.post(f"/api/nodes/{_root_id()}/child")
        document = client.get("/api/mindmap/export").json()
        client.post("/api/mindmap/new", json={})

        response = client.post("/api/mindmap/import", content=json.dumps(document))
        assert response.status_code == 200
        assert response.json()["stats"]["node_count"] == 2

    def test_bad_json_is_400(self):
        response = client.post("/api/mindmap/import", content="{broken")
        assert response.status_code == 400

    def test_deep_import_and_child_refused(self, make_document):
        response = client.post("/api/mindmap/import", content=json.dumps(make_document(201, nested=True)))
        assert response.status_code == 200
        assert client.post("/api/nodes/n200/child").status_code == 400
        assert client.post("/api/layout/auto").json()["strategy"] == "tree"
        assert client.get("/api/mindmap/export").status_code == 200

    def test_too_deep_is_413(self, make_document):
        response = client.post("/api/mindmap/import", content=json.dumps(make_document(202, nested=True)))
        assert response.status_code == 413

    def test_too_many_nodes_is_413(self, make_document):
        response = client.post("/api/mindmap/import", content=json.dumps(make_document(1001)))
        assert response.status_code == 413
        assert client.get("/api/mindmap").json()["stats"]["node_count"] == 1

    def test_save_and_open(self, tmp_path):
        path = tmp_path / "map.json"
        assert client.post("/api/mindmap/save", json={"file_path": str(path)}).json()["success"]
        response = client.post("/api/mindmap/open", json={"file_path": str(path)})
        assert response.json()["file_path"] == str(path)

    def test_open_missing_is_404(self, tmp_path):
        response = client.post("/api/mindmap/open", json={"file_path": str(tmp_path / "none.json")})
        assert response.status_code == 404

    def test_save_without_path_is_400(self):
        assert client.post("/api/mindmap/save", json={}).status_code == 400


class TestViewAndLayout:
    """Tests for viewport, selection and layout endpoints."""

    def test_zoom_steps(self):
        view = client.post("/api/view/zoom-in").json()["view"]
        assert view["zoom_percent"] == 110
        view = client.post("/api/view/zoom", json={"factor": 100}).json()["view"]
        assert view["zoom"] == 3.0

    def test_pan_and_fit(self):
        assert client.post("/api/view/pan", json={"dx": 10, "dy": 0}).json()["view"]["offset_x"] == 10
        assert client.post("/api/view/fit").json()["success"] is True

    def test_hit(self):
        hit = client.get("/api/hit", params={"screen_x": 600, "screen_y": 400}).json()
        assert hit["node"]["text"] == "Main Topic"
        assert client.get("/api/hit", params={"screen_x": 1, "screen_y": 1}).json()["node"] is None

    def test_box_selection(self):
        response = client.post("/api/selection/box", json={"x1": 0, "y1": 0, "x2": 1200, "y2": 800})
        assert len(response.json()["selected"]) == 1

    def test_auto_layout(self):
        root_id = _root_id()
        client.post(f"/api/nodes/{root_id}/child")
        data = client.post("/api/layout/auto").json()
        assert data["strategy"] == "tree"

    def test_shapes(self):
        assert "cloud" in client.get("/api/shapes").json()["shapes"]


def test_validate_and_summary():
    data = client.get("/api/validate").json()
    assert data["summary"]["valid"] is True
    summary = client.get("/api/summary").json()["summary"]
    assert summary["total_nodes"] == 1
