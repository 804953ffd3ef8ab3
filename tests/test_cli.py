"""Tests for the command-line tool."""

import json

import pytest

from mindmap_backend.cli import main


@pytest.fixture
def map_file(tmp_path):
    path = tmp_path / "map.json"
    path.write_text(json.dumps({
        "title": "CLI",
        "nodes": [{
            "id": "R", "text": "Root", "x": 0, "y": 0,
            "children": [
                {"id": "A", "text": "A", "x": 300, "y": 300},
                {"id": "B", "text": "B", "x": -300, "y": 0},
            ],
        }],
    }))
    return path


def run_cli(capsys, *argv):
    with pytest.raises(SystemExit) as exc:
        main(list(argv))
    return exc.value.code, json.loads(capsys.readouterr().out)


class TestLayoutCommand:
    """Tests for `mindmap layout`."""

    def test_auto_layout_writes_output(self, capsys, map_file, tmp_path):
        out = tmp_path / "out.json"
        code, data = run_cli(capsys, "layout", str(map_file), "-o", str(out))
        assert code == 0
        assert data["strategy"] == "tree"
        document = json.loads(out.read_text())
        a, b = document["nodes"][0]["children"]
        assert (a["x"], a["y"]) == (150, -100)
        assert (b["x"], b["y"]) == (150, 100)
        assert document["zoom"] <= 1

    def test_radial_in_place(self, capsys, map_file):
        code, data = run_cli(capsys, "layout", str(map_file), "--strategy", "radial")
        assert data["strategy"] == "radial"
        document = json.loads(map_file.read_text())
        assert document["nodes"][0]["children"][0]["x"] == pytest.approx(150)

    def test_missing_file(self, capsys, tmp_path):
        code, data = run_cli(capsys, "layout", str(tmp_path / "nope.json"))
        assert code == 1
        assert data["status"] == "error"


def test_fit(capsys, map_file):
    code, data = run_cli(capsys, "fit", str(map_file), "--width", "400", "--height", "300")
    assert data["success"] is True
    assert 0.1 <= data["zoom"] <= 1


def test_validate(capsys, map_file):
    code, data = run_cli(capsys, "validate", str(map_file))
    assert data["summary"]["valid"] is True
    assert data["skipped_records"] == 0


def test_summary(capsys, map_file):
    code, data = run_cli(capsys, "summary", str(map_file))
    assert data["summary"]["total_nodes"] == 3
    assert data["summary"]["title"] == "CLI"


def test_bad_json(capsys, tmp_path):
    path = tmp_path / "bad.json"
    path.write_text("{oops")
    code, data = run_cli(capsys, "summary", str(path))
    assert code == 1
    assert "error" in data
