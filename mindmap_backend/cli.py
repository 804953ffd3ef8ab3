#!/usr/bin/env python3
"""Mind-map CLI - layout, summary, validation and view fitting for JSON files."""

import argparse
import json
import sys
from pathlib import Path

from mindmap_core import (
    MindMapError,
    apply_force_directed_layout,
    apply_radial_layout,
    apply_tree_layout,
    auto_layout,
    configure_logging,
    dumps_document,
    fit_to_screen,
    loads_document,
    serialize_document,
    summarize_mindmap,
    validate_mindmap,
    validation_summary,
)

STRATEGIES = ("auto", "tree", "radial", "force")


def _json_out(data, code=0):
    print(json.dumps(data))
    sys.exit(code)


def _load(path):
    """Read a mind-map file or exit with a JSON error."""
    file_path = Path(path)
    if not file_path.exists():
        _json_out({"status": "error", "error": f"Mind map file not found: {file_path}"}, 1)
    try:
        return loads_document(file_path.read_bytes())
    except MindMapError as e:
        _json_out({"status": "error", "error": str(e)}, 1)


# ── Layout ───────────────────────────────────────────────────────────────────

def cmd_layout(args):
    loaded = _load(args.file)
    graph = loaded.graph
    roots = graph.roots()

    if args.strategy == "auto":
        strategy = auto_layout(graph)
    elif not roots and args.strategy != "force":
        strategy = None
    elif args.strategy == "tree":
        for root in roots:
            apply_tree_layout(graph, root, horizontal=not args.vertical)
        strategy = "tree"
    elif args.strategy == "radial":
        for root in roots:
            apply_radial_layout(graph, root)
        strategy = "radial"
    else:
        apply_force_directed_layout(graph, iterations=args.iterations)
        strategy = "force"

    view = loaded.view
    if strategy is not None:
        view = fit_to_screen(graph, args.width, args.height) or view

    document = serialize_document(graph, view, loaded.title, loaded.generation_colors)
    out_path = Path(args.output) if args.output else Path(args.file)
    out_path.write_text(dumps_document(document), encoding="utf-8")

    _json_out({
        "success": strategy is not None,
        "strategy": strategy,
        "nodes": len(graph),
        "file_path": str(out_path)
    })


# ── View ─────────────────────────────────────────────────────────────────────

def cmd_fit(args):
    loaded = _load(args.file)
    view = fit_to_screen(loaded.graph, args.width, args.height)
    if view is None:
        _json_out({"success": False, "error": "Mind map has no nodes"})
    _json_out({
        "success": True,
        "viewOffset": {"x": view.offset_x, "y": view.offset_y},
        "zoom": view.zoom
    })


# ── Analysis ─────────────────────────────────────────────────────────────────

def cmd_validate(args):
    loaded = _load(args.file)
    issues = validate_mindmap(loaded.graph)
    summary = validation_summary(issues)

    _json_out({
        "success": True,
        "issues": [issue.to_dict() for issue in issues],
        "summary": summary,
        "skipped_records": loaded.skipped
    })


def cmd_summary(args):
    loaded = _load(args.file)
    summary = summarize_mindmap(loaded.graph, title=loaded.title)

    _json_out({
        "success": True,
        "summary": summary.to_dict()
    })


# ── Main ─────────────────────────────────────────────────────────────────────

def main(argv=None):
    parser = argparse.ArgumentParser(description="Mind-map CLI")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("layout")
    p.add_argument("file")
    p.add_argument("--strategy", choices=STRATEGIES, default="auto")
    p.add_argument("--vertical", action="store_true")
    p.add_argument("--iterations", type=int, default=50)
    p.add_argument("--width", type=float, default=1200)
    p.add_argument("--height", type=float, default=800)
    p.add_argument("-o", "--output", default=None)

    p = sub.add_parser("fit")
    p.add_argument("file")
    p.add_argument("--width", type=float, default=1200)
    p.add_argument("--height", type=float, default=800)

    p = sub.add_parser("validate")
    p.add_argument("file")

    p = sub.add_parser("summary")
    p.add_argument("file")

    args = parser.parse_args(argv)
    configure_logging()

    cmd_map = {
        "layout": cmd_layout,
        "fit": cmd_fit,
        "validate": cmd_validate,
        "summary": cmd_summary,
    }
    cmd_map[args.command](args)


if __name__ == "__main__":
    main()
