"""Shared fixtures for mind-map engine tests."""

import random

import pytest

from mindmap_core import EngineConfig, GraphModel, Node
from mindmap_backend.session import MindMapSession


@pytest.fixture
def config():
    """Default limits, independent of the environment."""
    return EngineConfig()


@pytest.fixture
def graph():
    """An empty graph."""
    return GraphModel()


@pytest.fixture
def small_tree():
    """
    Root R at the origin with children A and B; A has one child C.

    Returns (graph, nodes-by-letter).
    """
    g = GraphModel()
    nodes = {
        "R": Node(id="R", x=0, y=0, text="Root"),
        "A": Node(id="A", x=10, y=10, text="A"),
        "B": Node(id="B", x=20, y=20, text="B"),
        "C": Node(id="C", x=30, y=30, text="C"),
    }
    for node in nodes.values():
        g.add_node(node)
    g.connect(nodes["R"], nodes["A"])
    g.connect(nodes["R"], nodes["B"])
    g.connect(nodes["A"], nodes["C"])
    return g, nodes


@pytest.fixture
def session(config):
    """A session with a seeded random source."""
    return MindMapSession(config=config, rng=random.Random(42))


@pytest.fixture
def make_document():
    """Factory for documents of a given size."""
    return _make_document


def _make_document(count: int, nested: bool = False) -> dict:
    """A document with `count` valid node records, flat or chained."""
    records = [
        {"id": f"n{i}", "text": f"Node {i}", "x": i * 10, "y": 0, "children": []}
        for i in range(count)
    ]
    if nested and records:
        for parent, child in zip(records, records[1:]):
            parent["children"].append(child)
        records = records[:1]
    return {"version": "1.0", "title": "Test", "nodes": records}
