"""
Undo/redo history built from full snapshots.

A snapshot freezes the whole editor state (every node in paint order,
viewport, title and generation colors). Nodes are kept as private deep
copies in a flat tuple; hierarchy lives in their `parent_id`/`child_ids`,
so taking or restoring a snapshot never walks the tree and works for
chains of any depth. Restoring always yields a fresh, independent graph,
so no snapshot can be changed after it is taken.

The history is a single list with a cursor:
- push drops everything after the cursor (the stale redo branch), then
  appends and moves the cursor onto the new entry
- past capacity the oldest entry is evicted and the cursor stays put
- undo/redo move the cursor and return the snapshot under it, or None
"""

import logging
from typing import Optional

from pydantic import BaseModel, ConfigDict

from .graph import GraphModel
from .models import Node, ViewportState
from .serialization import DEFAULT_TITLE

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 50


class HistorySnapshot(BaseModel):
    """Immutable copy of the editor state."""
    model_config = ConfigDict(frozen=True)

    nodes: tuple[Node, ...] = ()
    view: ViewportState = ViewportState()
    title: str = DEFAULT_TITLE
    generation_colors: tuple[tuple[int, str], ...] = ()

    @classmethod
    def capture(
        cls,
        graph: GraphModel,
        view: ViewportState,
        generation_colors: dict[int, str],
        title: str = DEFAULT_TITLE
    ) -> "HistorySnapshot":
        nodes = []
        for node in graph:
            copy = node.model_copy(deep=True)
            copy.selected = False
            nodes.append(copy)
        return cls(
            nodes=tuple(nodes),
            view=view,
            title=title,
            generation_colors=tuple(sorted(generation_colors.items())),
        )

    def restore(self) -> GraphModel:
        """A new graph built from fresh copies of the captured nodes."""
        graph = GraphModel()
        for node in self.nodes:
            graph.add_node(node.model_copy(deep=True))
        return graph

    def colors(self) -> dict[int, str]:
        return dict(self.generation_colors)


class HistoryManager:
    """Bounded linear undo/redo stack."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity < 1:
            raise ValueError("History capacity must be at least 1")
        self._capacity = capacity
        self._entries: list[HistorySnapshot] = []
        self._cursor = -1

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def current(self) -> Optional[HistorySnapshot]:
        if self._cursor < 0:
            return None
        return self._entries[self._cursor]

    @property
    def can_undo(self) -> bool:
        return self._cursor > 0

    @property
    def can_redo(self) -> bool:
        return self._cursor < len(self._entries) - 1

    def push(self, snapshot: HistorySnapshot):
        """Record a new state, discarding any redo branch."""
        del self._entries[self._cursor + 1:]
        self._entries.append(snapshot)

        if len(self._entries) > self._capacity:
            self._entries.pop(0)
            logger.debug("History full, evicted oldest snapshot")
        else:
            self._cursor += 1

    def undo(self) -> Optional[HistorySnapshot]:
        if not self.can_undo:
            return None
        self._cursor -= 1
        return self._entries[self._cursor]

    def redo(self) -> Optional[HistorySnapshot]:
        if not self.can_redo:
            return None
        self._cursor += 1
        return self._entries[self._cursor]

    def clear(self):
        self._entries.clear()
        self._cursor = -1
