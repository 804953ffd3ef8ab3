"""
Error types raised by the mind-map engine.

Only document loading raises. Everyday editing operations (add, remove,
connect, style) report problems through their return values instead.
"""


class MindMapError(Exception):
    """Base class for all engine errors."""


class ValidationError(MindMapError):
    """A node or record failed a structural check (duplicate id, bad fields)."""

    def __init__(self, message: str, node_id: str | None = None):
        self.node_id = node_id
        super().__init__(message)


class ParseError(MindMapError):
    """The payload is not a readable mind-map document."""


class LimitExceeded(MindMapError):
    """A load was refused because it is larger than the configured cap."""

    def __init__(self, what: str, limit: int, actual: int):
        self.what = what
        self.limit = limit
        self.actual = actual
        super().__init__(
            f"Mind map too large: {actual} {what} (maximum {limit} allowed)"
        )
