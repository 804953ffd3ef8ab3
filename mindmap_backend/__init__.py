"""Mind-map backend - editor session, HTTP API and command-line tool."""

from .session import MindMapSession

__all__ = ["MindMapSession"]
