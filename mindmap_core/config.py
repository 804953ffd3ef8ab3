"""Engine configuration helpers."""

from __future__ import annotations

from functools import lru_cache
import logging
import os
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class EngineConfig(BaseModel):
    """Runtime limits and defaults loaded from environment variables."""

    model_config = ConfigDict(frozen=True)

    history_capacity: int = Field(default=50, description="Undo/redo snapshots kept")
    max_nodes: int = Field(default=1000, description="Node cap for imported documents")
    max_payload_bytes: int = Field(
        default=5_000_000, description="Size cap for raw JSON payloads"
    )
    max_text_length: int = 500
    max_notes_length: int = 2000
    max_title_length: int = 100
    max_depth: int = Field(default=200, description="Deepest level below a root")
    screen_width: float = Field(default=1200, description="Viewport width in pixels")
    screen_height: float = Field(default=800, description="Viewport height in pixels")
    log_level: str = "INFO"

    @field_validator(
        "history_capacity",
        "max_nodes",
        "max_payload_bytes",
        "max_text_length",
        "max_notes_length",
        "max_title_length",
        "max_depth",
        "screen_width",
        "screen_height",
    )
    @classmethod
    def _ensure_positive(cls, value):
        if value <= 0:
            raise ValueError("must be positive")
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_level(cls, value: Optional[str]) -> str:
        if not value:
            return "INFO"
        level = str(value).strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level


def _read_env(key: str, default: Optional[str] = None) -> Optional[str]:
    return os.getenv(key, default)


@lru_cache(maxsize=1)
def get_config() -> EngineConfig:
    """Load and cache engine configuration."""
    values = {
        "history_capacity": _read_env("MINDMAP_HISTORY_CAPACITY"),
        "max_nodes": _read_env("MINDMAP_MAX_NODES"),
        "max_payload_bytes": _read_env("MINDMAP_MAX_PAYLOAD_BYTES"),
        "max_depth": _read_env("MINDMAP_MAX_DEPTH"),
        "screen_width": _read_env("MINDMAP_SCREEN_WIDTH"),
        "screen_height": _read_env("MINDMAP_SCREEN_HEIGHT"),
        "log_level": _read_env("MINDMAP_LOG_LEVEL"),
    }
    return EngineConfig(**{k: v for k, v in values.items() if v is not None})


def reload_config() -> EngineConfig:
    """Clear cached config (useful for tests) and reload."""
    get_config.cache_clear()
    return get_config()


def configure_logging(config: EngineConfig | None = None) -> None:
    """Apply the configured log level to the root logger."""
    config = config or get_config()
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


__all__ = ["EngineConfig", "get_config", "reload_config", "configure_logging"]
