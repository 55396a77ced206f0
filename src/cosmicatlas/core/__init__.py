"""Core data models for CosmicAtlas."""

from .models import (
    DEFAULT_MAX_ZOOM,
    TILE_QUALITY,
    TILE_SIZE,
    NasaConfig,
    ServerConfig,
    TileGrid,
    TilingConfig,
    TilingResult,
)

__all__ = [
    "DEFAULT_MAX_ZOOM",
    "TILE_QUALITY",
    "TILE_SIZE",
    "NasaConfig",
    "ServerConfig",
    "TileGrid",
    "TilingConfig",
    "TilingResult",
]
