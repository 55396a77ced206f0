"""Tile generation interfaces for CosmicAtlas."""

from .base import TileGenerator
from .pyramid import (
    PyramidTiler,
    TilingError,
    compute_tile_grid,
    create_image_tiles,
    plan_pyramid,
    tile_path,
)

__all__ = [
    "PyramidTiler",
    "TileGenerator",
    "TilingError",
    "compute_tile_grid",
    "create_image_tiles",
    "plan_pyramid",
    "tile_path",
]
