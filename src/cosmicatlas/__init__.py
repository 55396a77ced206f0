"""CosmicAtlas imagery tiling and browsing backend."""

from __future__ import annotations

import importlib
from typing import Any

__all__ = [
    "AtlasConfig",
    "DatasetCatalog",
    "NasaClient",
    "PyramidTiler",
    "TileGenerator",
    "TileGrid",
    "TilingConfig",
    "TilingResult",
    "create_app",
    "create_image_tiles",
]

_MODULE_MAP = {
    "AtlasConfig": ("cosmicatlas.config", "AtlasConfig"),
    "DatasetCatalog": ("cosmicatlas.catalog", "DatasetCatalog"),
    "NasaClient": ("cosmicatlas.nasa", "NasaClient"),
    "PyramidTiler": ("cosmicatlas.tiling", "PyramidTiler"),
    "TileGenerator": ("cosmicatlas.tiling", "TileGenerator"),
    "TileGrid": ("cosmicatlas.core", "TileGrid"),
    "TilingConfig": ("cosmicatlas.core", "TilingConfig"),
    "TilingResult": ("cosmicatlas.core", "TilingResult"),
    "create_app": ("cosmicatlas.server", "create_app"),
    "create_image_tiles": ("cosmicatlas.tiling", "create_image_tiles"),
}


def __getattr__(name: str) -> Any:
    if name not in _MODULE_MAP:
        raise AttributeError(f"module 'cosmicatlas' has no attribute '{name}'")
    module_name, attr = _MODULE_MAP[name]
    module = importlib.import_module(module_name)
    return getattr(module, attr)
