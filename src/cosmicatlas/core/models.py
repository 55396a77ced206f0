"""Dataclasses describing core CosmicAtlas entities."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple

TILE_SIZE = 256
TILE_QUALITY = 85
DEFAULT_MAX_ZOOM = 10


@dataclass
class TilingConfig:
    """Configuration options that control pyramid generation."""

    max_zoom: int = DEFAULT_MAX_ZOOM
    tile_size: int = TILE_SIZE
    quality: int = TILE_QUALITY
    workers: int = 1
    resampling: str = "lanczos"


@dataclass
class ServerConfig:
    """Bind address and browser origins for the HTTP API."""

    host: str = "127.0.0.1"
    port: int = 5000
    cors_origins: Tuple[str, ...] = ("*",)


@dataclass
class NasaConfig:
    """Connection settings for the NASA public API."""

    api_key: str = "DEMO_KEY"
    base_url: str = "https://api.nasa.gov"
    timeout_seconds: int = 30


@dataclass(frozen=True)
class TileGrid:
    """Tile layout of one zoom level of the pyramid."""

    zoom: int
    scale: int
    scaled_width: int
    scaled_height: int
    tiles_x: int
    tiles_y: int
    tile_size: int = TILE_SIZE

    @property
    def tile_count(self) -> int:
        return self.tiles_x * self.tiles_y

    def tile_box(self, x: int, y: int) -> Tuple[int, int, int, int]:
        """Return the ``(left, top, right, bottom)`` crop of tile ``(x, y)``.

        Edge tiles are clipped to the scaled canvas rather than padded.
        """

        if not (0 <= x < self.tiles_x and 0 <= y < self.tiles_y):
            raise ValueError(
                f"Tile ({x}, {y}) outside {self.tiles_x}x{self.tiles_y} grid at zoom {self.zoom}"
            )
        left = x * self.tile_size
        top = y * self.tile_size
        right = min(left + self.tile_size, self.scaled_width)
        bottom = min(top + self.tile_size, self.scaled_height)
        return left, top, right, bottom

    def iter_tiles(self) -> Iterator[Tuple[int, int]]:
        for x in range(self.tiles_x):
            for y in range(self.tiles_y):
                yield x, y

    def to_dict(self) -> Dict[str, int]:
        return {
            "zoom": self.zoom,
            "scaledWidth": self.scaled_width,
            "scaledHeight": self.scaled_height,
            "tilesX": self.tiles_x,
            "tilesY": self.tiles_y,
        }


@dataclass
class TilingResult:
    """Outcome of a pyramid generation run."""

    success: bool
    max_zoom: Optional[int] = None
    tiles_x: Optional[int] = None
    tiles_y: Optional[int] = None
    levels: List[TileGrid] = field(default_factory=list)
    tiles_written: int = 0
    output_dir: Optional[Path] = None
    error: Optional[str] = None

    @classmethod
    def failure(cls, message: str) -> "TilingResult":
        return cls(success=False, error=message)

    def to_dict(self) -> Dict[str, Any]:
        if not self.success:
            return {"success": False, "error": self.error}
        return {
            "success": True,
            "tiles": {
                "maxZoom": self.max_zoom,
                "tilesX": self.tiles_x,
                "tilesY": self.tiles_y,
                "levels": [level.to_dict() for level in self.levels],
            },
        }
