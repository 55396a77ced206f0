"""Zoom-level tile pyramids built with Pillow.

Level 0 holds the image at full resolution; every further level halves
it (``scale = 2 ** zoom``, dimensions rounded up).  Each level is cut
into ``tile_size`` squares starting at the top-left corner, and the
right and bottom edge tiles are clipped to the canvas instead of padded.
Tiles land in ``{output_dir}/{zoom}/{x}_{y}.jpg``.
"""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import List, Optional, Tuple

from PIL import Image

from cosmicatlas.core.models import (
    DEFAULT_MAX_ZOOM,
    TILE_SIZE,
    TileGrid,
    TilingConfig,
    TilingResult,
)
from cosmicatlas.logging import get_logger

from .base import TileGenerator

LOGGER = get_logger(__name__)

TILE_EXTENSION = ".jpg"

_RESAMPLING = {
    "nearest": Image.Resampling.NEAREST,
    "bilinear": Image.Resampling.BILINEAR,
    "bicubic": Image.Resampling.BICUBIC,
    "lanczos": Image.Resampling.LANCZOS,
}


class TilingError(RuntimeError):
    """Raised when a source image cannot be decoded or a tile cannot be written."""


def _ceil_div(numerator: int, denominator: int) -> int:
    # Integer ceiling; float division underflows to 0 once 2 ** zoom is huge.
    return -(-numerator // denominator)


def compute_tile_grid(width: int, height: int, zoom: int, tile_size: int = TILE_SIZE) -> TileGrid:
    """Return the scaled canvas and tile counts for one zoom level."""

    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if zoom < 0:
        raise ValueError(f"Zoom level must be non-negative, got {zoom}")
    if tile_size <= 0:
        raise ValueError(f"Tile size must be positive, got {tile_size}")

    scale = 2 ** zoom
    scaled_width = _ceil_div(width, scale)
    scaled_height = _ceil_div(height, scale)
    return TileGrid(
        zoom=zoom,
        scale=scale,
        scaled_width=scaled_width,
        scaled_height=scaled_height,
        tiles_x=_ceil_div(scaled_width, tile_size),
        tiles_y=_ceil_div(scaled_height, tile_size),
        tile_size=tile_size,
    )


def plan_pyramid(
    width: int,
    height: int,
    max_zoom: int,
    tile_size: int = TILE_SIZE,
) -> List[TileGrid]:
    if max_zoom < 0:
        raise ValueError(f"max_zoom must be non-negative, got {max_zoom}")
    return [compute_tile_grid(width, height, zoom, tile_size) for zoom in range(max_zoom + 1)]


def tile_path(output_dir: Path, zoom: int, x: int, y: int) -> Path:
    return Path(output_dir) / str(zoom) / f"{x}_{y}{TILE_EXTENSION}"


def read_image_size(source: Path) -> Tuple[int, int]:
    """Return ``(width, height)`` of ``source`` without decoding the pixels."""

    try:
        with Image.open(source) as image:
            return image.size
    except OSError as exc:
        raise TilingError(f"Cannot read source image {source}: {exc}") from exc


class PyramidTiler(TileGenerator):
    """Cut a source image into a tile pyramid on the local filesystem."""

    def __init__(self, config: Optional[TilingConfig] = None, *, dry_run: bool = False) -> None:
        self._config = config or TilingConfig()
        self._dry_run = dry_run
        resampling = self._config.resampling.lower()
        if resampling not in _RESAMPLING:
            LOGGER.warning("unknown resampling method %r; defaulting to 'lanczos'", resampling)
            resampling = "lanczos"
        self._resample = _RESAMPLING[resampling]

    def generate(
        self,
        source: Path,
        output_dir: Path,
        max_zoom: Optional[int] = None,
    ) -> TilingResult:
        source = Path(source)
        output_dir = Path(output_dir)
        max_zoom = self._config.max_zoom if max_zoom is None else max_zoom

        width, height = read_image_size(source)
        levels = plan_pyramid(width, height, max_zoom, self._config.tile_size)
        total = sum(level.tile_count for level in levels)
        LOGGER.info(
            "tile pyramid plan",
            extra={
                "source": str(source),
                "width": width,
                "height": height,
                "max_zoom": max_zoom,
                "tiles": total,
                "workers": self._config.workers,
            },
        )

        written = 0
        if not self._dry_run:
            work = self._prepare_work(output_dir, levels)
            if self._config.workers > 1:
                written = self._render_parallel(source, work)
            else:
                for grid, x, y, destination in work:
                    self._render_tile(source, grid, x, y, destination)
                    written += 1

        last = levels[-1]
        LOGGER.info(
            "tile pyramid complete",
            extra={"output_dir": str(output_dir), "tiles_written": written, "dry_run": self._dry_run},
        )
        return TilingResult(
            success=True,
            max_zoom=max_zoom,
            tiles_x=last.tiles_x,
            tiles_y=last.tiles_y,
            levels=levels,
            tiles_written=written,
            output_dir=output_dir,
        )

    def _prepare_work(
        self,
        output_dir: Path,
        levels: List[TileGrid],
    ) -> List[Tuple[TileGrid, int, int, Path]]:
        work = []
        for grid in levels:
            zoom_dir = output_dir / str(grid.zoom)
            try:
                zoom_dir.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise TilingError(f"Cannot create tile directory {zoom_dir}: {exc}") from exc
            for x, y in grid.iter_tiles():
                work.append((grid, x, y, tile_path(output_dir, grid.zoom, x, y)))
        return work

    def _render_parallel(self, source: Path, work: List[Tuple[TileGrid, int, int, Path]]) -> int:
        written = 0
        with ThreadPoolExecutor(max_workers=self._config.workers) as executor:
            futures: List[Future] = [
                executor.submit(self._render_tile, source, grid, x, y, destination)
                for grid, x, y, destination in work
            ]
            try:
                for future in futures:
                    future.result()
                    written += 1
            except Exception:
                for future in futures:
                    future.cancel()
                raise
        return written

    def _render_tile(self, source: Path, grid: TileGrid, x: int, y: int, destination: Path) -> None:
        # The full image is re-decoded and rescaled for every tile.
        box = grid.tile_box(x, y)
        try:
            with Image.open(source) as image:
                if image.mode != "RGB":
                    image = image.convert("RGB")
                scaled = image.resize((grid.scaled_width, grid.scaled_height), resample=self._resample)
            tile = scaled.crop(box)
            tile.save(destination, format="JPEG", quality=self._config.quality)
        except OSError as exc:
            raise TilingError(f"Failed to render tile {grid.zoom}/{x}_{y}: {exc}") from exc
        LOGGER.debug("wrote tile %s", destination)


def create_image_tiles(
    source_image_path: Path | str,
    output_directory: Path | str,
    max_zoom: int = DEFAULT_MAX_ZOOM,
    *,
    config: Optional[TilingConfig] = None,
    dry_run: bool = False,
) -> TilingResult:
    """Generate a tile pyramid and report the outcome instead of raising.

    Tiles written before a failure stay on disk; rerunning overwrites them.
    """

    tiler = PyramidTiler(config, dry_run=dry_run)
    try:
        return tiler.generate(Path(source_image_path), Path(output_directory), max_zoom)
    except Exception as exc:
        LOGGER.error(
            "Error creating tiles",
            exc_info=True,
            extra={"source": str(source_image_path), "output_dir": str(output_directory)},
        )
        return TilingResult.failure(str(exc) or exc.__class__.__name__)
