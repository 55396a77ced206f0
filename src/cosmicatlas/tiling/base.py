"""Protocol definitions for tile generation components."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Protocol

from cosmicatlas.core.models import TilingResult


class TileGenerator(Protocol):
    """Interface for creating zoom-level tile pyramids from a single image."""

    def generate(
        self,
        source: Path,
        output_dir: Path,
        max_zoom: Optional[int] = None,
    ) -> TilingResult:
        """Write ``{output_dir}/{zoom}/{x}_{y}.jpg`` tiles for zoom levels 0..max_zoom."""
