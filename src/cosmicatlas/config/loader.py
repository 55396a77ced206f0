"""Configuration management with YAML and JSON support."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from cosmicatlas.core.models import NasaConfig, ServerConfig, TilingConfig


@dataclass
class AtlasConfig:
    """Top-level configuration object for the CosmicAtlas services."""

    tiles_dir: Path = Path("public/tiles")
    sources_dir: Path = Path("data/sources")
    tiling: TilingConfig = field(default_factory=TilingConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    nasa: NasaConfig = field(default_factory=NasaConfig)

    def resolve_relative_paths(self, base_dir: Path) -> None:
        """Resolve relative directories against the provided base directory."""

        if not self.tiles_dir.is_absolute():
            self.tiles_dir = base_dir / self.tiles_dir
        if not self.sources_dir.is_absolute():
            self.sources_dir = base_dir / self.sources_dir

    def apply_environment(self, environ: Optional[Mapping[str, str]] = None) -> None:
        """Let ``PORT`` and ``NASA_API_KEY`` override file settings."""

        env = os.environ if environ is None else environ
        port = env.get("PORT")
        if port:
            try:
                self.server.port = int(port)
            except ValueError as exc:
                raise ValueError(f"PORT must be an integer, got {port!r}") from exc
        api_key = env.get("NASA_API_KEY")
        if api_key:
            self.nasa.api_key = api_key


class ConfigLoader:
    """Load configuration files in YAML or JSON format."""

    def __init__(self, base_dir: Optional[Path] = None) -> None:
        self._base_dir = base_dir or Path.cwd()

    def load(self, path: Path | str) -> AtlasConfig:
        """Parse a configuration file and return a populated dataclass."""

        config_path = self._resolve_path(Path(path))
        payload = self._load_payload(config_path)
        config = self._build_config(payload)
        config.resolve_relative_paths(config_path.parent)
        config.apply_environment()
        return config

    def _resolve_path(self, path: Path) -> Path:
        if path.is_absolute():
            return path
        return (self._base_dir / path).resolve()

    def _load_payload(self, path: Path) -> Dict[str, Any]:
        suffix = path.suffix.lower()
        if suffix in {".yaml", ".yml"}:
            with path.open("r", encoding="utf-8") as handle:
                payload = yaml.safe_load(handle) or {}
        elif suffix == ".json":
            with path.open("r", encoding="utf-8") as handle:
                payload = json.load(handle) or {}
        else:
            raise ValueError(f"Unsupported configuration format: {suffix}")
        if not isinstance(payload, dict):
            raise ValueError("configuration root must be a mapping")
        return payload

    def _build_config(self, payload: Dict[str, Any]) -> AtlasConfig:
        tiles_dir = Path(payload.get("tiles_dir", "public/tiles"))
        sources_dir = Path(payload.get("sources_dir", "data/sources"))

        tiling_data = self._section(payload, "tiling")
        for key in ("max_zoom", "tile_size", "quality", "workers"):
            if key in tiling_data and tiling_data[key] is not None:
                tiling_data[key] = int(tiling_data[key])
        tiling = TilingConfig(**tiling_data)
        if tiling.max_zoom < 0:
            raise ValueError("tiling.max_zoom must be non-negative")
        if tiling.workers < 1:
            raise ValueError("tiling.workers must be at least 1")

        server_data = self._section(payload, "server")
        if "port" in server_data and server_data["port"] is not None:
            server_data["port"] = int(server_data["port"])
        if "cors_origins" in server_data:
            origins = server_data["cors_origins"] or []
            if isinstance(origins, str):
                origins = [origins]
            server_data["cors_origins"] = tuple(origins)
        server = ServerConfig(**server_data)

        nasa_data = self._section(payload, "nasa")
        if "timeout_seconds" in nasa_data and nasa_data["timeout_seconds"] is not None:
            nasa_data["timeout_seconds"] = int(nasa_data["timeout_seconds"])
        nasa = NasaConfig(**nasa_data)

        return AtlasConfig(
            tiles_dir=tiles_dir,
            sources_dir=sources_dir,
            tiling=tiling,
            server=server,
            nasa=nasa,
        )

    @staticmethod
    def _section(payload: Dict[str, Any], name: str) -> Dict[str, Any]:
        section = payload.get(name) or {}
        if not isinstance(section, dict):
            raise ValueError(f"{name} section must be a mapping")
        return dict(section)


def load_config(path: Path | str, *, base_dir: Optional[Path] = None) -> AtlasConfig:
    """Convenience wrapper around :class:`ConfigLoader`."""

    loader = ConfigLoader(base_dir=base_dir)
    return loader.load(path)
