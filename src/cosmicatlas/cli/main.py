"""CLI entry point for CosmicAtlas."""

from __future__ import annotations

import argparse
import json
import os
from pathlib import Path
from typing import Iterable, Optional

from cosmicatlas.config import AtlasConfig, load_config
from cosmicatlas.logging import configure_logging, get_logger
from cosmicatlas.server import create_app
from cosmicatlas.tiling import create_image_tiles

LOGGER = get_logger(__name__)

DEFAULT_CONFIG = Path("configs/base/atlas.yaml")


def _load_env() -> None:
    env_path = Path.cwd() / ".env"
    if not env_path.exists():
        return
    try:
        for line in env_path.read_text(encoding="utf-8").splitlines():
            stripped = line.strip()
            if not stripped or stripped.startswith("#"):
                continue
            if "=" not in stripped:
                continue
            key, value = stripped.split("=", 1)
            os.environ.setdefault(key.strip(), value.strip().strip('"'))
    except OSError as exc:
        LOGGER.warning("Failed to load .env file", extra={"path": str(env_path), "error": str(exc)})


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="CosmicAtlas command-line interface")
    parser.add_argument("--log-json", action="store_true", help="Emit logs in JSON format")
    parser.add_argument("--log-level", default="INFO", help="Logging level (default: INFO)")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help=f"Path to configuration file (YAML or JSON, default: {DEFAULT_CONFIG} if present)",
    )
    subcommands = parser.add_subparsers(dest="command", required=True)

    tile = subcommands.add_parser("tile", help="Cut an image into a zoom-level tile pyramid")
    tile.add_argument("--input", type=Path, required=True, help="Source image path")
    tile.add_argument("--out", type=Path, required=True, help="Destination directory for tiles")
    tile.add_argument(
        "--max-zoom",
        type=int,
        default=None,
        help="Coarsest zoom level to generate (default: config or 10)",
    )
    tile.add_argument("--quality", type=int, default=None, help="JPEG quality (default: config or 85)")
    tile.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Number of tiles rendered concurrently (default: config or 1)",
    )
    tile.add_argument(
        "--dry-run",
        action="store_true",
        help="Report the tile grid without writing any files",
    )

    serve = subcommands.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default=None, help="Bind address (default: config)")
    serve.add_argument("--port", type=int, default=None, help="Bind port (default: config or $PORT)")
    serve.add_argument("--debug", action="store_true", help="Enable the Flask debugger")

    return parser


def main(argv: Iterable[str] | None = None) -> int:
    _load_env()
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    configure_logging(level=args.log_level, json_logs=args.log_json)

    if args.command == "tile":
        return _handle_tile(args)
    if args.command == "serve":
        return _handle_serve(args)
    parser.error("Unknown command")
    return 1


def _resolve_config(path: Optional[Path]) -> AtlasConfig:
    if path is not None:
        resolved = path.resolve()
        if not resolved.exists():
            raise SystemExit(f"Configuration file not found: {resolved}")
        return load_config(resolved)
    if DEFAULT_CONFIG.exists():
        return load_config(DEFAULT_CONFIG.resolve())
    config = AtlasConfig()
    config.apply_environment()
    return config


def _handle_tile(args: argparse.Namespace) -> int:
    cfg = _resolve_config(args.config)

    source_path = args.input.resolve()
    if not source_path.exists():
        raise SystemExit(f"Input image not found: {source_path}")

    if args.quality is not None:
        if not 1 <= args.quality <= 100:
            raise SystemExit("--quality must be between 1 and 100")
        cfg.tiling.quality = args.quality
    if args.workers is not None:
        if args.workers < 1:
            raise SystemExit("--workers must be at least 1")
        cfg.tiling.workers = args.workers
    max_zoom = args.max_zoom if args.max_zoom is not None else cfg.tiling.max_zoom
    if max_zoom < 0:
        raise SystemExit("--max-zoom must be non-negative")

    result = create_image_tiles(
        source_path,
        args.out.resolve(),
        max_zoom,
        config=cfg.tiling,
        dry_run=args.dry_run,
    )
    print(json.dumps(result.to_dict(), indent=2))
    if not result.success:
        LOGGER.error("tiling failed", extra={"source": str(source_path), "error": result.error})
        return 1
    return 0


def _handle_serve(args: argparse.Namespace) -> int:
    cfg = _resolve_config(args.config)
    host = args.host or cfg.server.host
    port = args.port if args.port is not None else cfg.server.port

    app = create_app(cfg)
    LOGGER.info(
        "starting CosmicAtlas API",
        extra={"host": host, "port": port, "tiles_dir": str(cfg.tiles_dir)},
    )
    app.run(host=host, port=port, debug=args.debug, use_reloader=False)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
