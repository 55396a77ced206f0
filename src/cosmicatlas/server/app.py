"""HTTP API serving dataset metadata, generated tiles and NASA proxies."""

from __future__ import annotations

import os
from datetime import datetime, timezone
from typing import Optional

from flask import Flask, jsonify, request, send_file
from flask_cors import CORS
from werkzeug.security import safe_join

from cosmicatlas.catalog import DatasetCatalog, DatasetNotFound
from cosmicatlas.config import AtlasConfig
from cosmicatlas.logging import get_logger
from cosmicatlas.nasa import NasaAPIError, NasaClient
from cosmicatlas.tiling import create_image_tiles

from .obs import install_request_logging

LOGGER = get_logger(__name__)

API_VERSION = "1.0.0"


def create_app(
    config: Optional[AtlasConfig] = None,
    *,
    catalog: Optional[DatasetCatalog] = None,
    nasa_client: Optional[NasaClient] = None,
) -> Flask:
    config = config or AtlasConfig()
    catalog = catalog or DatasetCatalog.load_default()
    nasa_client = nasa_client or NasaClient(config.nasa)

    app = Flask(__name__)
    app.config["ATLAS"] = config
    CORS(app, resources={r"/*": {"origins": list(config.server.cors_origins)}})
    install_request_logging(app)

    @app.get("/")
    def index():
        return jsonify(
            {
                "message": "CosmicAtlas imagery API",
                "version": API_VERSION,
                "endpoints": {
                    "health": "/api/health",
                    "datasets": "/api/datasets",
                    "tiles": "/api/tiles/<dataset>/<layer>/<z>/<x>/<y>",
                    "nasa": {
                        "earth": "/api/nasa/earth",
                        "mars": "/api/nasa/mars",
                    },
                },
            }
        )

    @app.get("/api/health")
    def health():
        return jsonify({"status": "OK", "timestamp": datetime.now(timezone.utc).isoformat()})

    @app.get("/api/datasets")
    def list_datasets():
        return jsonify(catalog.list_datasets())

    @app.get("/api/datasets/<dataset>")
    def get_dataset(dataset: str):
        try:
            record = catalog.get(dataset)
        except DatasetNotFound:
            return jsonify({"error": "Dataset not found"}), 404
        return jsonify(record.to_dict())

    @app.get("/api/datasets/<dataset>/images")
    def dataset_images(dataset: str):
        return jsonify([image.to_dict() for image in catalog.list_sample_images(dataset)])

    @app.get("/api/tiles/<dataset>/<layer>/<int:z>/<int:x>/<int:y>")
    def get_tile(dataset: str, layer: str, z: int, x: int, y: int):
        path = safe_join(str(config.tiles_dir), dataset, layer, str(z), f"{x}_{y}.jpg")
        if path is None or not os.path.isfile(path):
            return jsonify({"error": "Tile not found"}), 404
        return send_file(path, mimetype="image/jpeg")

    @app.post("/api/tiles/<dataset>/<layer>")
    def generate_tiles(dataset: str, layer: str):
        payload = request.get_json(silent=True) or {}
        source_name = payload.get("source")
        source = safe_join(str(config.sources_dir), source_name) if isinstance(source_name, str) else None
        if source is None or not os.path.isfile(source):
            return jsonify({"success": False, "error": "Source image not found"}), 400

        max_zoom = payload.get("maxZoom", config.tiling.max_zoom)
        if not isinstance(max_zoom, int) or isinstance(max_zoom, bool) or max_zoom < 0:
            return jsonify({"success": False, "error": "maxZoom must be a non-negative integer"}), 400

        output_dir = safe_join(str(config.tiles_dir), dataset, layer)
        if output_dir is None:
            return jsonify({"success": False, "error": "Invalid dataset or layer"}), 400

        result = create_image_tiles(source, output_dir, max_zoom, config=config.tiling)
        if not result.success:
            return jsonify({"success": False, "error": "Tile generation failed"}), 500
        return jsonify(result.to_dict())

    @app.get("/api/nasa/earth")
    def nasa_earth():
        args = request.args
        try:
            data = nasa_client.earth_assets(
                lat=args.get("lat", 0.0, type=float),
                lon=args.get("lon", 0.0, type=float),
                date_=args.get("date"),
                dim=args.get("dim", 0.1, type=float),
            )
        except NasaAPIError:
            LOGGER.exception("Earth assets request failed")
            return jsonify({"error": "Failed to fetch NASA data"}), 500
        return jsonify(data)

    @app.get("/api/nasa/mars")
    def nasa_mars():
        args = request.args
        try:
            data = nasa_client.mars_photos(
                sol=args.get("sol", 1000, type=int),
                camera=args.get("camera", "FHAZ"),
            )
        except NasaAPIError:
            LOGGER.exception("Mars photos request failed")
            return jsonify({"error": "Failed to fetch Mars data"}), 500
        return jsonify(data)

    @app.errorhandler(404)
    def not_found(_exc):
        return jsonify({"error": "Route not found", "path": request.path}), 404

    return app
