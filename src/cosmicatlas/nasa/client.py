"""Thin client for the NASA public imagery APIs proxied by the server."""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional

import requests

from cosmicatlas.core.models import NasaConfig
from cosmicatlas.logging import get_logger

LOGGER = get_logger(__name__)

__all__ = ["NasaAPIError", "NasaClient"]


class NasaAPIError(RuntimeError):
    """Raised when a NASA API request fails or returns an unusable body."""


class NasaClient:
    """Query the Earth assets and Mars rover photo endpoints."""

    def __init__(
        self,
        config: Optional[NasaConfig] = None,
        *,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._config = config or NasaConfig()
        self._session = session or requests.Session()

    def earth_assets(
        self,
        *,
        lat: float = 0.0,
        lon: float = 0.0,
        date_: Optional[str] = None,
        dim: float = 0.1,
    ) -> Dict[str, Any]:
        params = {
            "lat": lat,
            "lon": lon,
            "date": date_ or date.today().isoformat(),
            "dim": dim,
        }
        return self._get("/planetary/earth/assets", params)

    def mars_photos(
        self,
        *,
        sol: int = 1000,
        camera: str = "FHAZ",
        rover: str = "curiosity",
    ) -> Dict[str, Any]:
        params = {"sol": sol, "camera": camera}
        return self._get(f"/mars-photos/api/v1/rovers/{rover}/photos", params)

    def _get(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self._config.base_url.rstrip('/')}{path}"
        query = dict(params, api_key=self._config.api_key)
        LOGGER.info("nasa request", extra={"url": url, "params": params})
        try:
            response = self._session.get(url, params=query, timeout=self._config.timeout_seconds)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise NasaAPIError(f"NASA API request to {path} failed: {exc}") from exc
        try:
            return response.json()
        except ValueError as exc:
            raise NasaAPIError(f"NASA API returned a non-JSON body for {path}") from exc
