"""NASA public API integration."""

from .client import NasaAPIError, NasaClient

__all__ = ["NasaAPIError", "NasaClient"]
