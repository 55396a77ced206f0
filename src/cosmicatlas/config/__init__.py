"""Configuration loading utilities for CosmicAtlas."""

from .loader import AtlasConfig, ConfigLoader, load_config

__all__ = ["AtlasConfig", "ConfigLoader", "load_config"]
