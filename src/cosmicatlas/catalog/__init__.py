"""Static sample datasets exposed by the CosmicAtlas API."""

from .datasets import (
    DatasetCatalog,
    DatasetNotFound,
    DatasetRecord,
    LayerRecord,
    SampleImage,
)

__all__ = [
    "DatasetCatalog",
    "DatasetNotFound",
    "DatasetRecord",
    "LayerRecord",
    "SampleImage",
]
