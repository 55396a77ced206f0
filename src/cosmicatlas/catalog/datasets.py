"""Sample dataset catalog served by the HTTP API."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

import yaml

DEFAULT_CATALOG_PATH = Path(__file__).resolve().parent / "datasets.yaml"


class DatasetNotFound(KeyError):
    """Raised when a dataset id is not present in the catalog."""


@dataclass(frozen=True)
class LayerRecord:
    id: str
    name: str
    description: str = ""


@dataclass(frozen=True)
class SampleImage:
    """A showcase image attached to a dataset."""

    id: int
    title: str
    description: str
    url: str
    resolution: str
    source: str
    date: str
    tags: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["tags"] = list(self.tags)
        return payload


@dataclass(frozen=True)
class DatasetRecord:
    """Metadata describing a browsable imagery dataset."""

    dataset_id: str
    name: str
    description: str
    base_url: str
    layers: Tuple[LayerRecord, ...] = ()
    images: Tuple[SampleImage, ...] = field(default=(), compare=False)

    def has_layer(self, layer_id: str) -> bool:
        return any(layer.id == layer_id for layer in self.layers)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "baseUrl": self.base_url,
            "layers": [asdict(layer) for layer in self.layers],
        }


class DatasetCatalog:
    """In-memory representation of the dataset catalog."""

    def __init__(self, records: Dict[str, DatasetRecord]) -> None:
        self._records = records

    @classmethod
    def from_mapping(cls, mapping: Dict[str, dict]) -> "DatasetCatalog":
        records: Dict[str, DatasetRecord] = {}
        for dataset_id, raw in mapping.items():
            layers = tuple(
                LayerRecord(
                    id=str(layer["id"]),
                    name=layer.get("name", str(layer["id"])),
                    description=layer.get("description", ""),
                )
                for layer in raw.get("layers", [])
            )
            images = tuple(
                SampleImage(
                    id=int(image["id"]),
                    title=image["title"],
                    description=image.get("description", ""),
                    url=image["url"],
                    resolution=str(image.get("resolution", "")),
                    source=image.get("source", ""),
                    date=str(image.get("date", "")),
                    tags=tuple(image.get("tags", [])),
                )
                for image in raw.get("images", [])
            )
            records[dataset_id] = DatasetRecord(
                dataset_id=dataset_id,
                name=raw["name"],
                description=raw.get("description", ""),
                base_url=raw.get("base_url", ""),
                layers=layers,
                images=images,
            )
        return cls(records)

    @classmethod
    def load(cls, path: Path) -> "DatasetCatalog":
        payload = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        datasets = payload.get("datasets", {})
        if not isinstance(datasets, dict):
            raise ValueError("datasets catalog must be a mapping")
        return cls.from_mapping(datasets)

    @classmethod
    def load_default(cls) -> "DatasetCatalog":
        return cls.load(DEFAULT_CATALOG_PATH)

    def get(self, dataset_id: str) -> DatasetRecord:
        try:
            return self._records[dataset_id]
        except KeyError as exc:
            raise DatasetNotFound(dataset_id) from exc

    def iter_records(self) -> Iterable[DatasetRecord]:
        return self._records.values()

    def list_datasets(self) -> Dict[str, Dict[str, Any]]:
        return {record.dataset_id: record.to_dict() for record in self.iter_records()}

    def list_sample_images(self, dataset_id: str) -> List[SampleImage]:
        record: Optional[DatasetRecord] = self._records.get(dataset_id)
        if record is None:
            return []
        return list(record.images)
