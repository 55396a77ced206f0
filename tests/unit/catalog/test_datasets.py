from pathlib import Path

import pytest

from cosmicatlas.catalog import DatasetCatalog, DatasetNotFound


def test_default_catalog_contents() -> None:
    catalog = DatasetCatalog.load_default()

    listing = catalog.list_datasets()
    assert set(listing) == {"earth", "mars", "moon"}
    assert listing["earth"]["layers"] == [
        {"id": "landsat", "name": "Landsat 8", "description": "Natural color imagery"},
        {"id": "modis", "name": "MODIS", "description": "Daily global imagery"},
    ]
    assert catalog.get("moon").has_layer("lroc")
    assert not catalog.get("moon").has_layer("landsat")


def test_sample_images() -> None:
    catalog = DatasetCatalog.load_default()

    images = catalog.list_sample_images("mars")
    assert len(images) == 1
    assert images[0].to_dict()["tags"][0] == "mars"
    assert catalog.list_sample_images("pluto") == []


def test_unknown_dataset_raises() -> None:
    catalog = DatasetCatalog.load_default()

    with pytest.raises(DatasetNotFound):
        catalog.get("pluto")


def test_load_rejects_non_mapping(tmp_path: Path) -> None:
    path = tmp_path / "datasets.yaml"
    path.write_text("datasets: [earth]", encoding="utf-8")

    with pytest.raises(ValueError):
        DatasetCatalog.load(path)
