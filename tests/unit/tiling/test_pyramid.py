import logging
from pathlib import Path
from typing import Set

import pytest
from PIL import Image

from cosmicatlas.core.models import TilingConfig
from cosmicatlas.tiling.pyramid import PyramidTiler, TilingError, create_image_tiles


def _make_image(path: Path, size, mode: str = "RGB") -> Path:
    color = (120, 60, 200, 255)[: len(mode)] if mode in {"RGB", "RGBA"} else 128
    Image.new(mode, size, color).save(path)
    return path


def _tile_names(root: Path) -> Set[str]:
    return {str(path.relative_to(root)) for path in root.rglob("*.jpg")}


@pytest.fixture()
def source(tmp_path: Path) -> Path:
    return _make_image(tmp_path / "source.png", (600, 400))


def test_small_image_yields_single_tile(tmp_path: Path) -> None:
    image = _make_image(tmp_path / "small.png", (200, 100))
    out = tmp_path / "tiles"

    result = create_image_tiles(image, out, max_zoom=0)

    assert result.success
    assert _tile_names(out) == {"0/0_0.jpg"}
    with Image.open(out / "0" / "0_0.jpg") as tile:
        assert tile.size == (200, 100)
        assert tile.format == "JPEG"


def test_600x400_grid_per_zoom_level(source: Path, tmp_path: Path) -> None:
    out = tmp_path / "tiles"

    result = create_image_tiles(source, out, max_zoom=1)

    assert result.success
    assert [(level.tiles_x, level.tiles_y) for level in result.levels] == [(3, 2), (2, 1)]
    assert (result.max_zoom, result.tiles_x, result.tiles_y) == (1, 2, 1)
    assert result.tiles_written == 8
    assert len(list((out / "0").glob("*.jpg"))) == 6
    assert len(list((out / "1").glob("*.jpg"))) == 2


def test_tile_dimensions_match_clipped_boxes(source: Path, tmp_path: Path) -> None:
    out = tmp_path / "tiles"

    result = create_image_tiles(source, out, max_zoom=2)

    assert result.success
    for level in result.levels:
        for x, y in level.iter_tiles():
            expected = (
                min(256, level.scaled_width - x * 256),
                min(256, level.scaled_height - y * 256),
            )
            with Image.open(out / str(level.zoom) / f"{x}_{y}.jpg") as tile:
                assert tile.size == expected


def test_result_dict_keeps_last_level_and_levels(source: Path, tmp_path: Path) -> None:
    payload = create_image_tiles(source, tmp_path / "tiles", max_zoom=1).to_dict()

    assert payload["success"] is True
    assert payload["tiles"]["maxZoom"] == 1
    assert payload["tiles"]["tilesX"] == 2
    assert payload["tiles"]["tilesY"] == 1
    assert payload["tiles"]["levels"][0]["tilesX"] == 3
    assert "error" not in payload


def test_repeated_runs_produce_same_tile_set(source: Path, tmp_path: Path) -> None:
    first = tmp_path / "first"
    second = tmp_path / "second"

    create_image_tiles(source, first, max_zoom=3)
    create_image_tiles(source, second, max_zoom=3)

    assert _tile_names(first) == _tile_names(second)
    for name in _tile_names(first):
        with Image.open(first / name) as a, Image.open(second / name) as b:
            assert a.size == b.size


def test_regeneration_overwrites_existing_tiles(source: Path, tmp_path: Path) -> None:
    out = tmp_path / "tiles"
    (out / "0").mkdir(parents=True)
    (out / "0" / "0_0.jpg").write_bytes(b"stale")

    result = create_image_tiles(source, out, max_zoom=0)

    assert result.success
    with Image.open(out / "0" / "0_0.jpg") as tile:
        assert tile.size == (256, 256)


def test_missing_source_reports_failure(tmp_path: Path) -> None:
    result = create_image_tiles(tmp_path / "nope.png", tmp_path / "tiles", max_zoom=1)

    assert result.success is False
    assert result.error
    assert not (tmp_path / "tiles").exists()


def test_undecodable_source_reports_failure(tmp_path: Path) -> None:
    bogus = tmp_path / "bogus.jpg"
    bogus.write_text("not an image", encoding="utf-8")

    result = create_image_tiles(bogus, tmp_path / "tiles")

    assert result.success is False
    assert "bogus.jpg" in result.error


def test_unwritable_output_reports_failure(source: Path, tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("file in the way", encoding="utf-8")

    result = create_image_tiles(source, blocker, max_zoom=0)

    assert result.success is False
    assert result.error


def test_negative_max_zoom_reports_failure(source: Path, tmp_path: Path) -> None:
    result = create_image_tiles(source, tmp_path / "tiles", max_zoom=-1)

    assert result.success is False
    assert "max_zoom" in result.error


def test_generator_raises_tiling_error(tmp_path: Path) -> None:
    tiler = PyramidTiler()

    with pytest.raises(TilingError):
        tiler.generate(tmp_path / "missing.png", tmp_path / "tiles", 0)


def test_rgba_and_grayscale_sources_are_converted(tmp_path: Path) -> None:
    rgba = _make_image(tmp_path / "rgba.png", (300, 300), mode="RGBA")
    gray = _make_image(tmp_path / "gray.png", (300, 300), mode="L")

    assert create_image_tiles(rgba, tmp_path / "rgba", max_zoom=0).success
    assert create_image_tiles(gray, tmp_path / "gray", max_zoom=0).success
    with Image.open(tmp_path / "gray" / "0" / "1_1.jpg") as tile:
        assert tile.mode == "RGB"
        assert tile.size == (44, 44)


def test_worker_pool_matches_sequential_output(source: Path, tmp_path: Path) -> None:
    sequential = tmp_path / "sequential"
    pooled = tmp_path / "pooled"

    create_image_tiles(source, sequential, max_zoom=2)
    result = create_image_tiles(source, pooled, max_zoom=2, config=TilingConfig(workers=4))

    assert result.success
    assert result.tiles_written == 6 + 2 + 1
    assert _tile_names(pooled) == _tile_names(sequential)


def test_worker_pool_propagates_first_failure(source: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    tiler = PyramidTiler(TilingConfig(workers=2))

    def broken(*args, **kwargs):  # type: ignore[no-untyped-def]
        raise TilingError("disk full")

    monkeypatch.setattr(tiler, "_render_tile", broken)

    with pytest.raises(TilingError, match="disk full"):
        tiler.generate(source, tmp_path / "tiles", 1)


def test_dry_run_plans_without_writing(source: Path, tmp_path: Path) -> None:
    out = tmp_path / "tiles"

    result = create_image_tiles(source, out, max_zoom=1, dry_run=True)

    assert result.success
    assert result.tiles_written == 0
    assert len(result.levels) == 2
    assert not out.exists()


def _quantization(path: Path):  # type: ignore[no-untyped-def]
    with Image.open(path) as image:
        return image.quantization


def _reference_jpeg(tmp_path: Path, quality: int) -> Path:
    reference = tmp_path / f"reference_q{quality}.jpg"
    Image.new("RGB", (64, 64), (120, 60, 200)).save(reference, "JPEG", quality=quality)
    return reference


def test_tiles_encoded_at_quality_85_by_default(source: Path, tmp_path: Path) -> None:
    out = tmp_path / "tiles"

    create_image_tiles(source, out, max_zoom=0)

    expected = _quantization(_reference_jpeg(tmp_path, 85))
    assert _quantization(out / "0" / "0_0.jpg") == expected
    assert _quantization(out / "0" / "2_1.jpg") == expected


def test_configured_quality_reaches_encoder(source: Path, tmp_path: Path) -> None:
    out = tmp_path / "tiles"

    result = create_image_tiles(source, out, max_zoom=0, config=TilingConfig(quality=40))

    assert result.tiles_written == 6
    tables = _quantization(out / "0" / "1_0.jpg")
    assert tables == _quantization(_reference_jpeg(tmp_path, 40))
    assert tables != _quantization(_reference_jpeg(tmp_path, 85))


def test_unknown_resampling_falls_back_to_lanczos(
    source: Path,
    tmp_path: Path,
    caplog: pytest.LogCaptureFixture,
) -> None:
    config = TilingConfig(resampling="mystery")

    with caplog.at_level(logging.WARNING, logger="cosmicatlas.tiling.pyramid"):
        result = create_image_tiles(source, tmp_path / "tiles", max_zoom=0, config=config)

    assert result.success
    assert result.tiles_written == 6
    assert any(
        "unknown resampling method 'mystery'" in record.getMessage() for record in caplog.records
    )
