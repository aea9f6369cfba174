"""Tests for the command-line entry point."""

import geopandas as gpd
import numpy as np
from rasterio.transform import from_origin

from coverage2vec.cli import build_parser, main
from tests.conftest import disk_raster, write_raster


def _input(tmp_path, name="cov.tif", data=None):
    if data is None:
        data = disk_raster(24, 7.0)
    return write_raster(
        tmp_path / name,
        data,
        transform=from_origin(1000.0, 2000.0, 1.0, 1.0),
        crs="EPSG:3857",
    )


def test_parser_defaults():
    args = build_parser().parse_args(["-i", "in.tif", "-o", "out.gpkg"])
    assert args.layer == "polygons"
    assert args.driver == "GPKG"
    assert args.schedule == "fixed"
    assert (args.x, args.y, args.z) == (-1, -1, -1)
    assert not args.append and not args.complement


def test_main_writes_layer(tmp_path):
    src = _input(tmp_path)
    out = tmp_path / "out.gpkg"
    assert main(["-i", str(src), "-o", str(out), "-l", "disk", "-x", "3", "-z", "9"]) == 0

    gdf = gpd.read_file(out, layer="disk")
    assert len(gdf) >= 1
    assert set(gdf["x"]) == {3}
    assert set(gdf["z"]) == {9}
    assert "y" not in gdf.columns
    minx, miny, maxx, maxy = gdf.total_bounds
    assert 1000.0 <= minx < maxx <= 1024.0
    assert 1976.0 <= miny < maxy <= 2000.0


def test_main_appends_and_converges(tmp_path):
    src = _input(tmp_path)
    out = tmp_path / "out.gpkg"
    assert main(["-i", str(src), "-o", str(out)]) == 0
    first = len(gpd.read_file(out, layer="polygons"))
    assert main(["-i", str(src), "-o", str(out), "--append", "--schedule", "converge"]) == 0
    assert len(gpd.read_file(out, layer="polygons")) > first


def test_main_complement(tmp_path):
    src = _input(tmp_path, data=np.zeros((8, 8)))
    comb = _input(tmp_path, "comb.tif", data=np.full((8, 8), 255))
    out = tmp_path / "out.gpkg"
    assert main(["-i", str(src), "-c", str(comb), "--complement", "-o", str(out)]) == 0
    gdf = gpd.read_file(out, layer="polygons")
    assert len(gdf) == 1
    assert gdf.geometry.iloc[0].area == 64.0


def test_main_reports_failures(tmp_path):
    out = tmp_path / "out.gpkg"
    assert main(["-i", str(tmp_path / "missing.tif"), "-o", str(out)]) == 1
    src = _input(tmp_path)
    assert main(["-i", str(src), "-o", str(out), "--complement"]) == 1
    assert main(["-i", str(src), "-o", str(out), "--append"]) == 1
    assert not out.exists()


def test_main_rejects_unknown_schedule_setting(tmp_path, monkeypatch):
    from coverage2vec.config import settings

    # Settings defaults bypass argparse choices
    monkeypatch.setattr(settings, "coverage2vec_schedule", "sometimes")
    src = _input(tmp_path)
    out = tmp_path / "out.gpkg"
    assert main(["-i", str(src), "-o", str(out)]) == 1
    assert not out.exists()
