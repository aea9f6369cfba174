"""Tests for the polygon sinks."""

import geopandas as gpd
import pytest
from shapely.geometry import box

from coverage2vec.errors import SinkError
from coverage2vec.io.vector import LayerSink, MemorySink


def test_memory_sink_collects():
    sink = MemorySink()
    sink.write(box(0, 0, 1, 1), {"x": 1})
    sink.write(box(2, 2, 3, 3))
    sink.close()
    assert len(sink) == 2
    assert sink.attributes == [{"x": 1}, {}]
    assert sink.closed


def test_layer_sink_writes_layer_with_fields(tmp_path):
    path = tmp_path / "out.gpkg"
    with LayerSink(path, layer="blobs", crs="EPSG:4326") as sink:
        sink.write(box(0, 0, 1, 1), {"x": 4, "y": 7})
        sink.write(box(2, 2, 3, 4), {"x": 4, "y": 7})

    gdf = gpd.read_file(path, layer="blobs")
    assert len(gdf) == 2
    assert gdf["x"].tolist() == [4, 4]
    assert gdf["y"].tolist() == [7, 7]
    assert "z" not in gdf.columns
    assert gdf.crs.to_epsg() == 4326
    assert sorted(gdf.geometry.area) == [1.0, 2.0]


def test_layer_sink_batches(tmp_path):
    path = tmp_path / "out.gpkg"
    sink = LayerSink(path, batch_size=2)
    for i in range(5):
        sink.write(box(i, 0, i + 1, 1))
    sink.close()
    assert sink.count == 5
    assert len(gpd.read_file(path, layer="polygons")) == 5


def test_layer_sink_appends(tmp_path):
    path = tmp_path / "out.gpkg"
    with LayerSink(path) as sink:
        sink.write(box(0, 0, 1, 1), {"z": 1})
    with LayerSink(path, append=True) as sink:
        sink.write(box(1, 1, 2, 2), {"z": 2})
    gdf = gpd.read_file(path, layer="polygons")
    assert sorted(gdf["z"].tolist()) == [1, 2]


def test_layer_sink_rejects_bad_targets(tmp_path):
    with pytest.raises(SinkError, match="Cannot append"):
        LayerSink(tmp_path / "missing.gpkg", append=True)
    with pytest.raises(SinkError, match="directory"):
        LayerSink(tmp_path / "nope" / "out.gpkg")


def test_layer_sink_not_flushed_on_error(tmp_path):
    path = tmp_path / "out.gpkg"
    with pytest.raises(RuntimeError):
        with LayerSink(path) as sink:
            sink.write(box(0, 0, 1, 1))
            raise RuntimeError("boom")
    assert not path.exists()
