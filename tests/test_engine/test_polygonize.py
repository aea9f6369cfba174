"""End-to-end tests: full pass schedule through T3.01 polygon extraction."""

import math

import numpy as np
import pytest

from coverage2vec.engine.config import PipelineConfig
from coverage2vec.engine.pipeline import Pipeline
from coverage2vec.io.raster import build_coverage
from coverage2vec.io.vector import MemorySink
from tests.conftest import disk_raster


def _run(registry, ctx, **config):
    Pipeline(registry=registry, config=PipelineConfig(**config)).run(ctx)
    assert ctx.errors == {}
    return ctx


def test_saturated_block_gives_square(registry, make_ctx):
    coverage = np.zeros((4, 4), dtype=np.uint8)
    coverage[1:3, 1:3] = 255
    sink = MemorySink()
    ctx = _run(registry, make_ctx(coverage, sink=sink))

    assert len(sink) == 1
    poly = sink.polygons[0]
    assert poly.bounds == (2.0, 2.0, 6.0, 6.0)
    assert poly.area == pytest.approx(16.0)
    assert all(float(v).is_integer() for xy in poly.exterior.coords for v in xy)
    assert ctx.stats["T3.01"] == {"polygons": 1, "skipped": 0}


def test_hole_becomes_interior_ring(registry, make_ctx):
    coverage = np.full((5, 5), 255, dtype=np.uint8)
    coverage[2, 2] = 0
    sink = MemorySink()
    _run(registry, make_ctx(coverage, sink=sink))

    assert len(sink) == 1
    poly = sink.polygons[0]
    assert len(poly.interiors) == 1
    assert poly.area == pytest.approx(96.0)


def test_geotransform_applied(registry, make_ctx):
    coverage = np.zeros((4, 4), dtype=np.uint8)
    coverage[1:3, 1:3] = 255
    sink = MemorySink()
    _run(
        registry,
        make_ctx(coverage, sink=sink, geotransform=(100.0, 0.5, 0.0, 200.0, 0.0, -0.5)),
    )
    assert sink.polygons[0].bounds == pytest.approx((101.0, 197.0, 103.0, 199.0))


def test_separate_regions_give_separate_polygons(registry, make_ctx):
    coverage = np.zeros((5, 7), dtype=np.uint8)
    coverage[1:3, 1:3] = 255
    coverage[1:4, 4:6] = 255
    sink = MemorySink()
    _run(registry, make_ctx(coverage, sink=sink))
    assert sorted(p.area for p in sink.polygons) == [16.0, 24.0]


def test_regions_flushed_across_windows(registry, make_ctx):
    coverage = np.zeros((30, 4), dtype=np.uint8)
    coverage[1:3, 1:3] = 255
    coverage[20:23, 1:3] = 255
    sink = MemorySink()
    ctx = _run(registry, make_ctx(coverage, sink=sink), flush_rows=2)

    assert len(sink) == 2
    # The upper region is complete long before the lower one starts
    assert sink.polygons[0].bounds[1] < sink.polygons[1].bounds[1]
    assert ctx.polygons_emitted == 2


def test_disk_area_matches_coverage(registry, make_ctx):
    radius = 12.0
    coverage, fine = build_coverage(disk_raster(40, radius))
    sink = MemorySink()
    _run(registry, make_ctx(coverage, fine, sink=sink))

    assert len(sink) >= 1
    total = sum(p.area for p in sink.polygons)
    assert total == pytest.approx(math.pi * radius**2, rel=0.15)

    for poly in sink.polygons:
        coords = np.asarray(poly.exterior.coords)
        assert tuple(coords[0]) == tuple(coords[-1])
        assert np.all(np.any(coords[1:] != coords[:-1], axis=1))


def test_missing_sink_collects_in_memory(registry, make_ctx):
    coverage = np.zeros((3, 3), dtype=np.uint8)
    coverage[1, 1] = 255
    ctx = _run(registry, make_ctx(coverage))
    assert isinstance(ctx.sink, MemorySink)
    assert len(ctx.sink) == 1


def test_attributes_pass_through(registry, make_ctx):
    coverage = np.zeros((3, 3), dtype=np.uint8)
    coverage[1, 1] = 255
    sink = MemorySink()
    _run(registry, make_ctx(coverage, sink=sink, attributes={"x": 3, "z": 12}))
    assert sink.attributes == [{"x": 3, "z": 12}]


def test_empty_raster_emits_nothing(registry, make_ctx):
    sink = MemorySink()
    ctx = _run(registry, make_ctx(np.zeros((3, 3), dtype=np.uint8), sink=sink))
    assert len(sink) == 0
    assert ctx.stats["T3.01"]["polygons"] == 0


def test_half_covered_band_is_consistent(registry, make_ctx):
    from coverage2vec.engine.fractions import sides_connected

    coverage = np.zeros((5, 5), dtype=np.uint8)
    coverage[:2] = 255
    coverage[2] = 128
    sink = MemorySink()
    ctx = _run(registry, make_ctx(coverage, sink=sink))

    assert ctx.codes[2].tolist() == [2, 2, 2, 2, 2]
    # Interior side cells share both cut ends with their neighbors
    assert [sides_connected(ctx, x, 2) for x in range(1, 4)] == [3, 3, 3]
    assert ctx.f1[2].tolist() == [128] * 5
    assert ctx.f2[2].tolist() == [128] * 5

    assert len(sink) == 1
    minx, miny, maxx, maxy = sink.polygons[0].bounds
    assert (minx, miny, maxx) == (0.0, 0.0, 10.0)
    assert maxy == pytest.approx(5.0, abs=0.01)
    assert sink.polygons[0].area == pytest.approx(50.0, abs=0.1)
