"""Shared test fixtures."""

from __future__ import annotations

import numpy as np
import pytest

from coverage2vec.engine.context import PipelineContext
from coverage2vec.engine.pipeline import register_transforms
from coverage2vec.engine.registry import get_registry


def uniform_fine(coverage) -> np.ndarray:
    """Fine grid whose four samples per cell all equal the cell coverage."""
    cov = np.asarray(coverage, dtype=np.uint8)
    return np.repeat(np.repeat(cov, 2, axis=0), 2, axis=1)


def disk_raster(size: int, radius: float, oversample: int = 8) -> np.ndarray:
    """Antialiased 8-bit coverage of a disk centered in a size×size raster."""
    c = size / 2.0
    step = 1.0 / oversample
    offsets = (np.arange(oversample) + 0.5) * step
    ys = (np.arange(size)[:, None] + offsets[None, :]).reshape(-1)
    xs = ys.copy()
    inside = ((xs[None, :] - c) ** 2 + (ys[:, None] - c) ** 2) <= radius**2
    cov = inside.reshape(size, oversample, size, oversample).mean(axis=(1, 3))
    return np.floor(cov * 255).astype(np.uint8)


# 3×3: a faint NW corner at the center, saturated cells to its west and south
CORNER_COVERAGE = [
    [0, 0, 0],
    [255, 20, 0],
    [0, 255, 0],
]


@pytest.fixture
def make_ctx():
    """Factory: context from a coverage grid; fine defaults to uniform samples."""

    def _make(coverage, fine=None, **kwargs) -> PipelineContext:
        if fine is None:
            fine = uniform_fine(coverage)
        return PipelineContext.from_arrays(coverage, fine, **kwargs)

    return _make


@pytest.fixture
def corner_ctx(make_ctx) -> PipelineContext:
    fine = uniform_fine(CORNER_COVERAGE)
    # Center cell (1, 1): brightest sample top-left
    fine[2:4, 2:4] = [[80, 0], [0, 0]]
    return make_ctx(CORNER_COVERAGE, fine)


@pytest.fixture(scope="session")
def registry():
    register_transforms()
    return get_registry()


def write_raster(path, data, transform=None, crs=None):
    """Single-band 8-bit GeoTIFF; no transform / crs writes an ungeoreferenced file."""
    import warnings

    import rasterio
    from rasterio.errors import NotGeoreferencedWarning

    data = np.asarray(data, dtype=np.uint8)
    profile = {
        "driver": "GTiff",
        "height": data.shape[0],
        "width": data.shape[1],
        "count": 1,
        "dtype": "uint8",
    }
    if transform is not None:
        profile["transform"] = transform
    if crs is not None:
        profile["crs"] = crs
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", NotGeoreferencedWarning)
        with rasterio.open(path, "w", **profile) as dst:
            dst.write(data, 1)
    return path
