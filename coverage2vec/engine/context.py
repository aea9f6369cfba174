"""PipelineContext — the single mutable state object flowing through all transforms.

Grids are row-major numpy arrays indexed ``[y, x]``:
  coverage (H×W) and fine (2H×2W) are read-only inputs,
  codes / f1 / f2 / f3 are rewritten in place by the passes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import numpy as np
from numpy.typing import NDArray

from coverage2vec.engine.config import PipelineConfig

# GDAL-ordered affine coefficients: X = g0 + x*g1 + y*g2, Y = g3 + x*g4 + y*g5
IDENTITY_TRANSFORM: tuple[float, ...] = (0.0, 1.0, 0.0, 0.0, 0.0, 1.0)

F3_UNSET = -1


@dataclass
class PipelineContext:
    """Shared state flowing through the entire pipeline."""

    # Coverage per coarse cell, 0 = empty, 255 = full
    coverage: NDArray[np.uint8] = field(default_factory=lambda: np.zeros((0, 0), dtype=np.uint8))
    # Raw sub-samples, four per coarse cell
    fine: NDArray[np.uint8] = field(default_factory=lambda: np.zeros((0, 0), dtype=np.uint8))
    # Neighborhood code per cell
    codes: NDArray[np.uint8] = field(default_factory=lambda: np.zeros((0, 0), dtype=np.uint8))
    # Fraction pair and correction scalar; allocated by the fraction initializer
    f1: NDArray[np.uint8] | None = None
    f2: NDArray[np.uint8] | None = None
    f3: NDArray[np.int32] | None = None

    # Georeferencing, passed through to the output untouched
    geotransform: tuple[float, ...] = IDENTITY_TRANSFORM
    crs: Any = None

    # Output collaborator and feature attributes (x / y / z)
    sink: Any = None
    attributes: dict[str, int] = field(default_factory=dict)

    # Error tolerance used by the final tuning pass (fraction of 255)
    max_error: float = 0.05

    # Thresholds read by the passes; the pipeline installs its own
    config: PipelineConfig = field(default_factory=PipelineConfig)

    # --- Run bookkeeping ---
    # Counters of the most recent run of each transform
    stats: dict[str, dict[str, Any]] = field(default_factory=dict)
    # Transform ids in execution order (repeats included)
    pass_log: list[str] = field(default_factory=list)
    errors: dict[str, str] = field(default_factory=dict)
    polygons_emitted: int = 0

    @classmethod
    def from_arrays(
        cls,
        coverage: NDArray[np.integer] | list[list[int]],
        fine: NDArray[np.integer] | list[list[int]],
        **kwargs: Any,
    ) -> "PipelineContext":
        """Build a context from a coverage grid and its 2× fine grid."""
        cov = np.asarray(coverage)
        fin = np.asarray(fine)
        if cov.ndim != 2 or fin.ndim != 2:
            raise ValueError("coverage and fine grids must be two-dimensional")
        if fin.shape != (cov.shape[0] * 2, cov.shape[1] * 2):
            raise ValueError(
                f"fine grid shape {fin.shape} does not match coverage shape {cov.shape}"
            )
        if cov.size and (cov.min() < 0 or cov.max() > 255 or fin.min() < 0 or fin.max() > 255):
            raise ValueError("grid values must lie in [0, 255]")
        return cls(
            coverage=cov.astype(np.uint8),
            fine=fin.astype(np.uint8),
            codes=np.zeros(cov.shape, dtype=np.uint8),
            **kwargs,
        )

    @property
    def width(self) -> int:
        return int(self.coverage.shape[1])

    @property
    def height(self) -> int:
        return int(self.coverage.shape[0])

    @property
    def fractions_ready(self) -> bool:
        return self.f1 is not None

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def interior_cells(self):
        """Row-major iteration over cells with a full 8-neighborhood."""
        for y in range(1, self.height - 1):
            for x in range(1, self.width - 1):
                yield x, y

    def code(self, x: int, y: int) -> int:
        return int(self.codes[y, x])

    def value(self, x: int, y: int) -> int:
        return int(self.coverage[y, x])

    def samples(self, x: int, y: int) -> tuple[int, int, int, int]:
        """Fine sub-samples of cell (x, y) as (TL, TR, BL, BR)."""
        fx, fy = 2 * x, 2 * y
        f = self.fine
        return (
            int(f[fy, fx]),
            int(f[fy, fx + 1]),
            int(f[fy + 1, fx]),
            int(f[fy + 1, fx + 1]),
        )
