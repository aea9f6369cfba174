"""Leaf-node geometry helpers. No engine imports."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np
from numpy.typing import NDArray


def signed_area(points: NDArray[np.float64]) -> float:
    """Shoelace formula for signed area of a closed ring. Positive = CCW, Negative = CW."""
    x = points[:, 0]
    y = points[:, 1]
    return float(0.5 * np.sum(x[:-1] * y[1:] - x[1:] * y[:-1]))


def apply_affine(points: NDArray[np.float64], gt: Sequence[float]) -> NDArray[np.float64]:
    """Map (x, y) rows through GDAL-ordered coefficients (g0 .. g5)."""
    x = points[:, 0]
    y = points[:, 1]
    out = np.empty_like(points, dtype=np.float64)
    out[:, 0] = gt[0] + x * gt[1] + y * gt[2]
    out[:, 1] = gt[3] + x * gt[4] + y * gt[5]
    return out


def drop_consecutive_duplicates(points: NDArray[np.float64]) -> NDArray[np.float64]:
    if len(points) < 2:
        return points
    keep = np.ones(len(points), dtype=bool)
    keep[1:] = np.any(points[1:] != points[:-1], axis=1)
    return points[keep]


def close_ring(points: NDArray[np.float64]) -> NDArray[np.float64]:
    """Append the first point when the ring does not end where it starts."""
    if len(points) == 0 or np.array_equal(points[0], points[-1]):
        return points
    return np.vstack([points, points[:1]])
