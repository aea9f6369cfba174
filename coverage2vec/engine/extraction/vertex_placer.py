"""VertexPlacer — move crack-following ring points onto the estimated boundary.

Ring points live on the fine grid (two fine units per cell):

  even x, even y   cell corner, kept as-is
  even x, odd y    middle of a vertical cell edge, slides along y
  odd x, even y    middle of a horizontal cell edge, slides along x
  odd x, odd y     cell center, becomes the cell's corrected diagonal point,
                   or is dropped when the cell has no correction scalar
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from coverage2vec.engine.context import PipelineContext
from coverage2vec.utils.geometry import (
    apply_affine,
    close_ring,
    drop_consecutive_duplicates,
    signed_area,
)

_SCALE = 255.0 * 255.0

# Codes whose cut crosses a given edge, and which fraction it exposes there.
# "f" means the fraction as stored, "r" its complement 255 - f.
_RIGHT_OF_VERTICAL = {1: ("f2", False), 2: ("f2", False), 13: ("f2", False),
                      15: ("f1", True), 6: ("f1", True), 7: ("f1", True)}
_LEFT_OF_VERTICAL = {11: ("f1", False), 2: ("f1", False), 3: ("f1", False),
                     5: ("f2", True), 6: ("f2", True), 17: ("f2", True)}
_BELOW_HORIZONTAL = {17: ("f1", False), 8: ("f1", False), 1: ("f1", False),
                     3: ("f2", True), 4: ("f2", True), 15: ("f2", True)}
_ABOVE_HORIZONTAL = {7: ("f2", False), 8: ("f2", False), 11: ("f2", False),
                     13: ("f1", True), 4: ("f1", True), 5: ("f1", True)}


def _exposed(ctx: PipelineContext, cx: int, cy: int, table: dict) -> int | None:
    if not ctx.fractions_ready or not ctx.in_bounds(cx, cy):
        return None
    entry = table.get(ctx.code(cx, cy))
    if entry is None:
        return None
    name, reverse = entry
    grid = ctx.f1 if name == "f1" else ctx.f2
    f = int(grid[cy, cx])
    return 255 - f if reverse else f


def _edge_offset(values: list[int | None]) -> float:
    found = [v for v in values if v is not None]
    if not found:
        return 0.0
    f = sum(found) / len(found)
    return 2 * (f / 255 - 0.5)


def _diagonal_point(ctx: PipelineContext, px: int, py: int) -> tuple[float, float] | None:
    """Corrected diagonal point of cell (px, py), or None when f3 is unset."""
    f3 = int(ctx.f3[py, px])
    if f3 < 0:
        return None
    code = ctx.code(px, py)
    f1 = int(ctx.f1[py, px])
    f2 = int(ctx.f2[py, px])
    x0, y0 = 2 * px, 2 * py
    x1, y1 = x0 + 2, y0 + 2
    s = f3 / _SCALE
    k = 2 * f3 / 255

    if code == 2:
        return x0 + 1, y0 + k
    if code == 4:
        return x1 - k, y0 + 1
    if code == 6:
        return x0 + 1, y1 - k
    if code == 8:
        return x0 + k, y0 + 1

    if code == 1:
        return x0 + f1 * s, y0 + f2 * s
    if code == 3:
        return x1 - f2 * s, y0 + f1 * s
    if code == 5:
        return x1 - f1 * s, y1 - f2 * s
    if code == 7:
        return x0 + f2 * s, y1 - f1 * s

    g1 = 255 - f1
    g2 = 255 - f2
    if code == 11:
        return x1 - g2 * s, y1 - g1 * s
    if code == 13:
        return x0 + g1 * s, y1 - g2 * s
    if code == 15:
        return x0 + g2 * s, y0 + g1 * s
    if code == 17:
        return x1 - g1 * s, y0 + g2 * s
    return None


def place_vertex(ctx: PipelineContext, x: int, y: int) -> tuple[float, float] | None:
    """Sub-pixel position of fine-grid point (x, y); None drops the point."""
    if x % 2 == 0 and y % 2 == 0:
        return float(x), float(y)

    if x % 2 == 0:
        cy = (y - 1) // 2
        cx = x // 2
        dy = _edge_offset([
            _exposed(ctx, cx, cy, _RIGHT_OF_VERTICAL),
            _exposed(ctx, cx - 1, cy, _LEFT_OF_VERTICAL),
        ])
        return float(x), y + dy

    if y % 2 == 0:
        cx = (x - 1) // 2
        cy = y // 2
        dx = _edge_offset([
            _exposed(ctx, cx, cy, _BELOW_HORIZONTAL),
            _exposed(ctx, cx, cy - 1, _ABOVE_HORIZONTAL),
        ])
        return x + dx, float(y)

    cx = (x - 1) // 2
    cy = (y - 1) // 2
    if not ctx.in_bounds(cx, cy) or ctx.f3 is None:
        return None
    return _diagonal_point(ctx, cx, cy)


def place_ring(ctx: PipelineContext, ring: list[tuple[int, int]]) -> NDArray[np.float64] | None:
    """Placed, georeferenced, closed ring; None when it degenerates."""
    placed = [p for p in (place_vertex(ctx, x, y) for x, y in ring) if p is not None]
    if not placed:
        return None
    pts = apply_affine(np.asarray(placed, dtype=np.float64), ctx.geotransform)
    pts = close_ring(drop_consecutive_duplicates(pts))
    if len(pts) < 4 or signed_area(pts) == 0.0:
        return None
    return pts
