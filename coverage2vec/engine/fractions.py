"""Sub-pixel fraction model — per-class area formulas and neighbor connectivity.

Fractions are in 255-units along a cell side: 0 at the start of the side,
255 at its end. Coverage values are in 255-units of cell area.

  corner        area = 0.5·f1·f2/255
  side          area = (f1 + f2)/2
  large corner  area = 255 − 0.5·(255−f1)·(255−f2)/255
"""

from __future__ import annotations

import numpy as np

from coverage2vec.engine.codes import CodeClass, code_class, move_dir, opposite, side1, side2
from coverage2vec.engine.context import F3_UNSET, PipelineContext
from coverage2vec.utils.math_helpers import corner_leg, large_corner_leg, to_byte

_SCALE = 255 * 255

# share_sides results: which fraction of each cell lies on the shared edge
SHARE_NONE = 0
SHARE_F1_F1 = 11
SHARE_F1_F2 = 12
SHARE_F2_F1 = 21
SHARE_F2_F2 = 22


def allocate_fractions(ctx: PipelineContext) -> None:
    shape = ctx.coverage.shape
    ctx.f1 = np.zeros(shape, dtype=np.uint8)
    ctx.f2 = np.zeros(shape, dtype=np.uint8)
    ctx.f3 = np.full(shape, F3_UNSET, dtype=np.int32)


def initial_fraction(cls: CodeClass, coverage: int) -> int:
    """Symmetric f1 = f2 value that reproduces ``coverage`` for the class."""
    if cls == CodeClass.CORNER:
        return to_byte(corner_leg(coverage))
    if cls == CodeClass.SIDE:
        return coverage
    if cls == CodeClass.LARGE_CORNER:
        return to_byte(large_corner_leg(coverage))
    return 0


def set_fraction(ctx: PipelineContext, x: int, y: int) -> CodeClass:
    """Re-initialize the fraction pair of one cell from its code and coverage."""
    cls = code_class(ctx.code(x, y))
    f = initial_fraction(cls, ctx.value(x, y))
    ctx.f1[y, x] = f
    ctx.f2[y, x] = f
    ctx.f3[y, x] = F3_UNSET
    return cls


def area(cls: CodeClass, f1: int, f2: int) -> float:
    if cls == CodeClass.CORNER:
        return 0.5 * f1 * f2 / 255
    if cls == CodeClass.SIDE:
        return (f1 + f2) * 0.5
    if cls == CodeClass.LARGE_CORNER:
        return 255 - 0.5 * (255 - f1) * (255 - f2) / 255
    return 0.0


def pixel_error(ctx: PipelineContext, x: int, y: int, use_adjust: bool = False) -> float:
    """Reconstruction error (area − coverage) of one cell.

    With ``use_adjust`` the correction scalar f3 is folded into the area model.
    """
    cls = code_class(ctx.code(x, y))
    c = ctx.value(x, y)
    f1 = int(ctx.f1[y, x])
    f2 = int(ctx.f2[y, x])
    if not use_adjust:
        if cls == CodeClass.NONE:
            return 0.0
        return area(cls, f1, f2) - c

    f3 = int(ctx.f3[y, x])
    if cls == CodeClass.CORNER:
        return 0.5 * f1 * f2 * f3 / _SCALE - c
    if cls == CodeClass.SIDE:
        return (2.0 * f3 + f1 + f2) * 0.25 - c
    if cls == CodeClass.LARGE_CORNER:
        return 0.5 * (255 - f1) * (255 - f2) * f3 / _SCALE - (255 - c)
    return 0.0


def _points_back(ctx: PipelineContext, x: int, y: int, direction: int) -> bool:
    """True when the neighbor across ``direction`` has a cut side facing back."""
    nx, ny = move_dir(x, y, direction)
    if not ctx.in_bounds(nx, ny):
        return False
    back = opposite(direction)
    neighbor = ctx.code(nx, ny)
    return side1(neighbor) == back or side2(neighbor) == back


def sides_connected(ctx: PipelineContext, x: int, y: int) -> int:
    """Bitmask of cut sides already shared with a neighbor: +1 side1, +2 side2."""
    if not ctx.in_bounds(x, y):
        return 0
    code = ctx.code(x, y)
    s1 = side1(code)
    s2 = side2(code)
    res = 0
    if s1 and _points_back(ctx, x, y, s1):
        res += 1
    if s2 and _points_back(ctx, x, y, s2):
        res += 2
    return res


def share_sides(ctx: PipelineContext, x1: int, y1: int, x2: int, y2: int) -> int:
    """Which fractions of two adjacent cells sit on their common edge.

    Returns 11, 12, 21 or 22 (first digit: fraction of cell 1, second: of
    cell 2) or 0 when the cuts do not meet on that edge.
    """
    if not (ctx.in_bounds(x1, y1) and ctx.in_bounds(x2, y2)):
        return SHARE_NONE

    n1 = ctx.code(x1, y1)
    n2 = ctx.code(x2, y2)

    s11, s12 = side1(n1), side2(n1)
    s21, s22 = side1(n2), side2(n2)

    a1 = move_dir(x1, y1, s11) == (x2, y2)
    a2 = move_dir(x1, y1, s12) == (x2, y2)
    b1 = move_dir(x2, y2, s21) == (x1, y1)
    b2 = move_dir(x2, y2, s22) == (x1, y1)

    if a1 and b1:
        return SHARE_F1_F1
    if a1 and b2:
        return SHARE_F1_F2
    if a2 and b1:
        return SHARE_F2_F1
    if a2 and b2:
        return SHARE_F2_F2
    return SHARE_NONE
