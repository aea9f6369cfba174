"""T2.02 — Fraction Tuning. ★★★

Re-solve each cell's fraction pair against its coverage, holding fixed the
fractions already shared with a connected neighbor:

  no side connected    → symmetric initializer
  side1 connected      → keep f1, solve f2
  side2 connected      → keep f2, solve f1
  both connected       → damp toward the initializer (0.75·old + 0.25·init)

With a positive tolerance, cells whose error exceeds it keep their fractions
and get a correction scalar f3 instead (see T2.04).
"""

from __future__ import annotations

import logging
import math

from coverage2vec.engine.codes import CodeClass, code_class
from coverage2vec.engine.context import F3_UNSET, PipelineContext
from coverage2vec.engine.fractions import initial_fraction, pixel_error, sides_connected
from coverage2vec.engine.registry import Layer, transform
from coverage2vec.utils.math_helpers import clamp, corner_leg, large_corner_leg, to_byte

logger = logging.getLogger(__name__)

_MODES = {0: "n", 1: "s", 2: "s", 3: "damped"}
_CLASS_NAMES = {
    CodeClass.CORNER: "corner",
    CodeClass.SIDE: "side",
    CodeClass.LARGE_CORNER: "large_corner",
}


def solve_correction(cls: CodeClass, c: int, f1: int, f2: int) -> int:
    """Correction scalar f3 that fixes the cell's area without touching f1/f2."""
    if cls == CodeClass.SIDE:
        return int(clamp(2 * (c - 0.25 * f1 - 0.25 * f2), 0, 255))

    if cls == CodeClass.LARGE_CORNER:
        c, f1, f2 = 255 - c, 255 - f1, 255 - f2

    prod = 0.5 * f1 * f2
    f = c * 255 / prod if prod > 0 else 1.0
    longest = max(f1, f2)
    limit = 255 / longest if longest > 0 else 1.0
    return int(clamp(f, 0, limit) * 255)


def _solve_other(cls: CodeClass, c: int, fixed: int) -> int:
    """Solve the free fraction of a cell given the fraction on its connected side."""
    if cls == CodeClass.CORNER:
        f = c * 510 // fixed if fixed > 0 else c * 510
        return min(f, 255)
    if cls == CodeClass.SIDE:
        return to_byte(2 * (c - 0.5 * fixed))
    # Large corner
    if fixed < 255:
        f = 255 - (255 - c) * 510 // (255 - fixed)
    else:
        f = 255 - (255 - c) * 510
    return max(0, f)


def _damped(cls: CodeClass, c: int, old: int) -> int:
    if cls == CodeClass.CORNER:
        target = corner_leg(c)
    elif cls == CodeClass.SIDE:
        target = c
    else:
        target = large_corner_leg(c)
    return to_byte(0.75 * old + 0.25 * target)


def tune_cell(ctx: PipelineContext, x: int, y: int, tolerance: float = -1.0) -> str | None:
    """Tune one cell in place; returns the mode used (or None for unclassed cells)."""
    cls = code_class(ctx.code(x, y))
    if cls == CodeClass.NONE:
        return None

    c = ctx.value(x, y)
    f1 = int(ctx.f1[y, x])
    f2 = int(ctx.f2[y, x])

    if tolerance > 0 and abs(pixel_error(ctx, x, y)) > tolerance * 255:
        ctx.f3[y, x] = solve_correction(cls, c, f1, f2)
        return "adjusted"

    connected = sides_connected(ctx, x, y)
    if connected == 0:
        f1 = f2 = initial_fraction(cls, c)
    elif connected == 1:
        f2 = _solve_other(cls, c, f1)
    elif connected == 2:
        f1 = _solve_other(cls, c, f2)
    else:
        f1 = _damped(cls, c, f1)
        f2 = _damped(cls, c, f2)

    ctx.f1[y, x] = f1
    ctx.f2[y, x] = f2
    ctx.f3[y, x] = F3_UNSET
    return _MODES[connected]


def run_tuning(ctx: PipelineContext, stats_id: str, tolerance: float = -1.0) -> dict:
    """Tune every cell once and record counters under ``ctx.stats[stats_id]``."""
    counters: dict[str, int] = {}
    max_error = 0.0
    total_error = 0.0
    cells = 0
    changed = 0
    max_change = 0

    for y in range(ctx.height):
        for x in range(ctx.width):
            cls = code_class(ctx.code(x, y))
            if cls == CodeClass.NONE:
                continue

            old1 = int(ctx.f1[y, x])
            old2 = int(ctx.f2[y, x])
            mode = tune_cell(ctx, x, y, tolerance)
            key = f"{_CLASS_NAMES[cls]}_{mode}"
            counters[key] = counters.get(key, 0) + 1

            # Error after tuning; cells carrying a correction are measured with it
            err = abs(pixel_error(ctx, x, y, use_adjust=int(ctx.f3[y, x]) >= 0))
            max_error = max(max_error, err)
            total_error += err
            cells += 1

            delta = max(abs(int(ctx.f1[y, x]) - old1), abs(int(ctx.f2[y, x]) - old2))
            if delta:
                changed += 1
                max_change = max(max_change, delta)

    stats = {
        **counters,
        "cells": cells,
        "changed": changed,
        "max_change": max_change,
        "max_error": max_error,
        "avg_error": total_error / cells if cells else 0.0,
    }
    ctx.stats[stats_id] = stats
    logger.info(
        "Tuning: %d cells, max error %.2f, avg error %.2f, %d changed (max change %d)",
        cells,
        max_error,
        stats["avg_error"],
        changed,
        max_change,
    )
    logger.debug("Tuning counters: %s", counters)
    return stats


@transform(
    id="T2.02",
    layer=Layer.FRACTIONS,
    dependencies=["T2.01"],
    description="Tune fraction pairs against coverage and connected neighbors",
)
def tune_fractions(ctx: PipelineContext) -> None:
    run_tuning(ctx, "T2.02")
