"""T0.01 — Neighborhood Classification. ★★★

Assign every coarse cell one of the fixed neighborhood codes from its coverage
value and its four fine sub-samples. Low coverage → small corner at the
brightest sample, high coverage → large corner, otherwise the side whose two
samples sum highest.
"""

from __future__ import annotations

import logging

from coverage2vec.engine.codes import NeighborhoodCode as N
from coverage2vec.engine.context import PipelineContext
from coverage2vec.engine.registry import Layer, transform

logger = logging.getLogger(__name__)

_LARGE = {
    N.CORNER_NW: N.LARGE_NW,
    N.CORNER_NE: N.LARGE_NE,
    N.CORNER_SE: N.LARGE_SE,
    N.CORNER_SW: N.LARGE_SW,
}


def _brightest_corner(tl: int, tr: int, bl: int, br: int) -> N:
    # Ties fall through to SE / SW
    if tl > tr:
        if tl > bl:
            return N.CORNER_NW if tl > br else N.CORNER_SE
        return N.CORNER_SW if bl > br else N.CORNER_SE
    if tr > bl:
        return N.CORNER_NE if tr > br else N.CORNER_SE
    return N.CORNER_SW if bl > br else N.CORNER_SE


def classify_cell(
    v: int,
    tl: int,
    tr: int,
    bl: int,
    br: int,
    corner_band: int = 255 // 3,
    large_corner_band: int = 2 * 255 // 3,
) -> N:
    """Neighborhood code of one cell; pure and total."""
    if v == 0:
        return N.EMPTY
    if v == 255:
        return N.FULL
    if v < corner_band:
        return _brightest_corner(tl, tr, bl, br)
    if v > large_corner_band:
        return _LARGE[_brightest_corner(tl, tr, bl, br)]

    best = N.SIDE_N
    best_sum = tl + tr
    for code, total in ((N.SIDE_E, tr + br), (N.SIDE_S, bl + br), (N.SIDE_W, tl + bl)):
        if total > best_sum:
            best, best_sum = code, total
    return best


@transform(
    id="T0.01",
    layer=Layer.CLASSIFY,
    description="Classify every cell into a neighborhood code",
)
def classify(ctx: PipelineContext) -> None:
    cfg = ctx.config
    counts = {"empty": 0, "full": 0, "corner": 0, "side": 0, "large_corner": 0}

    for y in range(ctx.height):
        for x in range(ctx.width):
            code = classify_cell(
                ctx.value(x, y),
                *ctx.samples(x, y),
                corner_band=cfg.corner_band,
                large_corner_band=cfg.large_corner_band,
            )
            ctx.codes[y, x] = int(code)
            if code == N.EMPTY:
                counts["empty"] += 1
            elif code == N.FULL:
                counts["full"] += 1
            elif code < 10 and code % 2:
                counts["corner"] += 1
            elif code < 10:
                counts["side"] += 1
            else:
                counts["large_corner"] += 1

    ctx.stats["T0.01"] = counts
    logger.info(
        "Classified %d cells: %d corners, %d sides, %d large corners",
        ctx.width * ctx.height,
        counts["corner"],
        counts["side"],
        counts["large_corner"],
    )
