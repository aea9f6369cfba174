"""T2.03 — Neighbor Fraction Smoothing. ★★

Where the cuts of two orthogonal neighbors meet on their shared edge, pull
both fractions toward their integer average so the boundary crosses that
edge at (nearly) one point.
"""

from __future__ import annotations

import logging

from coverage2vec.engine.context import PipelineContext
from coverage2vec.engine.fractions import SHARE_NONE, share_sides
from coverage2vec.engine.registry import Layer, transform

logger = logging.getLogger(__name__)

# W, N, E, S
_NEIGHBORS = ((-1, 0), (0, -1), (1, 0), (0, 1))


def _grid(ctx: PipelineContext, which: int):
    return ctx.f1 if which == 1 else ctx.f2


@transform(
    id="T2.03",
    layer=Layer.FRACTIONS,
    dependencies=["T2.01"],
    description="Average fractions shared across cell edges",
)
def neighbor_smoothing(ctx: PipelineContext) -> None:
    visits = 0
    max_adjust = 0
    total_adjust = 0

    for y in range(ctx.height):
        for x in range(ctx.width):
            for dx, dy in _NEIGHBORS:
                nx, ny = x + dx, y + dy
                shared = share_sides(ctx, x, y, nx, ny)
                if shared == SHARE_NONE:
                    continue

                ga = _grid(ctx, shared // 10)
                gb = _grid(ctx, shared % 10)
                a = int(ga[y, x])
                b = int(gb[ny, nx])
                avg = (a + b) // 2
                new_a = (a + avg) // 2
                new_b = (b + avg) // 2
                ga[y, x] = new_a
                gb[ny, nx] = new_b

                adjust = max(abs(new_a - a), abs(new_b - b))
                max_adjust = max(max_adjust, adjust)
                total_adjust += adjust
                visits += 1

    # Each shared edge is seen once from either side
    pairs = visits // 2
    ctx.stats["T2.03"] = {
        "pairs": pairs,
        "max_adjust": max_adjust,
        "avg_adjust": total_adjust / visits if visits else 0.0,
    }
    logger.info(
        "Neighbor smoothing: %d pairs, max adjust %d, avg adjust %.2f",
        pairs,
        max_adjust,
        ctx.stats["T2.03"]["avg_adjust"],
    )
