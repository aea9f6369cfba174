"""T2.01 — Fraction Initialization. ★

Allocate f1 / f2 / f3 and give every classed cell the symmetric fraction pair
that reproduces its coverage exactly (up to byte truncation).
"""

from __future__ import annotations

import logging

from coverage2vec.engine.codes import CodeClass
from coverage2vec.engine.context import PipelineContext
from coverage2vec.engine.fractions import allocate_fractions, set_fraction
from coverage2vec.engine.registry import Layer, transform

logger = logging.getLogger(__name__)


@transform(
    id="T2.01",
    layer=Layer.FRACTIONS,
    dependencies=["T0.01"],
    description="Initialize per-cell fraction pairs from coverage",
)
def init_fractions(ctx: PipelineContext) -> None:
    allocate_fractions(ctx)

    counts = {cls: 0 for cls in CodeClass}
    for y in range(ctx.height):
        for x in range(ctx.width):
            counts[set_fraction(ctx, x, y)] += 1

    ctx.stats["T2.01"] = {
        "corner": counts[CodeClass.CORNER],
        "side": counts[CodeClass.SIDE],
        "large_corner": counts[CodeClass.LARGE_CORNER],
    }
    logger.info(
        "Fractions initialized: %d corners, %d sides, %d large corners",
        counts[CodeClass.CORNER],
        counts[CodeClass.SIDE],
        counts[CodeClass.LARGE_CORNER],
    )
