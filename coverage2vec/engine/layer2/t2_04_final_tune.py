"""T2.04 — Final Tuning with Error Tolerance. ★★

Last tuning pass before extraction. Cells whose area error exceeds
``ctx.max_error`` (a fraction of 255) keep their fractions, which are shared
with neighbors, and get a correction scalar f3 that bends their own diagonal
vertex instead.
"""

from __future__ import annotations

import logging

from coverage2vec.engine.context import PipelineContext
from coverage2vec.engine.layer2.t2_02_tune_fractions import run_tuning
from coverage2vec.engine.registry import Layer, transform

logger = logging.getLogger(__name__)


@transform(
    id="T2.04",
    layer=Layer.FRACTIONS,
    dependencies=["T2.01"],
    description="Final tuning; out-of-tolerance cells get a correction scalar",
)
def final_tune(ctx: PipelineContext) -> None:
    stats = run_tuning(ctx, "T2.04", tolerance=ctx.max_error)
    adjusted = sum(v for k, v in stats.items() if k.endswith("_adjusted"))
    logger.info("Final tuning: %d cells corrected (tolerance %.3f)", adjusted, ctx.max_error)
