"""T1.01 — Topology Alignment. ★★

Sweep 1: small corners with enough coverage become a flanking side when the
flank neighbor reaches across the shared edge and the other neighbor
continues the corner.

Sweep 2: small corners next to a saturated cell become the side facing it;
large corners become a side when none of the three neighbors that could
continue the cut actually do.
"""

from __future__ import annotations

import logging

from coverage2vec.engine.context import PipelineContext
from coverage2vec.engine.registry import Layer, transform
from coverage2vec.engine.relaxation import (
    E,
    N,
    S,
    W,
    Covers,
    Rule,
    Saturated,
    sweep,
    table_selector,
)

logger = logging.getLogger(__name__)

CORNER_RULES: dict[int, tuple[Rule, ...]] = {
    1: (
        Rule(2, (Covers(N, 6), Covers(E, 1))),
        Rule(8, (Covers(W, 4), Covers(S, 1))),
    ),
    3: (
        Rule(2, (Covers(N, 6), Covers(W, 3))),
        Rule(4, (Covers(E, 8), Covers(S, 3))),
    ),
    5: (
        Rule(6, (Covers(S, 6), Covers(W, 5))),
        Rule(4, (Covers(E, 4), Covers(N, 5))),
    ),
    7: (
        Rule(8, (Covers(W, 4), Covers(N, 7))),
        Rule(6, (Covers(S, 2), Covers(E, 7))),
    ),
}


def _none(*pairs: tuple[int, int]) -> tuple[Covers, ...]:
    return tuple(Covers(d, c, expect=False) for d, c in pairs)


SATURATION_RULES: dict[int, tuple[Rule, ...]] = {
    1: (
        Rule(8, (Saturated(W), Covers(S, 1))),
        Rule(2, (Saturated(N), Covers(E, 1))),
    ),
    3: (
        Rule(2, (Saturated(N), Covers(W, 3))),
        Rule(4, (Saturated(E), Covers(S, 3))),
    ),
    5: (
        Rule(4, (Saturated(E), Covers(N, 5))),
        Rule(6, (Saturated(S), Covers(W, 5))),
    ),
    7: (
        Rule(6, (Saturated(S), Covers(E, 7))),
        Rule(8, (Saturated(W), Covers(N, 7))),
    ),
    11: (
        Rule(8, _none((E, 7), (E, 1), (N, 5))),
        Rule(2, _none((S, 1), (S, 3), (W, 5))),
    ),
    13: (
        Rule(2, _none((S, 1), (S, 3), (E, 7))),
        Rule(4, _none((W, 3), (W, 5), (N, 7))),
    ),
    15: (
        Rule(4, _none((W, 3), (W, 5), (S, 1))),
        Rule(6, _none((N, 5), (N, 7), (E, 1))),
    ),
    17: (
        Rule(6, _none((N, 5), (N, 7), (W, 3))),
        Rule(8, _none((E, 7), (E, 1), (S, 3))),
    ),
}


@transform(
    id="T1.01",
    layer=Layer.CONSISTENCY,
    dependencies=["T0.01"],
    description="Align corner cells with the sides of their neighbors",
)
def topology_alignment(ctx: PipelineContext) -> None:
    min_coverage = ctx.config.alignment_min_coverage

    def select_corner(ctx: PipelineContext, x: int, y: int, code: int):
        if ctx.value(x, y) <= min_coverage:
            return None
        return CORNER_RULES.get(code)

    cnt1 = sweep(ctx, select_corner)
    cnt2 = sweep(ctx, table_selector(SATURATION_RULES))

    ctx.stats["T1.01"] = {"corners_to_sides": cnt1, "edges_smoothed": cnt2}
    logger.info("Topology alignment: %d corners to sides, %d edges smoothed", cnt1, cnt2)
