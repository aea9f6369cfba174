"""T1.02 — Conflict Resolution. ★★★

Two sweeps that rotate a cut to agree with its neighbors.

Strict sweep: a corner moves to the adjacent corner when one neighbor shows
the cut leaving through the other side; large corners likewise; sides turn
perpendicular when the neighbors on both ends agree.

Loose sweep: the same corner moves with a weaker third condition, and a side
flips to the opposite side when its flank neighbors only support that.

Once fractions exist, every rewritten cell gets fresh fractions.
"""

from __future__ import annotations

import logging

from coverage2vec.engine.context import PipelineContext
from coverage2vec.engine.fractions import set_fraction
from coverage2vec.engine.registry import Layer, transform
from coverage2vec.engine.relaxation import (
    E,
    N,
    S,
    W,
    AnyOf,
    Covers,
    Either,
    Rule,
    sweep,
    table_selector,
)

logger = logging.getLogger(__name__)


def _yes(d: int, c: int) -> Covers:
    return Covers(d, c)


def _no(d: int, c: int) -> Covers:
    return Covers(d, c, expect=False)


STRICT_RULES: dict[int, tuple[Rule, ...]] = {
    1: (
        Rule(7, (_no(W, 3), _yes(W, 5), _yes(S, 1))),
        Rule(3, (_no(N, 7), _yes(N, 5), _yes(E, 1))),
    ),
    3: (
        Rule(1, (_no(N, 5), _yes(N, 7), _yes(W, 3))),
        Rule(5, (_no(E, 1), _yes(E, 7), _yes(S, 3))),
    ),
    5: (
        Rule(3, (_no(E, 7), _yes(E, 1), _yes(N, 5))),
        Rule(7, (_no(S, 3), _yes(S, 1), _yes(W, 5))),
    ),
    7: (
        Rule(5, (_no(S, 1), _yes(S, 3), _yes(E, 7))),
        Rule(1, (_no(W, 5), _yes(W, 3), _yes(N, 7))),
    ),
    11: (
        Rule(17, (_yes(E, 7), _no(E, 1), _no(N, 5))),
        Rule(13, (_yes(S, 3), _no(S, 1), _no(W, 5))),
    ),
    13: (
        Rule(11, (_yes(S, 1), _no(S, 3), _no(E, 7))),
        Rule(15, (_yes(W, 5), _no(W, 3), _no(N, 7))),
    ),
    15: (
        Rule(13, (_yes(W, 3), _no(W, 5), _no(S, 1))),
        Rule(17, (_yes(N, 7), _no(N, 5), _no(E, 1))),
    ),
    17: (
        Rule(15, (_yes(N, 5), _no(N, 7), _no(W, 3))),
        Rule(11, (_yes(E, 1), _no(E, 7), _no(S, 3))),
    ),
    2: (
        Rule(4, (_yes(W, 5), _no(W, 3), Either(N, 5, 7), Either(S, 3, 1))),
        Rule(8, (_yes(E, 7), _no(E, 1), Either(W, 7, 5), Either(E, 1, 3))),
    ),
    6: (
        Rule(4, (_yes(W, 3), _no(W, 5), Either(N, 5, 7), Either(S, 3, 1))),
        Rule(8, (_yes(E, 1), _no(E, 7), Either(W, 7, 5), Either(E, 1, 3))),
    ),
    4: (
        Rule(6, (_yes(N, 7), _no(N, 5), Either(W, 5, 3), Either(E, 7, 1))),
        Rule(2, (_yes(S, 1), _no(S, 3), Either(W, 3, 5), Either(E, 1, 7))),
    ),
    8: (
        Rule(6, (_yes(N, 5), _no(N, 7), Either(W, 5, 3), Either(E, 7, 1))),
        Rule(2, (_yes(S, 3), _no(S, 1), Either(W, 3, 5), Either(E, 1, 7))),
    ),
}


def _leaning(*pairs: tuple[int, int, int]) -> tuple[tuple[Covers, ...], ...]:
    """Groups 'neighbor covers a but not b' for each (direction, a, b)."""
    return tuple((_yes(d, a), _no(d, b)) for d, a, b in pairs)


_LEAN_W5_E7 = _leaning((W, 5, 3), (E, 7, 1))
_LEAN_W3_E1 = _leaning((W, 3, 5), (E, 1, 7))
_LEAN_N7_S1 = _leaning((N, 7, 5), (S, 1, 3))
_LEAN_N5_S3 = _leaning((N, 5, 7), (S, 3, 1))

LOOSE_RULES: dict[int, tuple[Rule, ...]] = {
    1: (
        Rule(7, (_no(W, 3), _yes(W, 5), _no(S, 3))),
        Rule(3, (_no(N, 7), _yes(N, 5), _no(E, 7))),
    ),
    3: (
        Rule(1, (_no(N, 5), _yes(N, 7), _no(W, 5))),
        Rule(5, (_no(E, 1), _yes(E, 7), _no(S, 1))),
    ),
    5: (
        Rule(3, (_no(E, 7), _yes(E, 1), _no(N, 7))),
        Rule(7, (_no(S, 3), _yes(S, 1), _no(W, 3))),
    ),
    7: (
        Rule(5, (_no(S, 1), _yes(S, 3), _no(E, 1))),
        Rule(1, (_no(W, 5), _yes(W, 3), _no(N, 5))),
    ),
    11: (
        Rule(17, (_yes(E, 7), _no(E, 1), _yes(N, 7))),
        Rule(13, (_yes(S, 3), _no(S, 1), _yes(W, 3))),
    ),
    13: (
        Rule(11, (_yes(S, 1), _no(S, 3), _yes(E, 1))),
        Rule(15, (_yes(W, 5), _no(W, 3), _yes(N, 5))),
    ),
    15: (
        Rule(13, (_yes(W, 3), _no(W, 5), _yes(S, 3))),
        Rule(17, (_yes(N, 7), _no(N, 5), _yes(E, 7))),
    ),
    17: (
        Rule(15, (_yes(N, 5), _no(N, 7), _yes(W, 5))),
        Rule(11, (_yes(E, 1), _no(E, 7), _yes(S, 1))),
    ),
    2: (Rule(6, (AnyOf(_LEAN_W5_E7), AnyOf(_LEAN_W3_E1, expect=False))),),
    6: (Rule(2, (AnyOf(_LEAN_W3_E1), AnyOf(_LEAN_W5_E7, expect=False))),),
    4: (Rule(8, (AnyOf(_LEAN_N7_S1), AnyOf(_LEAN_N5_S3, expect=False))),),
    8: (Rule(4, (AnyOf(_LEAN_N5_S3), AnyOf(_LEAN_N7_S1, expect=False))),),
}


def _refresh_fractions(ctx: PipelineContext, x: int, y: int) -> None:
    if ctx.fractions_ready:
        set_fraction(ctx, x, y)


@transform(
    id="T1.02",
    layer=Layer.CONSISTENCY,
    dependencies=["T0.01"],
    description="Resolve cut direction conflicts between neighbors",
)
def conflict_resolution(ctx: PipelineContext) -> None:
    cnt1 = sweep(ctx, table_selector(STRICT_RULES), _refresh_fractions)
    cnt2 = sweep(ctx, table_selector(LOOSE_RULES), _refresh_fractions)

    ctx.stats["T1.02"] = {"strict": cnt1, "loose": cnt2}
    logger.info("Conflict resolution: %d strict, %d loose changes", cnt1, cnt2)
