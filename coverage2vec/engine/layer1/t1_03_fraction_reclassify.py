"""T1.03 — Fraction-Driven Reclassification. ★★

A fraction that ran to the end of its side means the cut really leaves the
cell through a different side than its code says. Saturated fractions plus a
confirming neighbor move:

  corner (f = 255)        → flanking side
  side (f = 255)          → large corner
  side (f = 0)            → small corner
  large corner (f = 0)    → flanking side

Only the first saturated fraction of a cell is considered (f1 = 255,
f2 = 255, f1 = 0, f2 = 0 in that order). Every rewrite re-initializes the
cell's fractions.
"""

from __future__ import annotations

import logging

from coverage2vec.engine.context import PipelineContext
from coverage2vec.engine.fractions import set_fraction
from coverage2vec.engine.registry import Layer, transform
from coverage2vec.engine.relaxation import E, N, S, W, Either, Rule, sweep

logger = logging.getLogger(__name__)

# Gate: (fraction name, saturated value, candidate rules)
Gate = tuple[str, int, tuple[Rule, ...]]


def _pair(first: Rule, second: Rule) -> tuple[tuple[Rule, ...], tuple[Rule, ...]]:
    """Candidate order for f1- and f2-gates: f2 tries the rules reversed."""
    return (first, second), (second, first)


def _gates(
    full: tuple[Rule, Rule] | None = None,
    empty: tuple[Rule, Rule] | None = None,
) -> tuple[Gate, ...]:
    gates: list[Gate] = []
    if full is not None:
        on_f1, on_f2 = _pair(*full)
        gates += [("f1", 255, on_f1), ("f2", 255, on_f2)]
    if empty is not None:
        on_f1, on_f2 = _pair(*empty)
        gates += [("f1", 0, on_f1), ("f2", 0, on_f2)]
    return tuple(gates)


GATES: dict[int, tuple[Gate, ...]] = {
    # Small corners
    1: _gates(full=(Rule(2, (Either(E, 1, 7),)), Rule(8, (Either(S, 1, 3),)))),
    3: _gates(full=(Rule(4, (Either(S, 3, 1),)), Rule(2, (Either(W, 3, 5),)))),
    5: _gates(full=(Rule(6, (Either(W, 5, 3),)), Rule(4, (Either(N, 5, 7),)))),
    7: _gates(full=(Rule(8, (Either(N, 7, 5),)), Rule(6, (Either(E, 7, 1),)))),
    # Sides
    2: _gates(
        full=(Rule(13, (Either(S, 3, 1),)), Rule(11, (Either(S, 1, 3),))),
        empty=(Rule(1, (Either(N, 7, 5),)), Rule(3, (Either(N, 5, 7),))),
    ),
    4: _gates(
        full=(Rule(15, (Either(W, 5, 3),)), Rule(13, (Either(W, 3, 5),))),
        empty=(Rule(3, (Either(E, 1, 7),)), Rule(5, (Either(E, 7, 1),))),
    ),
    6: _gates(
        full=(Rule(17, (Either(N, 5, 7),)), Rule(15, (Either(N, 7, 5),))),
        empty=(Rule(5, (Either(S, 3, 1),)), Rule(7, (Either(S, 1, 3),))),
    ),
    8: _gates(
        full=(Rule(11, (Either(E, 1, 7),)), Rule(17, (Either(E, 7, 1),))),
        empty=(Rule(7, (Either(W, 5, 3),)), Rule(1, (Either(W, 3, 5),))),
    ),
    # Large corners
    11: _gates(empty=(Rule(8, (Either(E, 1, 7),)), Rule(2, (Either(S, 1, 3),)))),
    13: _gates(empty=(Rule(2, (Either(S, 3, 1),)), Rule(4, (Either(W, 3, 5),)))),
    15: _gates(empty=(Rule(4, (Either(W, 5, 3),)), Rule(6, (Either(N, 5, 7),)))),
    17: _gates(empty=(Rule(6, (Either(N, 7, 5),)), Rule(8, (Either(E, 7, 1),)))),
}


def _select(ctx: PipelineContext, x: int, y: int, code: int) -> tuple[Rule, ...] | None:
    fractions = {"f1": int(ctx.f1[y, x]), "f2": int(ctx.f2[y, x])}
    for name, value, rules in GATES.get(code, ()):
        if fractions[name] == value:
            return rules
    return None


@transform(
    id="T1.03",
    layer=Layer.CONSISTENCY,
    dependencies=["T2.01"],
    description="Reclassify cells whose fractions saturated",
)
def fraction_reclassify(ctx: PipelineContext) -> None:
    cnt = sweep(ctx, _select, set_fraction)

    ctx.stats["T1.03"] = {"changed": cnt}
    logger.info("Fraction reclassification: %d cells changed", cnt)
