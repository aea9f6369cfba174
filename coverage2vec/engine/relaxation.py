"""Rule tables for the neighbor-consistency sweeps.

A sweep visits interior cells in row-major order and rewrites codes in place,
so a cell sees the rewrites already made to cells before it. For each code a
table lists candidate rewrites; the first candidate whose checks all hold
wins.
"""

from __future__ import annotations

import logging
from typing import Callable, NamedTuple, Union

from coverage2vec.engine.codes import covers, move_dir
from coverage2vec.engine.context import PipelineContext

logger = logging.getLogger(__name__)

# Neighbor directions used by the tables
N, E, S, W = 2, 4, 6, 8


class Covers(NamedTuple):
    """Neighbor across ``direction`` covers ``covered`` (or not, with expect=False)."""

    direction: int
    covered: int
    expect: bool = True


class Either(NamedTuple):
    """Neighbor covers ``covered`` or does not cover ``uncovered``."""

    direction: int
    covered: int
    uncovered: int


class Saturated(NamedTuple):
    """Neighbor across ``direction`` has coverage 255."""

    direction: int


class AnyOf(NamedTuple):
    """At least one of the nested check groups holds entirely."""

    groups: tuple[tuple["Check", ...], ...]
    expect: bool = True


Check = Union[Covers, Either, Saturated, AnyOf]


class Rule(NamedTuple):
    result: int
    checks: tuple[Check, ...]


def neighbor_code(ctx: PipelineContext, x: int, y: int, direction: int) -> int:
    nx, ny = move_dir(x, y, direction)
    return ctx.code(nx, ny)


def holds(ctx: PipelineContext, x: int, y: int, check: Check) -> bool:
    if isinstance(check, Covers):
        return covers(neighbor_code(ctx, x, y, check.direction), check.covered) == check.expect
    if isinstance(check, Either):
        n = neighbor_code(ctx, x, y, check.direction)
        return covers(n, check.covered) or not covers(n, check.uncovered)
    if isinstance(check, Saturated):
        nx, ny = move_dir(x, y, check.direction)
        return ctx.value(nx, ny) == 255
    if isinstance(check, AnyOf):
        hit = any(all(holds(ctx, x, y, c) for c in group) for group in check.groups)
        return hit == check.expect
    raise TypeError(f"Unknown check: {check!r}")


def first_match(ctx: PipelineContext, x: int, y: int, rules: tuple[Rule, ...]) -> int | None:
    for rule in rules:
        if all(holds(ctx, x, y, c) for c in rule.checks):
            return rule.result
    return None


def sweep(
    ctx: PipelineContext,
    select: Callable[[PipelineContext, int, int, int], tuple[Rule, ...] | None],
    on_change: Callable[[PipelineContext, int, int], None] | None = None,
) -> int:
    """One in-place row-major sweep over interior cells; returns the change count.

    ``select`` picks the candidate rules for a cell (or None to skip it).
    """
    changed = 0
    for x, y in ctx.interior_cells():
        code = ctx.code(x, y)
        rules = select(ctx, x, y, code)
        if not rules:
            continue
        new = first_match(ctx, x, y, rules)
        if new is None or new == code:
            continue
        ctx.codes[y, x] = new
        changed += 1
        if on_change is not None:
            on_change(ctx, x, y)
    return changed


def table_selector(table: dict[int, tuple[Rule, ...]]):
    def select(ctx: PipelineContext, x: int, y: int, code: int) -> tuple[Rule, ...] | None:
        return table.get(code)

    return select
