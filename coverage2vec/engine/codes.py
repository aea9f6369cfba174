"""Neighborhood codes — the closed set of per-cell boundary topologies.

Directions around a cell, clockwise from north-west:

    1 2 3
    8 0 4
    7 6 5

Every lookup here is a total function over ``NeighborhoodCode``. The tables
are the geometric ground truth shared by classification, relaxation,
fraction estimation and vertex placement.
"""

from __future__ import annotations

import enum


class NeighborhoodCode(enum.IntEnum):
    EMPTY = 0
    CORNER_NW = 1
    SIDE_N = 2
    CORNER_NE = 3
    SIDE_E = 4
    CORNER_SE = 5
    SIDE_S = 6
    CORNER_SW = 7
    SIDE_W = 8
    LARGE_NW = 11  # missing SE
    LARGE_NE = 13  # missing SW
    LARGE_SE = 15  # missing NW
    LARGE_SW = 17  # missing NE
    FULL = 255


class CodeClass(enum.IntEnum):
    NONE = 0
    CORNER = 1
    SIDE = 2
    LARGE_CORNER = 3


class Direction(enum.IntEnum):
    SELF = 0
    NW = 1
    N = 2
    NE = 3
    E = 4
    SE = 5
    S = 6
    SW = 7
    W = 8


N = NeighborhoodCode

CORNERS = (N.CORNER_NW, N.CORNER_NE, N.CORNER_SE, N.CORNER_SW)
SIDES = (N.SIDE_N, N.SIDE_E, N.SIDE_S, N.SIDE_W)
LARGE_CORNERS = (N.LARGE_NW, N.LARGE_NE, N.LARGE_SE, N.LARGE_SW)

_CLASS: dict[int, CodeClass] = {int(c): CodeClass.NONE for c in N}
_CLASS.update({int(c): CodeClass.CORNER for c in CORNERS})
_CLASS.update({int(c): CodeClass.SIDE for c in SIDES})
_CLASS.update({int(c): CodeClass.LARGE_CORNER for c in LARGE_CORNERS})

# Covered directions per code. Codes 1 and 11 leave out direction 8; the
# relaxation tables are written against these sets.
_COVERS: dict[int, frozenset[int]] = {
    0: frozenset(),
    1: frozenset({1, 2}),
    3: frozenset({2, 3, 4}),
    5: frozenset({4, 5, 6}),
    7: frozenset({6, 7, 8}),
    2: frozenset({1, 2, 3}),
    4: frozenset({3, 4, 5}),
    6: frozenset({5, 6, 7}),
    8: frozenset({7, 8, 1}),
    11: frozenset({1, 2, 3, 7}),
    13: frozenset({1, 2, 3, 4, 5}),
    15: frozenset({3, 4, 5, 6, 7}),
    17: frozenset({1, 5, 6, 7, 8}),
    255: frozenset(range(1, 9)),
}

# The two sides cut by the boundary. f1 runs clockwise along side1,
# f2 counter-clockwise along side2.
_SIDE1: dict[int, int] = {
    0: 0, 1: 2, 2: 4, 3: 4, 4: 6, 5: 6, 6: 8, 7: 8, 8: 2,
    11: 4, 13: 6, 15: 8, 17: 2, 255: 0,
}
_SIDE2: dict[int, int] = {
    0: 0, 1: 8, 2: 8, 3: 2, 4: 2, 5: 4, 6: 4, 7: 6, 8: 6,
    11: 6, 13: 8, 15: 2, 17: 4, 255: 0,
}

_OFFSETS: dict[int, tuple[int, int]] = {
    0: (0, 0),
    1: (-1, -1),
    2: (0, -1),
    3: (1, -1),
    4: (1, 0),
    5: (1, 1),
    6: (0, 1),
    7: (-1, 1),
    8: (-1, 0),
}

# 2×2 fine-mask pattern per code: (TL, TR, BL, BR)
_MASKS: dict[int, tuple[int, int, int, int]] = {
    0: (0, 0, 0, 0),
    1: (1, 0, 0, 0),
    2: (1, 1, 0, 0),
    3: (0, 1, 0, 0),
    4: (0, 1, 0, 1),
    5: (0, 0, 0, 1),
    6: (0, 0, 1, 1),
    7: (0, 0, 1, 0),
    8: (1, 0, 1, 0),
    11: (1, 1, 1, 0),
    13: (1, 1, 0, 1),
    15: (0, 1, 1, 1),
    17: (1, 0, 1, 1),
    255: (1, 1, 1, 1),
}


def code_class(code: int) -> CodeClass:
    return _CLASS[int(code)]


def covers(code: int, direction: int) -> bool:
    """True when the covered region of ``code`` extends toward ``direction``."""
    return direction in _COVERS[int(code)]


def side1(code: int) -> int:
    return _SIDE1[int(code)]


def side2(code: int) -> int:
    return _SIDE2[int(code)]


def move_dir(x: int, y: int, direction: int) -> tuple[int, int]:
    """Step one cell from (x, y) toward ``direction`` (0 stays put)."""
    dx, dy = _OFFSETS[direction]
    return x + dx, y + dy


def opposite(direction: int) -> int:
    if direction == 0:
        return 0
    return (direction + 3) % 8 + 1


def mask_pattern(code: int) -> tuple[int, int, int, int]:
    return _MASKS[int(code)]
