"""Synthetic fine mask: each cell's code expanded to its 2×2 sub-pixel pattern."""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from coverage2vec.engine.codes import NeighborhoodCode, mask_pattern
from coverage2vec.engine.context import PipelineContext


def _lookup_tables() -> NDArray[np.uint8]:
    """(4, 256) table: row k holds sample k (TL, TR, BL, BR) of each code."""
    lut = np.zeros((4, 256), dtype=np.uint8)
    for code in NeighborhoodCode:
        lut[:, int(code)] = mask_pattern(code)
    return lut


_LUT = _lookup_tables()


def build_mask(ctx: PipelineContext) -> NDArray[np.uint8]:
    """2H×2W mask of 0/1 from cell codes; coverage 0 / 255 forces empty / full."""
    codes = ctx.codes.astype(np.intp)
    mask = np.zeros((ctx.height * 2, ctx.width * 2), dtype=np.uint8)
    mask[0::2, 0::2] = _LUT[0][codes]
    mask[0::2, 1::2] = _LUT[1][codes]
    mask[1::2, 0::2] = _LUT[2][codes]
    mask[1::2, 1::2] = _LUT[3][codes]

    empty = np.repeat(np.repeat(ctx.coverage == 0, 2, axis=0), 2, axis=1)
    full = np.repeat(np.repeat(ctx.coverage == 255, 2, axis=0), 2, axis=1)
    mask[empty] = 0
    mask[full] = 1
    return mask
