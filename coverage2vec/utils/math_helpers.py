"""Math helpers — byte storage, clamping, area-model roots. No engine imports."""

from __future__ import annotations

import math


def clamp(value: float, lo: float, hi: float) -> float:
    return min(max(value, lo), hi)


def to_byte(value: float) -> int:
    """Store a solved fraction: truncate toward zero, then clamp to [0, 255]."""
    if math.isnan(value):
        return 0
    return int(clamp(math.trunc(value), 0, 255))


def corner_leg(coverage: int) -> float:
    """Leg length of the isosceles corner triangle of area ``coverage`` (255-units)."""
    return math.sqrt(coverage * 255.0 * 2)


def large_corner_leg(coverage: int) -> float:
    """Fraction position of a large-corner cut, measured from the covered side."""
    return 255 - math.sqrt((255 - coverage) * 255.0 * 2)
