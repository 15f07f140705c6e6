"""Axial coordinate system for the bonsai hex grid.

Coordinate System:
    - Axial coordinates (q, r); the cube coordinate s is derived as -q - r
    - The seed bud of every tree sits at the origin (0, 0)
    - Rows grow upward with decreasing r, the pot occupies r >= 0

Direction Numbering (counter-clockwise from East):
    0 = right     : (+1,  0)
    1 = upRight   : (+1, -1)
    2 = upLeft    : ( 0, -1)
    3 = left      : (-1,  0)
    4 = downLeft  : (-1, +1)
    5 = downRight : ( 0, +1)

Consecutive directions are adjacent edges of the hexagon, so the neighbor list
returned by :func:`neighbors` can be read as a cycle: entries ``i`` and
``(i + 1) % 6`` always touch each other.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple


@dataclass(frozen=True)
class HexCoord:
    """A cell of the hex grid, compared and hashed by ``(q, r)``."""

    q: int
    r: int

    @property
    def s(self) -> int:
        return -self.q - self.r

    def __add__(self, other: "HexCoord") -> "HexCoord":
        return HexCoord(self.q + other.q, self.r + other.r)

    def __sub__(self, other: "HexCoord") -> "HexCoord":
        return HexCoord(self.q - other.q, self.r - other.r)

    def __mul__(self, factor: int) -> "HexCoord":
        return HexCoord(self.q * factor, self.r * factor)

    __rmul__ = __mul__

    def __neg__(self) -> "HexCoord":
        return HexCoord(-self.q, -self.r)

    def __repr__(self) -> str:
        return f"HexCoord({self.q}, {self.r})"


ORIGIN = HexCoord(0, 0)

RIGHT = HexCoord(1, 0)
UP_RIGHT = HexCoord(1, -1)
UP_LEFT = HexCoord(0, -1)
LEFT = HexCoord(-1, 0)
DOWN_LEFT = HexCoord(-1, 1)
DOWN_RIGHT = HexCoord(0, 1)

# Order is significant: fruit placement reads neighbor pairs (i, i + 1) cyclically.
DIRECTIONS: Tuple[HexCoord, ...] = (
    RIGHT,
    UP_RIGHT,
    UP_LEFT,
    LEFT,
    DOWN_LEFT,
    DOWN_RIGHT,
)


def add(a: HexCoord, b: HexCoord) -> HexCoord:
    """Return ``a + b``."""
    return a + b


def subtract(a: HexCoord, b: HexCoord) -> HexCoord:
    """Return ``a - b``."""
    return a - b


def scale(coord: HexCoord, factor: int) -> HexCoord:
    """Multiply both axes of ``coord`` by ``factor``."""
    return coord * factor


def neighbors(coord: HexCoord) -> List[HexCoord]:
    """Return all 6 neighbors of ``coord`` in direction order.

    Args:
        coord: Center cell

    Returns:
        List of six cells, index ``i`` lying in direction ``i``
    """
    return [coord + d for d in DIRECTIONS]


def trunc_div(numerator: int, denominator: int) -> int:
    """Integer division rounding toward zero.

    The pot boundary formulas are defined with truncating division, which
    differs from Python's floor division for negative rows.
    """
    quotient = abs(numerator) // abs(denominator)
    if (numerator < 0) != (denominator < 0):
        return -quotient
    return quotient


__all__ = [
    "DIRECTIONS",
    "DOWN_LEFT",
    "DOWN_RIGHT",
    "HexCoord",
    "LEFT",
    "ORIGIN",
    "RIGHT",
    "UP_LEFT",
    "UP_RIGHT",
    "add",
    "neighbors",
    "scale",
    "subtract",
    "trunc_div",
]
