"""Hex grid geometry and tree-shape rules."""

from .coordinates import DIRECTIONS, ORIGIN, HexCoord, neighbors

__all__ = [
    "DIRECTIONS",
    "ORIGIN",
    "HexCoord",
    "neighbors",
]
