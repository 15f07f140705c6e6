"""Tile removal for trees that can no longer grow wood.

When cultivating finds no cell where a wood tile may be placed, the player has
to remove the smallest set of tiles that opens such a cell again. A proposed
removal is checked for three things:

1. Every coordinate holds a tile of the tree (the seed bud excluded).
2. The set is minimal: no smaller set would already unblock the tree.
3. After removal some cell accepts a wood tile again.

Four-tile removals are judged by a structural rule instead: every leaf left on the tree must be surrounded by two flowers and a
fruit, or by two fruits and a flower.
"""
from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from ..errors import BonsaiRuleError, IneffectiveRemoval, NonMinimalRemoval, OwnershipViolation
from ..game_models import TileKind, Tree
from .coordinates import ORIGIN, HexCoord
from .connectivity import neighbors_of_kind
from .placement import can_place_wood

logger = logging.getLogger(__name__)

MAX_REMOVAL = 4


def restores_wood(tree: Tree, coords: Sequence[HexCoord]) -> bool:
    """True if removing ``coords`` leaves a cell where wood can grow."""
    return can_place_wood(tree.without(coords))


def _leaves_are_enclosed(tree: Tree) -> bool:
    for coord, kind in tree.items():
        if kind != TileKind.LEAF:
            continue
        around = tree.occupied_neighbors(coord)
        flowers = around.count(TileKind.FLOWER)
        fruits = around.count(TileKind.FRUIT)
        if not ((flowers >= 2 and fruits >= 1) or (fruits >= 2 and flowers >= 1)):
            return False
    return True


def _smaller_pair_restores(tree: Tree, coords: Sequence[HexCoord]) -> bool:
    # A proposed tile together with one flower or fruit next to it.
    for coord in coords:
        for other in neighbors_of_kind(tree, coord, (TileKind.FLOWER, TileKind.FRUIT)):
            if other == ORIGIN:
                continue
            if restores_wood(tree, [coord, other]):
                return True
    return False


def removal_error(tree: Tree, coords: Sequence[HexCoord]) -> Optional[BonsaiRuleError]:
    """Return the reason ``coords`` may not be removed, or ``None``.

    Args:
        tree: Tree of the active player
        coords: Cells proposed for removal

    Returns:
        ``OwnershipViolation`` for cells that hold no removable tile,
        ``NonMinimalRemoval`` for sets that are empty, too large or not minimal,
        ``IneffectiveRemoval`` when no wood placement is restored.
    """
    coords = list(coords)
    if len(set(coords)) != len(coords):
        return OwnershipViolation("Each tile can only be removed once")
    for coord in coords:
        if coord == ORIGIN:
            return OwnershipViolation("The seed bud cannot be removed")
        if coord not in tree:
            return OwnershipViolation(f"No tile at {coord}")

    size = len(coords)
    if size == 0:
        return NonMinimalRemoval("At least one tile has to be removed")
    if size > MAX_REMOVAL:
        return NonMinimalRemoval(f"At most {MAX_REMOVAL} tiles may be removed")
    if size == MAX_REMOVAL:
        if _leaves_are_enclosed(tree.without(coords)):
            return None
        return IneffectiveRemoval("Every remaining leaf must be enclosed by flowers and fruits")
    if size == 2 and any(restores_wood(tree, [c]) for c in coords):
        return NonMinimalRemoval("A single tile would already unblock the tree")
    if size == 3 and _smaller_pair_restores(tree, coords):
        return NonMinimalRemoval("Two tiles would already unblock the tree")
    if not restores_wood(tree, coords):
        return IneffectiveRemoval("Removing these tiles does not restore a wood placement")
    return None


def validate_removal(tree: Tree, coords: Sequence[HexCoord]) -> bool:
    return removal_error(tree, coords) is None


def remove_tiles(tree: Tree, coords: Sequence[HexCoord]) -> List[HexCoord]:
    """Remove ``coords`` from ``tree`` after validating them.

    Raises:
        BonsaiRuleError: when the removal is not allowed; the tree is unchanged.
    """
    error = removal_error(tree, coords)
    if error is not None:
        raise error
    removed = list(coords)
    for coord in removed:
        del tree.tiles[coord]
    logger.debug("Removed %d tile(s): %s", len(removed), removed)
    return removed


__all__ = [
    "MAX_REMOVAL",
    "remove_tiles",
    "removal_error",
    "restores_wood",
    "validate_removal",
]
