"""Tile placement rules for a bonsai tree.

Implements the adjacency requirements for each tile kind, the pot exclusion
zone and the growth budget check used while cultivating or using a helper.
"""
from __future__ import annotations

import logging
from typing import Dict, FrozenSet, List, Optional

from ..errors import AdjacencyViolation, BonsaiRuleError, BudgetExceeded, OwnershipViolation
from ..game_models import TileKind, Tree
from .coordinates import ORIGIN, HexCoord, neighbors

logger = logging.getLogger(__name__)


# Cells covered by the pot; the seed bud sits on its rim at the origin.
POT_CELLS: FrozenSet[HexCoord] = frozenset(
    HexCoord(q, r)
    for q, r in (
        (-2, 0), (-1, 0), (1, 0), (2, 0), (3, 0),
        (-2, 1), (-1, 1), (0, 1), (1, 1), (2, 1),
        (-2, 2), (-1, 2), (0, 2), (1, 2),
    )
)

Budget = Dict[TileKind, int]


def is_free_cell(tree: Tree, coord: HexCoord) -> bool:
    """True when ``coord`` is empty, outside the pot and not the origin."""
    return coord != ORIGIN and coord not in POT_CELLS and coord not in tree


def has_budget(kind: TileKind, budget: Budget) -> bool:
    return budget.get(kind, 0) > 0 or budget.get(TileKind.WILDCARD, 0) > 0


def satisfies_adjacency(tree: Tree, kind: TileKind, coord: HexCoord) -> bool:
    """Check the neighbor requirement of ``kind`` at ``coord``.

    Args:
        tree: Tree the tile would be added to
        kind: Kind of the new tile
        coord: Target cell

    Returns:
        True if the neighbors of ``coord`` allow ``kind`` there
    """
    around = tree.neighbor_kinds(coord)
    if kind in (TileKind.WOOD, TileKind.LEAF):
        return TileKind.WOOD in around
    if kind == TileKind.FLOWER:
        return TileKind.LEAF in around
    if kind == TileKind.FRUIT:
        if TileKind.FRUIT in around:
            return False
        # Two leaves on consecutive sides, wrapping from direction 5 to 0.
        return any(
            around[i] == TileKind.LEAF and around[(i + 1) % 6] == TileKind.LEAF
            for i in range(6)
        )
    return False


def placement_error(
    tree: Tree, kind: TileKind, coord: HexCoord, budget: Budget
) -> Optional[BonsaiRuleError]:
    """Return the rule a placement would break, or ``None`` when it is legal."""
    if kind == TileKind.WILDCARD:
        return OwnershipViolation("Wildcard tiles cannot be placed on a tree")
    if not has_budget(kind, budget):
        return BudgetExceeded(f"No growth left for a {kind.value} tile")
    if coord in tree:
        return OwnershipViolation(f"{coord} is already occupied")
    if coord == ORIGIN or coord in POT_CELLS:
        return AdjacencyViolation(f"{coord} lies in the pot")
    if not satisfies_adjacency(tree, kind, coord):
        return AdjacencyViolation(f"A {kind.value} tile cannot grow at {coord}")
    return None


def can_place(tree: Tree, kind: TileKind, coord: HexCoord, budget: Budget) -> bool:
    return placement_error(tree, kind, coord, budget) is None


def spend_budget(kind: TileKind, budget: Budget) -> None:
    """Charge one tile of ``kind``, falling back to the wildcard bucket."""
    if budget.get(kind, 0) > 0:
        budget[kind] -= 1
    else:
        budget[TileKind.WILDCARD] -= 1


def place(tree: Tree, kind: TileKind, coord: HexCoord, budget: Budget) -> None:
    """Add a tile to ``tree`` and charge ``budget``.

    Raises:
        BonsaiRuleError: the subclass naming the broken rule; nothing is changed.
    """
    error = placement_error(tree, kind, coord, budget)
    if error is not None:
        raise error
    spend_budget(kind, budget)
    tree.tiles[coord] = kind
    logger.debug("Placed %s at %s", kind.value, coord)


def possible_placements(tree: Tree) -> List[HexCoord]:
    """Empty cells outside the pot that touch at least one tile of ``tree``."""
    seen = set()
    out: List[HexCoord] = []
    for coord in tree:
        for n in neighbors(coord):
            if n in seen or not is_free_cell(tree, n):
                continue
            seen.add(n)
            out.append(n)
    return out


def can_place_wood(tree: Tree) -> bool:
    """True if some reachable cell borders a wood tile."""
    return any(
        TileKind.WOOD in tree.neighbor_kinds(coord) for coord in possible_placements(tree)
    )


__all__ = [
    "POT_CELLS",
    "can_place",
    "can_place_wood",
    "has_budget",
    "is_free_cell",
    "place",
    "placement_error",
    "possible_placements",
    "satisfies_adjacency",
    "spend_budget",
]
