"""Goal tile evaluation.

A goal tile is reachable when the tree meets its threshold:

* wood / fruit: number of tiles of that kind (the seed bud counts as wood)
* leaf: size of the largest connected group of leaves
* flower: flowers hanging over one side of the pot
* position: tier 1 needs a growth spot protruding on the right, tier 2 on
  both sides, tier 3 additionally one below the rim of the pot
"""
from __future__ import annotations

from typing import Callable, Dict, Iterable, List, Set

from .game_models import GoalCategory, GoalTile, TileKind, Tree
from .map.connectivity import largest_component_size
from .map.coordinates import HexCoord, trunc_div
from .map.placement import possible_placements


def overhangs_left(coord: HexCoord) -> bool:
    return coord.q < -1 - trunc_div(coord.r + 3, 2)


def flower_overhangs_right(coord: HexCoord) -> bool:
    return coord.q > 3 - trunc_div(coord.r + 2, 2)


def protrudes_right(coord: HexCoord) -> bool:
    return coord.q > 3 - trunc_div(coord.r - 2, 2)


def flower_overhang_counts(tree: Tree) -> Dict[str, int]:
    """Count flowers beyond the left and right edge of the pot."""
    flowers = [c for c, k in tree.items() if k == TileKind.FLOWER]
    return {
        "left": sum(1 for c in flowers if overhangs_left(c)),
        "right": sum(1 for c in flowers if flower_overhangs_right(c)),
    }


def position_tier(tree: Tree) -> int:
    """Highest position tier (0-3) the tree currently satisfies."""
    spots = possible_placements(tree)
    upper = [c for c in spots if c.r < 0]
    right = any(protrudes_right(c) for c in upper)
    if not right:
        return 0
    left = any(overhangs_left(c) for c in upper)
    if not left:
        return 1
    if any(c.r > 1 for c in spots):
        return 3
    return 2


def _wood_met(tree: Tree, goal: GoalTile) -> bool:
    return tree.count(TileKind.WOOD) >= goal.threshold


def _fruit_met(tree: Tree, goal: GoalTile) -> bool:
    return tree.count(TileKind.FRUIT) >= goal.threshold


def _leaf_met(tree: Tree, goal: GoalTile) -> bool:
    return largest_component_size(tree, TileKind.LEAF) >= goal.threshold


def _flower_met(tree: Tree, goal: GoalTile) -> bool:
    counts = flower_overhang_counts(tree)
    return max(counts.values()) >= goal.threshold


def _position_met(tree: Tree, goal: GoalTile) -> bool:
    return position_tier(tree) >= goal.threshold


_GOAL_CHECKS: Dict[GoalCategory, Callable[[Tree, GoalTile], bool]] = {
    GoalCategory.WOOD: _wood_met,
    GoalCategory.LEAF: _leaf_met,
    GoalCategory.FLOWER: _flower_met,
    GoalCategory.FRUIT: _fruit_met,
    GoalCategory.POSITION: _position_met,
}


def goal_met(tree: Tree, goal: GoalTile) -> bool:
    return _GOAL_CHECKS[goal.category](tree, goal)


def reachable_goals(
    tree: Tree,
    pool: Iterable[GoalTile],
    renounced: Iterable[GoalTile] = (),
) -> Set[GoalTile]:
    """Goals from ``pool`` that ``tree`` meets, minus the ``renounced`` ones."""
    skip = set(renounced)
    return {goal for goal in pool if goal not in skip and goal_met(tree, goal)}


def goals_of_category(pool: Iterable[GoalTile], category: GoalCategory) -> List[GoalTile]:
    return [goal for goal in pool if goal.category == category]


__all__ = [
    "flower_overhang_counts",
    "goal_met",
    "goals_of_category",
    "overhangs_left",
    "position_tier",
    "reachable_goals",
]
