"""Tests for goal tile evaluation."""
import pytest

from bonsai_engine.game_models import GoalCategory, GoalTile, TileKind, Tree
from bonsai_engine.goals import (
    flower_overhang_counts,
    goal_met,
    overhangs_left,
    position_tier,
    reachable_goals,
)
from bonsai_engine.map.connectivity import component, largest_component_size
from bonsai_engine.map.coordinates import HexCoord

W, L, FL, FR = TileKind.WOOD, TileKind.LEAF, TileKind.FLOWER, TileKind.FRUIT

WOOD_8 = GoalTile(points=5, threshold=8, category=GoalCategory.WOOD)
LEAF_5 = GoalTile(points=6, threshold=5, category=GoalCategory.LEAF)
FLOWER_3 = GoalTile(points=8, threshold=3, category=GoalCategory.FLOWER)
FRUIT_3 = GoalTile(points=9, threshold=3, category=GoalCategory.FRUIT)
POSITION = {
    tier: GoalTile(points=pts, threshold=tier, category=GoalCategory.POSITION)
    for tier, pts in ((1, 7), (2, 10), (3, 14))
}


def _tree(tiles):
    return Tree({HexCoord(q, r): kind for (q, r), kind in tiles.items()})


def _column(kind, q, rows):
    return {(q, r): kind for r in rows}


class TestCountGoals:
    def test_seed_counts_as_wood(self):
        tree = _tree(_column(W, 0, range(-7, 0)))
        assert tree.count(W) == 8
        assert goal_met(tree, WOOD_8)

    def test_one_wood_short(self):
        tree = _tree(_column(W, 0, range(-6, 0)))
        assert not goal_met(tree, WOOD_8)

    def test_fruit_count(self):
        tree = _tree({(0, -2): FR, (3, -4): FR, (-2, -3): FR})
        assert goal_met(tree, FRUIT_3)


class TestLeafGoal:
    def test_largest_component_only(self):
        tiles = _column(L, 0, range(-3, 0))
        tiles.update(_column(L, 3, range(-3, -1)))
        tree = _tree(tiles)
        assert largest_component_size(tree, L) == 3
        assert not goal_met(tree, LEAF_5)

    def test_joined_components(self):
        tiles = _column(L, 0, range(-3, 0))
        tiles.update({(1, -3): L, (2, -3): L})
        tree = _tree(tiles)
        assert goal_met(tree, LEAF_5)

    def test_component_is_the_same_from_any_start(self):
        tiles = {(0, -1): L, (1, -2): L, (1, -3): L, (2, -4): L, (4, -4): L}
        tree = _tree(tiles)
        region = component(tree, HexCoord(0, -1), L)
        for coord in region:
            assert component(tree, coord, L) == region
        assert HexCoord(4, -4) not in region


class TestFlowerGoal:
    def test_left_boundary_uses_truncation(self):
        # floor division would put (-1, -4) beyond the pot
        assert not overhangs_left(HexCoord(-1, -4))
        assert overhangs_left(HexCoord(-2, -4))
        assert overhangs_left(HexCoord(-3, -1))
        assert not overhangs_left(HexCoord(-2, -1))

    def test_one_side_reaches_goal(self):
        tree = _tree({(4, -1): FL, (4, -2): FL, (4, -3): FL})
        assert flower_overhang_counts(tree) == {"left": 0, "right": 3}
        assert goal_met(tree, FLOWER_3)

    def test_sides_are_not_added(self):
        tree = _tree({(4, -1): FL, (-3, -1): FL, (-2, -2): FL})
        counts = flower_overhang_counts(tree)
        assert counts == {"left": 2, "right": 1}
        assert not goal_met(tree, FLOWER_3)


class TestPositionGoal:
    RIGHT_ARM = {(1, -1): W, (2, -1): W, (3, -1): W, (4, -1): W}
    LEFT_ARM = {(0, -1): W, (-1, -1): W, (-2, -1): W}

    def test_no_protrusion(self):
        assert position_tier(Tree()) == 0

    def test_right_only(self):
        assert position_tier(_tree(self.RIGHT_ARM)) == 1

    def test_left_without_right_scores_nothing(self):
        assert position_tier(_tree(self.LEFT_ARM)) == 0

    def test_both_sides(self):
        tree = _tree({**self.RIGHT_ARM, **self.LEFT_ARM})
        assert position_tier(tree) == 2
        assert goal_met(tree, POSITION[2])
        assert not goal_met(tree, POSITION[3])

    def test_below_the_rim(self):
        tree = _tree({**self.RIGHT_ARM, **self.LEFT_ARM, (-3, 2): W})
        assert position_tier(tree) == 3
        assert reachable_goals(tree, POSITION.values()) == set(POSITION.values())


class TestReachableGoals:
    def test_returns_set_of_met_goals(self):
        tree = _tree(_column(W, 0, range(-7, 0)))
        pool = [WOOD_8, LEAF_5, FRUIT_3]
        assert reachable_goals(tree, pool) == {WOOD_8}

    def test_renounced_goals_are_skipped(self):
        tree = _tree(_column(W, 0, range(-7, 0)))
        assert reachable_goals(tree, [WOOD_8], renounced=[WOOD_8]) == set()

    @pytest.mark.parametrize("category", list(GoalCategory))
    def test_empty_tree_meets_nothing(self, category):
        goal = GoalTile(points=1, threshold=2, category=category)
        assert reachable_goals(Tree(), [goal]) == set()
