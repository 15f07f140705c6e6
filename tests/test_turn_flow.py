from __future__ import annotations

import pytest

from bonsai_engine import turn_flow
from bonsai_engine.errors import (
    BudgetExceeded,
    CapacityStillExceeded,
    GoalAlreadyResolved,
    GoalNotReachable,
    InvalidTileChoice,
    OwnershipViolation,
    PhaseViolation,
)
from bonsai_engine.game_models import (
    CARD_TAGS,
    GoalCategory,
    GoalTile,
    GrowthCard,
    HelperCard,
    MasterCard,
    MatchState,
    ParchmentCard,
    ParchmentCategory,
    Phase,
    Player,
    PlayerColor,
    TileKind,
    ToolCard,
    Tree,
)
from bonsai_engine.map.coordinates import HexCoord

W, L, FL, FR, ANY = TileKind.WOOD, TileKind.LEAF, TileKind.FLOWER, TileKind.FRUIT, TileKind.WILDCARD

WOOD_GOALS = [
    GoalTile(points=5, threshold=8, category=GoalCategory.WOOD),
    GoalTile(points=10, threshold=10, category=GoalCategory.WOOD),
    GoalTile(points=15, threshold=12, category=GoalCategory.WOOD),
]
LEAF_GOALS = [
    GoalTile(points=6, threshold=5, category=GoalCategory.LEAF),
    GoalTile(points=9, threshold=7, category=GoalCategory.LEAF),
    GoalTile(points=12, threshold=9, category=GoalCategory.LEAF),
]


def _make_player(name: str, color: PlayerColor, storage=None, tiles=None) -> Player:
    player = Player(name=name, color=color)
    player.storage = list(storage or [])
    if tiles:
        player.tree = Tree(dict(tiles))
    return player


def _basic_state(center=None, draw=None, players=None) -> MatchState:
    players = players or [
        _make_player("P1", PlayerColor.RED, storage=[W]),
        _make_player("P2", PlayerColor.BLUE, storage=[W, L]),
    ]
    if center is None:
        center = [
            GrowthCard(id=0, tile=W),
            ParchmentCard(id=39, points=1, category=ParchmentCategory.LEAF),
            ToolCard(id=41),
            MasterCard(id=24, tiles=(ANY,)),
        ]
    if draw is None:
        draw = [GrowthCard(id=2, tile=L), GrowthCard(id=3, tile=L)]
    return MatchState(
        players=players,
        center_cards=list(center),
        draw_pile=list(draw),
        goal_pool=WOOD_GOALS + LEAF_GOALS,
    )


class TestMeditate:
    def test_growth_card_in_first_slot(self):
        state = _basic_state()
        card = turn_flow.meditate(state, 0)
        player = state.players[0]
        assert card == GrowthCard(id=0, tile=W)
        assert player.growth_limit[W] == 2
        assert player.growth_card_pile == [card]
        assert state.phase == Phase.TURN_END
        assert state.center_cards[0] == GrowthCard(id=3, tile=L)
        assert len(state.draw_pile) == 1

    def test_market_slides_right(self):
        state = _basic_state()
        first, _, third, fourth = state.center_cards
        turn_flow.meditate(state, 1)
        assert state.center_cards == [GrowthCard(id=3, tile=L), first, third, fourth]

    def test_second_slot_asks_for_wood_or_leaf(self):
        state = _basic_state()
        turn_flow.meditate(state, 1)
        assert state.phase == Phase.CHOOSING_SECOND_TILE
        with pytest.raises(InvalidTileChoice):
            turn_flow.choose_tile(state, FL)
        turn_flow.choose_tile(state, L)
        player = state.players[0]
        assert player.storage == [W, L]
        assert player.discard_pile == [ParchmentCard(id=39, points=1, category=ParchmentCategory.LEAF)]
        assert state.phase == Phase.TURN_END
        assert state.resolving_card is None

    def test_third_slot_tool(self):
        state = _basic_state()
        turn_flow.meditate(state, 2)
        player = state.players[0]
        assert player.storage == [W, W, FL]
        assert player.max_capacity == 7
        assert player.tool_card_pile == [ToolCard(id=41)]
        assert state.phase == Phase.TURN_END

    def test_fourth_slot_master_with_wildcard(self):
        state = _basic_state()
        turn_flow.meditate(state, 3)
        assert state.phase == Phase.USING_MASTER
        assert state.pending_master_choices == 1
        with pytest.raises(InvalidTileChoice):
            turn_flow.choose_tile(state, ANY)
        turn_flow.choose_tile(state, FL)
        player = state.players[0]
        assert player.storage == [W, L, FR, FL]
        assert state.phase == Phase.TURN_END
        assert player.discard_pile == [MasterCard(id=24, tiles=(ANY,))]

    def test_empty_slot(self):
        state = _basic_state(center=[None, ToolCard(id=41), ToolCard(id=42), ToolCard(id=43)])
        with pytest.raises(OwnershipViolation):
            turn_flow.meditate(state, 0)
        with pytest.raises(OwnershipViolation):
            turn_flow.meditate(state, 4)
        assert state.phase == Phase.CHOOSE_ACTION

    def test_too_many_tiles_forces_discard(self):
        center = [
            GrowthCard(id=0, tile=W),
            GrowthCard(id=1, tile=W),
            GrowthCard(id=2, tile=L),
            MasterCard(id=31, tiles=(W, L, FL)),
        ]
        state = _basic_state(center=center)
        state.players[0].storage = [W, W, L]
        turn_flow.meditate(state, 3)
        player = state.players[0]
        assert len(player.storage) == 8
        assert state.phase == Phase.DISCARDING

        with pytest.raises(CapacityStillExceeded):
            turn_flow.discard_tiles(state, [FR])
        with pytest.raises(OwnershipViolation):
            turn_flow.discard_tiles(state, [FR, FR, FR])
        with pytest.raises(OwnershipViolation):
            turn_flow.discard_tiles(state, [ANY, W, W])
        assert len(player.storage) == 8

        turn_flow.discard_tiles(state, [W, W, L])
        assert len(player.storage) == 5
        assert state.phase == Phase.TURN_END


class TestHelperCard:
    def test_helper_allowance(self):
        center = [HelperCard(id=14, tiles=(ANY, W)), None, None, None]
        state = _basic_state(center=center)
        state.players[0].storage = [W, L]
        turn_flow.meditate(state, 0)
        player = state.players[0]
        assert state.phase == Phase.USING_HELPER
        assert player.remaining_growth[W] == 1
        assert player.remaining_growth[ANY] == 1

        turn_flow.place_tile(state, W, HexCoord(0, -1))
        assert state.phase == Phase.USING_HELPER
        turn_flow.place_tile(state, L, HexCoord(1, -1))
        assert state.phase == Phase.TURN_END
        assert player.storage == []


class TestCultivate:
    def test_budget_follows_growth_limit(self):
        state = _basic_state()
        player = state.players[0]
        player.growth_limit[ANY] = 0
        turn_flow.cultivate(state)
        assert state.phase == Phase.CULTIVATE
        assert player.remaining_growth[W] == 1

        turn_flow.place_tile(state, W, HexCoord(0, -1))
        assert player.tree.get(HexCoord(0, -1)) == W
        assert player.remaining_growth[W] == 0
        player.storage.append(W)
        with pytest.raises(BudgetExceeded):
            turn_flow.place_tile(state, W, HexCoord(1, -1))

    def test_tile_must_be_in_storage(self):
        state = _basic_state()
        turn_flow.cultivate(state)
        with pytest.raises(OwnershipViolation):
            turn_flow.place_tile(state, L, HexCoord(0, -1))
        assert turn_flow.can_place_tile(state, W, HexCoord(0, -1))
        assert not turn_flow.can_place_tile(state, L, HexCoord(0, -1))

    def test_blocked_tree_requires_removal(self):
        tiles = {
            HexCoord(0, -1): W,
            HexCoord(-1, -1): L,
            HexCoord(0, -2): L,
            HexCoord(1, -2): L,
            HexCoord(1, -1): L,
        }
        state = _basic_state()
        state.players[0] = _make_player("P1", PlayerColor.RED, storage=[W], tiles=tiles)
        turn_flow.cultivate(state)
        assert state.phase == Phase.REMOVE_TILES
        turn_flow.remove_tiles(state, [HexCoord(1, -1)])
        assert state.phase == Phase.CHOOSE_ACTION
        turn_flow.cultivate(state)
        assert state.phase == Phase.CULTIVATE


class TestGoals:
    def _state_one_wood_short(self) -> MatchState:
        tiles = {HexCoord(0, r): W for r in range(-6, 0)}
        state = _basic_state()
        state.players[0] = _make_player("P1", PlayerColor.RED, storage=[W], tiles=tiles)
        turn_flow.cultivate(state)
        reachable = turn_flow.place_tile(state, W, HexCoord(0, -7))
        assert reachable == {WOOD_GOALS[0]}
        assert state.phase == Phase.CLAIMING_GOALS
        return state

    def test_claim_renounces_category(self):
        state = self._state_one_wood_short()
        turn_flow.claim_goal(state, WOOD_GOALS[0])
        player = state.players[0]
        assert player.claimed_goals == [WOOD_GOALS[0]]
        assert WOOD_GOALS[0] not in state.goal_pool
        assert set(player.renounced_goals) == set(WOOD_GOALS[1:])
        assert state.phase == Phase.CULTIVATE

    def test_renounce(self):
        state = self._state_one_wood_short()
        turn_flow.renounce_goal(state, WOOD_GOALS[0])
        player = state.players[0]
        assert player.renounced_goals == [WOOD_GOALS[0]]
        assert WOOD_GOALS[0] in state.goal_pool
        assert state.phase == Phase.CULTIVATE
        assert turn_flow.player_reachable_goals(state) == set()

    def test_unreachable_and_resolved_goals(self):
        state = self._state_one_wood_short()
        with pytest.raises(GoalNotReachable):
            turn_flow.claim_goal(state, LEAF_GOALS[0])
        with pytest.raises(GoalNotReachable):
            turn_flow.claim_goal(state, GoalTile(points=99, threshold=1, category=GoalCategory.FRUIT))
        state.players[0].renounced_goals.append(WOOD_GOALS[0])
        with pytest.raises(GoalAlreadyResolved):
            turn_flow.claim_goal(state, WOOD_GOALS[0])
        assert state.players[0].claimed_goals == []


class TestPhases:
    def test_actions_outside_their_phase(self):
        state = _basic_state()
        with pytest.raises(PhaseViolation):
            turn_flow.place_tile(state, W, HexCoord(0, -1))
        with pytest.raises(PhaseViolation):
            turn_flow.end_turn(state)
        with pytest.raises(PhaseViolation):
            turn_flow.choose_tile(state, W)
        with pytest.raises(PhaseViolation):
            turn_flow.discard_tiles(state, [])
        with pytest.raises(PhaseViolation):
            turn_flow.claim_goal(state, WOOD_GOALS[0])

    def test_end_turn_passes_to_next_player(self):
        state = _basic_state()
        turn_flow.cultivate(state)
        turn_flow.place_tile(state, W, HexCoord(0, -1))
        assert turn_flow.end_turn(state) is None
        assert state.active_player_index == 1
        assert state.phase == Phase.CHOOSE_ACTION
        assert all(v == 0 for v in state.players[0].remaining_growth.values())

    def test_end_turn_with_full_storage(self):
        state = _basic_state()
        player = state.players[0]
        player.storage = [L] * 6
        turn_flow.cultivate(state)
        turn_flow.end_turn(state)
        assert state.phase == Phase.DISCARDING
        assert state.active_player_index == 0
        turn_flow.discard_tiles(state, [L])
        turn_flow.end_turn(state)
        assert state.active_player_index == 1


class TestGameEnd:
    def test_last_round_after_draw_pile_runs_out(self):
        state = _basic_state(draw=[GrowthCard(id=2, tile=L)])
        turn_flow.meditate(state, 0)
        assert state.draw_pile == []
        turn_flow.end_turn(state)
        assert state.final_player_index == 0
        assert state.last_round is True
        assert state.active_player_index == 1

        turn_flow.cultivate(state)
        assert turn_flow.end_turn(state) is None
        assert state.active_player_index == 0

        turn_flow.cultivate(state)
        result = turn_flow.end_turn(state)
        assert state.phase == Phase.GAME_ENDED
        assert result is not None
        assert set(result["players"]) == {"P1", "P2"}
        assert result["winner"] in {"P1", "P2"}

        with pytest.raises(PhaseViolation):
            turn_flow.cultivate(state)

    def test_final_player_is_write_once(self):
        state = _basic_state()
        state.mark_final_player(1)
        with pytest.raises(ValueError):
            state.mark_final_player(0)


class TestCardResolution:
    def test_every_card_type_has_a_resolver(self):
        assert set(turn_flow.CARD_RESOLVERS) == set(CARD_TAGS.values())

    def test_unknown_card_type(self):
        state = _basic_state()
        with pytest.raises(TypeError):
            turn_flow.resolve_card(state, object())
