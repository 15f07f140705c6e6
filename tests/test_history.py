from __future__ import annotations

import pytest

from bonsai_engine.game_models import (
    GrowthCard,
    MatchState,
    Phase,
    Player,
    PlayerColor,
    TileKind,
)
from bonsai_engine.history import History, freeze, thaw
from bonsai_engine.map.coordinates import HexCoord


def _state() -> MatchState:
    players = [Player(name="P1", color=PlayerColor.RED), Player(name="P2", color=PlayerColor.BLUE)]
    players[0].storage = [TileKind.WOOD]
    return MatchState(players=players, draw_pile=[GrowthCard(id=0, tile=TileKind.WOOD)])


def test_freeze_thaw_round_trip():
    state = _state()
    assert thaw(freeze(state)) == state


def test_snapshot_does_not_alias_live_state():
    state = _state()
    history = History()
    history.record(state)

    state.players[0].tree.tiles[HexCoord(0, -1)] = TileKind.WOOD
    state.players[0].storage.clear()
    state.draw_pile.pop()

    restored = history.undo(state)
    assert HexCoord(0, -1) not in restored.players[0].tree
    assert restored.players[0].storage == [TileKind.WOOD]
    assert len(restored.draw_pile) == 1


def test_unchanged_players_are_shared_between_snapshots():
    state = _state()
    history = History()
    history.record(state)
    state.players[0].storage.append(TileKind.LEAF)
    history.record(state)

    first, second = history.past
    assert first.players[1] is second.players[1]
    assert first.players[0] is not second.players[0]


def test_undo_redo_stacks():
    history = History()
    states = []
    for n in range(3):
        state = _state()
        state.active_player_index = n % 2
        state.players[0].max_capacity = 5 + n
        states.append(state)
    history.record(states[0])
    history.record(states[1])
    current = states[2]

    current = history.undo(current)
    assert current.players[0].max_capacity == 6
    assert current.phase == Phase.TURN_END
    current = history.undo(current)
    assert current.players[0].max_capacity == 5
    assert not history.can_undo()

    current = history.redo(current)
    assert current.players[0].max_capacity == 6
    current = history.redo(current)
    assert current.players[0].max_capacity == 7
    assert current.phase == Phase.TURN_END
    assert not history.can_redo()


def test_record_clears_redo():
    history = History()
    state = _state()
    history.record(state)
    state = history.undo(state)
    assert history.can_redo()
    history.record(state)
    assert not history.can_redo()


def test_empty_history():
    history = History()
    with pytest.raises(IndexError):
        history.undo(_state())
    with pytest.raises(IndexError):
        history.redo(_state())
