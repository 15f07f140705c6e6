"""Undo/redo history built from immutable match snapshots.

A snapshot freezes every mutable part of a :class:`MatchState` into tuples and
frozensets. Cards and goal tiles are already immutable and are shared as-is.
Frozen player records are interned, so consecutive snapshots in which a player
did not change point at the same record instead of holding a copy each.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Optional, Tuple

from .game_models import (
    Card,
    GoalTile,
    GrowthCard,
    MatchState,
    Phase,
    Player,
    PlayerColor,
    PlayerType,
    TileKind,
    ToolCard,
    Tree,
)
from .map.coordinates import HexCoord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlayerSnapshot:
    name: str
    color: PlayerColor
    player_type: PlayerType
    storage: Tuple[TileKind, ...]
    max_capacity: int
    growth_limit: Tuple[Tuple[TileKind, int], ...]
    remaining_growth: Tuple[Tuple[TileKind, int], ...]
    tree: FrozenSet[Tuple[HexCoord, TileKind]]
    discard_pile: Tuple[Card, ...]
    growth_card_pile: Tuple[GrowthCard, ...]
    tool_card_pile: Tuple[ToolCard, ...]
    claimed_goals: Tuple[GoalTile, ...]
    renounced_goals: Tuple[GoalTile, ...]


@dataclass(frozen=True)
class StateSnapshot:
    players: Tuple[PlayerSnapshot, ...]
    active_player_index: int
    center_cards: Tuple[Optional[Card], ...]
    draw_pile: Tuple[Card, ...]
    goal_pool: Tuple[GoalTile, ...]
    phase: Phase
    last_round: bool
    final_player_index: Optional[int]
    resolving_card: Optional[Card]
    placement_phase: Optional[Phase]
    pending_master_choices: int


def freeze_player(player: Player) -> PlayerSnapshot:
    return PlayerSnapshot(
        name=player.name,
        color=player.color,
        player_type=player.player_type,
        storage=tuple(player.storage),
        max_capacity=player.max_capacity,
        growth_limit=tuple(player.growth_limit.items()),
        remaining_growth=tuple(player.remaining_growth.items()),
        tree=frozenset(player.tree.items()),
        discard_pile=tuple(player.discard_pile),
        growth_card_pile=tuple(player.growth_card_pile),
        tool_card_pile=tuple(player.tool_card_pile),
        claimed_goals=tuple(player.claimed_goals),
        renounced_goals=tuple(player.renounced_goals),
    )


def thaw_player(snapshot: PlayerSnapshot) -> Player:
    return Player(
        name=snapshot.name,
        color=snapshot.color,
        player_type=snapshot.player_type,
        storage=list(snapshot.storage),
        max_capacity=snapshot.max_capacity,
        growth_limit=dict(snapshot.growth_limit),
        remaining_growth=dict(snapshot.remaining_growth),
        tree=Tree(dict(snapshot.tree)),
        discard_pile=list(snapshot.discard_pile),
        growth_card_pile=list(snapshot.growth_card_pile),
        tool_card_pile=list(snapshot.tool_card_pile),
        claimed_goals=list(snapshot.claimed_goals),
        renounced_goals=list(snapshot.renounced_goals),
    )


def freeze(state: MatchState, players: Optional[Tuple[PlayerSnapshot, ...]] = None) -> StateSnapshot:
    """Capture ``state``; ``players`` may supply already frozen player records."""
    return StateSnapshot(
        players=players if players is not None else tuple(freeze_player(p) for p in state.players),
        active_player_index=state.active_player_index,
        center_cards=tuple(state.center_cards),
        draw_pile=tuple(state.draw_pile),
        goal_pool=tuple(state.goal_pool),
        phase=state.phase,
        last_round=state.last_round,
        final_player_index=state.final_player_index,
        resolving_card=state.resolving_card,
        placement_phase=state.placement_phase,
        pending_master_choices=state.pending_master_choices,
    )


def thaw(snapshot: StateSnapshot) -> MatchState:
    """Build a fresh mutable state that shares nothing mutable with ``snapshot``."""
    return MatchState(
        players=[thaw_player(p) for p in snapshot.players],
        active_player_index=snapshot.active_player_index,
        center_cards=list(snapshot.center_cards),
        draw_pile=list(snapshot.draw_pile),
        goal_pool=list(snapshot.goal_pool),
        phase=snapshot.phase,
        last_round=snapshot.last_round,
        final_player_index=snapshot.final_player_index,
        resolving_card=snapshot.resolving_card,
        placement_phase=snapshot.placement_phase,
        pending_master_choices=snapshot.pending_master_choices,
    )


class History:
    """Past and future stacks of snapshots, the top being the most recent."""

    def __init__(self) -> None:
        self.past: List[StateSnapshot] = []
        self.future: List[StateSnapshot] = []
        self._players: Dict[PlayerSnapshot, PlayerSnapshot] = {}

    def _freeze(self, state: MatchState) -> StateSnapshot:
        players = tuple(
            self._players.setdefault(record, record)
            for record in (freeze_player(p) for p in state.players)
        )
        return freeze(state, players)

    def record(self, state: MatchState) -> None:
        """Push ``state`` onto the past stack and drop any redo entries."""
        self.past.append(self._freeze(state))
        self.future.clear()

    def clear_future(self) -> None:
        self.future.clear()

    def can_undo(self) -> bool:
        return bool(self.past)

    def can_redo(self) -> bool:
        return bool(self.future)

    def undo(self, current: MatchState) -> MatchState:
        """Return the previous state; ``current`` becomes redoable.

        The restored state resumes at TURN_END.
        """
        if not self.past:
            raise IndexError("Nothing to undo")
        snapshot = self.past.pop()
        self.future.append(self._freeze(current))
        state = thaw(snapshot)
        state.phase = Phase.TURN_END
        logger.debug("Undo, %d step(s) left", len(self.past))
        return state

    def redo(self, current: MatchState) -> MatchState:
        if not self.future:
            raise IndexError("Nothing to redo")
        snapshot = self.future.pop()
        self.past.append(self._freeze(current))
        state = thaw(snapshot)
        state.phase = Phase.TURN_END
        logger.debug("Redo, %d step(s) left", len(self.future))
        return state

    def reset(self) -> None:
        self.past.clear()
        self.future.clear()
        self._players.clear()


__all__ = ["History", "PlayerSnapshot", "StateSnapshot", "freeze", "thaw"]
