"""
Central rules API for bonsai_engine.

All callers (UI, bots, network layer, tests) should use ONLY this module to:
1. start or load a match
2. perform the actions of the active player
3. query placements, goals and scores
4. step through the undo/redo history

Every action either applies completely or raises a BonsaiRuleError and leaves
the match untouched.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Set, Union

from .. import turn_flow
from ..config import load_settings
from ..data.rules_loader import load_rules
from ..errors import NoGameInProgress, PhaseViolation
from ..game_models import Card, GoalTile, MatchState, Phase, Player, TileKind
from ..game_setup import DrawPile, SetupConfig, new_match
from ..history import History
from ..map.coordinates import HexCoord
from ..map.placement import possible_placements
from ..scoring.endgame import compute_player_score, score_game

logger = logging.getLogger(__name__)

PlayerRef = Union[int, str, Player]


class BonsaiGame:
    """One match plus its history.

    ``settings`` is the merged configuration; its ``rules`` section overrides
    the packaged rule data. When omitted it is built with
    :func:`bonsai_engine.config.load_settings`, so ``BONSAI__`` environment
    variables apply.
    """

    def __init__(self, settings: Optional[Mapping[str, Any]] = None) -> None:
        self.settings: Dict[str, Any] = dict(settings if settings is not None else load_settings())
        self.history = History()
        self.result: Optional[Dict[str, Any]] = None
        self._state: Optional[MatchState] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def state(self) -> MatchState:
        if self._state is None:
            raise NoGameInProgress("No match has been started")
        return self._state

    @property
    def in_progress(self) -> bool:
        return self._state is not None and self._state.phase != Phase.GAME_ENDED

    def start(
        self,
        config: Union[SetupConfig, Mapping[str, Any]],
        draw_pile: Optional[DrawPile] = None,
    ) -> MatchState:
        if not isinstance(config, SetupConfig):
            config = SetupConfig.model_validate(config)
        rules = load_rules(self.settings.get("rules"))
        self._state = new_match(config, draw_pile=draw_pile, rules=rules)
        self.result = None
        self.history.reset()
        self.history.record(self._state)
        return self._state

    def load(self, snapshot: Mapping[str, Any]) -> MatchState:
        """Resume a match from a dictionary produced by :meth:`to_dict`."""
        self._state = MatchState.from_dict(dict(snapshot))
        self.result = score_game(self._state) if self._state.phase == Phase.GAME_ENDED else None
        self.history.reset()
        self.history.record(self._state)
        logger.info("Loaded match at %s", self._state.phase.value)
        return self._state

    def to_dict(self) -> Dict[str, Any]:
        return self.state.to_dict()

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def _acted(self) -> None:
        self.history.clear_future()

    def meditate(self, slot: int) -> Card:
        card = turn_flow.meditate(self.state, slot)
        self._acted()
        return card

    def cultivate(self) -> None:
        turn_flow.cultivate(self.state)
        self._acted()

    def place_tile(self, kind: TileKind, coord: HexCoord) -> Set[GoalTile]:
        reachable = turn_flow.place_tile(self.state, kind, coord)
        self._acted()
        return reachable

    def choose_tile(self, kind: TileKind) -> None:
        turn_flow.choose_tile(self.state, kind)
        self._acted()

    def claim_goal(self, goal: GoalTile) -> None:
        turn_flow.claim_goal(self.state, goal)
        self._acted()

    def renounce_goal(self, goal: GoalTile) -> None:
        turn_flow.renounce_goal(self.state, goal)
        self._acted()

    def discard_tiles(self, kinds: Iterable[TileKind]) -> None:
        turn_flow.discard_tiles(self.state, kinds)
        self._acted()

    def remove_tiles(self, coords: Sequence[HexCoord]) -> None:
        turn_flow.remove_tiles(self.state, coords)
        self._acted()

    def end_turn(self) -> Optional[Dict[str, Any]]:
        """End the active turn; returns the final scores once the game is over."""
        state = self.state
        result = turn_flow.end_turn(state)
        if result is not None:
            self.result = result
            self._acted()
        elif state.phase == Phase.CHOOSE_ACTION:
            self.history.record(state)
        else:
            self._acted()
        return result

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def can_undo(self) -> bool:
        return self._state is not None and self.history.can_undo()

    def can_redo(self) -> bool:
        return self._state is not None and self.history.can_redo()

    def undo(self) -> MatchState:
        state = self.state
        if not self.history.can_undo():
            raise PhaseViolation("There is nothing to undo")
        self._state = self.history.undo(state)
        self.result = None
        return self._state

    def redo(self) -> MatchState:
        state = self.state
        if not self.history.can_redo():
            raise PhaseViolation("There is nothing to redo")
        self._state = self.history.redo(state)
        self.result = None
        return self._state

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def _player(self, player: Optional[PlayerRef]) -> Player:
        state = self.state
        if player is None:
            return state.active_player
        if isinstance(player, Player):
            return player
        if isinstance(player, int):
            return state.players[player]
        for candidate in state.players:
            if candidate.name == player:
                return candidate
        raise KeyError(f"Unknown player '{player}'")

    def possible_placements(self, player: Optional[PlayerRef] = None) -> List[HexCoord]:
        return possible_placements(self._player(player).tree)

    def can_place_tile(self, kind: TileKind, coord: HexCoord) -> bool:
        return turn_flow.can_place_tile(self.state, kind, coord)

    def reachable_goals(self, player: Optional[PlayerRef] = None) -> Set[GoalTile]:
        return turn_flow.player_reachable_goals(self.state, self._player(player))

    def current_score(self, player: Optional[PlayerRef] = None) -> Dict[str, int]:
        return compute_player_score(self._player(player))

    def final_scores(self) -> Dict[str, Any]:
        """Scores of all players as they would be if the game ended now."""
        return score_game(self.state)


__all__ = ["BonsaiGame"]
