"""Match setup: players, card market, goal pool and starting tiles."""
from __future__ import annotations

import logging
import random
from typing import Any, Dict, List, Optional, Sequence, Union

from pydantic import BaseModel, Field, model_validator

from .cards import cards_by_id, shuffled_deck
from .data.rules_loader import goal_categories_per_match, goal_tiles, growth_limit, load_rules
from .game_models import (
    CENTER_SLOTS,
    Card,
    GoalCategory,
    MatchState,
    Phase,
    Player,
    PlayerColor,
    PlayerType,
    TileKind,
)

logger = logging.getLogger(__name__)


class PlayerSetup(BaseModel):
    name: str = Field(min_length=1)
    player_type: PlayerType = PlayerType.LOCAL
    color: Optional[PlayerColor] = None


class SetupConfig(BaseModel):
    players: List[PlayerSetup] = Field(min_length=2, max_length=4)
    # None draws the goal categories at random
    goal_categories: Optional[List[GoalCategory]] = None
    random_order: bool = False
    seed: Optional[int] = None

    @model_validator(mode="after")
    def check_unique(self) -> "SetupConfig":
        names = [p.name for p in self.players]
        if len(set(names)) != len(names):
            raise ValueError("player names must be unique")
        colors = [p.color for p in self.players if p.color is not None]
        if len(set(colors)) != len(colors):
            raise ValueError("player colors must be unique")
        if self.goal_categories is not None:
            if len(set(self.goal_categories)) != len(self.goal_categories):
                raise ValueError("goal categories must be different")
        return self

    @classmethod
    def for_names(cls, *names: str, **kwargs: Any) -> "SetupConfig":
        return cls(players=[PlayerSetup(name=n) for n in names], **kwargs)


DrawPile = Sequence[Union[Card, int]]


def _assign_colors(setups: Sequence[PlayerSetup]) -> List[PlayerColor]:
    taken = {p.color for p in setups if p.color is not None}
    free = [c for c in PlayerColor if c not in taken]
    return [p.color if p.color is not None else free.pop(0) for p in setups]


def _starting_tiles(rules: Dict[str, Any], seat: int) -> List[TileKind]:
    return [TileKind(t) for t in rules["starting_tiles"][: seat + 1]]


def _resolve_draw_pile(rules: Dict[str, Any], draw_pile: DrawPile) -> List[Card]:
    ids = [item for item in draw_pile if isinstance(item, int)]
    if not ids:
        return list(draw_pile)  # type: ignore[arg-type]
    if len(ids) != len(draw_pile):
        raise ValueError("A predefined draw pile must contain only cards or only card ids")
    return cards_by_id(rules, ids)


def new_match(
    config: SetupConfig,
    draw_pile: Optional[DrawPile] = None,
    rules: Optional[Dict[str, Any]] = None,
) -> MatchState:
    """Create a match ready for the first player's turn.

    Args:
        config: Validated setup configuration
        draw_pile: Optional predefined card order (cards or card ids), e.g.
            for a synchronized online game; the first four cards go to the
            market and the rest is drawn from the end
        rules: Rule data; defaults to the packaged rules

    Returns:
        MatchState in CHOOSE_ACTION with seat 0 to move

    Raises:
        ValueError: the chosen goal categories do not match
            ``goal_categories_per_match`` of the rules
    """
    rules = rules if rules is not None else load_rules()
    rng = random.Random(config.seed)

    setups = list(config.players)
    if config.random_order:
        rng.shuffle(setups)
    colors = _assign_colors(setups)

    players: List[Player] = []
    for seat, (setup, color) in enumerate(zip(setups, colors)):
        player = Player(
            name=setup.name,
            color=color,
            player_type=setup.player_type,
            max_capacity=int(rules["starting_capacity"]),
            growth_limit=growth_limit(rules),
        )
        player.storage = _starting_tiles(rules, seat)
        players.append(player)

    if draw_pile is not None:
        deck = _resolve_draw_pile(rules, draw_pile)
    else:
        deck = shuffled_deck(rules, len(players), rng)
    center: List[Optional[Card]] = list(deck[:CENTER_SLOTS])
    center += [None] * (CENTER_SLOTS - len(center))

    wanted = goal_categories_per_match(rules)
    if config.goal_categories is None:
        categories = rng.sample(list(GoalCategory), wanted)
    elif len(config.goal_categories) == wanted:
        categories = list(config.goal_categories)
    else:
        raise ValueError(
            f"Expected {wanted} goal categories, got {len(config.goal_categories)}"
        )
    pool = [goal for category in categories for goal in goal_tiles(rules, category)]

    state = MatchState(
        players=players,
        active_player_index=0,
        center_cards=center,
        draw_pile=list(deck[CENTER_SLOTS:]),
        goal_pool=pool,
        phase=Phase.CHOOSE_ACTION,
    )
    logger.info(
        "New match: %s, goals %s, %d cards in the draw pile",
        ", ".join(p.name for p in players),
        ", ".join(c.value for c in categories),
        len(state.draw_pile),
    )
    return state


__all__ = ["PlayerSetup", "SetupConfig", "new_match"]
