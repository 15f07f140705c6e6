"""Endgame scoring for trees, parchment cards and goal tiles."""
from __future__ import annotations

import logging
from typing import Any, Dict, List

from ..data.constants import FLOWER_SIDES, FRUIT_VP, LEAF_VP
from ..game_models import (
    HelperCard,
    MasterCard,
    MatchState,
    ParchmentCard,
    ParchmentCategory,
    Player,
    TileKind,
)

logger = logging.getLogger(__name__)

_TILE_CATEGORIES = {
    ParchmentCategory.WOOD: TileKind.WOOD,
    ParchmentCategory.LEAF: TileKind.LEAF,
    ParchmentCategory.FLOWER: TileKind.FLOWER,
    ParchmentCategory.FRUIT: TileKind.FRUIT,
}


def leaf_vp(player: Player) -> int:
    return LEAF_VP * player.tree.count(TileKind.LEAF)


def fruit_vp(player: Player) -> int:
    return FRUIT_VP * player.tree.count(TileKind.FRUIT)


def flower_vp(player: Player) -> int:
    tree = player.tree
    return sum(
        FLOWER_SIDES - len(tree.occupied_neighbors(coord))
        for coord, kind in tree.items()
        if kind == TileKind.FLOWER
    )


def parchment_count(player: Player, category: ParchmentCategory) -> int:
    """How many things of ``category`` the player owns at the end of the game."""
    if category in _TILE_CATEGORIES:
        return player.tree.count(_TILE_CATEGORIES[category])
    if category == ParchmentCategory.HELPER:
        return sum(1 for card in player.discard_pile if isinstance(card, HelperCard))
    if category == ParchmentCategory.MASTER:
        return sum(1 for card in player.discard_pile if isinstance(card, MasterCard))
    if category == ParchmentCategory.GROWTH:
        return len(player.growth_card_pile)
    raise ValueError(f"Unknown parchment category: {category}")


def parchment_vp(player: Player) -> int:
    return sum(
        card.points * parchment_count(player, card.category)
        for card in player.discard_pile
        if isinstance(card, ParchmentCard)
    )


def goal_vp(player: Player) -> int:
    return sum(goal.points for goal in player.claimed_goals)


def compute_player_score(player: Player) -> Dict[str, int]:
    """Compute the VP breakdown of ``player``."""

    vp_leaf = leaf_vp(player)
    vp_fruit = fruit_vp(player)
    vp_flower = flower_vp(player)
    vp_parchment = parchment_vp(player)
    vp_goals = goal_vp(player)

    return {
        "vp_leaf": vp_leaf,
        "vp_fruit": vp_fruit,
        "vp_flower": vp_flower,
        "vp_parchment": vp_parchment,
        "vp_goals": vp_goals,
        "total": vp_leaf + vp_fruit + vp_flower + vp_parchment + vp_goals,
    }


def rank_players(totals: List[int]) -> List[int]:
    """Seat indices ordered from first to last place.

    Ties go to the player seated farther clockwise from the starting player,
    i.e. the higher seat index.
    """
    return sorted(range(len(totals)), key=lambda seat: (totals[seat], seat), reverse=True)


def score_game(state: MatchState) -> Dict[str, Any]:
    """Return per-player VP breakdowns, the ranking and the winner."""

    breakdowns: Dict[str, Dict[str, int]] = {}
    totals: List[int] = []
    for player in state.players:
        breakdown = compute_player_score(player)
        breakdowns[player.name] = breakdown
        totals.append(breakdown["total"])

    ranking = rank_players(totals)
    winner = ranking[0] if ranking else None
    tied = winner is not None and totals.count(totals[winner]) > 1

    result: Dict[str, Any] = {
        "players": breakdowns,
        "ranking": [state.players[seat].name for seat in ranking],
        "winner": state.players[winner].name if winner is not None else None,
        "tied": tied,
    }
    logger.debug("Scored %d players: %s", len(state.players), totals)
    return result


__all__ = [
    "compute_player_score",
    "flower_vp",
    "fruit_vp",
    "goal_vp",
    "leaf_vp",
    "parchment_count",
    "parchment_vp",
    "rank_players",
    "score_game",
]
