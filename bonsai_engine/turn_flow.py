"""Turn phase machine: one function per player action, each checking the current phase first."""
from __future__ import annotations

import logging
from collections import Counter
from typing import Any, Callable, Dict, Iterable, Optional, Sequence, Set

from . import cards
from .errors import (
    BudgetExceeded,
    CapacityStillExceeded,
    GoalAlreadyResolved,
    GoalNotReachable,
    InvalidTileChoice,
    OwnershipViolation,
    PhaseViolation,
)
from .game_models import (
    PLACEABLE_KINDS,
    Card,
    GoalTile,
    GrowthCard,
    HelperCard,
    MasterCard,
    MatchState,
    ParchmentCard,
    Phase,
    Player,
    TileKind,
    ToolCard,
    empty_growth,
)
from .goals import goals_of_category, reachable_goals
from .map import placement, removal
from .map.coordinates import HexCoord
from .scoring.endgame import score_game

logger = logging.getLogger(__name__)

# Tiles granted for taking a card from the market, by slot.
SLOT_BONUS_TILES: Dict[int, Sequence[TileKind]] = {
    2: (TileKind.WOOD, TileKind.FLOWER),
    3: (TileKind.LEAF, TileKind.FRUIT),
}
SECOND_SLOT_CHOICES = (TileKind.WOOD, TileKind.LEAF)
SECOND_SLOT = 1


def _require_phase(state: MatchState, action: str, *phases: Phase) -> None:
    if state.phase not in phases:
        allowed = ", ".join(p.value for p in phases)
        raise PhaseViolation(f"{action} is only allowed in {allowed}, not {state.phase.value}")


# ---------------------------------------------------------------------------
# Card resolution
# ---------------------------------------------------------------------------

def _resolve_growth(state: MatchState, player: Player, card: GrowthCard) -> None:
    player.growth_limit[card.tile] += 1
    player.growth_card_pile.append(card)
    state.phase = Phase.TURN_END


def _resolve_tool(state: MatchState, player: Player, card: ToolCard) -> None:
    player.max_capacity += card.capacity_bonus
    player.tool_card_pile.append(card)
    state.phase = Phase.TURN_END


def _resolve_parchment(state: MatchState, player: Player, card: ParchmentCard) -> None:
    player.discard_pile.append(card)
    state.phase = Phase.TURN_END


def _resolve_master(state: MatchState, player: Player, card: MasterCard) -> None:
    player.discard_pile.append(card)
    wildcards = 0
    for tile in card.tiles:
        if tile == TileKind.WILDCARD:
            wildcards += 1
        else:
            player.storage.append(tile)
    state.pending_master_choices = wildcards
    state.phase = Phase.USING_MASTER if wildcards else Phase.TURN_END


def _resolve_helper(state: MatchState, player: Player, card: HelperCard) -> None:
    player.discard_pile.append(card)
    for tile in card.tiles:
        player.remaining_growth[tile] += 1
    state.placement_phase = Phase.USING_HELPER
    state.phase = Phase.USING_HELPER


CARD_RESOLVERS: Dict[type, Callable[[MatchState, Player, Any], None]] = {
    GrowthCard: _resolve_growth,
    HelperCard: _resolve_helper,
    MasterCard: _resolve_master,
    ParchmentCard: _resolve_parchment,
    ToolCard: _resolve_tool,
}


def resolve_card(state: MatchState, card: Card) -> None:
    """Apply the effect of ``card`` for the active player."""
    resolver = CARD_RESOLVERS.get(type(card))
    if resolver is None:
        raise TypeError(f"No resolver registered for {type(card).__name__}")
    resolver(state, state.active_player, card)
    if state.phase != Phase.USING_MASTER:
        state.resolving_card = None
    logger.debug("Resolved card %s -> %s", card, state.phase.value)
    _check_discard(state)


def _check_discard(state: MatchState) -> None:
    if state.phase == Phase.TURN_END and state.active_player.needs_to_discard():
        state.phase = Phase.DISCARDING


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------

def meditate(state: MatchState, slot: int) -> Card:
    """Take the card in ``slot`` of the market and resolve it.

    Slot 1 first asks for a wood or leaf tile (see :func:`choose_tile`), slots
    2 and 3 hand out two extra tiles before the card takes effect.
    """
    _require_phase(state, "Meditating", Phase.CHOOSE_ACTION)
    if not 0 <= slot < len(state.center_cards):
        raise OwnershipViolation(f"There is no card slot {slot}")
    if state.center_cards[slot] is None:
        raise OwnershipViolation(f"Card slot {slot} is empty")

    player = state.active_player
    state.phase = Phase.MEDITATE
    card = cards.take_from_market(state, slot)
    state.resolving_card = card
    logger.debug("%s takes %s from slot %d", player.name, card, slot)

    if slot == SECOND_SLOT:
        state.phase = Phase.CHOOSING_SECOND_TILE
        return card
    player.storage.extend(SLOT_BONUS_TILES.get(slot, ()))
    resolve_card(state, card)
    return card


def choose_tile(state: MatchState, kind: TileKind) -> None:
    """Pick the tile offered by the second market slot or by a master card."""
    _require_phase(state, "Choosing a tile", Phase.CHOOSING_SECOND_TILE, Phase.USING_MASTER)
    player = state.active_player

    if state.phase == Phase.CHOOSING_SECOND_TILE:
        if kind not in SECOND_SLOT_CHOICES:
            raise InvalidTileChoice(f"Only wood or leaf can be chosen, not {kind.value}")
        card = state.resolving_card
        if card is None:
            raise PhaseViolation("No card is waiting to be resolved")
        player.storage.append(kind)
        resolve_card(state, card)
        return

    if kind not in PLACEABLE_KINDS:
        raise InvalidTileChoice(f"{kind.value} is not a tile that can be chosen")
    player.storage.append(kind)
    state.pending_master_choices -= 1
    if state.pending_master_choices <= 0:
        state.pending_master_choices = 0
        state.resolving_card = None
        state.phase = Phase.TURN_END
        _check_discard(state)


def cultivate(state: MatchState) -> None:
    _require_phase(state, "Cultivating", Phase.CHOOSE_ACTION)
    player = state.active_player
    if not placement.can_place_wood(player.tree):
        logger.debug("%s cannot grow wood and must remove tiles", player.name)
        state.phase = Phase.REMOVE_TILES
        return
    player.remaining_growth = dict(player.growth_limit)
    state.placement_phase = Phase.CULTIVATE
    state.phase = Phase.CULTIVATE


def can_place_tile(state: MatchState, kind: TileKind, coord: HexCoord) -> bool:
    """Whether :func:`place_tile` would accept the move right now."""
    if state.phase not in (Phase.CULTIVATE, Phase.USING_HELPER):
        return False
    player = state.active_player
    if kind not in player.storage:
        return False
    return placement.can_place(player.tree, kind, coord, player.remaining_growth)


def place_tile(state: MatchState, kind: TileKind, coord: HexCoord) -> Set[GoalTile]:
    """Place a tile from storage onto the active player's tree.

    Returns:
        The goals the tree now reaches; when non-empty the phase moves to
        CLAIMING_GOALS until each of them is claimed or renounced.
    """
    _require_phase(state, "Placing a tile", Phase.CULTIVATE, Phase.USING_HELPER)
    player = state.active_player
    if kind == TileKind.WILDCARD:
        raise OwnershipViolation("Wildcard tiles cannot be placed on a tree")
    if not placement.has_budget(kind, player.remaining_growth):
        raise BudgetExceeded(f"No growth left for a {kind.value} tile")
    if kind not in player.storage:
        raise OwnershipViolation(f"{player.name} has no {kind.value} tile in storage")

    placement.place(player.tree, kind, coord, player.remaining_growth)
    player.storage.remove(kind)

    reachable = player_reachable_goals(state, player)
    if reachable:
        state.phase = Phase.CLAIMING_GOALS
    elif state.phase == Phase.USING_HELPER and not _has_allowance(player):
        state.phase = Phase.TURN_END
    return reachable


def _has_allowance(player: Player) -> bool:
    return any(v > 0 for v in player.remaining_growth.values())


def player_reachable_goals(state: MatchState, player: Optional[Player] = None) -> Set[GoalTile]:
    player = player or state.active_player
    return reachable_goals(player.tree, state.goal_pool, player.renounced_goals)


def _check_goal(state: MatchState, player: Player, goal: GoalTile) -> None:
    if goal in player.claimed_goals or goal in player.renounced_goals:
        raise GoalAlreadyResolved(f"{player.name} already resolved {goal}")
    if goal not in state.goal_pool:
        raise GoalNotReachable(f"{goal} is not in the goal pool")
    if goal not in player_reachable_goals(state, player):
        raise GoalNotReachable(f"{player.name} does not meet {goal}")


def _after_goal(state: MatchState, player: Player) -> None:
    if player_reachable_goals(state, player):
        return
    if state.placement_phase == Phase.USING_HELPER:
        state.phase = Phase.USING_HELPER if _has_allowance(player) else Phase.TURN_END
    else:
        state.phase = Phase.CULTIVATE


def claim_goal(state: MatchState, goal: GoalTile) -> None:
    """Claim ``goal``; the other goals of its category are renounced."""
    _require_phase(state, "Claiming a goal", Phase.CLAIMING_GOALS)
    player = state.active_player
    _check_goal(state, player, goal)

    state.goal_pool.remove(goal)
    player.claimed_goals.append(goal)
    for other in goals_of_category(state.goal_pool, goal.category):
        if other not in player.renounced_goals:
            player.renounced_goals.append(other)
    logger.debug("%s claims %s", player.name, goal)
    _after_goal(state, player)


def renounce_goal(state: MatchState, goal: GoalTile) -> None:
    _require_phase(state, "Renouncing a goal", Phase.CLAIMING_GOALS)
    player = state.active_player
    _check_goal(state, player, goal)
    player.renounced_goals.append(goal)
    logger.debug("%s renounces %s", player.name, goal)
    _after_goal(state, player)


def discard_tiles(state: MatchState, kinds: Iterable[TileKind]) -> None:
    """Drop tiles from storage until it fits the capacity again."""
    _require_phase(state, "Discarding", Phase.DISCARDING)
    player = state.active_player
    kinds = list(kinds)
    if TileKind.WILDCARD in kinds:
        raise OwnershipViolation("Wildcard tiles are never stored")
    owned = Counter(player.storage)
    wanted = Counter(kinds)
    for kind, count in wanted.items():
        if owned[kind] < count:
            raise OwnershipViolation(f"{player.name} owns only {owned[kind]} {kind.value} tile(s)")
    if len(player.storage) - len(kinds) > player.max_capacity:
        raise CapacityStillExceeded(
            f"Storage would hold {len(player.storage) - len(kinds)} tiles, capacity is {player.max_capacity}"
        )
    for kind in kinds:
        player.storage.remove(kind)
    state.phase = Phase.TURN_END


def remove_tiles(state: MatchState, coords: Sequence[HexCoord]) -> None:
    _require_phase(state, "Removing tiles", Phase.REMOVE_TILES)
    removal.remove_tiles(state.active_player.tree, coords)
    state.phase = Phase.CHOOSE_ACTION


def end_turn(state: MatchState) -> Optional[Dict[str, Any]]:
    """Finish the active player's turn.

    Returns:
        The final scores when this ends the game, otherwise ``None``.
    """
    _require_phase(state, "Ending the turn", Phase.CULTIVATE, Phase.USING_HELPER, Phase.TURN_END)
    player = state.active_player
    state.phase = Phase.TURN_END
    if player.needs_to_discard():
        state.phase = Phase.DISCARDING
        return None

    player.remaining_growth = empty_growth()
    state.placement_phase = None
    state.resolving_card = None

    if not state.draw_pile:
        if state.final_player_index == state.active_player_index:
            state.phase = Phase.GAME_ENDED
            result = score_game(state)
            logger.info(
                "Game over: %s wins (%s)",
                result["winner"],
                ", ".join(f"{name}={b['total']}" for name, b in result["players"].items()),
            )
            return result
        if state.final_player_index is None:
            state.mark_final_player(state.active_player_index)
            logger.info("Draw pile exhausted, final round ends with %s", player.name)

    state.active_player_index = (state.active_player_index + 1) % len(state.players)
    state.phase = Phase.CHOOSE_ACTION
    logger.info("Turn passes to %s", state.active_player.name)
    return None


__all__ = [
    "CARD_RESOLVERS",
    "can_place_tile",
    "choose_tile",
    "claim_goal",
    "cultivate",
    "discard_tiles",
    "end_turn",
    "meditate",
    "place_tile",
    "player_reachable_goals",
    "remove_tiles",
    "renounce_goal",
    "resolve_card",
]
