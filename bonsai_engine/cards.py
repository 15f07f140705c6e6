"""Card deck construction and the shared card market."""
from __future__ import annotations

import random
from typing import Any, Dict, List, Optional, Sequence

from .data.rules_loader import removed_card_ids
from .game_models import (
    Card,
    GrowthCard,
    HelperCard,
    MasterCard,
    MatchState,
    ParchmentCard,
    ParchmentCategory,
    TileKind,
    ToolCard,
)


def build_deck(rules: Dict[str, Any]) -> List[Card]:
    """Every card of the game in id order."""
    deck_data = rules["deck"]
    cards: List[Card] = []
    for entry in deck_data.get("growth", []):
        cards.append(GrowthCard(id=int(entry["id"]), tile=TileKind(entry["tile"])))
    for entry in deck_data.get("helper", []):
        cards.append(HelperCard(id=int(entry["id"]), tiles=tuple(TileKind(t) for t in entry["tiles"])))
    for entry in deck_data.get("master", []):
        cards.append(MasterCard(id=int(entry["id"]), tiles=tuple(TileKind(t) for t in entry["tiles"])))
    for entry in deck_data.get("parchment", []):
        cards.append(
            ParchmentCard(
                id=int(entry["id"]),
                points=int(entry["points"]),
                category=ParchmentCategory(entry["category"]),
            )
        )
    for entry in deck_data.get("tool", []):
        cards.append(ToolCard(id=int(entry["id"]), capacity_bonus=int(entry.get("capacity_bonus", 2))))
    cards.sort(key=lambda c: c.id)
    ids = [c.id for c in cards]
    if len(set(ids)) != len(ids):
        raise ValueError("Card ids in the rule data must be unique")
    return cards


def deck_for_players(rules: Dict[str, Any], num_players: int) -> List[Card]:
    """The deck with the cards removed for smaller player counts."""
    removed = set(removed_card_ids(rules, num_players))
    return [card for card in build_deck(rules) if card.id not in removed]


def shuffled_deck(
    rules: Dict[str, Any], num_players: int, rng: Optional[random.Random] = None
) -> List[Card]:
    deck = deck_for_players(rules, num_players)
    (rng or random.Random()).shuffle(deck)
    return deck


def cards_by_id(rules: Dict[str, Any], ids: Sequence[int]) -> List[Card]:
    """Resolve a predefined card order, e.g. one received from a host."""
    lookup = {card.id: card for card in build_deck(rules)}
    missing = [i for i in ids if i not in lookup]
    if missing:
        raise ValueError(f"Unknown card ids: {missing}")
    return [lookup[i] for i in ids]


def draw_card(state: MatchState) -> Optional[Card]:
    """Take the top card of the draw pile, ``None`` when it is exhausted."""
    if not state.draw_pile:
        return None
    return state.draw_pile.pop()


def take_from_market(state: MatchState, slot: int) -> Card:
    """Remove the card in ``slot`` and refill the market.

    The remaining cards keep their order and slide as far right as they can,
    then the first slot is refilled from the draw pile when possible.
    """
    card = state.center_cards[slot]
    if card is None:
        raise ValueError(f"Slot {slot} is empty")
    state.center_cards[slot] = None
    remaining = [c for c in state.center_cards if c is not None]
    width = len(state.center_cards)
    state.center_cards[:] = [None] * (width - len(remaining)) + remaining
    if state.draw_pile:
        state.center_cards[0] = draw_card(state)
    return card


__all__ = [
    "build_deck",
    "cards_by_id",
    "deck_for_players",
    "draw_card",
    "shuffled_deck",
    "take_from_market",
]
