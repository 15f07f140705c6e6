from __future__ import annotations
import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple, Union

from .map.coordinates import ORIGIN, HexCoord, neighbors


class TileKind(str, Enum):
    WOOD = "wood"
    LEAF = "leaf"
    FLOWER = "flower"
    FRUIT = "fruit"
    WILDCARD = "wildcard"  # budget bucket / card wildcard, never placed


PLACEABLE_KINDS: Tuple[TileKind, ...] = (
    TileKind.WOOD,
    TileKind.LEAF,
    TileKind.FLOWER,
    TileKind.FRUIT,
)


class GoalCategory(str, Enum):
    WOOD = "wood"
    LEAF = "leaf"
    FLOWER = "flower"
    FRUIT = "fruit"
    POSITION = "position"


class ParchmentCategory(str, Enum):
    WOOD = "wood"
    LEAF = "leaf"
    FLOWER = "flower"
    FRUIT = "fruit"
    HELPER = "helper"
    MASTER = "master"
    GROWTH = "growth"


class Phase(str, Enum):
    CHOOSE_ACTION = "CHOOSE_ACTION"
    MEDITATE = "MEDITATE"
    CHOOSING_SECOND_TILE = "CHOOSING_SECOND_TILE"
    USING_MASTER = "USING_MASTER"
    USING_HELPER = "USING_HELPER"
    CULTIVATE = "CULTIVATE"
    CLAIMING_GOALS = "CLAIMING_GOALS"
    REMOVE_TILES = "REMOVE_TILES"
    DISCARDING = "DISCARDING"
    TURN_END = "TURN_END"
    GAME_ENDED = "GAME_ENDED"


class PlayerType(str, Enum):
    LOCAL = "local"
    ONLINE = "online"
    EASY_BOT = "easy_bot"
    HARD_BOT = "hard_bot"


class PlayerColor(str, Enum):
    RED = "red"
    BLUE = "blue"
    BLACK = "black"
    PURPLE = "purple"


# ---------------------------------------------------------------------------
# Cards
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class GrowthCard:
    id: int
    tile: TileKind


@dataclass(frozen=True)
class HelperCard:
    id: int
    tiles: Tuple[TileKind, ...]


@dataclass(frozen=True)
class MasterCard:
    id: int
    tiles: Tuple[TileKind, ...]


@dataclass(frozen=True)
class ParchmentCard:
    id: int
    points: int
    category: ParchmentCategory


@dataclass(frozen=True)
class ToolCard:
    id: int
    capacity_bonus: int = 2


Card = Union[GrowthCard, HelperCard, MasterCard, ParchmentCard, ToolCard]

CARD_TAGS: Dict[str, type] = {
    "growth": GrowthCard,
    "helper": HelperCard,
    "master": MasterCard,
    "parchment": ParchmentCard,
    "tool": ToolCard,
}


def card_tag(card: Card) -> str:
    for tag, cls in CARD_TAGS.items():
        if type(card) is cls:
            return tag
    raise TypeError(f"Unknown card type: {type(card).__name__}")


def card_to_dict(card: Card) -> Dict[str, Any]:
    tag = card_tag(card)
    out: Dict[str, Any] = {"card": tag, "id": card.id}
    if isinstance(card, GrowthCard):
        out["tile"] = card.tile.value
    elif isinstance(card, (HelperCard, MasterCard)):
        out["tiles"] = [t.value for t in card.tiles]
    elif isinstance(card, ParchmentCard):
        out["points"] = card.points
        out["category"] = card.category.value
    elif isinstance(card, ToolCard):
        out["capacity_bonus"] = card.capacity_bonus
    return out


def card_from_dict(data: Dict[str, Any]) -> Card:
    tag = data.get("card")
    if tag not in CARD_TAGS:
        raise ValueError(f"Unknown card tag: {tag!r}")
    card_id = int(data["id"])
    if tag == "growth":
        return GrowthCard(id=card_id, tile=TileKind(data["tile"]))
    if tag == "helper":
        return HelperCard(id=card_id, tiles=tuple(TileKind(t) for t in data["tiles"]))
    if tag == "master":
        return MasterCard(id=card_id, tiles=tuple(TileKind(t) for t in data["tiles"]))
    if tag == "parchment":
        return ParchmentCard(
            id=card_id,
            points=int(data["points"]),
            category=ParchmentCategory(data["category"]),
        )
    return ToolCard(id=card_id, capacity_bonus=int(data.get("capacity_bonus", 2)))


def _optional_card_from_dict(data: Optional[Dict[str, Any]]) -> Optional[Card]:
    return None if data is None else card_from_dict(data)


def _optional_card_to_dict(card: Optional[Card]) -> Optional[Dict[str, Any]]:
    return None if card is None else card_to_dict(card)


# ---------------------------------------------------------------------------
# Goals and trees
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class GoalTile:
    points: int
    threshold: int
    category: GoalCategory

    def to_dict(self) -> Dict[str, Any]:
        return {"points": self.points, "threshold": self.threshold, "category": self.category.value}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GoalTile":
        return cls(
            points=int(data["points"]),
            threshold=int(data["threshold"]),
            category=GoalCategory(data["category"]),
        )


@dataclass
class Tree:
    """Tiles placed by one player, keyed by cell.

    The seed bud (a wood tile at the origin) is part of every tree.
    """

    tiles: Dict[HexCoord, TileKind] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.tiles.setdefault(ORIGIN, TileKind.WOOD)

    def get(self, coord: HexCoord) -> Optional[TileKind]:
        return self.tiles.get(coord)

    def __contains__(self, coord: object) -> bool:
        return coord in self.tiles

    def __iter__(self) -> Iterator[HexCoord]:
        return iter(self.tiles)

    def __len__(self) -> int:
        return len(self.tiles)

    def items(self) -> Iterable[Tuple[HexCoord, TileKind]]:
        return self.tiles.items()

    def neighbor_kinds(self, coord: HexCoord) -> List[Optional[TileKind]]:
        """Kinds around ``coord`` in direction order, ``None`` for empty cells."""
        return [self.tiles.get(n) for n in neighbors(coord)]

    def occupied_neighbors(self, coord: HexCoord) -> List[TileKind]:
        return [k for k in self.neighbor_kinds(coord) if k is not None]

    def count(self, kind: TileKind) -> int:
        return sum(1 for k in self.tiles.values() if k == kind)

    def without(self, coords: Iterable[HexCoord]) -> "Tree":
        """Return a copy of the tree with ``coords`` removed."""
        removed = set(coords)
        return Tree({c: k for c, k in self.tiles.items() if c not in removed})

    def to_list(self) -> List[Dict[str, Any]]:
        return [
            {"q": c.q, "r": c.r, "kind": k.value}
            for c, k in sorted(self.tiles.items(), key=lambda item: (item[0].r, item[0].q))
        ]

    @classmethod
    def from_list(cls, data: Iterable[Dict[str, Any]]) -> "Tree":
        return cls({HexCoord(int(d["q"]), int(d["r"])): TileKind(d["kind"]) for d in data})


# ---------------------------------------------------------------------------
# Players and match
# ---------------------------------------------------------------------------

def _default_growth_limit() -> Dict[TileKind, int]:
    return {
        TileKind.WOOD: 1,
        TileKind.LEAF: 1,
        TileKind.FLOWER: 0,
        TileKind.FRUIT: 0,
        TileKind.WILDCARD: 1,
    }


def empty_growth() -> Dict[TileKind, int]:
    return {kind: 0 for kind in TileKind}


@dataclass
class Player:
    name: str
    color: PlayerColor
    player_type: PlayerType = PlayerType.LOCAL
    storage: List[TileKind] = field(default_factory=list)
    max_capacity: int = 5
    growth_limit: Dict[TileKind, int] = field(default_factory=_default_growth_limit)
    remaining_growth: Dict[TileKind, int] = field(default_factory=empty_growth)
    tree: Tree = field(default_factory=Tree)
    discard_pile: List[Card] = field(default_factory=list)
    growth_card_pile: List[GrowthCard] = field(default_factory=list)
    tool_card_pile: List[ToolCard] = field(default_factory=list)
    claimed_goals: List[GoalTile] = field(default_factory=list)
    renounced_goals: List[GoalTile] = field(default_factory=list)

    def needs_to_discard(self) -> bool:
        return len(self.storage) > self.max_capacity

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "color": self.color.value,
            "player_type": self.player_type.value,
            "storage": [t.value for t in self.storage],
            "max_capacity": self.max_capacity,
            "growth_limit": {k.value: v for k, v in self.growth_limit.items()},
            "remaining_growth": {k.value: v for k, v in self.remaining_growth.items()},
            "tree": self.tree.to_list(),
            "discard_pile": [card_to_dict(c) for c in self.discard_pile],
            "growth_card_pile": [card_to_dict(c) for c in self.growth_card_pile],
            "tool_card_pile": [card_to_dict(c) for c in self.tool_card_pile],
            "claimed_goals": [g.to_dict() for g in self.claimed_goals],
            "renounced_goals": [g.to_dict() for g in self.renounced_goals],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Player":
        player = cls(
            name=data["name"],
            color=PlayerColor(data["color"]),
            player_type=PlayerType(data.get("player_type", PlayerType.LOCAL.value)),
        )
        player.storage = [TileKind(t) for t in data.get("storage", [])]
        player.max_capacity = int(data.get("max_capacity", player.max_capacity))
        if "growth_limit" in data:
            player.growth_limit = {TileKind(k): int(v) for k, v in data["growth_limit"].items()}
        if "remaining_growth" in data:
            player.remaining_growth = {TileKind(k): int(v) for k, v in data["remaining_growth"].items()}
        player.tree = Tree.from_list(data.get("tree", []))
        player.discard_pile = [card_from_dict(c) for c in data.get("discard_pile", [])]
        player.growth_card_pile = [card_from_dict(c) for c in data.get("growth_card_pile", [])]
        player.tool_card_pile = [card_from_dict(c) for c in data.get("tool_card_pile", [])]
        player.claimed_goals = [GoalTile.from_dict(g) for g in data.get("claimed_goals", [])]
        player.renounced_goals = [GoalTile.from_dict(g) for g in data.get("renounced_goals", [])]
        return player


CENTER_SLOTS = 4


@dataclass
class MatchState:
    players: List[Player] = field(default_factory=list)
    active_player_index: int = 0
    center_cards: List[Optional[Card]] = field(default_factory=lambda: [None] * CENTER_SLOTS)
    draw_pile: List[Card] = field(default_factory=list)  # drawn from the tail
    goal_pool: List[GoalTile] = field(default_factory=list)
    phase: Phase = Phase.CHOOSE_ACTION
    last_round: bool = False
    final_player_index: Optional[int] = None
    resolving_card: Optional[Card] = None
    placement_phase: Optional[Phase] = None
    pending_master_choices: int = 0

    def __post_init__(self) -> None:
        if self.players and not 2 <= len(self.players) <= 4:
            raise ValueError(f"A match needs 2-4 players, got {len(self.players)}")
        if len(self.center_cards) != CENTER_SLOTS:
            raise ValueError(f"Expected {CENTER_SLOTS} center slots, got {len(self.center_cards)}")

    @property
    def active_player(self) -> Player:
        return self.players[self.active_player_index]

    def mark_final_player(self, index: int) -> None:
        """Record who triggered the final round; both flags are write-once."""
        if self.final_player_index is not None:
            raise ValueError(f"Final player already set to {self.final_player_index}")
        if not 0 <= index < len(self.players):
            raise ValueError(f"No player at index {index}")
        self.final_player_index = index
        self.last_round = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "players": [p.to_dict() for p in self.players],
            "active_player_index": self.active_player_index,
            "center_cards": [_optional_card_to_dict(c) for c in self.center_cards],
            "draw_pile": [card_to_dict(c) for c in self.draw_pile],
            "goal_pool": [g.to_dict() for g in self.goal_pool],
            "phase": self.phase.value,
            "last_round": self.last_round,
            "final_player_index": self.final_player_index,
            "resolving_card": _optional_card_to_dict(self.resolving_card),
            "placement_phase": self.placement_phase.value if self.placement_phase else None,
            "pending_master_choices": self.pending_master_choices,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MatchState":
        placement_phase = data.get("placement_phase")
        return cls(
            players=[Player.from_dict(p) for p in data.get("players", [])],
            active_player_index=int(data.get("active_player_index", 0)),
            center_cards=[_optional_card_from_dict(c) for c in data.get("center_cards", [None] * CENTER_SLOTS)],
            draw_pile=[card_from_dict(c) for c in data.get("draw_pile", [])],
            goal_pool=[GoalTile.from_dict(g) for g in data.get("goal_pool", [])],
            phase=Phase(data.get("phase", Phase.CHOOSE_ACTION.value)),
            last_round=bool(data.get("last_round", False)),
            final_player_index=data.get("final_player_index"),
            resolving_card=_optional_card_from_dict(data.get("resolving_card")),
            placement_phase=Phase(placement_phase) if placement_phase else None,
            pending_master_choices=int(data.get("pending_master_choices", 0)),
        )

    @classmethod
    def from_json(cls, text: str) -> "MatchState":
        return cls.from_dict(json.loads(text))
