"""Loader for the packaged rule data in rules.yaml."""
from __future__ import annotations

import copy
import os
from functools import lru_cache
from typing import Any, Dict, List, Optional

import yaml

from ..config import _deep_merge
from ..game_models import GoalCategory, GoalTile, TileKind


def _yaml_path() -> str:
    """Get path to rules.yaml."""
    return os.path.abspath(os.path.join(os.path.dirname(__file__), "rules.yaml"))


@lru_cache()
def _load_packaged_rules() -> Dict[str, Any]:
    with open(_yaml_path(), "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_rules(overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Return the rule data, with ``overrides`` merged over the packaged values.

    Args:
        overrides: Partial rule mapping, usually the ``rules`` section of the
            merged configuration

    Returns:
        A fresh dictionary the caller may modify
    """
    rules = copy.deepcopy(_load_packaged_rules())
    if overrides:
        rules = _deep_merge(rules, overrides)
    return rules


def goal_tiles(rules: Dict[str, Any], category: GoalCategory) -> List[GoalTile]:
    """The three tiers of ``category``, lowest threshold first."""
    tiers = rules["goal_tiers"][category.value]
    tiles = [
        GoalTile(points=int(t["points"]), threshold=int(t["threshold"]), category=category)
        for t in tiers
    ]
    return sorted(tiles, key=lambda g: g.threshold)


def goal_categories_per_match(rules: Dict[str, Any]) -> int:
    return int(rules.get("goal_categories_per_match", 3))


def growth_limit(rules: Dict[str, Any]) -> Dict[TileKind, int]:
    limits = {kind: 0 for kind in TileKind}
    for key, value in rules["starting_growth_limit"].items():
        limits[TileKind(key)] = int(value)
    return limits


def removed_card_ids(rules: Dict[str, Any], num_players: int) -> List[int]:
    table = rules.get("removed_cards", {})
    # YAML keys may arrive as ints or strings depending on the source
    ids = table.get(num_players, table.get(str(num_players), []))
    return [int(i) for i in ids]


__all__ = ["goal_categories_per_match", "goal_tiles", "growth_limit", "load_rules", "removed_card_ids"]
