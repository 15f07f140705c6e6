"""Bonsai engine: rules, turn flow and scoring for the Bonsai tile-placement game."""

from importlib import import_module
from typing import Any

__version__ = "0.1.0"
__all__ = [
    "BonsaiGame",
    "SetupConfig",
    "PlayerSetup",
    "new_match",
    "HexCoord",
    "TileKind",
    "GoalCategory",
    "ParchmentCategory",
    "Phase",
    "PlayerType",
    "PlayerColor",
    "GoalTile",
    "Tree",
    "Player",
    "MatchState",
    "GrowthCard",
    "HelperCard",
    "MasterCard",
    "ParchmentCard",
    "ToolCard",
    "BonsaiRuleError",
    "score_game",
    "__version__",
]

_EXPORTS = {
    "BonsaiGame": ("rules.api", "BonsaiGame"),
    "SetupConfig": ("game_setup", "SetupConfig"),
    "PlayerSetup": ("game_setup", "PlayerSetup"),
    "new_match": ("game_setup", "new_match"),
    "HexCoord": ("map.coordinates", "HexCoord"),
    "TileKind": ("game_models", "TileKind"),
    "GoalCategory": ("game_models", "GoalCategory"),
    "ParchmentCategory": ("game_models", "ParchmentCategory"),
    "Phase": ("game_models", "Phase"),
    "PlayerType": ("game_models", "PlayerType"),
    "PlayerColor": ("game_models", "PlayerColor"),
    "GoalTile": ("game_models", "GoalTile"),
    "Tree": ("game_models", "Tree"),
    "Player": ("game_models", "Player"),
    "MatchState": ("game_models", "MatchState"),
    "GrowthCard": ("game_models", "GrowthCard"),
    "HelperCard": ("game_models", "HelperCard"),
    "MasterCard": ("game_models", "MasterCard"),
    "ParchmentCard": ("game_models", "ParchmentCard"),
    "ToolCard": ("game_models", "ToolCard"),
    "BonsaiRuleError": ("errors", "BonsaiRuleError"),
    "score_game": ("scoring.endgame", "score_game"),
}


def __getattr__(name: str) -> Any:
    if name in _EXPORTS:
        module_name, attr_name = _EXPORTS[name]
        module = import_module(f".{module_name}", __name__)
        attr = getattr(module, attr_name)
        globals()[name] = attr
        return attr
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


def __dir__() -> list[str]:
    return sorted(set(list(globals().keys()) + list(__all__)))
