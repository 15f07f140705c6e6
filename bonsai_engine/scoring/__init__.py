"""Endgame scoring."""

from .endgame import compute_player_score, rank_players, score_game

__all__ = ["compute_player_score", "rank_players", "score_game"]
