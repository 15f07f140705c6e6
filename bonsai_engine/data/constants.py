"""Victory point constants for Bonsai endgame scoring."""
from __future__ import annotations

LEAF_VP = 3
FRUIT_VP = 7
# A flower scores one point per empty cell around it.
FLOWER_SIDES = 6
