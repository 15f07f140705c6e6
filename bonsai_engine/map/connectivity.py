"""Connected regions of a tree."""
from __future__ import annotations

from collections import deque
from typing import Iterable, List, Set

from ..game_models import TileKind, Tree
from .coordinates import HexCoord, neighbors


def component(tree: Tree, start: HexCoord, kind: TileKind) -> Set[HexCoord]:
    """Flood fill the 6-connected region of ``kind`` tiles containing ``start``.

    Returns an empty set when ``start`` does not hold a ``kind`` tile.
    """
    if tree.get(start) != kind:
        return set()
    seen = {start}
    queue = deque([start])
    while queue:
        current = queue.popleft()
        for n in neighbors(current):
            if n not in seen and tree.get(n) == kind:
                seen.add(n)
                queue.append(n)
    return seen


def components(tree: Tree, kind: TileKind) -> List[Set[HexCoord]]:
    """All disjoint regions of ``kind`` tiles, largest first."""
    remaining = {c for c, k in tree.items() if k == kind}
    regions: List[Set[HexCoord]] = []
    while remaining:
        region = component(tree, next(iter(remaining)), kind)
        remaining -= region
        regions.append(region)
    regions.sort(key=len, reverse=True)
    return regions


def largest_component_size(tree: Tree, kind: TileKind) -> int:
    regions = components(tree, kind)
    return len(regions[0]) if regions else 0


def neighbors_of_kind(tree: Tree, coord: HexCoord, kinds: Iterable[TileKind]) -> List[HexCoord]:
    """Occupied neighbors of ``coord`` whose tile is one of ``kinds``."""
    wanted = set(kinds)
    return [n for n in neighbors(coord) if tree.get(n) in wanted]


__all__ = [
    "component",
    "components",
    "largest_component_size",
    "neighbors_of_kind",
]
