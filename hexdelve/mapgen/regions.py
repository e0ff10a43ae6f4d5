"""Connected-component analysis over hex coordinates.

Results never depend on set iteration order: each region is sorted and the
list of regions is sorted before it is returned.
"""
from __future__ import annotations

from collections import deque
from typing import Iterable, List, Set

from .hexgeom import Coord2D, hex_neighbors


def flood_fill(points: Set[Coord2D], seed: Coord2D) -> Set[Coord2D]:
    """Return the subset of ``points`` hex-connected to ``seed``."""
    if seed not in points:
        return set()
    q = deque([seed])
    vis = {seed}
    while q:
        pos = q.popleft()
        for p in hex_neighbors(pos):
            if p in points and p not in vis:
                vis.add(p)
                q.append(p)
    return vis


def separate_regions(points: Iterable[Coord2D]) -> List[List[Coord2D]]:
    """Split a point cloud into connected regions, in stable order."""
    remaining = set(points)
    regions: List[List[Coord2D]] = []
    while remaining:
        seed = min(remaining)
        subset = flood_fill(remaining, seed)
        remaining -= subset
        regions.append(sorted(subset))
    regions.sort()
    return regions


__all__ = ["flood_fill", "separate_regions"]
