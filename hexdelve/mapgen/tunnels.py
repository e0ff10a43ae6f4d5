"""Tunnel digging and connectivity repair.

Digging one cell changes what may legally be dug next (a new opening can
breach a neighboring wall or put two doors side by side), so the tunnel
search keeps a whole grid snapshot per frontier node instead of a position
plus a visited set.
"""
from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Set

from .cells import MapCell
from .errors import MapgenError
from .grid import Grid
from .hexgeom import DIRECTIONS6, Coord2D, Dir6, add, hex_dist, hex_neighbors, step, sub
from .regions import separate_regions
from .terrain import Terrain

logger = logging.getLogger(__name__)

# Cells flanking a dig in each direction. Digging is refused if any of them
# is already open, since the new opening would visually breach a side wall
# in the fake-isometric projection. North and South use a stricter hex
# footprint because they are not wall axes.
SIDE_WALL_OFFSETS: Dict[Dir6, tuple] = {
    Dir6.NORTH: ((-1, 0), (0, -1), (-2, -1), (-1, -2)),
    Dir6.NORTHEAST: ((-1, -1), (1, -1)),
    Dir6.SOUTHEAST: ((1, -1), (1, 1)),
    Dir6.SOUTH: ((1, 0), (0, 1), (2, 1), (1, 2)),
    Dir6.SOUTHWEST: ((-1, 1), (1, 1)),
    Dir6.NORTHWEST: ((-1, -1), (-1, 1)),
}


def _walkable(grid: Grid, pos: Coord2D) -> bool:
    c = grid.get(pos)
    return c is not None and c.is_walkable()


def can_tunnel(grid: Grid, pos: Coord2D, d: Dir6) -> bool:
    """Return whether a tunnel may continue from ``pos`` into ``pos + d``.

    Also true when the target is already open and needs no digging.
    """
    target_pos = step(pos, d)
    target = grid.get(target_pos)

    if target is not None and target.is_walkable():
        return True

    if target is None or not target.can_dig or target.is_interior():
        # Outside the map, undiggable, or sealed vault interior.
        return False

    for off in SIDE_WALL_OFFSETS[d]:
        if _walkable(grid, add(pos, off)):
            return False

    if target.is_border():
        if not d.is_fake_isometric():
            return False
        # No new door next to an existing door.
        for n in hex_neighbors(target_pos):
            c = grid.get(n)
            if c is not None and c.is_border() and c.is_walkable():
                return False

    current = grid.get(pos)
    if current is not None and current.is_border() and not d.is_fake_isometric():
        # Leaving a vault only along its door axis.
        return False

    return True


def dig(grid: Grid, pos: Coord2D) -> None:
    """Dig one tunnel cell in place.

    Open cells and vault interiors are left alone; the tunnel may pass
    through them but the vault itself takes care of their connectivity.
    Raises MapgenError on an undiggable cell.
    """
    existing = grid.get(pos)
    if existing is None:
        return
    if existing.is_walkable() or existing.is_interior():
        return
    if not existing.can_dig:
        raise MapgenError(f"Digging undiggable cell at {pos}")
    if existing.is_border():
        grid.insert(pos, existing.to_door())
    else:
        grid.insert(pos, MapCell(Terrain.GROUND))


def _is_vault_exterior(grid: Grid, pos: Coord2D) -> bool:
    c = grid.get(pos)
    return c is not None and c.vault_kind is None


def is_interior_bubble(grid: Grid, points: Iterable[Coord2D]) -> bool:
    """Return whether a connected point set is a sealed vault pocket.

    A bubble lies entirely inside vaults and is entirely surrounded by vault
    cells that cannot be dug through. Such decorative chambers are expected
    to be unreachable and are left out of connectivity repair.
    """
    for p in points:
        if _is_vault_exterior(grid, p):
            return False
        for n in hex_neighbors(p):
            if _is_vault_exterior(grid, n):
                return False
            c = grid.get(n)
            if c is not None and c.can_dig:
                return False
    return True


def walkable_regions(grid: Grid) -> List[List[Coord2D]]:
    """Connected walkable regions, interior bubbles excluded."""
    return [r for r in separate_regions(grid.walkable_points()) if not is_interior_bubble(grid, r)]


def find_tunnel(grid: Grid, p1: Coord2D, p2: Coord2D) -> Optional[Grid]:
    """Search for a legal tunnel from ``p1`` to ``p2``.

    Returns a copy of the grid with the tunnel dug, or None.
    """
    seed = grid.clone()
    dig(seed, p1)
    open_set: Dict[Coord2D, Grid] = {p1: seed}
    closed: Set[Coord2D] = set()

    while open_set:
        # Closest to target first, ties broken by coordinate so the pick does
        # not depend on dict order.
        p = min(open_set, key=lambda v: (hex_dist(sub(v, p2)), v))
        snapshot = open_set.pop(p)

        for d in DIRECTIONS6:
            q = step(p, d)
            if q in closed:
                continue
            if can_tunnel(snapshot, p, d):
                new_map = snapshot.clone()
                dig(new_map, q)
                if q == p2:
                    return new_map
                open_set[q] = new_map

        closed.add(p)

    logger.debug("no tunnel from %s to %s", p1, p2)
    return None


def join_disjoint_regions(grid: Grid, rng) -> Optional[Grid]:
    """Tunnel between walkable regions until at most one remains.

    Returns a new connected grid, or None if some pair of regions cannot be
    joined. The input grid is not modified.
    """
    ret = grid.clone()
    while True:
        regions = walkable_regions(ret)
        if len(regions) < 2:
            return ret

        p1 = rng.choice(regions[0])
        p2 = rng.choice(regions[1])

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("merging %d disjoint regions (%s -> %s):\n%s", len(regions), p1, p2, ret.to_text())

        connected = find_tunnel(ret, p1, p2)
        if connected is None:
            return None
        ret = connected


__all__ = [
    "SIDE_WALL_OFFSETS",
    "can_tunnel",
    "dig",
    "is_interior_bubble",
    "walkable_regions",
    "find_tunnel",
    "join_disjoint_regions",
]
