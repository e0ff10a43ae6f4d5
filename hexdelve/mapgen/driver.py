"""Dungeon driver protocol and the default rooms-and-tunnels driver.

A driver decides *where* to dig. It talks to whatever receives the layout
only through the ``Dungeon`` capability interface, in driver-local
coordinates, so the grid and connectivity machinery stays independent of the
world the result ends up in.

High-level phases of ``RoomsAndTunnels.dig``:
    * Start from a base grid covering the domain.
    * Stamp vaults sampled from the dungeon at random legal sites, tunneling
      each one into the layout so far and dropping any that cannot be
      reached. The layout stays one connected component (sealed vault
      pockets excepted).
    * Put up stairs in the upper wall of one room and down stairs in the
      lower wall of another.
    * Report vaults, chambers, corridors, doors and stairs to the dungeon.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Iterable, List, Tuple

from .errors import MapgenError
from .grid import Grid
from .hexgeom import Coord2D, add
from .terrain import Terrain
from .tunnels import join_disjoint_regions
from .vaults import Vault

logger = logging.getLogger(__name__)

# Stairs sit in a wall with the room floor one South step away (up stairs)
# or one North step away (down stairs) so the stair art lines up.
FRONT = (1, 1)


class Dungeon(ABC):
    """Capability interface a driver digs into."""

    @abstractmethod
    def sample_vault(self, rng) -> Vault: ...

    @abstractmethod
    def dig_chamber(self, points: Iterable[Coord2D]) -> None: ...

    @abstractmethod
    def dig_corridor(self, points: Iterable[Coord2D]) -> None: ...

    @abstractmethod
    def place_vault(self, vault: Vault, pos: Coord2D) -> None: ...

    @abstractmethod
    def add_door(self, pos: Coord2D) -> None: ...

    @abstractmethod
    def add_up_stairs(self, pos: Coord2D) -> None: ...

    @abstractmethod
    def add_down_stairs(self, pos: Coord2D) -> None: ...


class RoomsAndTunnels:
    """Scatter vaults over the domain, then tunnel them together."""

    def __init__(self, min_rooms: int = 6, max_rooms: int = 10):
        if min_rooms < 2 or max_rooms < min_rooms:
            raise ValueError(f"bad room count range {min_rooms}..{max_rooms}")
        self.min_rooms = min_rooms
        self.max_rooms = max_rooms

    def dig(self, rng, dungeon: Dungeon, domain: Iterable[Coord2D]) -> Grid:
        """Generate a layout over ``domain`` and report it to ``dungeon``.

        Returns the finished grid. Raises MapgenError when the layout cannot
        be completed; there is no retry with a different layout.
        """
        grid = Grid.new_base(domain)
        grid, placed = self._place_vaults(rng, dungeon, grid)

        joined = join_disjoint_regions(grid, rng)
        if joined is None:
            raise MapgenError("Could not tunnel all regions together")
        grid = joined

        up, down = self._place_stairs(rng, grid, placed)
        self._report(dungeon, grid, placed, up, down)
        return grid

    def _place_vaults(self, rng, dungeon: Dungeon, grid: Grid) -> Tuple[Grid, List[Tuple[Vault, Coord2D, Grid]]]:
        """Stamp vaults one at a time, tunneling each into the layout so far.

        A vault that cannot be joined (eg. its only doorway fused into a
        neighbor's undiggable corner) is dropped and the layout from before
        it is kept, so the returned grid is always one connected region.
        """
        target = rng.randint(self.min_rooms, self.max_rooms)
        placed = []
        for _ in range(target):
            vault = dungeon.sample_vault(rng)
            room = vault.to_grid()
            trial = grid.clone()
            offset = trial.place_room(rng, room)
            if offset is None:
                # Domain is full.
                break
            joined = join_disjoint_regions(trial, rng)
            if joined is None:
                logger.debug("dropping %r at %s, it cannot be tunneled into", vault, offset)
                continue
            grid = joined
            placed.append((vault, offset, room))
        logger.debug("placed %d/%d vaults", len(placed), target)
        if len(placed) < 2:
            raise MapgenError(f"Only {len(placed)} vaults fit in the domain")
        return grid, placed

    @staticmethod
    def _stairs_sites(grid: Grid, offset: Coord2D, room: Grid, floor_dir: int) -> List[Coord2D]:
        """Unpierced wall cells of one placed vault with floor on the given side."""
        ret = []
        for p, c in room.items():
            if not c.is_border():
                continue
            pos = add(offset, p)
            cell = grid.get(pos)
            if cell is None or cell.terrain is not Terrain.WALL:
                continue
            floor = grid.get((pos[0] + floor_dir * FRONT[0], pos[1] + floor_dir * FRONT[1]))
            if floor is None or not floor.is_interior() or not floor.is_walkable():
                continue
            if floor_dir < 0:
                # Down stairs get the cell behind them cleared, keep it off any path.
                behind = grid.get(add(pos, FRONT))
                if behind is None or behind.is_walkable():
                    continue
            ret.append(pos)
        return ret

    def _place_stairs(self, rng, grid: Grid, placed) -> Tuple[Coord2D, Coord2D]:
        ups = [(i, self._stairs_sites(grid, off, room, 1)) for i, (_, off, room) in enumerate(placed)]
        ups = [(i, s) for i, s in ups if s]
        if not ups:
            raise MapgenError("No site for up stairs")
        up_room, sites = rng.choice(ups)
        up = rng.choice(sites)

        downs = []
        for i, (_, off, room) in enumerate(placed):
            if i == up_room:
                continue
            sites = [p for p in self._stairs_sites(grid, off, room, -1) if p != up and add(p, FRONT) != up]
            if sites:
                downs.append(sites)
        if not downs:
            raise MapgenError("No site for down stairs")
        down = rng.choice(rng.choice(downs))

        grid.insert(up, grid[up].copy(terrain=Terrain.ENTRANCE))
        grid.insert(down, grid[down].copy(terrain=Terrain.EXIT))
        entrances, exits = grid.entrances(), grid.exits()
        if len(entrances) != 1 or len(exits) != 1:
            raise MapgenError(f"Expected one entrance and one exit, got {entrances} / {exits}")
        return entrances[0], exits[0]

    @staticmethod
    def _report(dungeon: Dungeon, grid: Grid, placed, up: Coord2D, down: Coord2D) -> None:
        for vault, offset, room in placed:
            if vault.is_prefab:
                dungeon.place_vault(vault, offset)
            else:
                chamber = [add(offset, p) for p, c in room.items() if c.is_interior() and c.is_walkable()]
                dungeon.dig_chamber(chamber)

        corridor = grid.find_positions(lambda _, c: c.vault_kind is None and c.is_walkable())
        if corridor:
            dungeon.dig_corridor(corridor)

        for pos in grid.find_positions(lambda _, c: c.is_border() and c.terrain is Terrain.DOOR):
            dungeon.add_door(pos)

        dungeon.add_up_stairs(up)
        dungeon.add_down_stairs(down)


__all__ = ["Dungeon", "RoomsAndTunnels"]
