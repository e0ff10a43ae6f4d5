"""Sparse hex grid used during map generation.

NOTE ON STABLE ORDER

The grid is backed by a dict so membership tests stay O(1), but generation
must introduce no randomness other than what comes in through the explicit
``rng`` argument. Every public method that selects or lists positions out of
the dict sorts them by ``(x, y)`` before returning, so results are a pure
function of grid contents.
"""
from __future__ import annotations

import logging
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Tuple

from .cells import MapCell
from .errors import MapgenError
from .hexgeom import Coord2D, add, hex_neighbors, taxicab_neighbors
from .terrain import Terrain

logger = logging.getLogger(__name__)


class Grid:
    """Coordinate -> MapCell store.

    An absent coordinate is *undefined* (outside the generated structure),
    which is different from a cell holding ``Terrain.EMPTY``.
    """

    __slots__ = ("_cells",)

    def __init__(self, cells: Optional[Dict[Coord2D, MapCell]] = None):
        self._cells: Dict[Coord2D, MapCell] = dict(cells) if cells else {}

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------
    @classmethod
    def new_base(cls, points: Iterable[Coord2D]) -> "Grid":
        """Grid with a default (diggable, empty) cell at every point."""
        ret = cls()
        for p in points:
            ret.insert(p, MapCell())
        return ret

    @classmethod
    def from_text(cls, text: str) -> "Grid":
        """Parse an ASCII vault template, see ``prefab.parse_vault``."""
        from .prefab import parse_vault

        return parse_vault(text)

    @classmethod
    def new_plain_room(cls, rng) -> "Grid":
        """Random rectangular room: Ground interior inside a Wall border ring.

        Ring corners are undiggable so doors are never punched diagonally
        into a room.
        """
        w, h = rng.randint(2, 7), rng.randint(2, 7)
        ret = cls()
        for y in range(-1, h + 1):
            for x in range(-1, w + 1):
                x_wall = x in (-1, w)
                y_wall = y in (-1, h)
                if x_wall and y_wall:
                    ret.insert((x, y), MapCell(Terrain.WALL).undiggable().border())
                elif x_wall or y_wall:
                    ret.insert((x, y), MapCell(Terrain.WALL).border())
                else:
                    ret.insert((x, y), MapCell(Terrain.GROUND).interior())
        return ret

    def clone(self) -> "Grid":
        # Cells are replaced, never mutated, once inserted; a shallow copy is
        # an independent snapshot.
        return Grid(self._cells)

    # ------------------------------------------------------------------
    # Primitive access
    # ------------------------------------------------------------------
    def insert(self, pos: Coord2D, cell: MapCell) -> None:
        self._cells[pos] = cell

    def get(self, pos: Coord2D) -> Optional[MapCell]:
        return self._cells.get(pos)

    def contains(self, pos: Coord2D) -> bool:
        return pos in self._cells

    def push_spawn(self, pos: Coord2D, spawn: str) -> None:
        """Queue an entity spawn on an existing cell."""
        cell = self._cells[pos]
        self._cells[pos] = cell.copy(spawns=cell.spawns + [spawn])

    def __contains__(self, pos) -> bool:
        return pos in self._cells

    def __getitem__(self, pos: Coord2D) -> MapCell:
        return self._cells[pos]

    def __len__(self) -> int:
        return len(self._cells)

    def __eq__(self, other):
        if not isinstance(other, Grid):
            return NotImplemented
        return self._cells == other._cells

    def items(self) -> List[Tuple[Coord2D, MapCell]]:
        """All cells in (x, y) order."""
        return sorted(self._cells.items(), key=lambda kv: kv[0])

    def __iter__(self) -> Iterator[Coord2D]:
        return iter(sorted(self._cells))

    # ------------------------------------------------------------------
    # Deterministic queries
    # ------------------------------------------------------------------
    def find_positions(self, pred: Callable[[Coord2D, MapCell], bool]) -> List[Coord2D]:
        """Positions whose cell satisfies ``pred``, sorted by (x, y)."""
        ret = [pos for pos, c in self._cells.items() if pred(pos, c)]
        ret.sort()
        return ret

    def room_positions(self, room: "Grid") -> List[Coord2D]:
        """Offsets where ``room`` could be legally placed, sorted."""
        return self.find_positions(lambda p, _: self.is_valid_placement(p, room))

    def entrances(self) -> List[Coord2D]:
        return self.find_positions(lambda _, c: c.terrain is Terrain.ENTRANCE)

    def exits(self) -> List[Coord2D]:
        return self.find_positions(lambda _, c: c.terrain is Terrain.EXIT)

    def open_ground(self) -> List[Coord2D]:
        return self.find_positions(lambda _, c: c.is_walkable() and not c.is_border())

    def walkable_points(self) -> List[Coord2D]:
        return self.find_positions(lambda _, c: c.is_walkable())

    # ------------------------------------------------------------------
    # Vault placement
    # ------------------------------------------------------------------
    def is_valid_placement(self, offset: Coord2D, room: "Grid") -> bool:
        """Return whether ``room`` may be stamped at ``offset``.

        Each room cell is judged independently against the current grid, so
        the order the cells are visited in does not change the outcome.
        """
        cells = self._cells
        for p, c in room._cells.items():
            pos = (offset[0] + p[0], offset[1] + p[1])
            existing = cells.get(pos)

            if existing is None:
                if c.is_walkable() or c.is_bumper():
                    # Walkable terrain or a bumper shim outside the domain.
                    return False
                continue

            if existing.is_interior():
                return False

            if c.is_interior() and not existing.can_dig:
                return False

            if not c.is_border():
                continue

            if existing.is_border():
                # Borders can fuse, but only when they are the same kind of wall.
                if existing.terrain is not c.terrain:
                    return False
            else:
                # Fake-isometric walls only touch along the four wall axes.
                for n in taxicab_neighbors(p):
                    if n in room._cells:
                        continue
                    other = cells.get(add(offset, n))
                    if other is not None and other.is_border():
                        return False

            if existing.is_walkable() and c.can_dig:
                # This border turns into a door, make sure it gets no door neighbor.
                for n in hex_neighbors(p):
                    rc = room._cells.get(n)
                    if rc is None or not (rc.is_border() and rc.can_dig):
                        continue
                    wc = cells.get(add(offset, n))
                    if wc is not None and wc.is_walkable():
                        return False

        return True

    def place_room_at(self, offset: Coord2D, room: "Grid") -> None:
        """Stamp ``room`` onto the grid at ``offset``."""
        if not self.is_valid_placement(offset, room):
            raise MapgenError(f"Invalid vault placement at {offset}")

        for p, c in room._cells.items():
            if c.is_bumper():
                continue
            pos = add(offset, p)
            existing = self._cells.get(pos)
            if existing is not None:
                if existing.is_walkable() and c.is_border() and c.can_dig:
                    # Border dropped on a dug tunnel becomes a doorway.
                    c = c.to_door()
                if not existing.can_dig:
                    c = c.undiggable()
            self._cells[pos] = c

    def place_room(self, rng, room: "Grid") -> Optional[Coord2D]:
        """Place ``room`` at a random legal site.

        Returns the chosen offset, or None when no legal site is left.
        """
        sites = self.room_positions(room)
        if not sites:
            logger.debug("no site left for a %d-cell vault", len(room))
            return None
        offset = rng.choice(sites)
        self.place_room_at(offset, room)
        return offset

    def to_text(self) -> str:
        from .prefab import render_text

        return render_text(self)

    def __repr__(self):
        return f"<Grid cells={len(self._cells)}>"


__all__ = ["Grid"]
