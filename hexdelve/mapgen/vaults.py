"""Vault templates: rectangular rooms and hand-authored ASCII prefabs."""
from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Dict, Optional

from .cells import MapCell
from .grid import Grid
from .hexgeom import Coord2D
from .prefab import parse_vault
from .terrain import Terrain


class VaultCell(Enum):
    UNDIGGABLE_WALL = "undiggable_wall"
    DIGGABLE_WALL = "diggable_wall"
    INTERIOR = "interior"


def shape_to_grid(shape: Dict[Coord2D, VaultCell]) -> Grid:
    """Turn a vault shape into grid cells for placement testing and stamping."""
    ret = Grid()
    for p, kind in shape.items():
        if kind is VaultCell.UNDIGGABLE_WALL:
            ret.insert(p, MapCell(Terrain.WALL).undiggable().border())
        elif kind is VaultCell.DIGGABLE_WALL:
            ret.insert(p, MapCell(Terrain.WALL).border())
        else:
            ret.insert(p, MapCell(Terrain.GROUND).interior())
    return ret


class Vault(ABC):
    """Something a dungeon driver can place as a room."""

    name = "vault"
    # Prefab vaults carry their own terrain and spawns and are handed back to
    # the digger whole instead of as a plain chamber.
    is_prefab = False

    @abstractmethod
    def shape(self) -> Dict[Coord2D, VaultCell]: ...

    def to_grid(self) -> Grid:
        return shape_to_grid(self.shape())


class Room(Vault):
    """Rectangular room of ``width`` x ``height`` floor cells inside a wall ring."""

    name = "room"

    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height

    @classmethod
    def rand(cls, rng, lo: int = 3, hi: int = 7) -> "Room":
        return cls(rng.randint(lo, hi), rng.randint(lo, hi))

    def shape(self) -> Dict[Coord2D, VaultCell]:
        ret = {}
        for y in range(-1, self.height + 1):
            for x in range(-1, self.width + 1):
                x_wall = x in (-1, self.width)
                y_wall = y in (-1, self.height)
                if x_wall and y_wall:
                    ret[(x, y)] = VaultCell.UNDIGGABLE_WALL
                elif x_wall or y_wall:
                    ret[(x, y)] = VaultCell.DIGGABLE_WALL
                else:
                    ret[(x, y)] = VaultCell.INTERIOR
        return ret

    def __repr__(self):
        return f"Room({self.width}x{self.height})"


class TextVault(Vault):
    """Vault parsed from the ASCII glyph grammar in ``prefab``."""

    is_prefab = True

    def __init__(self, name: str, text: str):
        self.name = name
        self.text = text
        self._grid: Optional[Grid] = None

    def to_grid(self) -> Grid:
        if self._grid is None:
            self._grid = parse_vault(self.text)
        return self._grid

    def shape(self) -> Dict[Coord2D, VaultCell]:
        ret = {}
        for p, c in self.to_grid().items():
            if c.is_bumper():
                continue
            if c.is_border():
                ret[p] = VaultCell.DIGGABLE_WALL if c.can_dig else VaultCell.UNDIGGABLE_WALL
            else:
                ret[p] = VaultCell.INTERIOR
        return ret

    def __repr__(self):
        return f"TextVault({self.name!r})"


PILLAR_HALL = TextVault(
    "pillar_hall",
    """
           _
    #######+#
    #.......#
    #.I.I.I.#
    #.......#
    #+#######
     _
    """,
)

FLOODED_SHRINE = TextVault(
    "flooded_shrine",
    """
     _
    #+#####
    #.....#
    #.~~~.#
    #.~I~.#
    #.~~~.#
    #.....#
    #####+#
         _
    """,
)

# The middle floor cell is walled in by undiggable rock and stays an
# unreachable pocket.
SEALED_CRYPT = TextVault(
    "sealed_crypt",
    """
       _
    ###+###
    #.....#
    #.%%%.#
    #.%.%.#
    #.%%%.#
    #.....#
    #######
    """,
)

MONSTER_DEN = TextVault(
    "monster_den",
    """
      _
    ##+##
    #...#
    #.a.#
    #...#
    ##+##
      _
    """,
)

VAULT_LIBRARY = (PILLAR_HALL, FLOODED_SHRINE, SEALED_CRYPT, MONSTER_DEN)

__all__ = [
    "VaultCell",
    "Vault",
    "Room",
    "TextVault",
    "shape_to_grid",
    "VAULT_LIBRARY",
    "PILLAR_HALL",
    "FLOODED_SHRINE",
    "SEALED_CRYPT",
    "MONSTER_DEN",
]
