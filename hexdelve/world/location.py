"""Unambiguous positions in the generated world."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Tuple

from hexdelve.mapgen.hexgeom import hex_neighbors

# Default sector dimensions; WorldConfig can override them per world.
SECTOR_WIDTH = 40
SECTOR_HEIGHT = 24


@dataclass(frozen=True, order=True)
class Location:
    x: int
    y: int
    z: int = 0

    def __add__(self, v: Tuple[int, int]) -> "Location":
        return Location(self.x + v[0], self.y + v[1], self.z)

    def __sub__(self, v: Tuple[int, int]) -> "Location":
        return Location(self.x - v[0], self.y - v[1], self.z)

    def v2_from(self, origin: "Location") -> Tuple[int, int]:
        """Planar offset from ``origin``; both must be on the same depth."""
        if origin.z != self.z:
            raise ValueError(f"{self} and {origin} are on different depths")
        return (self.x - origin.x, self.y - origin.y)

    def hex_neighbors(self) -> Iterator["Location"]:
        for x, y in hex_neighbors((self.x, self.y)):
            yield Location(x, y, self.z)

    def sector(self, width: int = SECTOR_WIDTH, height: int = SECTOR_HEIGHT) -> "Sector":
        return Sector(self.x // width, self.y // height, self.z, width, height)

    def to_list(self):
        return [self.x, self.y, self.z]


@dataclass(frozen=True, order=True)
class Sector:
    """Rectangular partition of one depth of the world grid."""

    x: int
    y: int
    z: int
    width: int = SECTOR_WIDTH
    height: int = SECTOR_HEIGHT

    def origin(self) -> Location:
        return Location(self.x * self.width, self.y * self.height, self.z)

    def iter(self) -> Iterator[Location]:
        o = self.origin()
        for y in range(self.height):
            for x in range(self.width):
                yield Location(o.x + x, o.y + y, self.z)

    def taxicab_distance(self, other: "Sector") -> int:
        return abs(self.x - other.x) + abs(self.y - other.y) + abs(self.z - other.z)


@dataclass(frozen=True)
class Portal:
    """One-way link, eg. a staircase."""

    origin: Location
    destination: Location


__all__ = ["Location", "Sector", "Portal", "SECTOR_WIDTH", "SECTOR_HEIGHT"]
