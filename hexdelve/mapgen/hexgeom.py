"""Hex grid geometry helpers.

Coordinates are plain ``(x, y)`` tuples on a six-neighbor hex lattice. The
lattice is drawn in a fake-isometric projection, so four of the six
directions (the ones that are also taxicab steps) run along the visual wall
axes and the remaining two (North and South) run vertically on screen.
"""
from __future__ import annotations

from enum import Enum
from typing import Iterator, Tuple

Coord2D = Tuple[int, int]


class Dir6(Enum):
    NORTH = (-1, -1)
    NORTHEAST = (0, -1)
    SOUTHEAST = (1, 0)
    SOUTH = (1, 1)
    SOUTHWEST = (0, 1)
    NORTHWEST = (-1, 0)

    @property
    def vec(self) -> Coord2D:
        return self.value

    def is_fake_isometric(self) -> bool:
        return self not in (Dir6.NORTH, Dir6.SOUTH)


# Enum iteration follows definition order, keep an explicit tuple anyway so
# the expansion order used by the tunnel search is visible in one place.
DIRECTIONS6 = (
    Dir6.NORTH,
    Dir6.NORTHEAST,
    Dir6.SOUTHEAST,
    Dir6.SOUTH,
    Dir6.SOUTHWEST,
    Dir6.NORTHWEST,
)

TAXICAB_OFFSETS = ((0, -1), (1, 0), (0, 1), (-1, 0))


def add(a: Coord2D, b: Coord2D) -> Coord2D:
    return (a[0] + b[0], a[1] + b[1])


def sub(a: Coord2D, b: Coord2D) -> Coord2D:
    return (a[0] - b[0], a[1] - b[1])


def step(pos: Coord2D, d: Dir6) -> Coord2D:
    return (pos[0] + d.value[0], pos[1] + d.value[1])


def hex_neighbors(pos: Coord2D) -> Iterator[Coord2D]:
    x, y = pos
    for d in DIRECTIONS6:
        dx, dy = d.value
        yield (x + dx, y + dy)


def taxicab_neighbors(pos: Coord2D) -> Iterator[Coord2D]:
    """Neighbors along the four fake-isometric axes only."""
    x, y = pos
    for dx, dy in TAXICAB_OFFSETS:
        yield (x + dx, y + dy)


def hex_dist(v: Coord2D) -> int:
    """Length of vector ``v`` in hex steps."""
    x, y = v
    if (x >= 0) == (y >= 0):
        return max(abs(x), abs(y))
    return abs(x) + abs(y)


__all__ = [
    "Coord2D",
    "Dir6",
    "DIRECTIONS6",
    "add",
    "sub",
    "step",
    "hex_neighbors",
    "taxicab_neighbors",
    "hex_dist",
]
