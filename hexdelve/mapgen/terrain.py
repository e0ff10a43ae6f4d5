# Terrain constants centralized for modular imports
from __future__ import annotations

from enum import Enum
from typing import Dict, Optional, Tuple


class Terrain(Enum):
    EMPTY = "empty"
    GATE = "gate"
    GROUND = "ground"
    GRASS = "grass"
    SNOW = "snow"
    SAND = "sand"
    WATER = "water"
    SHALLOWS = "shallows"
    MAGMA = "magma"
    TREE = "tree"
    WALL = "wall"
    ROCK = "rock"
    DOOR = "door"
    OPEN_DOOR = "open_door"
    WINDOW = "window"
    PILLAR = "pillar"
    ENTRANCE = "entrance"
    EXIT = "exit"

    def blocks_walk(self) -> bool:
        return self in _BLOCKS_WALK

    def is_open(self) -> bool:
        return not self.blocks_walk()

    @classmethod
    def from_color(cls, rgb: Tuple[int, int, int]) -> Optional["Terrain"]:
        """Map an RGB bitmap pixel to terrain, None for unmapped colors."""
        return COLOR_TABLE.get(tuple(rgb[:3]))


_BLOCKS_WALK = frozenset(
    {
        Terrain.EMPTY,
        Terrain.WATER,
        Terrain.MAGMA,
        Terrain.TREE,
        Terrain.WALL,
        Terrain.ROCK,
        Terrain.WINDOW,
        Terrain.PILLAR,
    }
)

COLOR_TABLE: Dict[Tuple[int, int, int], Terrain] = {
    (192, 192, 192): Terrain.GROUND,
    (0, 128, 0): Terrain.GRASS,
    (255, 255, 255): Terrain.SNOW,
    (255, 255, 0): Terrain.SAND,
    (0, 0, 255): Terrain.WATER,
    (0, 128, 255): Terrain.SHALLOWS,
    (255, 0, 0): Terrain.MAGMA,
    (0, 64, 0): Terrain.TREE,
    (128, 128, 128): Terrain.WALL,
    (128, 64, 0): Terrain.ROCK,
    (128, 0, 128): Terrain.DOOR,
}

__all__ = ["Terrain", "COLOR_TABLE"]
