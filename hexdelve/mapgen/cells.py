from __future__ import annotations

from enum import Enum
from typing import List, Optional

from .terrain import Terrain


class VaultKind(Enum):
    """Where a cell sits inside a placed vault.

    INTERIOR cells can be walked through from vault edge to vault edge but
    must never be overwritten by later placements. BORDER cells are the wall
    shell; a diggable border cell is a potential doorway, and two vaults'
    borders may only touch by overlapping.
    """

    INTERIOR = "interior"
    BORDER = "border"


class MapCell:
    """Terrain cell used during map generation.

    Cells are treated as values once inserted into a grid: operations that
    change a cell build a new one (see ``copy``) so grid snapshots can share
    cell objects.
    """

    __slots__ = ("terrain", "spawns", "can_dig", "vault_kind")

    def __init__(
        self,
        terrain: Terrain = Terrain.EMPTY,
        spawns: Optional[List[str]] = None,
        can_dig: bool = True,
        vault_kind: Optional[VaultKind] = None,
    ):
        self.terrain = terrain
        self.spawns = list(spawns) if spawns else []
        self.can_dig = can_dig
        self.vault_kind = vault_kind

    @classmethod
    def new_terrain(cls, terrain: Terrain) -> "MapCell":
        return cls(terrain)

    @classmethod
    def new_bumper(cls) -> "MapCell":
        return cls()

    def copy(self, **changes) -> "MapCell":
        ret = MapCell(self.terrain, self.spawns, self.can_dig, self.vault_kind)
        for k, v in changes.items():
            setattr(ret, k, v)
        return ret

    def is_walkable(self) -> bool:
        return not self.terrain.blocks_walk()

    def is_border(self) -> bool:
        return self.vault_kind is VaultKind.BORDER

    def is_interior(self) -> bool:
        return self.vault_kind is VaultKind.INTERIOR

    def is_bumper(self) -> bool:
        # Placeholder that only reserves space around a vault, never real terrain.
        return self.terrain is Terrain.EMPTY and self.can_dig

    def to_door(self) -> "MapCell":
        return self.copy(terrain=Terrain.DOOR)

    def undiggable(self) -> "MapCell":
        return self.copy(can_dig=False)

    def border(self) -> "MapCell":
        return self.copy(vault_kind=VaultKind.BORDER)

    def interior(self) -> "MapCell":
        return self.copy(vault_kind=VaultKind.INTERIOR)

    def __eq__(self, other):
        if not isinstance(other, MapCell):
            return NotImplemented
        return (
            self.terrain is other.terrain
            and self.spawns == other.spawns
            and self.can_dig == other.can_dig
            and self.vault_kind is other.vault_kind
        )

    def __repr__(self):
        kind = self.vault_kind.value if self.vault_kind else None
        return f"MapCell({self.terrain.value}, dig={self.can_dig}, vault={kind}, spawns={self.spawns})"

    def to_dict(self):
        return {
            "terrain": self.terrain.value,
            "spawns": list(self.spawns),
            "can_dig": self.can_dig,
            "vault_kind": self.vault_kind.value if self.vault_kind else None,
        }


__all__ = ["MapCell", "VaultKind"]
