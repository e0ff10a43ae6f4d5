"""Public map generation package interface."""

from .cells import MapCell, VaultKind
from .driver import Dungeon, RoomsAndTunnels
from .errors import DriverContractError, MapgenError, PrefabError
from .grid import Grid
from .hexgeom import DIRECTIONS6, Dir6, hex_dist, hex_neighbors
from .prefab import load_bitmap, parse_vault, render_text
from .regions import flood_fill, separate_regions
from .terrain import Terrain
from .tunnels import can_tunnel, dig, find_tunnel, is_interior_bubble, join_disjoint_regions
from .vaults import VAULT_LIBRARY, Room, TextVault, Vault, VaultCell

__all__ = [
    "MapCell",
    "VaultKind",
    "Dungeon",
    "RoomsAndTunnels",
    "MapgenError",
    "PrefabError",
    "DriverContractError",
    "Grid",
    "Dir6",
    "DIRECTIONS6",
    "hex_dist",
    "hex_neighbors",
    "load_bitmap",
    "parse_vault",
    "render_text",
    "flood_fill",
    "separate_regions",
    "Terrain",
    "can_tunnel",
    "dig",
    "find_tunnel",
    "is_interior_bubble",
    "join_disjoint_regions",
    "VAULT_LIBRARY",
    "Room",
    "TextVault",
    "Vault",
    "VaultCell",
]
