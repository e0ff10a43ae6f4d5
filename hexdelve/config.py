"""World generation configuration.

Defaults can be overridden from environment variables (``from_env``) and,
inside the web app, from ``WORLD_*`` keys of the Flask config
(``from_mapping``), which take precedence.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from typing import Any, Mapping, Optional, Tuple


@dataclass(frozen=True)
class WorldConfig:
    depth_count: int = 10
    sector_width: int = 40
    sector_height: int = 24
    min_rooms: int = 6
    max_rooms: int = 10
    spawns_per_sector: int = 20
    entrance_safe_radius: int = 12
    prefab_vault_chance: float = 0.25
    overland_path: Optional[str] = None
    player_entry: Tuple[int, int] = (25, 0)
    cave_entrance: Tuple[int, int] = (40, 12)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "WorldConfig":
        env = os.environ if environ is None else environ
        env_map = {
            "HEXDELVE_DEPTH_COUNT": "depth_count",
            "HEXDELVE_SECTOR_WIDTH": "sector_width",
            "HEXDELVE_SECTOR_HEIGHT": "sector_height",
            "HEXDELVE_SPAWNS_PER_SECTOR": "spawns_per_sector",
            "HEXDELVE_OVERLAND_PATH": "overland_path",
        }
        changes = {}
        for env_key, attr in env_map.items():
            val = env.get(env_key)
            if val:
                changes[attr] = val if attr == "overland_path" else int(val)
        return replace(cls(), **changes)

    def from_mapping(self, cfg: Mapping[str, Any]) -> "WorldConfig":
        """Apply ``WORLD_<FIELD>`` overrides, eg. ``WORLD_DEPTH_COUNT``."""
        changes = {}
        for f in fields(self):
            key = "WORLD_" + f.name.upper()
            if key in cfg and cfg[key] is not None:
                changes[f.name] = cfg[key]
        return replace(self, **changes)

    def cache_key(self) -> Tuple:
        return tuple(getattr(self, f.name) for f in fields(self))


__all__ = ["WorldConfig"]
