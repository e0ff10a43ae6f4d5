"""Static generated world.

``Worldgen`` builds the whole world from a seed: the overland level comes
from a color-keyed bitmap, and every dungeon depth below it is one sector
dug by the map generator through a ``SectorDigger``. Consecutive depths are
linked with paired one-way portals. Only the seed needs to be stored; the
terrain is regenerated from it on load.
"""
from __future__ import annotations

import logging
import os
import random
from collections import deque
from typing import Dict, List, Optional, Set, Tuple

from hexdelve.config import WorldConfig
from hexdelve.logging_utils import get_logger
from hexdelve.mapgen import (
    VAULT_LIBRARY,
    DriverContractError,
    Dungeon,
    Grid,
    MapCell,
    MapgenError,
    Room,
    RoomsAndTunnels,
    Terrain,
    Vault,
    load_bitmap,
)
from hexdelve.mapgen.hexgeom import Coord2D
from hexdelve.mapgen.tunnels import walkable_regions
from hexdelve.world import forms
from hexdelve.world.forms import Loadout
from hexdelve.world.location import Location, Portal, Sector

logger = logging.getLogger(__name__)
event_log = get_logger("worldgen")

OVERLAND_PATH = os.path.join(os.path.dirname(os.path.dirname(__file__)), "assets", "overland.png")

# Cells around a downbound cave mouth that must stay solid so the stairs read
# as going down.
DOWNBOUND_ENCLOSURE = ((1, 0), (0, 1), (2, 1), (1, 2), (2, 2))

# Stair art offset: portals land one South step past the stairs going down and
# one North step before the stairs going up.
STAIRS_FRONT = (1, 1)

SAFE_RADIUS_VISIT_CAP = 10_000

SpawnEntry = Tuple[Location, Loadout]


class SectorDigger(Dungeon):
    """Receives one sector's layout from a dungeon driver.

    The driver works in sector-local coordinates; the digger translates them
    into world Locations. Writes are staged locally and only merged into the
    world by ``commit`` after the sector has been fully generated.
    """

    def __init__(self, worldgen: "Worldgen", sector: Sector, config: WorldConfig):
        self.worldgen = worldgen
        self.sector = sector
        self.config = config
        self.terrain: Dict[Location, Terrain] = {}
        self.up_portal: Optional[Location] = None
        self.down_portal: Optional[Location] = None
        self.spawn_region: Set[Location] = set()
        self.spawns: List[SpawnEntry] = []

    def domain(self) -> List[Coord2D]:
        """Sector-local points the driver may dig.

        Sectors only connect in the four cardinal directions, so cells that
        touch a diagonally adjacent sector are left out to avoid holes
        between two diagonal shafts.
        """
        origin = self.sector.origin()
        ret = []
        for loc in self.sector.iter():
            if self._is_next_to_diagonal_sector(loc):
                continue
            ret.append(loc.v2_from(origin))
        return ret

    def _is_next_to_diagonal_sector(self, loc: Location) -> bool:
        w, h = self.sector.width, self.sector.height
        home = loc.sector(w, h)
        return any(n.sector(w, h).taxicab_distance(home) > 1 for n in loc.hex_neighbors())

    def loc(self, pos: Coord2D) -> Location:
        return self.sector.origin() + pos

    def terrain_at(self, loc: Location) -> Optional[Terrain]:
        """Staged terrain, falling back to what the world already has."""
        if loc in self.terrain:
            return self.terrain[loc]
        return self.worldgen.terrain.get(loc)

    def set(self, loc: Location, terrain: Terrain) -> None:
        if terrain is not Terrain.GATE and loc in (self.up_portal, self.down_portal):
            raise DriverContractError(f"Overwriting stairs at {loc} with {terrain.name}")
        self.terrain[loc] = terrain

    # Dungeon interface

    def sample_vault(self, rng) -> Vault:
        if rng.random() < self.config.prefab_vault_chance:
            return rng.choice(VAULT_LIBRARY)
        return Room.rand(rng)

    def dig_chamber(self, points) -> None:
        for pos in points:
            loc = self.loc(pos)
            self.spawn_region.add(loc)
            self.set(loc, Terrain.GROUND)

    def dig_corridor(self, points) -> None:
        for pos in points:
            loc = self.loc(pos)
            # No spawns in corridors.
            self.spawn_region.discard(loc)
            self.set(loc, Terrain.GROUND)

    def place_vault(self, vault: Vault, pos: Coord2D) -> None:
        origin = self.loc(pos)
        grid = vault.to_grid()
        # Sealed pockets inside the vault are never reachable, keep spawns out.
        reachable = {p for region in walkable_regions(grid) for p in region}
        for p, cell in grid.items():
            if cell.is_bumper() or cell.terrain is Terrain.EMPTY:
                continue
            loc = origin + p
            self.set(loc, cell.terrain)
            if cell.terrain is Terrain.GROUND and cell.is_interior() and not cell.spawns and p in reachable:
                self.spawn_region.add(loc)
            for name in cell.spawns:
                form = forms.named(name)
                if form is None:
                    raise MapgenError(f"Vault {vault.name!r} spawns unknown form {name!r}")
                self.spawns.append((loc, form.loadout))

    def add_door(self, pos: Coord2D) -> None:
        loc = self.loc(pos)
        self.spawn_region.discard(loc)
        self.set(loc, Terrain.DOOR)

    def add_up_stairs(self, pos: Coord2D) -> None:
        if self.up_portal is not None:
            raise DriverContractError(f"Second up stairs at {pos} in {self.sector}")
        loc = self.loc(pos)
        self.up_portal = loc
        self.spawn_region.discard(loc)
        self.set(loc, Terrain.GATE)

    def add_down_stairs(self, pos: Coord2D) -> None:
        if self.down_portal is not None:
            raise DriverContractError(f"Second down stairs at {pos} in {self.sector}")
        loc = self.loc(pos)
        self.down_portal = loc
        self.spawn_region.discard(loc)
        self.set(loc, Terrain.GATE)
        # Carve out the rock blob that would be drawn in front of the stairs.
        front = loc + STAIRS_FRONT
        self.set(front, Terrain.EMPTY)
        self.spawn_region.discard(front)

    # Post-processing

    def require_stairs(self) -> Tuple[Location, Location]:
        if self.up_portal is None:
            raise DriverContractError(f"Map generator didn't create stairs up in {self.sector}")
        if self.down_portal is None:
            raise DriverContractError(f"Map generator didn't create stairs down in {self.sector}")
        return self.up_portal, self.down_portal

    def clear_spawns_near_entrance(self, radius: int) -> None:
        """Drop spawn candidates within ``radius`` walking steps of the up stairs."""
        if self.up_portal is None:
            raise DriverContractError(f"No entrance generated in {self.sector}")
        dist = {self.up_portal: 0}
        queue = deque([self.up_portal])
        while queue and len(dist) < SAFE_RADIUS_VISIT_CAP:
            loc = queue.popleft()
            if dist[loc] >= radius:
                continue
            for n in loc.hex_neighbors():
                if n in dist:
                    continue
                t = self.terrain_at(n)
                if t is None or not t.is_open():
                    continue
                dist[n] = dist[loc] + 1
                queue.append(n)
        for loc in dist:
            self.spawn_region.discard(loc)

    def sample_spawns(self, rng, depth: int, count: int) -> None:
        """Scatter item and mob spawns over the remaining candidates."""
        candidates = sorted(self.spawn_region)
        locs = rng.sample(candidates, min(count, len(candidates)))
        n_items = len(locs) // 2

        items = forms.filter_forms(forms.ITEM, depth)
        mobs = forms.filter_forms(forms.MOB, depth)
        for i, loc in enumerate(locs):
            pool = items if i < n_items else mobs
            form = forms.rand_form(rng, pool)
            if form is None:
                raise MapgenError(f"No {'item' if i < n_items else 'mob'} forms at depth {depth}")
            self.spawns.append((loc, form.loadout))

    def commit(self) -> None:
        self.worldgen.terrain.update(self.terrain)
        self.worldgen._spawns.extend(self.spawns)


class Worldgen:
    """Terrain, portals and spawns of a whole world, built from ``seed``."""

    def __init__(self, seed: int, config: Optional[WorldConfig] = None):
        self.config = config or WorldConfig()
        self._seed = seed
        self.terrain: Dict[Location, Terrain] = {}
        self.portals: Dict[Location, Portal] = {}
        self._spawns: List[SpawnEntry] = []
        self._player_entry = Location(*self.config.player_entry, 0)

        with event_log.timed("worldgen_complete", seed=seed, depths=self.config.depth_count):
            self._generate()

    def _generate(self) -> None:
        cfg = self.config
        self.load_map_bitmap(Location(0, 0, 0), cfg.overland_path or OVERLAND_PATH)

        rng = random.Random(self._seed)
        driver = RoomsAndTunnels(cfg.min_rooms, cfg.max_rooms)

        entrance = Location(*cfg.cave_entrance, 0)
        self.cave_entrance(entrance)
        self.terrain[entrance] = Terrain.GATE
        self.terrain[entrance + STAIRS_FRONT] = Terrain.EMPTY

        for depth in range(1, cfg.depth_count + 1):
            sector = Sector(0, 0, depth, cfg.sector_width, cfg.sector_height)
            try:
                up, down = self._dig_sector(rng, driver, sector)
            except MapgenError:
                logger.error("World generation failed at depth %d (seed %s)", depth, self._seed)
                raise
            self.portal(entrance, up + STAIRS_FRONT)
            self.portal(up, entrance - STAIRS_FRONT)
            entrance = down

    def _dig_sector(self, rng, driver: RoomsAndTunnels, sector: Sector) -> Tuple[Location, Location]:
        cfg = self.config
        digger = SectorDigger(self, sector, cfg)
        driver.dig(rng, digger, digger.domain())
        up, down = digger.require_stairs()

        digger.clear_spawns_near_entrance(cfg.entrance_safe_radius)
        digger.sample_spawns(rng, sector.z, cfg.spawns_per_sector)
        digger.commit()

        logger.info("Generated depth %d: %d cells, stairs %s -> %s", sector.z, len(digger.terrain), up, down)
        event_log.info(
            event="worldgen_sector",
            seed=self._seed,
            depth=sector.z,
            cells=len(digger.terrain),
            spawns=len(digger.spawns),
        )
        return up, down

    def load_map_bitmap(self, origin: Location, source) -> None:
        for p, t in load_bitmap(source):
            self.terrain[origin + p] = t

    def cave_entrance(self, loc: Location) -> None:
        """Make a cave entrance going down."""
        for v in DOWNBOUND_ENCLOSURE:
            self.terrain[loc + v] = Terrain.ROCK
        self.terrain[loc] = Terrain.GROUND
        self.terrain[loc + STAIRS_FRONT] = Terrain.GROUND

    def portal(self, origin: Location, destination: Location) -> None:
        """Punch a one-way portal between two points."""
        self.portals[origin] = Portal(origin, destination)

    # Read interface

    def seed(self) -> int:
        return self._seed

    def terrain_at(self, loc: Location) -> Terrain:
        t = self.terrain.get(loc)
        if t is None:
            return self.default_terrain(loc)
        return t

    @staticmethod
    def default_terrain(loc: Location) -> Terrain:
        return Terrain.GROUND if loc.z == 0 else Terrain.ROCK

    def portal_at(self, loc: Location) -> Optional[Location]:
        p = self.portals.get(loc)
        return p.destination if p else None

    def spawns(self) -> List[SpawnEntry]:
        return list(self._spawns)

    def player_entry(self) -> Location:
        return self._player_entry

    def sector_grid(self, depth: int) -> Grid:
        """Terrain of the depth's sector as a sector-local grid, for dumps."""
        cfg = self.config
        sector = Sector(0, 0, depth, cfg.sector_width, cfg.sector_height)
        origin = sector.origin()
        grid = Grid()
        for loc in sector.iter():
            t = self.terrain.get(loc)
            if t is not None:
                grid.insert(loc.v2_from(origin), MapCell(t))
        return grid

    def __eq__(self, other):
        if not isinstance(other, Worldgen):
            return NotImplemented
        return (
            self._seed == other._seed
            and self.terrain == other.terrain
            and self.portals == other.portals
            and self._player_entry == other._player_entry
        )


__all__ = ["Worldgen", "SectorDigger", "OVERLAND_PATH", "SpawnEntry"]
