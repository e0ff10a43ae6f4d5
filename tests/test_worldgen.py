import random
from types import SimpleNamespace

import pytest

from hexdelve.config import WorldConfig
from hexdelve.mapgen import DriverContractError, MapgenError, Terrain, flood_fill
from hexdelve.mapgen.vaults import MONSTER_DEN, SEALED_CRYPT
from hexdelve.world import forms
from hexdelve.world.location import Location, Sector
from hexdelve.world.worldgen import SectorDigger, Worldgen

SMALL = WorldConfig(depth_count=2)


@pytest.fixture(scope="module")
def world():
    return Worldgen(1234, SMALL)


def _digger(depth=1, terrain=None):
    stub = SimpleNamespace(terrain=dict(terrain or {}), _spawns=[])
    return SectorDigger(stub, Sector(0, 0, depth), SMALL), stub


def test_determinism(world):
    again = Worldgen(1234, SMALL)
    assert again.seed() == world.seed()
    # Whole-table comparisons, a failing assert_eq would print huge dicts.
    assert again.terrain == world.terrain
    assert again.portals == world.portals
    assert again.player_entry() == world.player_entry()
    assert again.spawns() == world.spawns()


def test_overland_and_cave_entrance(world):
    assert world.player_entry() == Location(25, 0, 0)
    assert world.terrain_at(Location(25, 0, 0)) is Terrain.GROUND
    assert world.terrain_at(Location(12, 22, 0)) is Terrain.WATER

    mouth = Location(40, 12, 0)
    assert world.terrain_at(mouth) is Terrain.GATE
    assert world.terrain_at(mouth + (1, 1)) is Terrain.EMPTY
    for v in [(1, 0), (0, 1), (2, 1), (1, 2), (2, 2)]:
        assert world.terrain_at(mouth + v) is Terrain.ROCK


def test_default_terrain(world):
    assert world.terrain_at(Location(-500, 900, 0)) is Terrain.GROUND
    assert world.terrain_at(Location(-500, 900, 1)) is Terrain.ROCK
    assert world.terrain_at(Location(-500, 900, 7)) is Terrain.ROCK


def test_portals_link_consecutive_depths(world):
    mouth = Location(40, 12, 0)
    landing = world.portal_at(mouth)
    assert landing is not None and landing.z == 1
    assert world.terrain_at(landing).is_open()

    up_stairs = landing - (1, 1)
    assert world.terrain_at(up_stairs) is Terrain.GATE
    assert world.portal_at(up_stairs) == mouth - (1, 1)

    down_1 = [p.origin for p in world.portals.values() if p.origin.z == 1 and p.destination.z == 2]
    assert len(down_1) == 1
    down = down_1[0]
    assert world.terrain_at(down) is Terrain.GATE
    assert world.terrain_at(down + (1, 1)) is Terrain.EMPTY
    landing_2 = world.portal_at(down)
    assert landing_2.z == 2 and world.terrain_at(landing_2).is_open()
    assert world.portal_at(landing_2 - (1, 1)) == down - (1, 1)

    # Bottom depth only has its way back up.
    assert len([p for p in world.portals if p.z == 2]) == 1
    assert world.portal_at(Location(0, 0, 0)) is None


def test_spawns(world):
    spawns = world.spawns()
    assert spawns
    for depth in (1, 2):
        here = [(loc, lo) for loc, lo in spawns if loc.z == depth]
        assert here
        for loc, loadout in here:
            assert world.terrain_at(loc).is_open()
            form = forms.named(loadout.name)
            assert form is not None and form.at_depth(depth)
    # Returned list is a copy.
    spawns.clear()
    assert world.spawns()


def test_spawns_stay_out_of_corridors_and_stairs(world):
    stairs = {p for p in world.portals if p.z > 0}
    for loc, _ in world.spawns():
        assert loc not in stairs
        assert world.terrain_at(loc) is not Terrain.DOOR


def test_failed_depth_raises():
    cfg = WorldConfig(depth_count=1, sector_width=5, sector_height=5)
    with pytest.raises(MapgenError):
        Worldgen(1, cfg)


def test_no_depths_is_just_the_overland():
    w = Worldgen(9, WorldConfig(depth_count=0))
    assert w.portals == {}
    assert w.spawns() == []
    assert all(loc.z == 0 for loc in w.terrain)


def test_domain_skips_cells_next_to_diagonal_sectors():
    digger, _ = _digger()
    domain = digger.domain()
    assert len(domain) == 40 * 24 - 2
    assert (0, 0) not in domain and (39, 23) not in domain
    assert (39, 0) in domain and (0, 23) in domain
    assert domain == sorted(domain, key=lambda p: (p[1], p[0]))


def test_local_to_world_locations():
    digger = SectorDigger(SimpleNamespace(terrain={}, _spawns=[]), Sector(1, 2, 3), SMALL)
    assert digger.loc((2, 5)) == Location(42, 53, 3)


def test_writes_are_staged_until_commit():
    digger, stub = _digger()
    digger.dig_chamber([(3, 3), (4, 3)])
    digger.dig_corridor([(5, 3)])
    digger.add_door((6, 3))
    assert stub.terrain == {}

    digger.commit()
    assert stub.terrain[Location(3, 3, 1)] is Terrain.GROUND
    assert stub.terrain[Location(5, 3, 1)] is Terrain.GROUND
    assert stub.terrain[Location(6, 3, 1)] is Terrain.DOOR
    assert digger.spawn_region == {Location(3, 3, 1), Location(4, 3, 1)}


def test_stairs_contract():
    digger, _ = _digger()
    with pytest.raises(DriverContractError):
        digger.require_stairs()

    digger.add_up_stairs((5, 5))
    with pytest.raises(DriverContractError):
        digger.add_up_stairs((9, 9))
    with pytest.raises(DriverContractError):
        digger.dig_corridor([(5, 5)])
    with pytest.raises(DriverContractError):
        digger.require_stairs()

    digger.add_down_stairs((20, 10))
    assert digger.terrain[Location(21, 11, 1)] is Terrain.EMPTY
    with pytest.raises(DriverContractError):
        digger.add_down_stairs((25, 10))
    with pytest.raises(DriverContractError):
        digger.add_door((20, 10))
    assert digger.require_stairs() == (Location(5, 5, 1), Location(20, 10, 1))


def test_place_vault_stamps_terrain_and_spawns():
    digger, _ = _digger()
    digger.place_vault(MONSTER_DEN, (10, 10))
    origin = Location(10, 10, 1)
    # Bumpers are not terrain.
    assert origin + (2, 0) not in digger.terrain
    assert digger.terrain[origin + (2, 1)] is Terrain.WALL
    assert digger.terrain[origin + (2, 3)] is Terrain.GROUND
    assert [(loc, lo.name) for loc, lo in digger.spawns] == [(origin + (2, 3), "dreg")]
    assert origin + (2, 3) not in digger.spawn_region
    assert origin + (1, 2) in digger.spawn_region


def test_clear_spawns_near_entrance():
    digger, _ = _digger()
    row = [(x, 5) for x in range(6, 20)]
    digger.dig_chamber(row)
    digger.add_up_stairs((5, 5))
    digger.clear_spawns_near_entrance(3)
    assert sorted(loc.x for loc in digger.spawn_region) == list(range(9, 20))


def test_sample_spawns_splits_items_and_mobs():
    digger, _ = _digger(depth=4)
    digger.dig_chamber([(x, y) for x in range(2, 8) for y in range(2, 8)])
    digger.sample_spawns(random.Random(2), 4, 10)
    kinds = [forms.named(lo.name).kind for _, lo in digger.spawns]
    assert kinds == [forms.ITEM] * 5 + [forms.MOB] * 5
    assert len({loc for loc, _ in digger.spawns}) == 10


def test_sample_spawns_with_few_candidates():
    digger, _ = _digger()
    digger.dig_chamber([(2, 2), (3, 2), (4, 2)])
    digger.sample_spawns(random.Random(2), 1, 20)
    assert len(digger.spawns) == 3


def test_sealed_vault_pocket_gets_no_spawns():
    digger, _ = _digger()
    digger.place_vault(SEALED_CRYPT, (10, 10))
    origin = Location(10, 10, 1)
    assert digger.terrain[origin + (3, 4)] is Terrain.GROUND
    assert origin + (3, 4) not in digger.spawn_region
    assert origin + (1, 2) in digger.spawn_region
    assert origin + (5, 6) in digger.spawn_region


@pytest.mark.parametrize("seed", [2, 12])
def test_prefab_heavy_spawns_are_reachable(seed):
    w = Worldgen(seed, WorldConfig(depth_count=1, prefab_vault_chance=1.0))
    open_cells = {(loc.x, loc.y) for loc, t in w.terrain.items() if loc.z == 1 and t.is_open()}
    up = [p for p in w.portals if p.z == 1][0]
    reached = flood_fill(open_cells, (up.x, up.y))
    for loc, _ in w.spawns():
        assert (loc.x, loc.y) in reached, loc
