import random

import pytest

from hexdelve.mapgen import Dungeon, Grid, MapgenError, Room, RoomsAndTunnels, Terrain, TextVault
from hexdelve.mapgen.driver import FRONT
from hexdelve.mapgen.hexgeom import add
from hexdelve.mapgen.tunnels import walkable_regions
from hexdelve.mapgen.vaults import MONSTER_DEN, VAULT_LIBRARY


class RecordingDungeon(Dungeon):
    def __init__(self, vaults=None):
        self.vaults = vaults
        self.calls = []

    def sample_vault(self, rng):
        if self.vaults:
            return rng.choice(self.vaults)
        return Room.rand(rng)

    def dig_chamber(self, points):
        self.calls.append(("chamber", list(points)))

    def dig_corridor(self, points):
        self.calls.append(("corridor", list(points)))

    def place_vault(self, vault, pos):
        self.calls.append(("vault", vault, pos))

    def add_door(self, pos):
        self.calls.append(("door", pos))

    def add_up_stairs(self, pos):
        self.calls.append(("up", pos))

    def add_down_stairs(self, pos):
        self.calls.append(("down", pos))

    def kinds(self):
        return [c[0] for c in self.calls]


DOMAIN = [(x, y) for y in range(24) for x in range(40)]


def _dig(seed, **kw):
    dungeon = RecordingDungeon(**kw)
    grid = RoomsAndTunnels(3, 5).dig(random.Random(seed), dungeon, DOMAIN)
    return dungeon, grid


def test_rooms_are_connected_with_one_pair_of_stairs():
    dungeon, grid = _dig(11)
    assert len(walkable_regions(grid)) == 1
    assert len(grid.entrances()) == 1
    assert len(grid.exits()) == 1

    kinds = dungeon.kinds()
    assert kinds.count("up") == 1 and kinds.count("down") == 1
    assert kinds[-2:] == ["up", "down"]
    # Rooms first, then the tunnels that join them, then doors.
    last_room = max(i for i, k in enumerate(kinds) if k in ("chamber", "vault"))
    first_door = min((i for i, k in enumerate(kinds) if k == "door"), default=len(kinds) - 2)
    assert last_room < first_door


def test_stairs_face_room_floor():
    dungeon, grid = _dig(11)
    up = dungeon.calls[-2][1]
    down = dungeon.calls[-1][1]
    assert grid.entrances() == [up]
    assert grid.exits() == [down]

    below_up = grid[add(up, FRONT)]
    assert below_up.is_interior() and below_up.is_walkable()
    above_down = grid[(down[0] - FRONT[0], down[1] - FRONT[1])]
    assert above_down.is_interior() and above_down.is_walkable()
    behind_down = grid[add(down, FRONT)]
    assert not behind_down.is_walkable()


def test_reported_cells_match_grid():
    dungeon, grid = _dig(5)
    for call in dungeon.calls:
        if call[0] == "chamber":
            for p in call[1]:
                assert grid[p].terrain is Terrain.GROUND and grid[p].is_interior()
        elif call[0] == "corridor":
            for p in call[1]:
                assert grid[p].vault_kind is None and grid[p].is_walkable()
        elif call[0] == "door":
            assert grid[call[1]].terrain is Terrain.DOOR


def test_prefab_vaults_are_handed_back_whole():
    dungeon, _ = _dig(3, vaults=[MONSTER_DEN, Room(3, 3)])
    placed = [c for c in dungeon.calls if c[0] == "vault"]
    chambers = [c for c in dungeon.calls if c[0] == "chamber"]
    assert all(c[1] is MONSTER_DEN for c in placed)
    assert all(len(c[1]) == 9 for c in chambers)
    # Vaults that cannot be tunneled into are dropped.
    assert 2 <= len(placed) + len(chambers) <= 5


def test_same_seed_same_layout():
    a_dungeon, a = _dig(8)
    b_dungeon, b = _dig(8)
    assert a == b
    assert a_dungeon.kinds() == b_dungeon.kinds()


def test_too_small_domain():
    domain = [(x, y) for x in range(5) for y in range(5)]
    dungeon = RecordingDungeon(vaults=[Room(3, 3)])
    with pytest.raises(MapgenError):
        RoomsAndTunnels(2, 3).dig(random.Random(1), dungeon, domain)
    assert dungeon.calls == []


def test_room_count_range_checked():
    with pytest.raises(ValueError):
        RoomsAndTunnels(1, 4)
    with pytest.raises(ValueError):
        RoomsAndTunnels(5, 4)


MIXED_VAULTS = list(VAULT_LIBRARY) + [Room(3, 3), Room(4, 3), Room(5, 5), Room(7, 4)]


@pytest.mark.parametrize("seed", range(1, 13))
def test_mixed_vaults_always_join(seed):
    dungeon = RecordingDungeon(vaults=MIXED_VAULTS)
    grid = RoomsAndTunnels().dig(random.Random(seed), dungeon, DOMAIN)
    assert len(walkable_regions(grid)) == 1
    kinds = dungeon.kinds()
    assert kinds.count("up") == 1 and kinds.count("down") == 1


class ScriptedDungeon(RecordingDungeon):
    def __init__(self, script):
        super().__init__()
        self.script = list(script)

    def sample_vault(self, rng):
        return self.script.pop(0)


def test_vault_that_cannot_be_joined_is_dropped():
    # No doorway and an interior wall shell: the floor can never be reached.
    sealed = TextVault(
        "sealed",
        """
        %%%%%
        %###%
        %#.#%
        %###%
        %%%%%
        """,
    )
    dungeon = ScriptedDungeon([Room(3, 3), sealed] + [Room(3, 3)] * 4)
    grid, placed = RoomsAndTunnels(4, 6)._place_vaults(random.Random(4), dungeon, Grid.new_base(DOMAIN))
    assert all(vault is not sealed for vault, _, _ in placed)
    assert len(placed) >= 2
    assert len(walkable_regions(grid)) == 1
