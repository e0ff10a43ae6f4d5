import pytest

from hexdelve.mapgen import Grid, MapCell, PrefabError, Terrain, VaultKind
from hexdelve.mapgen.prefab import VAULT_MONSTER, render_text
from hexdelve.mapgen.vaults import Room, Vault, VaultCell


def test_plain_room_4x3(fake_rng):
    room = Grid.new_plain_room(fake_rng(ints=[4, 3]))

    floor = room.find_positions(lambda _, c: c.terrain is Terrain.GROUND)
    assert len(floor) == 12
    assert all(room[p].is_interior() for p in floor)
    assert floor == [(x, y) for x in range(4) for y in range(3)]

    ring = room.find_positions(lambda _, c: c.is_border())
    assert len(ring) == 18
    assert all(room[p].terrain is Terrain.WALL for p in ring)
    corners = [p for p in ring if not room[p].can_dig]
    assert corners == [(-1, -1), (-1, 3), (4, -1), (4, 3)]
    # Diggable edges: 2 * (4 + 3)
    assert len(ring) - len(corners) == 14
    assert len(room) == 30


def test_queries_are_sorted_regardless_of_insert_order():
    cells = {
        (5, 1): MapCell(Terrain.ENTRANCE),
        (-3, 2): MapCell(Terrain.GROUND),
        (0, 0): MapCell(Terrain.EXIT),
        (2, -7): MapCell(Terrain.GROUND),
        (2, -8): MapCell(Terrain.WALL).border(),
        (1, 9): MapCell(Terrain.DOOR).border(),
    }
    a, b = Grid(), Grid()
    for p in sorted(cells):
        a.insert(p, cells[p])
    for p in sorted(cells, reverse=True):
        b.insert(p, cells[p])

    assert a == b
    assert a.entrances() == b.entrances() == [(5, 1)]
    assert a.exits() == b.exits() == [(0, 0)]
    assert a.open_ground() == b.open_ground() == [(-3, 2), (0, 0), (2, -7), (5, 1)]
    assert list(a) == list(b) == sorted(cells)
    pred = lambda _, c: c.terrain is Terrain.GROUND  # noqa: E731
    assert a.find_positions(pred) == b.find_positions(pred) == [(-3, 2), (2, -7)]


def test_push_spawn_requires_existing_cell():
    g = Grid.new_base([(0, 0)])
    before = g[(0, 0)]
    g.push_spawn((0, 0), "snake")
    g.push_spawn((0, 0), "bug")
    assert g[(0, 0)].spawns == ["snake", "bug"]
    # Cells are replaced, not mutated.
    assert before.spawns == []
    with pytest.raises(KeyError):
        g.push_spawn((1, 1), "snake")


def test_undefined_is_not_empty():
    g = Grid.new_base([(0, 0)])
    assert (0, 0) in g and g[(0, 0)].terrain is Terrain.EMPTY
    assert (1, 0) not in g and g.get((1, 0)) is None
    assert g.contains((0, 0)) and not g.contains((1, 0))


def test_clone_is_independent():
    g = Grid.new_base([(0, 0), (1, 0)])
    h = g.clone()
    h.insert((0, 0), MapCell(Terrain.GROUND))
    assert g[(0, 0)].terrain is Terrain.EMPTY
    assert h != g


def test_parse_boundary_roles():
    g = Grid.from_text(
        """
        #####
        #####
        #####
        """
    )
    inner = g.find_positions(lambda _, c: c.is_interior())
    assert inner == [(1, 1), (2, 1), (3, 1)]
    for p in inner:
        assert g[p].terrain is Terrain.WALL and g[p].can_dig
    for p in g.find_positions(lambda _, c: c.is_border()):
        assert not g[p].can_dig
    assert len(g.find_positions(lambda _, c: c.is_border())) == 12


def test_parse_glyphs():
    g = Grid.from_text(
        """
         _
        #+###
        #a.<#
        #%I~#
        #.+>#
        #####
        """
    )
    bumper = g[(1, 0)]
    assert bumper.is_bumper() and bumper.vault_kind is None

    doorway = g[(1, 1)]
    assert doorway.terrain is Terrain.WALL and doorway.is_border() and doorway.can_dig

    assert g[(1, 2)].terrain is Terrain.GROUND and g[(1, 2)].spawns == [VAULT_MONSTER]
    assert g[(3, 2)].terrain is Terrain.ENTRANCE
    assert g[(3, 4)].terrain is Terrain.EXIT
    assert g[(2, 3)].terrain is Terrain.PILLAR
    assert g[(3, 3)].terrain is Terrain.WATER

    blank = g[(1, 3)]
    assert blank.terrain is Terrain.EMPTY and not blank.can_dig and blank.is_interior()

    inner_door = g[(2, 4)]
    assert inner_door.terrain is Terrain.DOOR and inner_door.is_interior()

    assert g[(0, 2)].is_border() and not g[(0, 2)].can_dig
    assert g.entrances() == [(3, 2)]
    assert g.exits() == [(3, 4)]


def test_parse_strips_common_indent():
    flat = Grid.from_text("#.#\n#.#")
    indented = Grid.from_text(
        """
            #.#
            #.#
        """
    )
    assert flat == indented
    assert flat[(1, 0)].vault_kind is VaultKind.INTERIOR


def test_unknown_glyph_reports_position():
    with pytest.raises(PrefabError) as exc:
        Grid.from_text("#Z#")
    assert "'Z'" in str(exc.value)
    assert "(1, 0)" in str(exc.value)


def test_render_text_uses_glyph_grammar():
    text = " _\n#+#\n#.#\n###"
    assert render_text(Grid.from_text(text)) == text
    assert Grid.from_text(text).to_text() == text
    assert render_text(Grid()) == ""


def test_vault_needs_a_shape():
    with pytest.raises(TypeError):
        Vault()

    class Nub(Vault):
        def shape(self):
            return {(0, 0): VaultCell.INTERIOR}

    assert Nub().to_grid()[(0, 0)].is_interior()
    assert Room(2, 2).to_grid()[(-1, -1)].is_border()
