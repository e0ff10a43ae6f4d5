"""Prefab formats: ASCII vault templates and color-keyed bitmaps.

ASCII glyphs (column = x, line = y):

    ' '  undefined, not part of the vault
    '_'  bumper: reserves space around the vault, never becomes terrain
    '%'  undiggable blank
    '#'  wall; undiggable vault border when on the template boundary
    '.'  ground
    '<'  entrance    '>'  exit
    '~'  water       'I'  pillar
    '+'  door; on the boundary a diggable border wall (potential doorway)
    'a'  ground with a queued monster spawn

A template position is on the boundary when any of its hex neighbors is
undefined in the template.
"""
from __future__ import annotations

import io
import os
import textwrap
from typing import Dict, List, Tuple, Union

from PIL import Image, UnidentifiedImageError

from .cells import MapCell, VaultKind
from .errors import PrefabError
from .grid import Grid
from .hexgeom import Coord2D, hex_neighbors
from .terrain import Terrain

VAULT_MONSTER = "dreg"

_SIMPLE_GLYPHS = {
    ".": Terrain.GROUND,
    ">": Terrain.EXIT,
    "<": Terrain.ENTRANCE,
    "~": Terrain.WATER,
    "I": Terrain.PILLAR,
}


def _text_cells(text: str) -> Dict[Coord2D, str]:
    lines = textwrap.dedent(text).splitlines()
    while lines and not lines[0].strip():
        lines.pop(0)
    while lines and not lines[-1].strip():
        lines.pop()
    ret: Dict[Coord2D, str] = {}
    for y, line in enumerate(lines):
        for x, ch in enumerate(line.rstrip()):
            if ch != " ":
                ret[(x, y)] = ch
    return ret


def parse_vault(text: str) -> Grid:
    """Build a vault grid from an ASCII template.

    Raises PrefabError on an unknown glyph.
    """
    prefab = _text_cells(text)
    ret = Grid()

    for pos, ch in sorted(prefab.items()):
        is_border_pos = not all(p in prefab for p in hex_neighbors(pos))
        # Only wall-shaped cells get the Border role; ground at the template
        # edge still counts as interior.
        cell = MapCell(vault_kind=VaultKind.INTERIOR)

        if ch == "_":
            cell = MapCell.new_bumper()
        elif ch == "%":
            cell.can_dig = False
        elif ch == "#":
            cell.terrain = Terrain.WALL
            if is_border_pos:
                cell.can_dig = False
                cell.vault_kind = VaultKind.BORDER
        elif ch in _SIMPLE_GLYPHS:
            cell.terrain = _SIMPLE_GLYPHS[ch]
        elif ch == "+":
            if is_border_pos:
                # Potential entryway: wall for now, may be dug into a door.
                cell.terrain = Terrain.WALL
                cell.vault_kind = VaultKind.BORDER
            else:
                cell.terrain = Terrain.DOOR
        elif ch == "a":
            cell.terrain = Terrain.GROUND
            cell.spawns.append(VAULT_MONSTER)
        else:
            raise PrefabError(f"Unknown map glyph {ch!r} at {pos}")

        ret.insert(pos, cell)

    return ret


_TERRAIN_GLYPHS = {
    Terrain.GROUND: ".",
    Terrain.EXIT: ">",
    Terrain.ENTRANCE: "<",
    Terrain.WATER: "~",
    Terrain.PILLAR: "I",
    Terrain.DOOR: "+",
}


def _glyph(cell: MapCell) -> str:
    if cell.is_bumper():
        return "_"
    if cell.terrain is Terrain.EMPTY:
        return "%"
    if cell.terrain is Terrain.WALL:
        return "+" if (cell.is_border() and cell.can_dig) else "#"
    if cell.terrain is Terrain.GROUND and cell.spawns:
        return "a"
    return _TERRAIN_GLYPHS.get(cell.terrain, "?")


def render_text(grid: Grid) -> str:
    """ASCII dump of a grid in the vault glyph grammar, for debug logs."""
    cells = grid.items()
    if not cells:
        return ""
    xs = [p[0] for p, _ in cells]
    ys = [p[1] for p, _ in cells]
    x0, y0 = min(xs), min(ys)
    rows: List[List[str]] = [[" "] * (max(xs) - x0 + 1) for _ in range(max(ys) - y0 + 1)]
    for (x, y), c in cells:
        rows[y - y0][x - x0] = _glyph(c)
    return "\n".join("".join(r).rstrip() for r in rows)


BitmapSource = Union[str, bytes, os.PathLike]


def load_bitmap(source: BitmapSource) -> List[Tuple[Coord2D, Terrain]]:
    """Read a color-keyed terrain bitmap.

    The bottom pixel row stores metadata and is skipped. Pixels whose color
    is not in the terrain color table are skipped. Returns ``((x, y),
    terrain)`` pairs in row-major order.
    """
    try:
        if isinstance(source, bytes):
            image = Image.open(io.BytesIO(source))
        else:
            image = Image.open(source)
        image = image.convert("RGB")
    except (OSError, UnidentifiedImageError) as e:
        raise PrefabError(f"Invalid bitmap prefab: {e}") from e

    w, h = image.size
    if h < 2:
        raise PrefabError(f"Bitmap prefab needs a metadata row, got height {h}")

    ret: List[Tuple[Coord2D, Terrain]] = []
    for y in range(h - 1):
        for x in range(w):
            t = Terrain.from_color(image.getpixel((x, y)))
            if t is not None:
                ret.append(((x, y), t))
    return ret


__all__ = ["parse_vault", "render_text", "load_bitmap", "VAULT_MONSTER"]
