"""Entity templates placed by world generation.

A ``Form`` names an entity kind and carries the ``Loadout`` the entity system
instantiates from a spawn entry. Forms are chosen with commonness-weighted
roulette among the forms allowed at a depth.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

MOB = "mob"
ITEM = "item"


@dataclass(frozen=True)
class Loadout:
    """Components to attach when instantiating an entity."""

    name: str
    icon: str
    components: Tuple[Tuple[str, object], ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, object]:
        return {"name": self.name, "icon": self.icon, "components": dict(self.components)}


@dataclass(frozen=True)
class Form:
    name: str
    kind: str
    min_depth: int
    commonness: int
    loadout: Loadout

    def is_mob(self) -> bool:
        return self.kind == MOB

    def is_item(self) -> bool:
        return self.kind == ITEM

    def at_depth(self, depth: int) -> bool:
        return self.min_depth <= depth


def _mob(name, icon, min_depth, commonness, hp, power) -> Form:
    return Form(name, MOB, min_depth, commonness, Loadout(name, icon, (("health", hp), ("power", power))))


def _item(name, icon, min_depth, commonness, **components) -> Form:
    return Form(name, ITEM, min_depth, commonness, Loadout(name, icon, tuple(sorted(components.items()))))


FORMS: Tuple[Form, ...] = (
    _mob("dreg", "dreg", 1, 1000, hp=8, power=2),
    _mob("snake", "snake", 1, 1000, hp=4, power=1),
    _mob("bug", "bug", 2, 400, hp=3, power=1),
    _mob("ogre", "ogre", 5, 300, hp=24, power=6),
    _mob("wraith", "wraith", 7, 200, hp=16, power=5),
    _mob("octopus", "octopus", 8, 100, hp=20, power=7),
    _item("sword", "sword", 1, 200, damage=4),
    _item("healing_potion", "potion", 1, 1000, heal=10),
    _item("confusion_scroll", "scroll", 2, 300, effect="confuse"),
    _item("lightning_wand", "wand", 4, 100, damage=12, charges=3),
    _item("armor", "armor", 3, 200, armor=3),
)


def filter_forms(kind: Optional[str] = None, depth: Optional[int] = None) -> List[Form]:
    """Forms of ``kind`` allowed at ``depth``, in catalog order."""
    ret = []
    for f in FORMS:
        if kind is not None and f.kind != kind:
            continue
        if depth is not None and not f.at_depth(depth):
            continue
        ret.append(f)
    return ret


def named(name: str) -> Optional[Form]:
    for f in FORMS:
        if f.name == name:
            return f
    return None


def rand_form(rng, forms: Sequence[Form]) -> Optional[Form]:
    """Pick one form with commonness-weighted roulette, None if empty."""
    if not forms:
        return None
    total = sum(f.commonness for f in forms)
    r = rng.randint(1, total)
    upto = 0
    for f in forms:
        upto += f.commonness
        if r <= upto:
            return f
    return forms[-1]


__all__ = ["Loadout", "Form", "FORMS", "MOB", "ITEM", "filter_forms", "named", "rand_form"]
