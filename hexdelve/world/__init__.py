"""Multi-depth world assembled from generated sectors."""

from .forms import FORMS, Form, Loadout
from .location import Location, Portal, Sector
from .worldgen import SectorDigger, Worldgen

__all__ = ["FORMS", "Form", "Loadout", "Location", "Portal", "Sector", "SectorDigger", "Worldgen"]
