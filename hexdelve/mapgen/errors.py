"""Map generation error types.

Low-level grid operations report "no room left" or "no tunnel" as an empty
result or ``None``; the sector digger and the drivers turn those into one of
these exceptions. Generation is never retried in place.
"""


class MapgenError(Exception):
    """Generation could not produce a valid layout."""


class PrefabError(MapgenError):
    """An ASCII vault or bitmap prefab could not be parsed."""


class DriverContractError(MapgenError):
    """The dungeon driver broke the sector digger's callback contract."""


__all__ = ["MapgenError", "PrefabError", "DriverContractError"]
