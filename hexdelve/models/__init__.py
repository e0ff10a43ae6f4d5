from .world_instance import WorldInstance

__all__ = ["WorldInstance"]
