"""
Persistence for dungeon maps.

Usage:
    from dungeon_mapper.storage import MapStorage

    storage = MapStorage()          # ~/.config/dungeon_mapper/dungeon-map.json
    editor = MapEditor(storage=storage)
"""

from .map_storage import MapStorage

__all__ = [
    'MapStorage',
]
