"""
Dungeon Mapper - editor core for hand-drawn dungeon floor maps.

Usage:
    from dungeon_mapper import MapEditor, MapStorage

    editor = MapEditor.open(MapStorage())
    editor.set_wall(1, 3, 3, 'e', True)
    path = editor.find_path(1, 0, 0, 3, 3)
"""

from .map_model import MapEditor, MapState, OutOfRangeError, MapError
from .storage import MapStorage

__version__ = "0.1.0"

__all__ = [
    'MapEditor',
    'MapState',
    'MapStorage',
    'MapError',
    'OutOfRangeError',
]
