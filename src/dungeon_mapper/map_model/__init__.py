"""
Grid map model for dungeon floor mapping.

Provides the map data structures, the MapEditor facade with undo/redo, and
the navigation aids (shortest path, walking directions, explored flood fill,
floor rotation).
"""

from .data_model import (
    MapError,
    OutOfRangeError,
    Edge,
    EDGES,
    Facing,
    DoorType,
    ContentType,
    CONTENT_CATALOG,
    CellCoord,
    Door,
    Cell,
    Floor,
    PlayerPosition,
    MapState,
    is_valid_coord,
)
from .commands import HistoryManager, HistoryEntry
from .pathfinding import (
    Instruction,
    DirectionStep,
    find_path,
    path_to_directions,
    format_directions,
)
from .flood_fill import flood_fill_explored
from .rotation import rotate_floor_90
from .validation import ValidationResult, ValidationIssue, Severity, validate_map_document
from .editor import MapEditor, DOOR_CYCLE

__all__ = [
    'MapError',
    'OutOfRangeError',
    'Edge',
    'EDGES',
    'Facing',
    'DoorType',
    'ContentType',
    'CONTENT_CATALOG',
    'CellCoord',
    'Door',
    'Cell',
    'Floor',
    'PlayerPosition',
    'MapState',
    'is_valid_coord',
    'HistoryManager',
    'HistoryEntry',
    'Instruction',
    'DirectionStep',
    'find_path',
    'path_to_directions',
    'format_directions',
    'flood_fill_explored',
    'rotate_floor_90',
    'ValidationResult',
    'ValidationIssue',
    'Severity',
    'validate_map_document',
    'MapEditor',
    'DOOR_CYCLE',
]
