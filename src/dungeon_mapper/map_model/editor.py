"""
MapEditor: the operations a map UI calls.

Owns one MapState, its undo/redo history and an optional storage. Every
history-tracked operation validates its arguments, records exactly one
snapshot, mutates, then persists. A call that raises leaves no snapshot and
no change behind.

Wall/door consistency:
- Setting a wall also sets the neighbor's opposite wall (if on the grid)
- Removing a wall removes doors on that edge from both sides
- Placing a door creates its supporting wall
"""

from __future__ import annotations

import json
import logging
from datetime import date
from typing import Any, Dict, List, Optional, Tuple, Union, TYPE_CHECKING

from dungeon_mapper.config import EditorSettings, EXPORT_FILENAME_PREFIX
from .commands import HistoryManager
from .data_model import (
    MapState, Floor, Cell, CellCoord, Door, Edge, Facing, DoorType, ContentType,
    PlayerPosition, check_coord, check_floor, is_valid_coord,
)
from . import flood_fill, pathfinding, rotation
from .pathfinding import DirectionStep, Path
from .validation import validate_map_document, ValidationResult

if TYPE_CHECKING:
    from dungeon_mapper.storage import MapStorage

logger = logging.getLogger(__name__)

EdgeLike = Union[Edge, str]
FacingLike = Union[Facing, str]

# Order the door tool steps through; a door outside it restarts at the first type
DOOR_CYCLE: List[DoorType] = [
    DoorType.NORMAL, DoorType.LOCKED, DoorType.SECRET, DoorType.ONE_WAY,
]


def _as_edge(edge: EdgeLike) -> Edge:
    return edge if isinstance(edge, Edge) else Edge(edge)


def _as_facing(facing: FacingLike) -> Facing:
    return facing if isinstance(facing, Facing) else Facing(facing)


def _as_door_type(door_type: Union[DoorType, str, None]) -> Optional[DoorType]:
    if door_type is None or isinstance(door_type, DoorType):
        return door_type
    return DoorType(door_type)


def _as_content(content: Union[ContentType, str, None]) -> Optional[ContentType]:
    if content is None or isinstance(content, ContentType):
        return content
    return ContentType(content)


class MapEditor:
    """
    Editor facade over a MapState.

    Usage:
        editor = MapEditor.open(MapStorage())
        editor.set_wall(1, 5, 5, 'n', True)
        editor.set_door(1, 5, 5, 'n', 'locked')
        path = editor.find_path(1, 0, 0, 5, 6)
        editor.undo()
    """

    def __init__(self, state: Optional[MapState] = None,
                 storage: Optional['MapStorage'] = None,
                 settings: Optional[EditorSettings] = None):
        self._settings = settings or EditorSettings()
        self._state = state if state is not None else MapState()
        self._history = HistoryManager(self._settings.max_history)
        self._storage = storage

    @classmethod
    def open(cls, storage: 'MapStorage',
             settings: Optional[EditorSettings] = None) -> 'MapEditor':
        """Create an editor on the map saved in storage, or an empty map."""
        state = storage.load()
        if state is None:
            logger.info("No saved map at %s, starting empty", storage.path)
        return cls(state=state, storage=storage, settings=settings)

    # -------------------------------------------------------------------------
    # State access
    # -------------------------------------------------------------------------

    @property
    def state(self) -> MapState:
        return self._state

    @property
    def history(self) -> HistoryManager:
        return self._history

    @property
    def current_floor(self) -> int:
        return self._state.current_floor

    @property
    def player(self) -> PlayerPosition:
        return self._state.player

    @staticmethod
    def is_valid_coord(x: int, y: int) -> bool:
        return is_valid_coord(x, y)

    def get_cell(self, floor: int, x: int, y: int) -> Cell:
        """
        Get a cell, materializing an empty one on first access.

        Raises:
            OutOfRangeError: For an invalid floor or off-grid coordinate
        """
        check_floor(floor)
        check_coord(x, y)
        return self._state.floor(floor).get(CellCoord(x, y))

    def _floor(self, floor: int, x: int, y: int) -> Tuple[Floor, CellCoord]:
        check_floor(floor)
        check_coord(x, y)
        return self._state.floor(floor), CellCoord(x, y)

    def _peek_cell(self, floor: int, x: int, y: int) -> Cell:
        # Read-only view; an absent cell reads as empty and stays absent
        floor_obj, coord = self._floor(floor, x, y)
        return floor_obj.peek(coord) or Cell()

    def _record(self, description: str) -> None:
        self._history.record_before_mutation(self._state, description)

    def _persist(self) -> None:
        if self._storage is not None and self._settings.autosave:
            self._storage.save(self._state)

    # -------------------------------------------------------------------------
    # Walls and doors
    # -------------------------------------------------------------------------

    @staticmethod
    def _apply_wall(floor: Floor, coord: CellCoord, edge: Edge, value: bool) -> None:
        cell = floor.get(coord)
        cell.walls[edge] = value

        neighbor = coord.neighbor(edge)
        back = edge.opposite()
        adj_cell = floor.get(neighbor) if neighbor.is_valid() else None
        if adj_cell is not None:
            adj_cell.walls[back] = value

        if not value:
            if cell.door_on(edge):
                cell.door = None
            if adj_cell is not None and adj_cell.door_on(back):
                adj_cell.door = None

    def set_wall(self, floor: int, x: int, y: int, edge: EdgeLike, value: bool) -> None:
        """Set the wall on one edge, keeping the neighbor's side in step."""
        edge = _as_edge(edge)
        floor_obj, coord = self._floor(floor, x, y)

        self._record(f"{'Add' if value else 'Remove'} wall {edge.value} at {coord.key}")
        self._apply_wall(floor_obj, coord, edge, bool(value))
        logger.debug("Floor %d: wall %s at %s = %s", floor, edge.value, coord.key, value)
        self._persist()

    def toggle_wall(self, floor: int, x: int, y: int, edge: EdgeLike) -> bool:
        """Flip the wall on an edge. Returns the new wall value."""
        edge = _as_edge(edge)
        value = not self._peek_cell(floor, x, y).has_wall(edge)
        self.set_wall(floor, x, y, edge, value)
        return value

    def set_door(self, floor: int, x: int, y: int, edge: EdgeLike,
                 door_type: Union[DoorType, str, None]) -> None:
        """
        Place a door on an edge, or remove the cell's door with None.

        A missing supporting wall is created first. A cell holds one door, so
        a door on another edge of the same cell is replaced.
        """
        edge = _as_edge(edge)
        door_type = _as_door_type(door_type)
        floor_obj, coord = self._floor(floor, x, y)

        if door_type is None:
            self._record(f"Remove door at {coord.key}")
            floor_obj.get(coord).door = None
        else:
            self._record(f"Place {door_type.value} door {edge.value} at {coord.key}")
            if not floor_obj.get(coord).has_wall(edge):
                self._apply_wall(floor_obj, coord, edge, True)
            floor_obj.get(coord).door = Door(edge=edge, door_type=door_type)

        logger.debug("Floor %d: door %s at %s = %s", floor, edge.value, coord.key,
                     door_type.value if door_type else None)
        self._persist()

    def cycle_door(self, floor: int, x: int, y: int, edge: EdgeLike,
                   door_type: Union[DoorType, str] = DoorType.NORMAL) -> Optional[DoorType]:
        """
        Door tool click: step an existing door on this edge through DOOR_CYCLE
        (the last step removes it, a type outside the cycle becomes the first
        type), or place `door_type` if there is none.

        Returns:
            The door type now on the edge, or None if removed
        """
        edge = _as_edge(edge)
        door_type = _as_door_type(door_type)
        existing = self._peek_cell(floor, x, y).door_on(edge)

        if existing is None:
            new_type: Optional[DoorType] = door_type
        elif existing.door_type not in DOOR_CYCLE:
            new_type = DOOR_CYCLE[0]
        elif existing.door_type == DOOR_CYCLE[-1]:
            new_type = None
        else:
            new_type = DOOR_CYCLE[DOOR_CYCLE.index(existing.door_type) + 1]

        self.set_door(floor, x, y, edge, new_type)
        return new_type

    # -------------------------------------------------------------------------
    # Cell fields
    # -------------------------------------------------------------------------

    def set_content(self, floor: int, x: int, y: int,
                    content: Union[ContentType, str, None]) -> None:
        content = _as_content(content)
        floor_obj, coord = self._floor(floor, x, y)

        self._record(f"Set content at {coord.key}")
        floor_obj.get(coord).content = content
        self._persist()

    def toggle_content(self, floor: int, x: int, y: int,
                       content: Union[ContentType, str]) -> Optional[ContentType]:
        """Set content, or clear it if the cell already holds that tag."""
        content = _as_content(content)
        current = self._peek_cell(floor, x, y).content
        new_content = None if current == content else content
        self.set_content(floor, x, y, new_content)
        return new_content

    def set_note(self, floor: int, x: int, y: int, note: str) -> None:
        floor_obj, coord = self._floor(floor, x, y)

        self._record(f"Edit note at {coord.key}")
        floor_obj.get(coord).note = note or ""
        self._persist()

    def erase_cell(self, floor: int, x: int, y: int) -> None:
        """Clear a cell's content and note in one step; walls are kept."""
        floor_obj, coord = self._floor(floor, x, y)

        self._record(f"Erase {coord.key}")
        cell = floor_obj.get(coord)
        cell.content = None
        cell.note = ""
        self._persist()

    def set_teleporter_id(self, floor: int, x: int, y: int,
                          teleporter_id: Optional[str]) -> None:
        floor_obj, coord = self._floor(floor, x, y)

        self._record(f"Link teleporter at {coord.key}")
        floor_obj.get(coord).teleporter_id = teleporter_id
        self._persist()

    def set_passthrough_id(self, floor: int, x: int, y: int,
                           passthrough_id: Optional[str]) -> None:
        floor_obj, coord = self._floor(floor, x, y)

        self._record(f"Link passthrough at {coord.key}")
        floor_obj.get(coord).passthrough_id = passthrough_id
        self._persist()

    # -------------------------------------------------------------------------
    # Player and floor selection (navigation state, not undoable)
    # -------------------------------------------------------------------------

    def set_player_position(self, x: int, y: int, facing: FacingLike = Facing.N) -> None:
        facing = _as_facing(facing)
        check_coord(x, y)
        self._state.player = PlayerPosition(x=x, y=y, facing=facing)
        self._persist()

    def move_player(self, direction: FacingLike) -> PlayerPosition:
        """
        Step one cell in a compass direction, stopping at the grid edge.
        The player ends up facing `direction` either way.
        """
        direction = _as_facing(direction)
        dx, dy = direction.edge.offset
        pos = self._state.player
        x, y = pos.x + dx, pos.y + dy
        if not is_valid_coord(x, y):
            x, y = pos.x, pos.y
        self.set_player_position(x, y, direction)
        return self._state.player

    def turn_player(self) -> Facing:
        """Rotate the player's facing clockwise in place."""
        pos = self._state.player
        self.set_player_position(pos.x, pos.y, pos.facing.turned_right())
        return self._state.player.facing

    def set_current_floor(self, floor: int) -> None:
        check_floor(floor)
        self._state.current_floor = floor
        self._persist()

    # -------------------------------------------------------------------------
    # Whole-floor operations
    # -------------------------------------------------------------------------

    def clear_floor(self, floor: int) -> None:
        check_floor(floor)
        self._record(f"Clear floor {floor}")
        self._state.floors[floor] = Floor()
        logger.info("Cleared floor %d", floor)
        self._persist()

    def clear_all(self) -> None:
        self._record("Clear map")
        self._state = MapState()
        logger.info("Cleared map")
        self._persist()

    def rotate_floor_90(self, floor: int) -> None:
        """Rotate a floor 90° clockwise (and the player, if on it)."""
        check_floor(floor)
        self._record(f"Rotate floor {floor}")
        rotation.rotate_floor_90(self._state, floor)
        self._persist()

    # -------------------------------------------------------------------------
    # Undo / redo
    # -------------------------------------------------------------------------

    def undo(self) -> bool:
        """Restore the state before the last action. False if nothing to undo."""
        restored = self._history.undo(self._state)
        if restored is None:
            return False
        self._state = restored
        self._persist()
        return True

    def redo(self) -> bool:
        """Re-apply the last undone action. False if nothing to redo."""
        restored = self._history.redo(self._state)
        if restored is None:
            return False
        self._state = restored
        self._persist()
        return True

    @property
    def can_undo(self) -> bool:
        return self._history.can_undo

    @property
    def can_redo(self) -> bool:
        return self._history.can_redo

    # -------------------------------------------------------------------------
    # Navigation aids
    # -------------------------------------------------------------------------

    def find_path(self, floor: int, start_x: int, start_y: int,
                  end_x: int, end_y: int) -> Optional[Path]:
        """Shortest path as (x, y) tuples, or None if unreachable."""
        check_floor(floor)
        return pathfinding.find_path(self._state.floor(floor), start_x, start_y, end_x, end_y)

    def path_to_directions(self, path: Optional[Path],
                           start_facing: Optional[FacingLike] = None,
                           floor: Optional[int] = None) -> List[DirectionStep]:
        """
        Compressed walking directions for a path.

        Defaults to the player's facing and the current floor.
        """
        facing = _as_facing(start_facing) if start_facing is not None else self._state.player.facing
        floor_number = floor if floor is not None else self._state.current_floor
        check_floor(floor_number)
        return pathfinding.path_to_directions(path, facing, self._state.floor(floor_number))

    def route_from_player(self, end_x: int, end_y: int) -> Tuple[Optional[Path], List[DirectionStep]]:
        """Path and directions from the player to a cell on the current floor."""
        pos = self._state.player
        path = self.find_path(self._state.current_floor, pos.x, pos.y, end_x, end_y)
        return path, self.path_to_directions(path)

    def flood_fill_explored(self, floor: int, start_x: int, start_y: int) -> None:
        """Mark the area reachable from a cell as explored (not undoable)."""
        check_floor(floor)
        flood_fill.flood_fill_explored(self._state.floor(floor), start_x, start_y)
        self._persist()

    # -------------------------------------------------------------------------
    # Import / export
    # -------------------------------------------------------------------------

    def export_dict(self) -> Dict[str, Any]:
        return self._state.to_dict()

    def export_json(self) -> str:
        return json.dumps(self.export_dict(), indent=2, ensure_ascii=False)

    @staticmethod
    def export_filename(today: Optional[date] = None) -> str:
        """Suggested download name, e.g. dungeon-map-2024-05-01.json."""
        today = today or date.today()
        return f"{EXPORT_FILENAME_PREFIX}-{today.isoformat()}.json"

    def validate_document(self, data: Any) -> ValidationResult:
        return validate_map_document(data)

    def import_dict(self, data: Any) -> bool:
        """
        Replace the map with a parsed document.

        Returns:
            True if imported; False if the document failed validation, in
            which case the current map is untouched
        """
        result = validate_map_document(data)
        if not result.passed:
            logger.warning("Rejected map import:\n%s", result.report())
            return False

        new_state = MapState.from_dict(data)
        self._record("Import map")
        self._state = new_state
        logger.info("Imported map (current floor %d)", new_state.current_floor)
        self._persist()
        return True

    def import_json(self, text: str) -> bool:
        try:
            data = json.loads(text)
        except (json.JSONDecodeError, TypeError):
            logger.warning("Rejected map import: not valid JSON")
            return False
        return self.import_dict(data)
