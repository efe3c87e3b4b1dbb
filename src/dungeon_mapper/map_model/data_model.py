"""
Data model for the dungeon map editor.

Defines the core data structures for hand-drawn floor maps:
- Edge: Cell side enum (north, east, south, west)
- Facing: Player compass facing (N, E, S, W)
- DoorType / ContentType: Closed sets of door kinds and floor features
- CellCoord: Grid position (x, y integers, y increases northward)
- Door, Cell: Per-cell wall flags, door, content tag, note and link ids
- Floor: Sparse mapping of coordinates to cells
- PlayerPosition: The single player marker
- MapState: Complete map with all floors, current floor and player

Rotation System:
- Floors rotate 90° clockwise only; four rotations are the identity
- CellCoord.rotated_cw() maps (x, y) -> (GRID_SIZE - 1 - y, x)
- Edge.rotated_cw() / Facing.rotated_cw() relabel n->e->s->w->n
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple, Any, List

from dungeon_mapper.config import GRID_SIZE, FLOOR_COUNT


# =============================================================================
# EXCEPTIONS
# =============================================================================

class MapError(Exception):
    pass


class OutOfRangeError(MapError):
    """Raised for coordinates outside the grid or floors outside 1..FLOOR_COUNT."""
    pass


def is_valid_coord(x: int, y: int) -> bool:
    """Check whether (x, y) lies on the grid."""
    return 0 <= x < GRID_SIZE and 0 <= y < GRID_SIZE


def check_coord(x: int, y: int) -> None:
    if not is_valid_coord(x, y):
        raise OutOfRangeError(
            f"Coordinate ({x}, {y}) outside grid 0..{GRID_SIZE - 1}"
        )


def check_floor(floor: int) -> None:
    if not 1 <= floor <= FLOOR_COUNT:
        raise OutOfRangeError(f"Floor {floor} outside 1..{FLOOR_COUNT}")


# =============================================================================
# ENUMS
# =============================================================================

class Edge(Enum):
    """Cell side. Values are the serialized keys."""
    NORTH = "n"  # +Y direction
    EAST = "e"   # +X direction
    SOUTH = "s"  # -Y direction
    WEST = "w"   # -X direction

    def opposite(self) -> 'Edge':
        """Return the edge on the other side of a shared boundary."""
        opposites = {
            Edge.NORTH: Edge.SOUTH,
            Edge.SOUTH: Edge.NORTH,
            Edge.EAST: Edge.WEST,
            Edge.WEST: Edge.EAST,
        }
        return opposites[self]

    def rotated_cw(self) -> 'Edge':
        """Return the edge after a 90° clockwise rotation."""
        return EDGES[(EDGES.index(self) + 1) % 4]

    @property
    def offset(self) -> Tuple[int, int]:
        """(dx, dy) to the neighbor across this edge."""
        offsets = {
            Edge.NORTH: (0, 1),
            Edge.SOUTH: (0, -1),
            Edge.EAST: (1, 0),
            Edge.WEST: (-1, 0),
        }
        return offsets[self]

    @property
    def bit(self) -> int:
        """Bit used by the dense edge masks."""
        return 1 << EDGES.index(self)


# Clockwise order, starting north
EDGES: List[Edge] = [Edge.NORTH, Edge.EAST, Edge.SOUTH, Edge.WEST]


class Facing(Enum):
    """Compass direction the player faces."""
    N = "N"
    E = "E"
    S = "S"
    W = "W"

    def turned_right(self) -> 'Facing':
        return FACINGS[(FACINGS.index(self) + 1) % 4]

    def turned_left(self) -> 'Facing':
        return FACINGS[(FACINGS.index(self) + 3) % 4]

    def rotated_cw(self) -> 'Facing':
        """Facing after the map itself is rotated 90° clockwise."""
        return self.turned_right()

    def clockwise_steps_to(self, other: 'Facing') -> int:
        """Quarter turns clockwise needed to face `other` (0..3)."""
        return (FACINGS.index(other) - FACINGS.index(self)) % 4

    @property
    def edge(self) -> Edge:
        """The cell edge in front of the player."""
        return EDGES[FACINGS.index(self)]

    @staticmethod
    def from_edge(edge: Edge) -> 'Facing':
        return FACINGS[EDGES.index(edge)]


FACINGS: List[Facing] = [Facing.N, Facing.E, Facing.S, Facing.W]


class DoorType(Enum):
    """Kinds of door that can sit in a wall."""
    NORMAL = "normal"
    LOCKED = "locked"
    SECRET = "secret"
    ONE_WAY = "one-way"
    SECRET_ONE_WAY = "secret-one-way"
    TELEPORTER = "teleporter"


class ContentType(Enum):
    """Floor features; a cell holds at most one."""
    STAIRS_UP = "stairs-up"
    STAIRS_DOWN = "stairs-down"
    TELEPORTER = "teleporter"
    SPINNER = "spinner"
    PIT = "pit"
    CHUTE = "chute"
    ELEVATOR = "elevator"
    DARKNESS = "darkness"
    ANTIMAGIC = "antimagic"
    ENCOUNTER = "encounter"
    INACCESSIBLE = "inaccessible"
    EXPLORED = "explored"

    @property
    def icon(self) -> str:
        return CONTENT_CATALOG[self][0]

    @property
    def label(self) -> str:
        return CONTENT_CATALOG[self][1]


# Display data handed to the UI layer: {content: (icon, label)}
CONTENT_CATALOG: Dict[ContentType, Tuple[str, str]] = {
    ContentType.STAIRS_UP: ('↑', 'Stairs Up'),
    ContentType.STAIRS_DOWN: ('↓', 'Stairs Down'),
    ContentType.TELEPORTER: ('◎', 'Teleporter'),
    ContentType.SPINNER: ('⟳', 'Spinner'),
    ContentType.PIT: ('○', 'Pit'),
    ContentType.CHUTE: ('⇓', 'Chute'),
    ContentType.ELEVATOR: ('⬍', 'Elevator'),
    ContentType.DARKNESS: ('▪', 'Darkness'),
    ContentType.ANTIMAGIC: ('✕', 'Anti-magic'),
    ContentType.ENCOUNTER: ('!', 'Encounter'),
    ContentType.INACCESSIBLE: ('▒', 'Inaccessible'),
    ContentType.EXPLORED: ('·', 'Explored'),
}

# Blocks flood fill even where no wall exists
OPAQUE_CONTENT = ContentType.DARKNESS
EXPLORED_CONTENT = ContentType.EXPLORED


# =============================================================================
# GRID TYPES
# =============================================================================

@dataclass
class CellCoord:
    """Grid cell coordinate."""
    x: int
    y: int

    def __hash__(self):
        return hash((self.x, self.y))

    def __eq__(self, other):
        if not isinstance(other, CellCoord):
            return False
        return self.x == other.x and self.y == other.y

    def neighbor(self, edge: Edge) -> 'CellCoord':
        """Get the neighboring cell across the given edge (may be off-grid)."""
        dx, dy = edge.offset
        return CellCoord(self.x + dx, self.y + dy)

    def is_valid(self) -> bool:
        return is_valid_coord(self.x, self.y)

    def rotated_cw(self) -> 'CellCoord':
        """Position after a 90° clockwise rotation of the whole grid."""
        return CellCoord(GRID_SIZE - 1 - self.y, self.x)

    def edge_towards(self, other: 'CellCoord') -> Optional[Edge]:
        """Edge shared with an orthogonally adjacent cell, or None."""
        delta = (other.x - self.x, other.y - self.y)
        for edge in EDGES:
            if edge.offset == delta:
                return edge
        return None

    @property
    def key(self) -> str:
        """Serialized "x,y" key."""
        return f"{self.x},{self.y}"

    @staticmethod
    def from_key(key: str) -> 'CellCoord':
        x_str, y_str = key.split(',')
        return CellCoord(int(x_str), int(y_str))

    def as_tuple(self) -> Tuple[int, int]:
        return (self.x, self.y)


@dataclass
class Door:
    """A door set into the wall on one edge of a cell."""
    edge: Edge
    door_type: DoorType = DoorType.NORMAL

    def rotated_cw(self) -> 'Door':
        return Door(edge=self.edge.rotated_cw(), door_type=self.door_type)

    def to_dict(self) -> Dict[str, str]:
        return {'edge': self.edge.value, 'type': self.door_type.value}

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> 'Door':
        return Door(edge=Edge(data['edge']), door_type=DoorType(data['type']))


def _no_walls() -> Dict[Edge, bool]:
    return {edge: False for edge in EDGES}


@dataclass
class Cell:
    """State of one grid cell."""
    walls: Dict[Edge, bool] = field(default_factory=_no_walls)
    door: Optional[Door] = None
    content: Optional[ContentType] = None
    note: str = ""
    teleporter_id: Optional[str] = None
    passthrough_id: Optional[str] = None

    def has_wall(self, edge: Edge) -> bool:
        return self.walls.get(edge, False)

    def door_on(self, edge: Edge) -> Optional[Door]:
        """The cell's door if it sits on `edge`."""
        if self.door is not None and self.door.edge == edge:
            return self.door
        return None

    @property
    def is_empty(self) -> bool:
        """True if the cell is indistinguishable from a never-touched cell."""
        return (not any(self.walls.values()) and self.door is None
                and self.content is None and not self.note
                and self.teleporter_id is None and self.passthrough_id is None)

    @property
    def is_marked(self) -> bool:
        """True if the player has drawn anything here (wall, content or note)."""
        return any(self.walls.values()) or self.content is not None or bool(self.note)

    def rotated_cw(self) -> 'Cell':
        """Copy of this cell with walls and door relabeled for a clockwise turn."""
        return Cell(
            walls={edge.rotated_cw(): value for edge, value in self.walls.items()},
            door=self.door.rotated_cw() if self.door else None,
            content=self.content,
            note=self.note,
            teleporter_id=self.teleporter_id,
            passthrough_id=self.passthrough_id,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            'walls': {edge.value: self.has_wall(edge) for edge in EDGES},
            'door': self.door.to_dict() if self.door else None,
            'content': self.content.value if self.content else None,
            'note': self.note,
            'teleporterId': self.teleporter_id,
            'passthroughId': self.passthrough_id,
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> 'Cell':
        """Create from dictionary. Missing fields take their defaults."""
        walls_data = data.get('walls') or {}
        door_data = data.get('door')
        content = data.get('content')
        return Cell(
            walls={edge: bool(walls_data.get(edge.value, False)) for edge in EDGES},
            door=Door.from_dict(door_data) if door_data else None,
            content=ContentType(content) if content else None,
            note=data.get('note') or "",
            teleporter_id=data.get('teleporterId'),
            passthrough_id=data.get('passthroughId'),
        )


@dataclass
class Floor:
    """Sparse cell storage for one floor; absent cells are empty."""
    cells: Dict[CellCoord, Cell] = field(default_factory=dict)

    def get(self, coord: CellCoord) -> Cell:
        """Get the cell at coord, materializing an empty one if absent."""
        cell = self.cells.get(coord)
        if cell is None:
            cell = Cell()
            self.cells[coord] = cell
        return cell

    def peek(self, coord: CellCoord) -> Optional[Cell]:
        """Get the cell at coord without materializing it."""
        return self.cells.get(coord)

    def has_wall(self, coord: CellCoord, edge: Edge) -> bool:
        cell = self.cells.get(coord)
        return cell is not None and cell.has_wall(edge)

    def door_between(self, coord: CellCoord, edge: Edge) -> Optional[Door]:
        """Door on the shared edge, recorded on either side."""
        cell = self.cells.get(coord)
        if cell is not None and cell.door_on(edge):
            return cell.door
        other = self.cells.get(coord.neighbor(edge))
        if other is not None and other.door_on(edge.opposite()):
            return other.door
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {'cells': {coord.key: cell.to_dict() for coord, cell in self.cells.items()}}

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> 'Floor':
        floor = Floor()
        for key, cell_data in (data.get('cells') or {}).items():
            floor.cells[CellCoord.from_key(key)] = Cell.from_dict(cell_data)
        return floor


@dataclass
class PlayerPosition:
    """The player marker; one per map, independent of floor."""
    x: int = 0
    y: int = 0
    facing: Facing = Facing.N

    @property
    def coord(self) -> CellCoord:
        return CellCoord(self.x, self.y)

    def rotated_cw(self) -> 'PlayerPosition':
        coord = self.coord.rotated_cw()
        return PlayerPosition(x=coord.x, y=coord.y, facing=self.facing.rotated_cw())

    def to_dict(self) -> Dict[str, Any]:
        return {'x': self.x, 'y': self.y, 'facing': self.facing.value}

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> 'PlayerPosition':
        return PlayerPosition(
            x=int(data.get('x', 0)),
            y=int(data.get('y', 0)),
            facing=Facing(data.get('facing', 'N')),
        )


def _all_floors() -> Dict[int, Floor]:
    return {number: Floor() for number in range(1, FLOOR_COUNT + 1)}


@dataclass
class MapState:
    """Complete map: every floor, the current floor and the player."""
    current_floor: int = 1
    player: PlayerPosition = field(default_factory=PlayerPosition)
    floors: Dict[int, Floor] = field(default_factory=_all_floors)

    def floor(self, number: int) -> Floor:
        """Get a floor by number, raising OutOfRangeError for unknown floors."""
        check_floor(number)
        return self.floors.setdefault(number, Floor())

    def to_dict(self) -> Dict[str, Any]:
        """Serialize map to dictionary for JSON export."""
        return {
            'currentFloor': self.current_floor,
            'playerPosition': self.player.to_dict(),
            'floors': {
                str(number): floor.to_dict()
                for number, floor in sorted(self.floors.items())
            },
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> 'MapState':
        """Deserialize map from dictionary.

        Floors missing from the document are created empty so every map
        carries the full set of floors.
        """
        state = MapState(
            current_floor=int(data.get('currentFloor', 1)),
            player=PlayerPosition.from_dict(data.get('playerPosition') or {}),
        )
        for key, floor_data in (data.get('floors') or {}).items():
            state.floors[int(key)] = Floor.from_dict(floor_data or {})
        return state
