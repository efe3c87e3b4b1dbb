"""
Structural validation of serialized map documents.

Defines the types used to report import problems:
- Severity: Issue severity levels (INFO, WARN, FAIL)
- ValidationIssue: Individual validation finding
- ValidationResult: Collection of issues with pass/fail status

validate_map_document() checks a parsed JSON document before it replaces the
editor's state. Any FAIL issue rejects the import.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, List, Optional

from dungeon_mapper.config import GRID_SIZE, FLOOR_COUNT
from .data_model import Edge, EDGES, DoorType, ContentType, Facing, CellCoord


class Severity(Enum):
    """Validation issue severity levels.

    - INFO: Informational, doesn't affect pass/fail
    - WARN: Tolerated, a default is substituted
    - FAIL: Rejects the document
    """
    INFO = auto()
    WARN = auto()
    FAIL = auto()

    def __str__(self) -> str:
        return self.name


@dataclass
class ValidationIssue:
    """Represents a single validation finding.

    Attributes:
        severity: Issue severity (INFO, WARN, FAIL)
        code: Rule code (e.g., "CELL-003")
        message: Human-readable description
        location: Optional location ("floor 2 cell 5,5")
    """
    severity: Severity
    code: str
    message: str
    location: Optional[str] = None

    def format(self) -> str:
        location = self.location or '-'
        return f"[{self.severity}] {self.code} at={location} :: {self.message}"

    def __str__(self) -> str:
        return self.format()


@dataclass
class ValidationResult:
    """Collection of validation issues with pass/fail determination."""
    issues: List[ValidationIssue] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        """Check if validation passed (no FAIL issues)."""
        return not any(i.severity == Severity.FAIL for i in self.issues)

    @property
    def failed(self) -> bool:
        return not self.passed

    @property
    def warnings(self) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity == Severity.WARN]

    @property
    def errors(self) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity == Severity.FAIL]

    def add(self, severity: Severity, code: str, message: str,
            location: Optional[str] = None) -> None:
        self.issues.append(ValidationIssue(severity, code, message, location))

    def report(self) -> str:
        """Generate a formatted report of all issues."""
        if not self.issues:
            return "Validation passed: No issues found"

        status = "PASSED" if self.passed else "FAILED"
        lines = [f"Validation {status}: {len(self.issues)} issue(s)", "-" * 60]
        for severity in [Severity.FAIL, Severity.WARN, Severity.INFO]:
            severity_issues = [i for i in self.issues if i.severity == severity]
            if severity_issues:
                lines.append(f"\n{severity.name} ({len(severity_issues)}):")
                for issue in severity_issues:
                    lines.append(issue.format())
        return "\n".join(lines)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            'passed': self.passed,
            'issue_count': len(self.issues),
            'fail_count': len(self.errors),
            'warn_count': len(self.warnings),
            'issues': [
                {
                    'severity': str(issue.severity),
                    'code': issue.code,
                    'message': issue.message,
                    'location': issue.location,
                }
                for issue in self.issues
            ],
        }


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _enum_values(enum_cls) -> List[str]:
    return [member.value for member in enum_cls]


def _parse_cell_key(key: Any) -> Optional[CellCoord]:
    if not isinstance(key, str):
        return None
    parts = key.split(',')
    if len(parts) != 2:
        return None
    try:
        return CellCoord(int(parts[0]), int(parts[1]))
    except ValueError:
        return None


def _check_player(data: Any, result: ValidationResult) -> None:
    if data is None:
        result.add(Severity.WARN, "DOC-004", "playerPosition missing; default (0,0) N used")
        return
    if not isinstance(data, dict):
        result.add(Severity.FAIL, "DOC-004", "playerPosition must be an object")
        return
    x, y = data.get('x'), data.get('y')
    if not (_is_int(x) and _is_int(y)) or not (0 <= x < GRID_SIZE and 0 <= y < GRID_SIZE):
        result.add(Severity.FAIL, "DOC-005", f"player position ({x}, {y}) off grid")
    if data.get('facing') not in _enum_values(Facing):
        result.add(Severity.FAIL, "DOC-006", f"invalid player facing {data.get('facing')!r}")


def _check_cell(data: Any, location: str, result: ValidationResult) -> Optional[Dict[str, bool]]:
    """Check one cell; returns its wall flags for the symmetry pass."""
    if not isinstance(data, dict):
        result.add(Severity.FAIL, "CELL-002", "cell must be an object", location)
        return None

    walls: Dict[str, bool] = {}
    walls_data = data.get('walls', {})
    if not isinstance(walls_data, dict):
        result.add(Severity.FAIL, "CELL-003", "walls must be an object", location)
        walls_data = {}
    for edge_key, value in walls_data.items():
        if edge_key not in _enum_values(Edge):
            result.add(Severity.FAIL, "CELL-003", f"unknown wall edge {edge_key!r}", location)
        elif not isinstance(value, bool):
            result.add(Severity.FAIL, "CELL-003", f"wall {edge_key} must be boolean", location)
        else:
            walls[edge_key] = value

    door = data.get('door')
    if door is not None:
        if not isinstance(door, dict):
            result.add(Severity.FAIL, "CELL-004", "door must be an object or null", location)
        else:
            edge_key = door.get('edge')
            if edge_key not in _enum_values(Edge):
                result.add(Severity.FAIL, "CELL-004", f"invalid door edge {edge_key!r}", location)
            elif not walls.get(edge_key, False):
                result.add(Severity.FAIL, "CELL-005",
                           f"door on edge {edge_key} without a wall", location)
            if door.get('type') not in _enum_values(DoorType):
                result.add(Severity.FAIL, "CELL-004",
                           f"invalid door type {door.get('type')!r}", location)

    content = data.get('content')
    if content is not None and content not in _enum_values(ContentType):
        result.add(Severity.FAIL, "CELL-006", f"unknown content {content!r}", location)

    note = data.get('note', "")
    if note is not None and not isinstance(note, str):
        result.add(Severity.FAIL, "CELL-007", "note must be a string", location)

    for id_key in ('teleporterId', 'passthroughId'):
        value = data.get(id_key)
        if value is not None and not isinstance(value, (str, int)):
            result.add(Severity.FAIL, "CELL-008", f"{id_key} must be a string", location)

    return walls


def _check_symmetry(floor_number: int, walls: Dict[CellCoord, Dict[str, bool]],
                    result: ValidationResult) -> None:
    for coord, flags in walls.items():
        for edge in EDGES:
            other = coord.neighbor(edge)
            if not other.is_valid():
                continue
            # Pairs with both cells present are reported once, from the south/west cell
            if other in walls and edge in (Edge.SOUTH, Edge.WEST):
                continue
            mine = flags.get(edge.value, False)
            theirs = walls.get(other, {}).get(edge.opposite().value, False)
            if mine != theirs:
                result.add(Severity.WARN, "CELL-009",
                           f"wall {edge.value} disagrees with neighbor {other.key}",
                           f"floor {floor_number} cell {coord.key}")


def validate_map_document(data: Any) -> ValidationResult:
    """
    Validate a parsed map document against the serialized map format.

    Args:
        data: Result of json.loads on an exported map

    Returns:
        ValidationResult; `passed` is False if the document must be rejected
    """
    result = ValidationResult()

    if not isinstance(data, dict):
        result.add(Severity.FAIL, "DOC-001", "document must be an object")
        return result

    current = data.get('currentFloor')
    if current is None:
        result.add(Severity.FAIL, "DOC-002", "currentFloor missing")
    elif not _is_int(current) or not 1 <= current <= FLOOR_COUNT:
        result.add(Severity.FAIL, "DOC-002", f"currentFloor {current!r} outside 1..{FLOOR_COUNT}")

    floors = data.get('floors')
    if floors is None:
        result.add(Severity.FAIL, "DOC-003", "floors missing")
        return result
    if not isinstance(floors, dict):
        result.add(Severity.FAIL, "DOC-003", "floors must be an object")
        return result

    _check_player(data.get('playerPosition'), result)

    seen_floors = set()
    for floor_key, floor_data in floors.items():
        try:
            floor_number = int(floor_key)
        except (TypeError, ValueError):
            result.add(Severity.FAIL, "FLOOR-001", f"invalid floor key {floor_key!r}")
            continue
        if not 1 <= floor_number <= FLOOR_COUNT:
            result.add(Severity.FAIL, "FLOOR-001", f"floor {floor_number} outside 1..{FLOOR_COUNT}")
            continue
        seen_floors.add(floor_number)

        if not isinstance(floor_data, dict) or not isinstance(floor_data.get('cells', {}), dict):
            result.add(Severity.FAIL, "FLOOR-002", "floor must be an object with a cells object",
                       f"floor {floor_number}")
            continue

        walls: Dict[CellCoord, Dict[str, bool]] = {}
        for key, cell_data in floor_data.get('cells', {}).items():
            location = f"floor {floor_number} cell {key}"
            coord = _parse_cell_key(key)
            if coord is None or not coord.is_valid():
                result.add(Severity.FAIL, "CELL-001", "cell key must be \"x,y\" on the grid", location)
                continue
            flags = _check_cell(cell_data, location, result)
            if flags is not None:
                walls[coord] = flags

        _check_symmetry(floor_number, walls, result)

    missing = sorted(set(range(1, FLOOR_COUNT + 1)) - seen_floors)
    if missing:
        result.add(Severity.INFO, "FLOOR-003",
                   f"floors {missing} missing; created empty")

    return result
