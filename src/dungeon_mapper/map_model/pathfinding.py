"""
Shortest-path routing over a floor and its translation into walking directions.

Movement rules:
- Cells connect orthogonally across a shared edge
- A wall flag on either side of the edge blocks the move
- A door recorded on either side of the edge re-opens it, whatever its type
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

import numpy as np

from .data_model import (
    Floor, CellCoord, Edge, EDGES, Facing, check_coord,
)
from .grid_array import edge_masks

logger = logging.getLogger(__name__)

Path = List[Tuple[int, int]]


class Instruction(Enum):
    """Single walking instruction relative to the player's facing."""
    TURN_RIGHT = "turn-right"
    TURN_LEFT = "turn-left"
    OPEN_DOOR = "open-door"
    FORWARD = "forward"


@dataclass
class DirectionStep:
    """A run of identical instructions."""
    instruction: Instruction
    count: int = 1

    def __str__(self) -> str:
        if self.count == 1:
            return self.instruction.value
        return f"{self.count}×{self.instruction.value}"


def can_cross(walls: np.ndarray, doors: np.ndarray,
              coord: CellCoord, edge: Edge) -> bool:
    """
    Check whether a move from coord across edge is allowed.

    Args:
        walls: Wall bitmask from grid_array.wall_mask
        doors: Door bitmask from grid_array.door_mask
        coord: Cell being departed
        edge: Edge being crossed

    Returns:
        True if the neighbor is on the grid and the edge is open or has a door
    """
    target = coord.neighbor(edge)
    if not target.is_valid():
        return False

    back = edge.opposite()
    walled = bool(walls[coord.y, coord.x] & edge.bit) or bool(walls[target.y, target.x] & back.bit)
    if not walled:
        return True

    has_door = bool(doors[coord.y, coord.x] & edge.bit) or bool(doors[target.y, target.x] & back.bit)
    return has_door


def find_path(floor: Floor, start_x: int, start_y: int,
              end_x: int, end_y: int) -> Optional[Path]:
    """
    Breadth-first search for the shortest route between two cells.

    Args:
        floor: Floor to search (read-only, no cells are materialized)
        start_x, start_y: Start cell
        end_x, end_y: Goal cell

    Returns:
        Ordered list of (x, y) from start to goal inclusive, a single entry
        if start equals goal, or None if the goal is unreachable.

    Raises:
        OutOfRangeError: If either endpoint is off the grid
    """
    check_coord(start_x, start_y)
    check_coord(end_x, end_y)

    start = CellCoord(start_x, start_y)
    goal = CellCoord(end_x, end_y)
    if start == goal:
        return [start.as_tuple()]

    walls, doors = edge_masks(floor)

    came_from: Dict[CellCoord, Optional[CellCoord]] = {start: None}
    queue = deque([start])

    while queue:
        current = queue.popleft()
        if current == goal:
            break

        for edge in EDGES:
            if not can_cross(walls, doors, current, edge):
                continue
            nxt = current.neighbor(edge)
            if nxt in came_from:
                continue
            came_from[nxt] = current
            queue.append(nxt)

    if goal not in came_from:
        logger.debug("No path from %s to %s", start.key, goal.key)
        return None

    path: Path = []
    node: Optional[CellCoord] = goal
    while node is not None:
        path.append(node.as_tuple())
        node = came_from[node]
    path.reverse()

    logger.debug("Path %s -> %s: %d steps", start.key, goal.key, len(path) - 1)
    return path


def compress_instructions(instructions: List[Instruction]) -> List[DirectionStep]:
    """Run-length encode consecutive identical instructions."""
    steps: List[DirectionStep] = []
    for instruction in instructions:
        if steps and steps[-1].instruction == instruction:
            steps[-1].count += 1
        else:
            steps.append(DirectionStep(instruction))
    return steps


def path_to_instructions(path: Path, start_facing: Facing,
                         floor: Optional[Floor] = None) -> List[Instruction]:
    """
    Expand a path into uncompressed instructions.

    A half turn is always two right turns. When a floor is given, an
    open-door instruction precedes each move through a door.

    Raises:
        ValueError: If two consecutive path entries are not adjacent
    """
    instructions: List[Instruction] = []
    facing = start_facing

    for (x0, y0), (x1, y1) in zip(path, path[1:]):
        here = CellCoord(x0, y0)
        edge = here.edge_towards(CellCoord(x1, y1))
        if edge is None:
            raise ValueError(f"Path step ({x0}, {y0}) -> ({x1}, {y1}) is not adjacent")

        heading = Facing.from_edge(edge)
        turn = facing.clockwise_steps_to(heading)
        if turn == 3:
            instructions.append(Instruction.TURN_LEFT)
        else:
            instructions.extend([Instruction.TURN_RIGHT] * turn)

        if floor is not None and floor.door_between(here, edge) is not None:
            instructions.append(Instruction.OPEN_DOOR)

        instructions.append(Instruction.FORWARD)
        facing = heading

    return instructions


def path_to_directions(path: Optional[Path], start_facing: Facing,
                       floor: Optional[Floor] = None) -> List[DirectionStep]:
    """
    Translate a path into compressed walking directions.

    Args:
        path: Result of find_path
        start_facing: Facing before the first step
        floor: Floor the path lies on, used to detect doors

    Returns:
        List of DirectionStep; empty for a missing or single-cell path
    """
    if not path or len(path) < 2:
        return []
    return compress_instructions(path_to_instructions(path, start_facing, floor))


def format_directions(steps: List[DirectionStep]) -> str:
    """Human-readable one-line rendering, e.g. "turn-right, 3×forward"."""
    return ", ".join(str(step) for step in steps)
