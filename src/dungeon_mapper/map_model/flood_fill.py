"""
Flood fill of the area reachable from a cell, marking it explored.

Fill rules:
- Spreads through edges without a wall flag; doors are ignored
- Darkness cells stop the fill and keep their content
- Empty cells become explored; other content is kept but still spreads
"""

import logging
from collections import deque
from typing import Set

from .data_model import (
    Floor, CellCoord, EDGES, OPAQUE_CONTENT, EXPLORED_CONTENT, check_coord,
)

logger = logging.getLogger(__name__)


def flood_fill_explored(floor: Floor, start_x: int, start_y: int) -> None:
    """
    Mark every cell reachable from the seed as explored, in place.

    Raises:
        OutOfRangeError: If the seed is off the grid
    """
    check_coord(start_x, start_y)

    start = CellCoord(start_x, start_y)
    visited: Set[CellCoord] = {start}
    queue = deque([start])
    marked = 0

    while queue:
        current = queue.popleft()
        cell = floor.peek(current)

        if cell is not None and cell.content == OPAQUE_CONTENT:
            continue

        if cell is None or cell.content in (None, EXPLORED_CONTENT):
            floor.get(current).content = EXPLORED_CONTENT
            marked += 1

        for edge in EDGES:
            if cell is not None and cell.has_wall(edge):
                continue
            nxt = current.neighbor(edge)
            if nxt in visited:
                continue
            visited.add(nxt)
            if not nxt.is_valid():
                continue
            queue.append(nxt)

    logger.debug("Flood fill from %s marked %d cells", start.key, marked)
