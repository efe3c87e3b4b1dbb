"""
90° clockwise rotation of a whole floor.

(x, y) -> (GRID_SIZE - 1 - y, x); wall and door edges relabel
n->e->s->w->n. Absent cells stay absent.
"""

import logging
from typing import Dict

from .data_model import MapState, Floor, Cell, CellCoord

logger = logging.getLogger(__name__)


def rotate_floor_cells(floor: Floor) -> Floor:
    """Return a new floor holding the rotated cells of `floor`."""
    rotated: Dict[CellCoord, Cell] = {
        coord.rotated_cw(): cell.rotated_cw()
        for coord, cell in floor.cells.items()
    }
    return Floor(cells=rotated)


def rotate_floor_90(state: MapState, floor_number: int) -> None:
    """
    Rotate one floor of the map in place.

    The player is rotated with the floor only when it is the current floor.

    Raises:
        OutOfRangeError: If the floor number is invalid
    """
    floor = state.floor(floor_number)
    state.floors[floor_number] = rotate_floor_cells(floor)

    if state.current_floor == floor_number:
        state.player = state.player.rotated_cw()

    logger.info("Rotated floor %d (%d cells)", floor_number, len(floor.cells))
