"""
Dense numpy views of a sparse floor.

Arrays are indexed [y, x] with shape (GRID_SIZE, GRID_SIZE). Edge masks hold
one bit per edge (Edge.bit): north=1, east=2, south=4, west=8.
"""

from typing import Dict, Iterator, Tuple

import numpy as np

from dungeon_mapper.config import GRID_SIZE
from .data_model import Floor, EDGES, ContentType, Cell, CellCoord


def _on_grid(floor: Floor) -> Iterator[Tuple[CellCoord, Cell]]:
    # Leniently loaded saves may carry off-grid keys
    for coord, cell in floor.cells.items():
        if coord.is_valid():
            yield coord, cell


def wall_mask(floor: Floor) -> np.ndarray:
    """Bitmask of wall flags per cell."""
    mask = np.zeros((GRID_SIZE, GRID_SIZE), dtype=np.uint8)
    for coord, cell in _on_grid(floor):
        bits = 0
        for edge in EDGES:
            if cell.has_wall(edge):
                bits |= edge.bit
        mask[coord.y, coord.x] = bits
    return mask


def door_mask(floor: Floor) -> np.ndarray:
    """Bit of the door edge per cell (0 where the cell has no door)."""
    mask = np.zeros((GRID_SIZE, GRID_SIZE), dtype=np.uint8)
    for coord, cell in _on_grid(floor):
        if cell.door is not None:
            mask[coord.y, coord.x] = cell.door.edge.bit
    return mask


def edge_masks(floor: Floor) -> Tuple[np.ndarray, np.ndarray]:
    """(walls, doors) for a single pass over the floor."""
    return wall_mask(floor), door_mask(floor)


def content_mask(floor: Floor, content: ContentType) -> np.ndarray:
    """Boolean mask of cells carrying the given content tag."""
    mask = np.zeros((GRID_SIZE, GRID_SIZE), dtype=bool)
    for coord, cell in _on_grid(floor):
        if cell.content == content:
            mask[coord.y, coord.x] = True
    return mask


def occupancy_mask(floor: Floor) -> np.ndarray:
    """Boolean mask of cells that carry any state."""
    mask = np.zeros((GRID_SIZE, GRID_SIZE), dtype=bool)
    for coord, cell in _on_grid(floor):
        if not cell.is_empty:
            mask[coord.y, coord.x] = True
    return mask


def marked_mask(floor: Floor) -> np.ndarray:
    """Boolean mask of cells the player has drawn on."""
    mask = np.zeros((GRID_SIZE, GRID_SIZE), dtype=bool)
    for coord, cell in _on_grid(floor):
        mask[coord.y, coord.x] = cell.is_marked
    return mask


def floor_summary(floor: Floor) -> Dict[str, int]:
    """
    Counts describing a floor.

    Returns:
        Dict with 'cells' (non-empty cells), 'marked', 'wall_edges'
        (cell-side wall flags, so an interior wall counts twice),
        'doors', 'explored' and 'darkness'
    """
    walls, doors = edge_masks(floor)
    wall_edges = sum(int(np.count_nonzero(walls & edge.bit)) for edge in EDGES)
    return {
        'cells': int(np.count_nonzero(occupancy_mask(floor))),
        'marked': int(np.count_nonzero(marked_mask(floor))),
        'wall_edges': wall_edges,
        'doors': int(np.count_nonzero(doors)),
        'explored': int(np.count_nonzero(content_mask(floor, ContentType.EXPLORED))),
        'darkness': int(np.count_nonzero(content_mask(floor, ContentType.DARKNESS))),
    }
