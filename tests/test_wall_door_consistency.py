import itertools

import pytest

from dungeon_mapper.config import GRID_SIZE
from dungeon_mapper.map_model import (
    Edge, EDGES, DoorType, ContentType, CellCoord, OutOfRangeError,
)


def _assert_invariants(editor, floor=1):
    cells = editor.state.floor(floor).cells
    for coord, cell in cells.items():
        for edge in EDGES:
            other = coord.neighbor(edge)
            if other.is_valid():
                neighbor = cells.get(other)
                theirs = neighbor.has_wall(edge.opposite()) if neighbor else False
                assert cell.has_wall(edge) == theirs, (coord, edge)
        if cell.door is not None:
            assert cell.has_wall(cell.door.edge)


@pytest.mark.parametrize('x,y,edge,value', [
    (5, 5, 'n', True), (0, 0, 'w', True), (19, 19, 'n', True),
    (10, 3, 'e', True), (10, 3, 's', False), (0, 7, 'e', True),
])
def test_set_wall_is_symmetric(editor, x, y, edge, value):
    editor.set_wall(1, x, y, edge, value)
    e = Edge(edge)
    assert editor.get_cell(1, x, y).has_wall(e) == value
    other = CellCoord(x, y).neighbor(e)
    if other.is_valid():
        assert editor.get_cell(1, other.x, other.y).has_wall(e.opposite()) == value
    _assert_invariants(editor)


def test_boundary_wall_is_local(editor):
    editor.set_wall(1, 0, 0, Edge.SOUTH, True)
    assert editor.get_cell(1, 0, 0).has_wall(Edge.SOUTH)
    assert list(editor.state.floor(1).cells) == [CellCoord(0, 0)]


def test_removing_wall_removes_doors_on_both_sides(editor):
    editor.set_door(1, 5, 5, 'n', 'locked')
    editor.set_door(1, 5, 6, 's', 'secret')
    editor.set_wall(1, 5, 5, 'n', False)
    assert editor.get_cell(1, 5, 5).door is None
    assert editor.get_cell(1, 5, 6).door is None
    assert not editor.get_cell(1, 5, 6).has_wall(Edge.SOUTH)


def test_removing_other_wall_keeps_door(editor):
    editor.set_door(1, 5, 5, 'n', 'normal')
    editor.set_wall(1, 5, 5, 'e', True)
    editor.set_wall(1, 5, 5, 'e', False)
    assert editor.get_cell(1, 5, 5).door.door_type == DoorType.NORMAL


def test_door_creates_wall(editor):
    editor.set_door(1, 3, 3, Edge.EAST, DoorType.ONE_WAY)
    cell = editor.get_cell(1, 3, 3)
    assert cell.has_wall(Edge.EAST)
    assert cell.door.edge == Edge.EAST
    assert editor.get_cell(1, 4, 3).has_wall(Edge.WEST)
    _assert_invariants(editor)


def test_one_door_per_cell(editor):
    editor.set_door(1, 3, 3, 'n', 'normal')
    editor.set_door(1, 3, 3, 'w', 'teleporter')
    cell = editor.get_cell(1, 3, 3)
    assert cell.door.edge == Edge.WEST
    assert cell.door.door_type == DoorType.TELEPORTER
    # The wall under the replaced door stays
    assert cell.has_wall(Edge.NORTH)


def test_door_none_removes_door_keeps_wall(editor):
    editor.set_door(1, 3, 3, 'n', 'normal')
    editor.set_door(1, 3, 3, 'n', None)
    cell = editor.get_cell(1, 3, 3)
    assert cell.door is None
    assert cell.has_wall(Edge.NORTH)


def test_random_edit_sequence_keeps_invariants(editor):
    coords = [(x, y) for x, y in itertools.product(range(3), range(3))]
    ops = 0
    for (x, y), edge in itertools.product(coords, EDGES):
        ops += 1
        if ops % 3 == 0:
            editor.set_door(1, x, y, edge, DoorType.LOCKED)
        elif ops % 3 == 1:
            editor.set_wall(1, x, y, edge, True)
        else:
            editor.set_wall(1, x, y, edge, False)
        _assert_invariants(editor)


def test_out_of_range_fails_without_side_effect(editor):
    with pytest.raises(OutOfRangeError):
        editor.set_wall(1, GRID_SIZE, 0, 'n', True)
    with pytest.raises(OutOfRangeError):
        editor.get_cell(1, -1, 0)
    with pytest.raises(OutOfRangeError):
        editor.set_door(0, 1, 1, 'n', 'normal')
    assert not editor.can_undo
    assert not editor.state.floor(1).cells


def test_invalid_enum_values_rejected(editor):
    with pytest.raises(ValueError):
        editor.set_wall(1, 1, 1, 'up', True)
    with pytest.raises(ValueError):
        editor.set_door(1, 1, 1, 'n', 'portcullis')
    with pytest.raises(ValueError):
        editor.set_content(1, 1, 1, 'lava')
    assert not editor.can_undo


def test_is_valid_coord(editor):
    assert editor.is_valid_coord(0, 19)
    assert not editor.is_valid_coord(20, 0)


def test_toggle_wall(editor):
    assert editor.toggle_wall(1, 2, 2, 'n') is True
    assert editor.toggle_wall(1, 2, 2, 'n') is False
    assert not editor.get_cell(1, 2, 3).has_wall(Edge.SOUTH)


def test_cycle_door(editor):
    seen = [editor.cycle_door(1, 2, 2, 'e') for _ in range(5)]
    assert seen == [DoorType.NORMAL, DoorType.LOCKED, DoorType.SECRET, DoorType.ONE_WAY, None]
    assert editor.get_cell(1, 2, 2).door is None
    assert editor.get_cell(1, 2, 2).has_wall(Edge.EAST)


@pytest.mark.parametrize('door_type', [DoorType.TELEPORTER, DoorType.SECRET_ONE_WAY])
def test_cycle_door_restarts_type_outside_cycle(editor, door_type):
    editor.set_door(1, 2, 2, 'e', door_type)
    assert editor.cycle_door(1, 2, 2, 'e') == DoorType.NORMAL
    assert editor.get_cell(1, 2, 2).door.door_type == DoorType.NORMAL
    assert editor.cycle_door(1, 2, 2, 'e') == DoorType.LOCKED


def test_content_note_and_erase(editor):
    editor.set_content(1, 4, 4, 'spinner')
    editor.set_note(1, 4, 4, "turns you around")
    cell = editor.get_cell(1, 4, 4)
    assert cell.content == ContentType.SPINNER
    assert cell.note == "turns you around"
    editor.erase_cell(1, 4, 4)
    assert cell.content is None and cell.note == ""


def test_toggle_content(editor):
    assert editor.toggle_content(1, 4, 4, ContentType.PIT) == ContentType.PIT
    assert editor.toggle_content(1, 4, 4, 'pit') is None
    assert editor.get_cell(1, 4, 4).content is None


def test_link_ids(editor):
    editor.set_teleporter_id(2, 1, 1, "tp-a")
    editor.set_passthrough_id(2, 1, 1, "pt-7")
    cell = editor.get_cell(2, 1, 1)
    assert (cell.teleporter_id, cell.passthrough_id) == ("tp-a", "pt-7")
