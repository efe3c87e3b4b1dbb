import pytest

from dungeon_mapper.map_model import Facing, OutOfRangeError


def test_move_player_steps_and_faces(editor):
    pos = editor.move_player('E')
    assert (pos.x, pos.y, pos.facing) == (1, 0, Facing.E)
    pos = editor.move_player(Facing.N)
    assert (pos.x, pos.y, pos.facing) == (1, 1, Facing.N)


def test_move_player_stops_at_grid_edge(editor):
    pos = editor.move_player('S')
    assert (pos.x, pos.y, pos.facing) == (0, 0, Facing.S)
    pos = editor.move_player('W')
    assert (pos.x, pos.y, pos.facing) == (0, 0, Facing.W)

    editor.set_player_position(19, 19, 'N')
    pos = editor.move_player('N')
    assert (pos.x, pos.y) == (19, 19)


def test_move_player_ignores_walls(editor):
    # Free movement; walls only matter for routing
    editor.set_wall(1, 0, 0, 'n', True)
    pos = editor.move_player('N')
    assert (pos.x, pos.y) == (0, 1)


def test_turn_player_clockwise(editor):
    assert [editor.turn_player() for _ in range(4)] == [Facing.E, Facing.S, Facing.W, Facing.N]


def test_player_changes_are_not_undoable(editor):
    editor.set_player_position(5, 5, 'S')
    editor.move_player('E')
    editor.turn_player()
    editor.set_current_floor(7)
    assert not editor.can_undo


def test_set_player_position_rejects_off_grid(editor):
    with pytest.raises(OutOfRangeError):
        editor.set_player_position(20, 0)
    with pytest.raises(ValueError):
        editor.set_player_position(1, 1, 'NE')
    assert (editor.player.x, editor.player.y) == (0, 0)


def test_set_current_floor_range(editor):
    editor.set_current_floor(10)
    assert editor.current_floor == 10
    with pytest.raises(OutOfRangeError):
        editor.set_current_floor(0)
    assert editor.current_floor == 10


def test_route_from_player(editor):
    editor.set_player_position(0, 0, 'E')
    path, steps = editor.route_from_player(2, 0)
    assert path == [(0, 0), (1, 0), (2, 0)]
    assert [str(s) for s in steps] == ["2×forward"]
