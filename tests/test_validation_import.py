import copy
import json
from datetime import date

from dungeon_mapper.map_model import MapEditor, MapState, ContentType, Severity, validate_map_document


def _document(**overrides):
    doc = {
        'currentFloor': 2,
        'playerPosition': {'x': 3, 'y': 4, 'facing': 'E'},
        'floors': {
            '2': {'cells': {
                '5,5': {
                    'walls': {'n': True, 'e': False, 's': False, 'w': False},
                    'door': {'edge': 'n', 'type': 'locked'},
                    'content': 'spinner', 'note': 'trap',
                    'teleporterId': None, 'passthroughId': None,
                },
                '5,6': {
                    'walls': {'n': False, 'e': False, 's': True, 'w': False},
                    'door': None, 'content': None, 'note': '',
                },
            }},
        },
    }
    doc.update(overrides)
    return doc


def _codes(result):
    return {issue.code for issue in result.issues}


def test_valid_document_passes():
    result = validate_map_document(_document())
    assert result.passed
    # Eight floors are absent from the document
    assert _codes(result) == {'FLOOR-003'}


def test_import_replaces_state_and_fills_floors(editor):
    assert editor.import_dict(_document()) is True
    assert editor.current_floor == 2
    assert (editor.player.x, editor.player.y, editor.player.facing.value) == (3, 4, 'E')
    assert sorted(editor.state.floors) == list(range(1, 11))
    cell = editor.get_cell(2, 5, 5)
    assert cell.content == ContentType.SPINNER
    assert cell.note == 'trap'


def test_import_is_undoable(editor):
    editor.set_wall(1, 0, 0, 'n', True)
    before = copy.deepcopy(editor.state)
    editor.import_dict(_document())
    assert editor.history.undo_description == "Import map"
    editor.undo()
    assert editor.state == before


def test_missing_keys_rejected_without_mutation(editor):
    editor.set_content(1, 1, 1, 'pit')
    before = copy.deepcopy(editor.state)

    no_floors = _document()
    del no_floors['floors']
    no_current = _document()
    del no_current['currentFloor']

    assert editor.import_dict(no_floors) is False
    assert editor.import_dict(no_current) is False
    assert editor.import_dict([1, 2, 3]) is False
    assert editor.state == before
    assert editor.history.undo_count == 1


def test_invalid_json_rejected(editor):
    before = copy.deepcopy(editor.state)
    assert editor.import_json("{not json") is False
    assert editor.state == before


def test_door_without_wall_rejected():
    doc = _document()
    doc['floors']['2']['cells']['5,5']['walls']['n'] = False
    result = validate_map_document(doc)
    assert not result.passed
    assert 'CELL-005' in _codes(result)


def test_asymmetric_walls_warn():
    doc = _document()
    doc['floors']['2']['cells']['5,6']['walls']['s'] = False
    result = validate_map_document(doc)
    assert result.passed
    assert [i.code for i in result.warnings] == ['CELL-009']


def test_bad_values_rejected():
    doc = _document(currentFloor=11)
    cells = doc['floors']['2']['cells']
    cells['5,5']['content'] = 'dragon'
    cells['5,5']['door']['type'] = 'portcullis'
    cells['20,1'] = {}
    doc['floors']['12'] = {'cells': {}}
    doc['playerPosition'] = {'x': 0, 'y': 0, 'facing': 'up'}

    result = validate_map_document(doc)
    assert not result.passed
    assert {'DOC-002', 'DOC-006', 'CELL-001', 'CELL-004', 'CELL-006', 'FLOOR-001'} <= _codes(result)
    assert all(issue.severity == Severity.FAIL for issue in result.errors)


def test_missing_player_position_is_tolerated(editor):
    doc = _document()
    del doc['playerPosition']
    result = validate_map_document(doc)
    assert result.passed
    assert 'DOC-004' in {i.code for i in result.warnings}
    assert editor.import_dict(doc) is True
    assert (editor.player.x, editor.player.y) == (0, 0)


def test_export_import_round_trip(editor):
    editor.set_door(3, 5, 5, 'n', 'secret')
    editor.set_content(3, 0, 0, 'stairs-up')
    editor.set_teleporter_id(3, 0, 0, 'a')
    editor.set_passthrough_id(3, 1, 0, 'b')
    editor.set_note(3, 9, 9, "skeleton")
    editor.set_current_floor(3)
    editor.set_player_position(9, 9, 'S')

    text = editor.export_json()
    assert json.loads(text)['floors']['3']['cells']['5,5']['door'] == {'edge': 'n', 'type': 'secret'}

    other = MapEditor()
    assert other.import_json(text) is True
    assert other.state == editor.state


def test_rotated_map_round_trips(editor):
    editor.set_wall(1, 5, 5, 'n', True)
    editor.rotate_floor_90(1)
    other = MapEditor()
    assert other.import_json(editor.export_json()) is True
    assert other.state == editor.state


def test_report_lists_failures():
    result = validate_map_document({'floors': {}})
    report = result.report()
    assert report.startswith("Validation FAILED")
    assert "DOC-002" in report
    assert result.to_dict()['fail_count'] == 1


def test_export_filename():
    assert MapEditor.export_filename(date(2024, 5, 1)) == "dungeon-map-2024-05-01.json"


def test_export_of_empty_map_lists_all_floors(editor):
    data = editor.export_dict()
    assert data['currentFloor'] == 1
    assert data['playerPosition'] == {'x': 0, 'y': 0, 'facing': 'N'}
    assert list(data['floors']) == [str(n) for n in range(1, 11)]
    assert MapState.from_dict(data) == MapState()
