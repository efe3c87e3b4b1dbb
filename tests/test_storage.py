import json
import logging

from dungeon_mapper.config import EditorSettings
from dungeon_mapper.map_model import MapEditor, MapState, CellCoord, ContentType, Edge
from dungeon_mapper.storage import MapStorage


def test_save_and_load(tmp_storage):
    state = MapState(current_floor=4)
    state.floor(4).get(CellCoord(1, 2)).note = "altar"
    assert tmp_storage.save(state) is True
    assert tmp_storage.exists()
    assert tmp_storage.load() == state


def test_save_writes_serialized_format(tmp_storage):
    tmp_storage.save(MapState())
    with open(tmp_storage.path, encoding='utf-8') as f:
        data = json.load(f)
    assert data == MapState().to_dict()
    assert not tmp_storage.path.with_suffix(".json.tmp").exists()


def test_load_missing_file(tmp_storage):
    assert tmp_storage.load() is None


def test_load_corrupt_file(tmp_storage, caplog):
    tmp_storage.path.write_text("{ nope", encoding='utf-8')
    with caplog.at_level(logging.WARNING):
        assert tmp_storage.load() is None
    assert "Failed to load" in caplog.text


def test_load_merges_missing_floors(tmp_storage):
    tmp_storage.path.write_text(json.dumps({
        'currentFloor': 3,
        'floors': {'3': {'cells': {'1,1': {'content': 'pit'}}}},
    }), encoding='utf-8')
    state = tmp_storage.load()
    assert sorted(state.floors) == list(range(1, 11))
    assert state.floor(3).peek(CellCoord(1, 1)).content == ContentType.PIT


def test_failed_save_is_logged_not_raised(tmp_path, caplog):
    # A directory where the file should be makes the final rename fail
    target = tmp_path / "map.json"
    target.mkdir()
    editor = MapEditor(storage=MapStorage(target))

    with caplog.at_level(logging.ERROR):
        editor.set_wall(1, 0, 0, 'n', True)

    assert editor.get_cell(1, 0, 0).has_wall(Edge.NORTH)
    assert "Failed to save" in caplog.text
    assert MapStorage(target).save(MapState()) is False


def test_mutations_autosave(stored_editor, tmp_storage):
    stored_editor.set_content(1, 2, 2, 'encounter')
    assert tmp_storage.load() == stored_editor.state

    stored_editor.undo()
    assert tmp_storage.load() == MapState()


def test_navigation_state_autosaves(stored_editor, tmp_storage):
    stored_editor.set_current_floor(5)
    stored_editor.set_player_position(4, 4, 'W')
    loaded = tmp_storage.load()
    assert loaded.current_floor == 5
    assert (loaded.player.x, loaded.player.y, loaded.player.facing.value) == (4, 4, 'W')


def test_autosave_off(tmp_storage):
    editor = MapEditor(storage=tmp_storage, settings=EditorSettings(autosave=False))
    editor.set_note(1, 0, 0, "no save")
    assert not tmp_storage.exists()


def test_open_resumes_saved_map(tmp_storage):
    first = MapEditor.open(tmp_storage)
    assert first.state == MapState()
    first.set_content(2, 7, 7, 'elevator')

    second = MapEditor.open(tmp_storage)
    assert second.get_cell(2, 7, 7).content == ContentType.ELEVATOR
    assert not second.can_undo


def test_delete(tmp_storage):
    assert tmp_storage.delete() is False
    tmp_storage.save(MapState())
    assert tmp_storage.delete() is True
    assert not tmp_storage.exists()


def test_default_path_uses_data_dir(tmp_path, monkeypatch):
    monkeypatch.setattr("pathlib.Path.home", lambda: tmp_path)
    storage = MapStorage()
    assert storage.path == tmp_path / ".config" / "dungeon_mapper" / "dungeon-map.json"
    assert EditorSettings().resolve_storage_path() == storage.path
