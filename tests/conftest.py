import pytest

from dungeon_mapper.map_model import MapEditor
from dungeon_mapper.storage import MapStorage


@pytest.fixture
def editor():
    return MapEditor()


@pytest.fixture
def tmp_storage(tmp_path):
    return MapStorage(tmp_path / "map.json")


@pytest.fixture
def stored_editor(tmp_storage):
    return MapEditor(storage=tmp_storage)
