"""
Map persistence layer.

Handles save/load of the editor's MapState to a JSON file, by default
~/.config/dungeon_mapper/dungeon-map.json. Saving is best-effort: a failed
write is logged and reported, never raised, so the in-memory edit stands.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional, Union

from dungeon_mapper.config import get_data_dir, STORAGE_FILENAME
from dungeon_mapper.map_model.data_model import MapState

logger = logging.getLogger(__name__)


class MapStorage:
    """
    File-backed store for a single map.

    Usage:
        storage = MapStorage(Path("maps/castle.json"))
        storage.save(state)
        state = storage.load() or MapState()
    """

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self._path = Path(path) if path is not None else get_data_dir() / STORAGE_FILENAME

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.exists()

    def save(self, state: MapState) -> bool:
        """
        Write the state to disk.

        Returns:
            True if written, False if the write failed (the error is logged)
        """
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, 'w', encoding='utf-8') as f:
                json.dump(state.to_dict(), f, indent=2, ensure_ascii=False)
            tmp_path.replace(self._path)
        except (OSError, TypeError, ValueError):
            logger.exception("Failed to save map data to %s", self._path)
            return False

        logger.debug("Saved map to %s", self._path)
        return True

    def load(self) -> Optional[MapState]:
        """
        Read the saved state.

        Floors missing from the file are created empty.

        Returns:
            MapState if the file exists and parses, None otherwise
        """
        if not self._path.exists():
            return None

        try:
            with open(self._path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            state = MapState.from_dict(data)
        except (OSError, json.JSONDecodeError, KeyError, TypeError, ValueError, AttributeError):
            logger.warning("Failed to load map data from %s", self._path, exc_info=True)
            return None

        logger.debug("Loaded map from %s", self._path)
        return state

    def delete(self) -> bool:
        """
        Delete the save file.

        Returns:
            True if deleted, False if not found
        """
        if self._path.exists():
            self._path.unlink()
            return True
        return False
