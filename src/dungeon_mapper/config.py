"""
Editor configuration and grid constants.

Grid geometry is fixed: every floor is GRID_SIZE x GRID_SIZE cells and a map
always carries FLOOR_COUNT floors numbered from 1.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


GRID_SIZE = 20          # Cells per side of a floor
FLOOR_COUNT = 10        # Floors are numbered 1..FLOOR_COUNT
MAX_HISTORY = 100       # Undo depth before the oldest snapshot is evicted

STORAGE_FILENAME = "dungeon-map.json"
EXPORT_FILENAME_PREFIX = "dungeon-map"


def get_data_dir() -> Path:
    """
    Get the directory for storing the autosaved map.

    Returns:
        Path to ~/.config/dungeon_mapper/
        Creates the directory if it doesn't exist.
    """
    config_dir = Path.home() / ".config" / "dungeon_mapper"
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


@dataclass
class EditorSettings:
    """
    Runtime settings for a MapEditor.

    Attributes:
        max_history: Maximum number of undo snapshots retained
        autosave: Persist after every mutation when a storage is attached
        storage_path: Save file location (None = default data dir)
    """
    max_history: int = MAX_HISTORY
    autosave: bool = True
    storage_path: Optional[Path] = None

    def resolve_storage_path(self) -> Path:
        """Return the configured save file path, falling back to the data dir."""
        if self.storage_path is not None:
            return Path(self.storage_path)
        return get_data_dir() / STORAGE_FILENAME
