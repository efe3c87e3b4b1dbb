"""
Snapshot-based undo/redo for the map editor.

Every history-tracked editor operation records a deep copy of the whole
MapState before mutating it. Undo swaps the current state for the newest
snapshot and keeps the current one for redo.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from typing import List, Optional, TYPE_CHECKING

from dungeon_mapper.config import MAX_HISTORY

if TYPE_CHECKING:
    from .data_model import MapState

logger = logging.getLogger(__name__)


@dataclass
class HistoryEntry:
    """A retained map snapshot and the action that followed it."""
    snapshot: 'MapState'
    description: str


class HistoryManager:
    """
    Manages undo/redo stacks of MapState snapshots.

    Usage:
        history = HistoryManager()
        history.record_before_mutation(state, "Set wall")
        ...mutate state...
        state = history.undo(state) or state
    """

    def __init__(self, max_undo_depth: int = MAX_HISTORY):
        self._undo_stack: List[HistoryEntry] = []
        self._redo_stack: List[HistoryEntry] = []
        self._max_depth = max_undo_depth

    def record_before_mutation(self, state: 'MapState', description: str = "Edit") -> None:
        """
        Push a snapshot of the state about to be mutated.

        Call exactly once per logical action, before the mutation is applied.
        Clears the redo stack.
        """
        self._undo_stack.append(HistoryEntry(copy.deepcopy(state), description))
        self._redo_stack.clear()  # Clear redo stack on new action

        # Limit stack size, oldest first
        if len(self._undo_stack) > self._max_depth:
            self._undo_stack.pop(0)

        logger.debug("Recorded '%s' (%d undo entries)", description, len(self._undo_stack))

    def undo(self, current: 'MapState') -> Optional['MapState']:
        """
        Step back one action.

        Returns:
            The state to restore, or None if there is nothing to undo.
        """
        if not self._undo_stack:
            return None

        entry = self._undo_stack.pop()
        self._redo_stack.append(HistoryEntry(copy.deepcopy(current), entry.description))
        return entry.snapshot

    def redo(self, current: 'MapState') -> Optional['MapState']:
        """
        Re-apply the last undone action.

        Returns:
            The state to restore, or None if there is nothing to redo.
        """
        if not self._redo_stack:
            return None

        entry = self._redo_stack.pop()
        self._undo_stack.append(HistoryEntry(copy.deepcopy(current), entry.description))
        return entry.snapshot

    @property
    def can_undo(self) -> bool:
        """Check if there are snapshots to undo."""
        return len(self._undo_stack) > 0

    @property
    def can_redo(self) -> bool:
        """Check if there are snapshots to redo."""
        return len(self._redo_stack) > 0

    @property
    def undo_description(self) -> Optional[str]:
        """Get description of the action that would be undone."""
        if self._undo_stack:
            return self._undo_stack[-1].description
        return None

    @property
    def redo_description(self) -> Optional[str]:
        """Get description of the action that would be redone."""
        if self._redo_stack:
            return self._redo_stack[-1].description
        return None

    def clear(self):
        """Clear all undo/redo history."""
        self._undo_stack.clear()
        self._redo_stack.clear()

    @property
    def max_depth(self) -> int:
        return self._max_depth

    @property
    def undo_count(self) -> int:
        """Number of snapshots in undo stack."""
        return len(self._undo_stack)

    @property
    def redo_count(self) -> int:
        """Number of snapshots in redo stack."""
        return len(self._redo_stack)
