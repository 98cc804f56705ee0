"""Linear undo/redo history of full-grid snapshots."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from gridcalc._address import Address
    from gridcalc._cell import Cell

logger = logging.getLogger(__name__)

MAX_HISTORY = 50


@dataclass(frozen=True)
class GridSnapshot:
    """Immutable copy of grid contents and dimensions."""

    cells: Mapping[Address, Cell]
    row_count: int
    column_count: int

    @classmethod
    def capture(
        cls, cells: Mapping[Address, Cell], row_count: int, column_count: int,
    ) -> GridSnapshot:
        # Cells are frozen, so a shallow copy of the mapping is a full copy.
        return cls(MappingProxyType(dict(cells)), row_count, column_count)


class History:
    """Bounded sequence of snapshots plus a cursor.

    ``checkpoint()`` stores the grid as it was right before a mutation;
    at most ``limit`` of these are kept. The cursor equals ``len(self)``
    while the live grid is newer than every stored entry. The first
    ``undo()`` after a mutation sets the live grid aside as the redo tip so
    that ``redo()`` can come back to it; the tip is not one of the entries.
    """

    __slots__ = ("_entries", "_index", "_limit", "_tip")

    def __init__(self, limit: int = MAX_HISTORY) -> None:
        if limit < 1:
            raise ValueError(f"History limit must be >= 1: {limit}")
        self._entries: list[GridSnapshot] = []
        self._index = 0
        self._limit = limit
        self._tip: GridSnapshot | None = None

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def index(self) -> int:
        return self._index

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def can_undo(self) -> bool:
        return self._index > 0

    @property
    def can_redo(self) -> bool:
        return self._index < len(self._entries)

    def checkpoint(self, snapshot: GridSnapshot) -> None:
        """Record the pre-mutation state, dropping any redo branch."""
        del self._entries[self._index:]
        self._tip = None
        self._entries.append(snapshot)
        if len(self._entries) > self._limit:
            del self._entries[0]
        self._index = len(self._entries)

    def undo(self, current: GridSnapshot) -> GridSnapshot | None:
        """Step back one entry. Returns the snapshot to restore, or None."""
        if self._index == 0:
            logger.debug("Nothing to undo")
            return None
        if self._index == len(self._entries):
            self._tip = current
        self._index -= 1
        return self._entries[self._index]

    def redo(self) -> GridSnapshot | None:
        """Step forward one entry. Returns the snapshot to restore, or None."""
        if not self.can_redo:
            logger.debug("Nothing to redo")
            return None
        self._index += 1
        if self._index == len(self._entries):
            return self._tip
        return self._entries[self._index]

    def clear(self) -> None:
        self._entries.clear()
        self._index = 0
        self._tip = None
