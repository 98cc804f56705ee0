"""Rectangular selection and pointer-drag state."""

from __future__ import annotations

import enum
from collections.abc import Iterable
from dataclasses import dataclass

from gridcalc._address import Address
from gridcalc.calc._parser import bounding_rectangle, rectangle


class DragState(enum.Enum):
    IDLE = "idle"
    ANCHORED = "anchored"  # button down, pointer not moved yet
    DRAGGING = "dragging"


@dataclass(frozen=True)
class Selection:
    """Anchor (fixed corner), focus (moving corner) and the selected cells."""

    anchor: Address
    focus: Address
    active_set: tuple[Address, ...]

    @classmethod
    def between(cls, anchor: Address, focus: Address) -> Selection:
        """Row-major rectangle spanned by *anchor* and *focus*, inclusive."""
        anchor, focus = anchor.relative(), focus.relative()
        top_left, bottom_right = bounding_rectangle((anchor, focus))
        return cls(anchor, focus, tuple(rectangle(top_left, bottom_right)))

    @property
    def bounds(self) -> tuple[Address, Address]:
        return bounding_rectangle(self.active_set)

    def __contains__(self, address: Address) -> bool:
        return address in self.active_set

    def __len__(self) -> int:
        return len(self.active_set)


class SelectionController:
    """Turns click/drag intents into a :class:`Selection`.

    ``IDLE -> ANCHORED`` on :meth:`start_drag`, ``-> DRAGGING`` on each
    :meth:`update_drag`, back to ``IDLE`` on :meth:`end_drag`.
    """

    __slots__ = ("_selection", "_state")

    def __init__(self) -> None:
        self._selection: Selection | None = None
        self._state = DragState.IDLE

    @property
    def selection(self) -> Selection | None:
        return self._selection

    @property
    def state(self) -> DragState:
        return self._state

    @property
    def is_dragging(self) -> bool:
        return self._state is not DragState.IDLE

    def click(self, address: Address) -> Selection:
        self._selection = Selection.between(address, address)
        return self._selection

    def extend(self, address: Address) -> Selection:
        """Shift-click: rectangle from the current anchor, anchor unchanged."""
        if self._selection is None:
            return self.click(address)
        self._selection = Selection.between(self._selection.anchor, address)
        return self._selection

    def select(self, addresses: Iterable[Address]) -> Selection:
        """Select an explicit set of cells, which need not be rectangular.

        The first address becomes the anchor and the last the focus.
        """
        unique = tuple(dict.fromkeys(a.relative() for a in addresses))
        if not unique:
            raise ValueError("select() needs at least one address")
        self._selection = Selection(unique[0], unique[-1], unique)
        return self._selection

    def start_drag(self, address: Address) -> Selection:
        self._state = DragState.ANCHORED
        return self.click(address)

    def update_drag(self, address: Address) -> Selection | None:
        """Move the focus while the button is held. Ignored when idle."""
        if self._state is DragState.IDLE or self._selection is None:
            return self._selection
        self._state = DragState.DRAGGING
        self._selection = Selection.between(self._selection.anchor, address)
        return self._selection

    def end_drag(self) -> Selection | None:
        self._state = DragState.IDLE
        return self._selection

    def clamp(self, column_count: int, row_count: int) -> None:
        """Drop selected cells that no longer fit after a row/column removal."""
        if self._selection is None:
            return
        kept = [
            a for a in self._selection.active_set
            if a.column < column_count and a.row <= row_count
        ]
        if not kept:
            self._selection = None
            self._state = DragState.IDLE
        elif len(kept) != len(self._selection.active_set):
            self._selection = Selection(
                kept[0] if self._selection.anchor not in kept else self._selection.anchor,
                kept[-1] if self._selection.focus not in kept else self._selection.focus,
                tuple(kept),
            )
