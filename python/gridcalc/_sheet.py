"""Sheet - the edit API: cell writes, selection, clipboard, history, bulk I/O."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import replace
from typing import Any

from gridcalc._address import Address, to_address
from gridcalc._cell import Cell
from gridcalc._clipboard import ClipboardSnapshot, clipboard_text, fill_plan, paste_plan, take_snapshot
from gridcalc._config import SheetConfig
from gridcalc._grid import Grid
from gridcalc._history import GridSnapshot, History
from gridcalc._io import read_csv, write_csv
from gridcalc._selection import DragState, Selection, SelectionController
from gridcalc.calc._graph import DependencyGraph
from gridcalc.calc._parser import clip_rectangle, parse_range, rectangle
from gridcalc.calc._protocol import RecalcResult
from gridcalc.calc._recalc import Recalculator

logger = logging.getLogger(__name__)

AddressLike = Address | str


class Sheet:
    """A single grid of cells with formulas, selection, clipboard and undo.

    Every mutating call records one history checkpoint holding the grid as
    it was before the call, then recalculates affected formulas before it
    returns.

    Usage::

        sheet = Sheet()
        sheet["A1"] = "1"
        sheet["A2"] = "2"
        sheet["A3"] = "=SUM(A1:A2)"
        sheet.value("A3")  # "3"
    """

    def __init__(self, config: SheetConfig | None = None) -> None:
        self._config = config if config is not None else SheetConfig()
        self._grid = Grid(self._config.rows, self._config.columns)
        self._recalc = Recalculator(self._grid)
        self._history = History(self._config.history_limit)
        self._selection = SelectionController()
        self._clipboard: ClipboardSnapshot | None = None

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def config(self) -> SheetConfig:
        return self._config

    @property
    def row_count(self) -> int:
        return self._grid.row_count

    @property
    def column_count(self) -> int:
        return self._grid.column_count

    @property
    def grid(self) -> Grid:
        return self._grid

    @property
    def graph(self) -> DependencyGraph:
        return self._recalc.graph

    @property
    def history(self) -> History:
        return self._history

    @property
    def selection(self) -> Selection | None:
        return self._selection.selection

    @property
    def drag_state(self) -> DragState:
        return self._selection.state

    @property
    def clipboard(self) -> ClipboardSnapshot | None:
        return self._clipboard

    # ------------------------------------------------------------------
    # Cell access
    # ------------------------------------------------------------------

    def _address(self, value: AddressLike) -> Address:
        return self._grid.check(to_address(value))

    def cell(self, address: AddressLike) -> Cell:
        return self._grid.get(self._address(address))

    def value(self, address: AddressLike) -> str:
        return self.cell(address).display_value

    def __getitem__(self, key: AddressLike) -> Cell:
        """``sheet['A1']`` -> Cell."""
        return self.cell(key)

    def __setitem__(self, key: AddressLike, value: Any) -> None:
        """``sheet['A1'] = 42`` - shorthand for :meth:`set_cell_content`."""
        self.set_cell_content(key, "" if value is None else str(value))

    # ------------------------------------------------------------------
    # Write path
    # ------------------------------------------------------------------

    def _checkpoint(self) -> None:
        self._history.checkpoint(self._grid.snapshot())

    def _write(self, plan: Iterable[tuple[Address, Cell]]) -> RecalcResult:
        """Store cells, resync the graph, recalculate. No checkpoint."""
        changed: set[Address] = set()
        for address, cell in plan:
            if cell.formula is not None:
                cell = replace(cell, display_value="")
            self._grid.set(address, cell)
            self._recalc.register(address)
            changed.add(address)
        return self._recalc.recalculate(changed)

    def _remove(self, addresses: Iterable[Address]) -> RecalcResult:
        """Forget cells already dropped from the grid and recalculate readers."""
        removed = set(addresses)
        for address in removed:
            self._recalc.register(address)
        return self._recalc.recalculate(removed)

    def set_cell_content(self, address: AddressLike, raw_text: str) -> RecalcResult:
        """Set what the user typed. Text starting with ``=`` is a formula."""
        addr = self._address(address)
        current = self._grid.get(addr)
        self._checkpoint()
        return self._write([(addr, Cell.from_input(raw_text, current.style))])

    def set_cell_style(self, address: AddressLike, **changes: Any) -> Cell:
        """Apply a partial style, e.g. ``set_cell_style("A1", bold=True)``."""
        addr = self._address(address)
        current = self._grid.get(addr)
        style = current.style.merge(**changes)
        self._checkpoint()
        updated = replace(current, style=style)
        self._grid.set(addr, updated)
        return updated

    def find_and_replace(self, range_text: str, find_text: str, replace_text: str) -> int:
        """Replace text inside literal cells of a range. Returns cells changed.

        Formula cells are left alone; their results follow from their inputs.
        """
        if not find_text:
            raise ValueError("find_text must not be empty")
        corners = clip_rectangle(
            *parse_range(range_text), (self._grid.column_count, self._grid.row_count),
        )
        plan: list[tuple[Address, Cell]] = []
        for addr in rectangle(*corners) if corners is not None else ():
            cell = self._grid.get(addr)
            if cell.formula is None and find_text in cell.raw_input:
                new_raw = cell.raw_input.replace(find_text, replace_text)
                plan.append((addr, Cell.from_input(new_raw, cell.style)))
        if plan:
            self._checkpoint()
            self._write(plan)
        logger.debug("find_and_replace(%s): %d cell(s) changed", range_text, len(plan))
        return len(plan)

    def recalculate_all(self) -> RecalcResult:
        """Rebuild the dependency graph and evaluate every formula."""
        self._recalc.rebuild()
        return self._recalc.calculate()

    # ------------------------------------------------------------------
    # Selection and drag
    # ------------------------------------------------------------------

    def select(self, addresses: Iterable[AddressLike]) -> Selection:
        return self._selection.select(self._address(a) for a in addresses)

    def click(self, address: AddressLike) -> Selection:
        return self._selection.click(self._address(address))

    def extend_selection(self, address: AddressLike) -> Selection:
        """Shift-click: select the rectangle from the anchor to *address*."""
        return self._selection.extend(self._address(address))

    def start_drag(self, address: AddressLike) -> Selection:
        return self._selection.start_drag(self._address(address))

    def update_drag(self, address: AddressLike) -> Selection | None:
        return self._selection.update_drag(self._address(address))

    def end_drag(self) -> Selection | None:
        return self._selection.end_drag()

    # ------------------------------------------------------------------
    # Clipboard
    # ------------------------------------------------------------------

    def copy(self) -> ClipboardSnapshot | None:
        """Snapshot the selected cells. No-op without a selection."""
        selection = self.selection
        if selection is None:
            return None
        self._clipboard = take_snapshot(self._grid, selection.active_set)
        return self._clipboard

    def cut(self) -> ClipboardSnapshot | None:
        """Snapshot then empty the selected cells, as one undoable step."""
        selection = self.selection
        if selection is None:
            return None
        self._clipboard = take_snapshot(self._grid, selection.active_set, cut=True)
        self._checkpoint()
        for address in selection.active_set:
            self._grid.reset(address)
        self._remove(selection.active_set)
        return self._clipboard

    def paste(self, target: AddressLike | None = None) -> RecalcResult | None:
        """Paste the clipboard with its top-left corner at *target*.

        Without a target the selection decides: a single copied cell fills
        every selected cell, anything else lands at the selection's top-left.
        Destinations outside the grid are skipped. Returns None when there is
        nothing to paste or nowhere to paste it.
        """
        snapshot = self._clipboard
        if snapshot is None:
            logger.debug("Nothing to paste")
            return None
        shift = self._recalc.evaluator.shift_references if self._config.shift_pasted_references else None

        if target is not None:
            plan = paste_plan(snapshot, self._address(target), self._grid, shift)
        else:
            selection = self.selection
            if selection is None:
                logger.debug("Paste without target or selection")
                return None
            if len(snapshot) == 1 and len(selection) > 1:
                plan = fill_plan(snapshot, selection.active_set, shift)
            else:
                plan = paste_plan(snapshot, selection.bounds[0], self._grid, shift)

        if not plan:
            logger.debug("Paste skipped: no destination on the grid")
            return None
        self._checkpoint()
        return self._write(plan)

    def clipboard_text(self) -> str:
        """Tab-separated text of the clipboard for the system clipboard."""
        if self._clipboard is None:
            return ""
        return clipboard_text(self._clipboard)

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def _restore(self, snapshot: GridSnapshot) -> None:
        self._grid.restore(snapshot)
        self._recalc.rebuild()
        self._selection.clamp(self._grid.column_count, self._grid.row_count)

    def undo(self) -> bool:
        """Restore the grid to before the last change. False when there is none."""
        snapshot = self._history.undo(self._grid.snapshot())
        if snapshot is None:
            return False
        self._restore(snapshot)
        return True

    def redo(self) -> bool:
        snapshot = self._history.redo()
        if snapshot is None:
            return False
        self._restore(snapshot)
        return True

    # ------------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------------

    def add_row(self) -> None:
        self._checkpoint()
        self._grid.row_count += 1
        self._recalc.rebuild()

    def add_column(self) -> None:
        self._checkpoint()
        self._grid.column_count += 1
        self._recalc.rebuild()

    def delete_row(self) -> bool:
        """Remove the last row. A sheet always keeps at least one row."""
        if self._grid.row_count <= 1:
            return False
        self._checkpoint()
        self._grid.row_count -= 1
        self._shrink()
        return True

    def delete_column(self) -> bool:
        """Remove the last column. A sheet always keeps at least one column."""
        if self._grid.column_count <= 1:
            return False
        self._checkpoint()
        self._grid.column_count -= 1
        self._shrink()
        return True

    def _shrink(self) -> None:
        self._remove(self._grid.truncate())
        self._selection.clamp(self._grid.column_count, self._grid.row_count)

    def clear(self) -> None:
        """Reset every cell to empty. Dimensions are kept."""
        self._checkpoint()
        self._grid.clear()
        self._recalc.rebuild()

    # ------------------------------------------------------------------
    # Bulk import / export
    # ------------------------------------------------------------------

    def load_rows(self, rows: Sequence[Sequence[str]]) -> RecalcResult:
        """Replace the grid's contents with a row-major table of raw fields.

        Fields are written first with formulas left unevaluated; every
        formula is then evaluated in a single batch. The grid grows to fit.
        """
        self._checkpoint()
        self._grid.clear()
        width = max((len(r) for r in rows), default=0)
        self._grid.row_count = max(self._grid.row_count, len(rows))
        self._grid.column_count = max(self._grid.column_count, width)

        for row_idx, fields in enumerate(rows, start=1):
            for col_idx, raw in enumerate(fields):
                if raw:
                    self._grid.set(Address(col_idx, row_idx), Cell.from_input(raw))

        self._recalc.rebuild()
        return self._recalc.calculate()

    def to_rows(self) -> list[list[str]]:
        """Display values from A1 to the last used row and column."""
        used = [a for a, c in self._grid.items() if c.raw_input or c.display_value]
        if not used:
            return []
        max_row = max(a.row for a in used)
        max_col = max(a.column for a in used)
        return [
            [self._grid.value(Address(col, row)) for col in range(max_col + 1)]
            for row in range(1, max_row + 1)
        ]

    def import_csv(self, text: str, delimiter: str = ",") -> RecalcResult:
        return self.load_rows(read_csv(text, delimiter))

    def export_csv(self, delimiter: str = ",") -> str:
        return write_csv(self.to_rows(), delimiter)

    def __repr__(self) -> str:
        return f"<Sheet {self.column_count}x{self.row_count} formulas={len(self.graph)}>"
