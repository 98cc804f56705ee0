"""Clipboard snapshots and paste planning with offset translation."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import TYPE_CHECKING, Callable

from gridcalc._address import Address
from gridcalc._cell import Cell
from gridcalc.calc._parser import bounding_rectangle

if TYPE_CHECKING:
    from gridcalc._grid import Grid

logger = logging.getLogger(__name__)

FIELD_DELIMITER = "\t"
ROW_DELIMITER = "\n"

FormulaShifter = Callable[[str, int, int], str]


@dataclass(frozen=True)
class ClipboardSnapshot:
    """Cells captured at copy/cut time, keyed by their source address."""

    top_left: Address
    bottom_right: Address
    cells: Mapping[Address, Cell]
    cut: bool = False

    def __len__(self) -> int:
        return len(self.cells)


def take_snapshot(grid: Grid, addresses: Iterable[Address], cut: bool = False) -> ClipboardSnapshot:
    """Copy every address in *addresses*; absent cells snapshot as empty."""
    cells = {a.relative(): grid.get(a) for a in addresses}
    if not cells:
        raise ValueError("Cannot snapshot an empty selection")
    top_left, bottom_right = bounding_rectangle(cells)
    return ClipboardSnapshot(top_left, bottom_right, MappingProxyType(cells), cut)


def _pasted(cell: Cell, columns: int, rows: int, shift: FormulaShifter | None) -> Cell:
    if shift is None or cell.formula is None:
        return cell
    return replace(cell, raw_input=shift(cell.raw_input, columns, rows))


def paste_plan(
    snapshot: ClipboardSnapshot,
    target: Address,
    grid: Grid,
    shift: FormulaShifter | None = None,
) -> list[tuple[Address, Cell]]:
    """Destination cells for pasting *snapshot* with its top-left at *target*.

    Destinations outside the grid are skipped. Formula text is copied
    verbatim unless a *shift* function is given.
    """
    col_offset = target.column - snapshot.top_left.column
    row_offset = target.row - snapshot.top_left.row
    plan: list[tuple[Address, Cell]] = []
    skipped = 0
    for source, cell in snapshot.cells.items():
        new_col = source.column + col_offset
        new_row = source.row + row_offset
        if new_col < 0 or new_row < 1 or new_col >= grid.column_count or new_row > grid.row_count:
            skipped += 1
            continue
        plan.append((Address(new_col, new_row), _pasted(cell, col_offset, row_offset, shift)))
    if skipped:
        logger.debug("Paste at %s skipped %d out-of-bounds cell(s)", target.key, skipped)
    return plan


def fill_plan(
    snapshot: ClipboardSnapshot,
    targets: Sequence[Address],
    shift: FormulaShifter | None = None,
) -> list[tuple[Address, Cell]]:
    """Paste a single copied cell into each of *targets*."""
    if len(snapshot.cells) != 1:
        raise ValueError("fill_plan() needs a single-cell snapshot")
    ((source, cell),) = snapshot.cells.items()
    return [
        (t, _pasted(cell, t.column - source.column, t.row - source.row, shift))
        for t in targets
    ]


def format_rectangle(values: Mapping[Address, str]) -> str:
    """Tab/newline text covering the bounding rectangle of *values*.

    Cells inside the rectangle but missing from *values* render as empty fields.
    """
    if not values:
        return ""
    top_left, bottom_right = bounding_rectangle(values)
    lines: list[str] = []
    for row in range(top_left.row, bottom_right.row + 1):
        fields = [
            values.get(Address(col, row), "")
            for col in range(top_left.column, bottom_right.column + 1)
        ]
        lines.append(FIELD_DELIMITER.join(fields))
    return ROW_DELIMITER.join(lines)


def clipboard_text(snapshot: ClipboardSnapshot) -> str:
    """System clipboard text for *snapshot*: display values, not formulas."""
    return format_rectangle({a: c.display_value for a, c in snapshot.cells.items()})
