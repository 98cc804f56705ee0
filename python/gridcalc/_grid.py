"""Sparse cell storage with row/column bounds."""

from __future__ import annotations

from collections.abc import Iterator

from gridcalc._address import Address, OutOfBounds
from gridcalc._cell import EMPTY_CELL, Cell
from gridcalc._history import GridSnapshot


class Grid:
    """Mapping of :class:`Address` to :class:`Cell` within fixed bounds.

    Absent entries are implicit empty cells. No stored address may fall
    outside ``[0, column_count) x [1, row_count]``.
    """

    __slots__ = ("_cells", "row_count", "column_count")

    def __init__(self, row_count: int, column_count: int) -> None:
        if row_count < 1 or column_count < 1:
            raise ValueError(f"Grid needs at least one row and column: {row_count}x{column_count}")
        self._cells: dict[Address, Cell] = {}
        self.row_count = row_count
        self.column_count = column_count

    # ------------------------------------------------------------------
    # Cell access
    # ------------------------------------------------------------------

    def in_bounds(self, address: Address) -> bool:
        return 0 <= address.column < self.column_count and 1 <= address.row <= self.row_count

    def check(self, address: Address) -> Address:
        """Return the relative form of *address*, or raise OutOfBounds."""
        if not self.in_bounds(address):
            raise OutOfBounds(
                f"{address.key} is outside the grid "
                f"({self.column_count} columns x {self.row_count} rows)"
            )
        return address.relative()

    def get(self, address: Address) -> Cell:
        return self._cells.get(address, EMPTY_CELL)

    def set(self, address: Address, cell: Cell) -> None:
        address = self.check(address)
        if cell.is_empty:
            self._cells.pop(address, None)
        else:
            self._cells[address] = cell

    def reset(self, address: Address) -> None:
        self._cells.pop(address, None)

    def value(self, address: Address) -> str:
        cell = self._cells.get(address)
        return cell.display_value if cell is not None else ""

    def __contains__(self, address: Address) -> bool:
        return address in self._cells

    def __len__(self) -> int:
        return len(self._cells)

    def addresses(self) -> list[Address]:
        """Stored (non-empty) addresses in row-major order."""
        return sorted(self._cells, key=lambda a: (a.row, a.column))

    def items(self) -> Iterator[tuple[Address, Cell]]:
        for address in self.addresses():
            yield address, self._cells[address]

    def formula_cells(self) -> list[Address]:
        return [a for a, c in self._cells.items() if c.formula is not None]

    # ------------------------------------------------------------------
    # Bounds
    # ------------------------------------------------------------------

    def truncate(self) -> set[Address]:
        """Drop cells that fell outside the bounds. Returns their addresses."""
        removed = {a for a in self._cells if not self.in_bounds(a)}
        for address in removed:
            del self._cells[address]
        return removed

    def clear(self) -> set[Address]:
        removed = set(self._cells)
        self._cells.clear()
        return removed

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    def snapshot(self) -> GridSnapshot:
        return GridSnapshot.capture(self._cells, self.row_count, self.column_count)

    def restore(self, snapshot: GridSnapshot) -> set[Address]:
        """Replace contents and bounds. Returns every address that was touched."""
        touched = set(self._cells) | set(snapshot.cells)
        self._cells = dict(snapshot.cells)
        self.row_count = snapshot.row_count
        self.column_count = snapshot.column_count
        return touched

    def __repr__(self) -> str:
        return f"<Grid {self.column_count}x{self.row_count} cells={len(self._cells)}>"
