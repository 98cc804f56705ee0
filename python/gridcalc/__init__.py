"""gridcalc - grid data editor engine: formulas, selection, clipboard and undo.

Usage::

    from gridcalc import Sheet

    sheet = Sheet()
    sheet["A1"] = "1"
    sheet["A2"] = "2"
    sheet["A3"] = "=SUM(A1:A2)"
    print(sheet.value("A3"))  # 3

    sheet.start_drag("A1")
    sheet.update_drag("A3")
    sheet.end_drag()
    sheet.copy()
    sheet.paste("C1")
    sheet.undo()
"""

from gridcalc._address import Address, InvalidAddress, OutOfBounds, decode, encode
from gridcalc._cell import Cell, CellStyle
from gridcalc._clipboard import ClipboardSnapshot
from gridcalc._config import SheetConfig
from gridcalc._grid import Grid
from gridcalc._history import GridSnapshot, History
from gridcalc._io import read_csv, write_csv
from gridcalc._selection import DragState, Selection, SelectionController
from gridcalc._sheet import Sheet
from gridcalc.calc import CellError, InvalidRange, RecalcResult

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "Address",
    "Cell",
    "CellError",
    "CellStyle",
    "ClipboardSnapshot",
    "DragState",
    "Grid",
    "GridSnapshot",
    "History",
    "InvalidAddress",
    "InvalidRange",
    "OutOfBounds",
    "RecalcResult",
    "Selection",
    "SelectionController",
    "Sheet",
    "SheetConfig",
    "decode",
    "encode",
    "read_csv",
    "write_csv",
]
