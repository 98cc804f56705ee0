"""Sheet configuration."""

from __future__ import annotations

from dataclasses import dataclass

from gridcalc._history import MAX_HISTORY

DEFAULT_ROWS = 100
DEFAULT_COLUMNS = 26


@dataclass(frozen=True)
class SheetConfig:
    """Settings fixed for the lifetime of a :class:`~gridcalc.Sheet`.

    ``shift_pasted_references`` selects the paste policy for formulas:
    ``False`` copies formula text verbatim, ``True`` moves the relative
    parts of each reference by the paste offset.
    """

    rows: int = DEFAULT_ROWS
    columns: int = DEFAULT_COLUMNS
    history_limit: int = MAX_HISTORY
    shift_pasted_references: bool = False

    def __post_init__(self) -> None:
        if self.rows < 1:
            raise ValueError(f"rows must be >= 1: {self.rows}")
        if self.columns < 1:
            raise ValueError(f"columns must be >= 1: {self.columns}")
        if self.history_limit < 1:
            raise ValueError(f"history_limit must be >= 1: {self.history_limit}")
