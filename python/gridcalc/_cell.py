"""Cell contents and flat per-cell style."""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from typing import Any

DEFAULT_FONT_SIZE = 14
DEFAULT_COLOR = "#000000"


@dataclass(frozen=True)
class CellStyle:
    """Flat style attributes. No conditional or inherited formatting."""

    bold: bool = False
    italic: bool = False
    font_size: int = DEFAULT_FONT_SIZE
    color: str = DEFAULT_COLOR

    def __post_init__(self) -> None:
        if isinstance(self.font_size, bool) or not isinstance(self.font_size, int):
            raise TypeError(f"font_size must be an int, got {type(self.font_size).__name__}")
        if self.font_size < 1:
            raise ValueError(f"font_size must be positive: {self.font_size}")
        if not isinstance(self.color, str) or not self.color:
            raise ValueError(f"color must be a non-empty string: {self.color!r}")

    def merge(self, **changes: Any) -> CellStyle:
        """Return a copy with *changes* applied. Unknown keys raise TypeError."""
        known = {f.name for f in fields(self)}
        unknown = set(changes) - known
        if unknown:
            raise TypeError(f"Unknown style attribute(s): {', '.join(sorted(unknown))}")
        return replace(self, **changes)


@dataclass(frozen=True)
class Cell:
    """One grid cell.

    ``raw_input`` is what the user typed. ``display_value`` is always the
    literal or evaluated result, never the formula text.
    """

    raw_input: str = ""
    display_value: str = ""
    style: CellStyle = field(default_factory=CellStyle)

    @property
    def formula(self) -> str | None:
        if self.raw_input.startswith("="):
            return self.raw_input
        return None

    @property
    def is_empty(self) -> bool:
        return self == EMPTY_CELL

    @classmethod
    def from_input(cls, raw_input: str, style: CellStyle | None = None) -> Cell:
        """Build a cell from user input. Formulas start with an empty value."""
        display = "" if raw_input.startswith("=") else raw_input
        return cls(raw_input, display, style if style is not None else CellStyle())


EMPTY_CELL = Cell()
