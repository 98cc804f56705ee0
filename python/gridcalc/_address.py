"""A1-style cell addresses with ``$`` absolute markers."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

_ADDRESS_RE = re.compile(r"^(\$?)([A-Za-z]+)(\$?)(\d+)$")


class InvalidAddress(ValueError):
    """Raised when reference text is not a valid cell address."""


class OutOfBounds(IndexError):
    """Raised when an address lies outside the grid."""


def column_to_letters(index: int) -> str:
    """0 -> "A", 25 -> "Z", 26 -> "AA"."""
    if index < 0:
        raise ValueError(f"Column index must be non-negative: {index}")
    letters: list[str] = []
    current = index + 1
    while current > 0:
        current, rem = divmod(current - 1, 26)
        letters.append(chr(ord("A") + rem))
    return "".join(reversed(letters))


def letters_to_column(letters: str) -> int:
    """"A" -> 0, "z" -> 25, "AA" -> 26."""
    if not letters or not letters.isalpha() or not letters.isascii():
        raise InvalidAddress(f"Invalid column letters: {letters!r}")
    index = 0
    for ch in letters.upper():
        index = index * 26 + (ord(ch) - ord("A") + 1)
    return index - 1


def encode(column: int, column_absolute: bool, row: int, row_absolute: bool) -> str:
    """Render a column index and row number as ``$A$1``-style text."""
    if row < 1:
        raise ValueError(f"Row must be >= 1: {row}")
    col_mark = "$" if column_absolute else ""
    row_mark = "$" if row_absolute else ""
    return f"{col_mark}{column_to_letters(column)}{row_mark}{row}"


def decode(text: str) -> Address:
    """Parse ``A1``, ``$A1``, ``A$1`` or ``$A$1`` into an :class:`Address`.

    Raises :class:`InvalidAddress` when the letter run is missing, the row is
    not a positive integer, or anything trails the row digits.
    """
    if not isinstance(text, str):
        raise InvalidAddress(f"Invalid cell reference: {text!r}")
    m = _ADDRESS_RE.match(text.strip())
    if not m:
        raise InvalidAddress(f"Invalid cell reference: {text!r}")
    col_mark, letters, row_mark, digits = m.groups()
    row = int(digits)
    if row < 1:
        raise InvalidAddress(f"Row must be >= 1: {text!r}")
    return Address(
        column=letters_to_column(letters),
        row=row,
        column_absolute=bool(col_mark),
        row_absolute=bool(row_mark),
    )


@dataclass(frozen=True)
class Address:
    """A cell coordinate: zero-based column, one-based row.

    The absolute markers describe how a reference was written; they do not
    take part in equality or hashing, so ``$A$1`` and ``A1`` name the same
    cell and can be used interchangeably as grid keys.
    """

    column: int
    row: int
    column_absolute: bool = field(default=False, compare=False)
    row_absolute: bool = field(default=False, compare=False)

    def __post_init__(self) -> None:
        if self.column < 0:
            raise InvalidAddress(f"Column must be >= 0: {self.column}")
        if self.row < 1:
            raise InvalidAddress(f"Row must be >= 1: {self.row}")

    @classmethod
    def parse(cls, text: str) -> Address:
        return decode(text)

    @property
    def key(self) -> str:
        """Canonical text without absolute markers, e.g. ``"B7"``."""
        return f"{column_to_letters(self.column)}{self.row}"

    def offset(self, columns: int, rows: int) -> Address:
        """Shift by (columns, rows), keeping the absolute markers."""
        return Address(
            self.column + columns,
            self.row + rows,
            self.column_absolute,
            self.row_absolute,
        )

    def relative(self) -> Address:
        return Address(self.column, self.row)

    def __str__(self) -> str:
        return encode(self.column, self.column_absolute, self.row, self.row_absolute)

    def __repr__(self) -> str:
        return f"Address({str(self)!r})"


def to_address(value: Address | str) -> Address:
    """Accept either an :class:`Address` or its text form."""
    if isinstance(value, Address):
        return value
    return decode(value)
