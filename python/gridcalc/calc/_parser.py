"""Formula parsing: range resolution and function-call splitting."""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass

from gridcalc._address import Address, InvalidAddress, decode

# Function call head: SUM(, remove_duplicates(
_FUNC_HEAD_RE = re.compile(r"^([A-Z][A-Z0-9_.]*)\s*\(", re.IGNORECASE)

_QUOTES = ('"', "'")

# (column_count, row_count) of a grid
Bounds = tuple[int, int]


class InvalidRange(InvalidAddress):
    """Raised when range text is not ``REF`` or ``REF:REF``."""


# ---------------------------------------------------------------------------
# Range resolution
# ---------------------------------------------------------------------------


def parse_range(text: str) -> tuple[Address, Address]:
    """Parse ``A1:B5`` (or a single ``A1``) into (top-left, bottom-right).

    Corners may be given in any order. Absolute markers are dropped from
    the normalised corners.
    """
    parts = text.split(":")
    if len(parts) > 2 or not all(p.strip() for p in parts):
        raise InvalidRange(f"Invalid range: {text!r}")
    try:
        first = decode(parts[0])
        second = decode(parts[-1])
    except InvalidAddress as e:
        raise InvalidRange(f"Invalid range: {text!r}") from e
    top_left = Address(min(first.column, second.column), min(first.row, second.row))
    bottom_right = Address(max(first.column, second.column), max(first.row, second.row))
    return top_left, bottom_right


def rectangle(top_left: Address, bottom_right: Address) -> list[Address]:
    """Every address in the inclusive rectangle, row-major."""
    return [
        Address(c, r)
        for r in range(top_left.row, bottom_right.row + 1)
        for c in range(top_left.column, bottom_right.column + 1)
    ]


def clip_rectangle(
    top_left: Address, bottom_right: Address, bounds: Bounds,
) -> tuple[Address, Address] | None:
    """Intersect a rectangle with a grid of *bounds* ``(column_count, row_count)``.

    Returns None when nothing of the rectangle lies on the grid.
    """
    column_count, row_count = bounds
    if top_left.column >= column_count or top_left.row > row_count:
        return None
    return top_left, Address(
        min(bottom_right.column, column_count - 1), min(bottom_right.row, row_count),
    )


def expand_range(text: str, bounds: Bounds | None = None) -> list[Address]:
    """Expand ``"A1:B2"`` into ``[A1, B1, A2, B2]``.

    Enumeration is row-major: rows in the outer loop, columns in the inner
    loop. Malformed text yields an empty list instead of raising. With
    *bounds*, cells off the grid are left out, so the result never exceeds
    the grid size however large the range text is.
    """
    try:
        corners = parse_range(text)
    except InvalidRange:
        return []
    if bounds is not None:
        clipped = clip_rectangle(*corners, bounds)
        if clipped is None:
            return []
        corners = clipped
    return rectangle(*corners)


def bounding_rectangle(addresses: Iterable[Address]) -> tuple[Address, Address]:
    """Componentwise min/max corners of *addresses*."""
    addrs = list(addresses)
    if not addrs:
        raise ValueError("bounding_rectangle() needs at least one address")
    top_left = Address(min(a.column for a in addrs), min(a.row for a in addrs))
    bottom_right = Address(max(a.column for a in addrs), max(a.row for a in addrs))
    return top_left, bottom_right


# ---------------------------------------------------------------------------
# Function-call parsing
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ParsedFormula:
    """``=NAME(arg, arg, ...)`` split into its head and raw argument texts."""

    name: str
    args: tuple[str, ...]


def _find_matching_paren(expr: str, start: int) -> int:
    """Index of the ``')'`` matching the ``'('`` at *expr[start]*, or -1."""
    depth = 1
    quote: str | None = None
    for i in range(start + 1, len(expr)):
        ch = expr[i]
        if quote is not None:
            if ch == quote:
                quote = None
        elif ch in _QUOTES:
            quote = ch
        elif ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth == 0:
                return i
    return -1


def split_arguments(args_str: str) -> list[str]:
    """Split on commas outside quotes and parentheses. Pieces are not stripped."""
    if not args_str.strip():
        return []
    args: list[str] = []
    depth = 0
    quote: str | None = None
    current = ""
    for ch in args_str:
        if quote is not None:
            if ch == quote:
                quote = None
        elif ch in _QUOTES:
            quote = ch
        elif ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
        elif ch == "," and depth == 0:
            args.append(current)
            current = ""
            continue
        current += ch
    args.append(current)
    return args


def strip_quotes(text: str) -> str:
    """Remove one pair of matching surrounding quotes, if present."""
    text = text.strip()
    if len(text) >= 2 and text[0] in _QUOTES and text[-1] == text[0]:
        return text[1:-1]
    return text


def formula_body(formula: str) -> str:
    """Text after the leading ``=``, stripped."""
    body = formula.strip()
    if body.startswith("="):
        body = body[1:]
    return body.strip()


def parse_formula(formula: str) -> ParsedFormula | None:
    """If *formula* is exactly ``=FUNC(balanced_args)``, split it.

    Returns None when the body is not a single function call, e.g. a bare
    reference, or a call followed by trailing text.
    """
    body = formula_body(formula)
    m = _FUNC_HEAD_RE.match(body)
    if not m:
        return None
    open_idx = m.end() - 1
    close_idx = _find_matching_paren(body, open_idx)
    if close_idx < 0 or close_idx != len(body) - 1:
        return None
    args = split_arguments(body[open_idx + 1 : close_idx])
    return ParsedFormula(m.group(1).upper(), tuple(args))


# ---------------------------------------------------------------------------
# Reference shifting
# ---------------------------------------------------------------------------


def shift_reference(text: str, columns: int, rows: int) -> str:
    """Move the relative parts of a cell or range reference.

    ``$`` marked axes stay put. Raises :class:`InvalidAddress` when the text
    is not a reference or the result would leave the sheet.
    """
    parts = text.strip().split(":")
    if len(parts) > 2:
        raise InvalidRange(f"Invalid range: {text!r}")
    shifted: list[str] = []
    for part in parts:
        addr = decode(part)
        shifted.append(str(Address(
            addr.column if addr.column_absolute else addr.column + columns,
            addr.row if addr.row_absolute else addr.row + rows,
            addr.column_absolute,
            addr.row_absolute,
        )))
    return ":".join(shifted)
