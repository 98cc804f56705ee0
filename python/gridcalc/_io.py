"""CSV framing for bulk import/export of row-major string tables."""

from __future__ import annotations

import csv
import io
from collections.abc import Iterable, Sequence


def read_csv(text: str, delimiter: str = ",") -> list[list[str]]:
    """Parse CSV text into rows of fields.

    Quoted fields may contain the delimiter, newlines and doubled quotes.
    A blank line is kept as an empty row so later rows keep their position;
    blank lines at the end are dropped.
    """
    reader = csv.reader(io.StringIO(text, newline=""), delimiter=delimiter)
    rows = list(reader)
    while rows and not rows[-1]:
        rows.pop()
    return rows


def write_csv(rows: Iterable[Sequence[str]], delimiter: str = ",") -> str:
    """Serialise rows of fields as CSV with ``\\n`` line endings."""
    buf = io.StringIO()
    writer = csv.writer(buf, delimiter=delimiter, lineterminator="\n")
    writer.writerows(rows)
    return buf.getvalue()
