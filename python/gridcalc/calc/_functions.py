"""Function table and builtin implementations for formula evaluation."""

from __future__ import annotations

import math
import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Callable, Union

from gridcalc.calc._parser import strip_quotes

# ---------------------------------------------------------------------------
# CellError: typed error tokens displayed in place of a value
# ---------------------------------------------------------------------------


class CellError:
    """Error token shown as a cell's value.

    Use ``CellError.of(code)`` to get a cached singleton for each code.
    Errors compare equal to their string code (``CellError.DIV0 == "#DIV0"``).
    """

    __slots__ = ("code",)
    _cache: dict[str, CellError] = {}

    DIV0: CellError
    CIRCULAR: CellError
    NAME: CellError
    VALUE: CellError
    NUM: CellError

    def __init__(self, code: str) -> None:
        self.code = code

    @classmethod
    def of(cls, code: str) -> CellError:
        canon = code.upper()
        if canon not in cls._cache:
            cls._cache[canon] = cls(canon)
        return cls._cache[canon]

    def __repr__(self) -> str:
        return self.code

    def __str__(self) -> str:
        return self.code

    def __eq__(self, other: object) -> bool:
        if isinstance(other, CellError):
            return self.code == other.code
        if isinstance(other, str):
            return self.code == other.upper()
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.code)


CellError.DIV0 = CellError.of("#DIV0")
CellError.CIRCULAR = CellError.of("#CIRCULAR")
CellError.NAME = CellError.of("#NAME")
CellError.VALUE = CellError.of("#VALUE")
CellError.NUM = CellError.of("#NUM")


def is_error(val: object) -> bool:
    return isinstance(val, CellError)


Result = Union[str, CellError]

# ---------------------------------------------------------------------------
# Coercion and display
# ---------------------------------------------------------------------------

# Base-10 integer or decimal; no exponent, no nan/inf.
_NUMERIC_RE = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)$")

LIST_SEPARATOR = ", "


def coerce_number(value: str) -> float | None:
    """Parse *value* as a base-10 number, or return None."""
    text = value.strip()
    if not _NUMERIC_RE.match(text):
        return None
    return float(text)


def numeric_values(values: Iterable[str]) -> list[float]:
    """Numbers among *values*. Text, blanks and error tokens are skipped, not zeroed."""
    result: list[float] = []
    for v in values:
        num = coerce_number(v)
        if num is not None:
            result.append(num)
    return result


def format_number(value: float) -> str:
    """Integral values without a decimal point, others rounded to 12 places."""
    if not math.isfinite(value):
        return CellError.NUM.code
    if value == int(value) and abs(value) < 1e15:
        return str(int(value))
    return repr(round(value, 12))


# ---------------------------------------------------------------------------
# Builtins. Each receives the operand values (one per referenced cell, in
# row-major order) followed by any extra text arguments.
# ---------------------------------------------------------------------------


def _builtin_sum(values: list[str]) -> Result:
    return format_number(math.fsum(numeric_values(values)))


def _builtin_average(values: list[str]) -> Result:
    nums = numeric_values(values)
    if not nums:
        return CellError.DIV0
    return format_number(math.fsum(nums) / len(nums))


def _builtin_max(values: list[str]) -> Result:
    nums = numeric_values(values)
    if not nums:
        return CellError.NUM
    return format_number(max(nums))


def _builtin_min(values: list[str]) -> Result:
    nums = numeric_values(values)
    if not nums:
        return CellError.NUM
    return format_number(min(nums))


def _builtin_count(values: list[str]) -> Result:
    """COUNT - counts numeric values only."""
    return str(len(numeric_values(values)))


def _builtin_trim(values: list[str]) -> Result:
    return values[0].strip()


def _builtin_upper(values: list[str]) -> Result:
    return values[0].upper()


def _builtin_lower(values: list[str]) -> Result:
    return values[0].lower()


def _builtin_remove_duplicates(values: list[str]) -> Result:
    """Unique non-empty values in first-occurrence order."""
    unique = dict.fromkeys(v for v in values if v != "")
    return LIST_SEPARATOR.join(unique)


def _builtin_find_and_replace(values: list[str], find_text: str, replace_text: str) -> Result:
    find_text = strip_quotes(find_text)
    replace_text = strip_quotes(replace_text)
    if not find_text:
        return CellError.VALUE
    return LIST_SEPARATOR.join(v.replace(find_text, replace_text) for v in values)


# ---------------------------------------------------------------------------
# Dispatch table
# ---------------------------------------------------------------------------

RANGE = "range"
CELL = "cell"


@dataclass(frozen=True)
class FunctionSpec:
    """One entry of the dispatch table.

    ``operand`` says how the first argument is resolved: ``"range"`` expands
    to every covered cell, ``"cell"`` requires a single address.
    ``extra_args`` is the number of plain text arguments that follow.
    """

    name: str
    operand: str
    handler: Callable[..., Result]
    extra_args: int = 0

    def __post_init__(self) -> None:
        if self.operand not in (RANGE, CELL):
            raise ValueError(f"Unknown operand kind for {self.name}: {self.operand!r}")

    @property
    def arity(self) -> int:
        return 1 + self.extra_args


_BUILTINS: dict[str, FunctionSpec] = {
    spec.name: spec
    for spec in (
        FunctionSpec("SUM", RANGE, _builtin_sum),
        FunctionSpec("AVERAGE", RANGE, _builtin_average),
        FunctionSpec("MAX", RANGE, _builtin_max),
        FunctionSpec("MIN", RANGE, _builtin_min),
        FunctionSpec("COUNT", RANGE, _builtin_count),
        FunctionSpec("TRIM", CELL, _builtin_trim),
        FunctionSpec("UPPER", CELL, _builtin_upper),
        FunctionSpec("LOWER", CELL, _builtin_lower),
        FunctionSpec("REMOVE_DUPLICATES", RANGE, _builtin_remove_duplicates),
        FunctionSpec("FIND_AND_REPLACE", RANGE, _builtin_find_and_replace, extra_args=2),
    )
}


class FunctionRegistry:
    """Registry of function specs.

    Starts with the builtins and can be extended with custom functions.
    """

    def __init__(self) -> None:
        self._functions: dict[str, FunctionSpec] = dict(_BUILTINS)

    def register(self, spec: FunctionSpec) -> None:
        self._functions[spec.name.upper()] = spec

    def get(self, name: str) -> FunctionSpec | None:
        return self._functions.get(name.upper())

    def has(self, name: str) -> bool:
        return name.upper() in self._functions

    @property
    def supported_functions(self) -> frozenset[str]:
        return frozenset(self._functions.keys())


def is_supported(func_name: str) -> bool:
    """Check if a function name is a builtin."""
    return func_name.upper() in _BUILTINS
