"""FormulaEvaluator: dispatches ``=FUNC(args)`` formulas against the function table.

The formula language is deliberately flat: one function call whose first
argument is a cell or range reference, optionally followed by text
arguments, or a bare reference such as ``=B2``. There are no operators and
no nested calls.
"""

from __future__ import annotations

import logging
from typing import Callable

from gridcalc._address import Address, InvalidAddress, decode
from gridcalc.calc._functions import CELL, CellError, FunctionRegistry, FunctionSpec, Result
from gridcalc.calc._parser import (
    Bounds,
    ParsedFormula,
    expand_range,
    formula_body,
    parse_formula,
    shift_reference,
)

logger = logging.getLogger(__name__)

ValueLookup = Callable[[Address], str]


def _is_range_text(text: str) -> bool:
    return ":" in text


class FormulaEvaluator:
    """Evaluates single formulas. Pure: never writes to the grid.

    Usage::

        evaluator = FormulaEvaluator()
        evaluator.evaluate("=SUM(A1:A3)", lambda addr: values.get(addr, ""))
        evaluator.references("=SUM(A1:A3)")  # [A1, A2, A3]
    """

    def __init__(self, functions: FunctionRegistry | None = None) -> None:
        self._functions = functions if functions is not None else FunctionRegistry()

    @property
    def functions(self) -> FunctionRegistry:
        return self._functions

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def evaluate(self, formula: str, lookup: ValueLookup, bounds: Bounds | None = None) -> Result:
        """Evaluate *formula* using *lookup* for cell values.

        Text that does not start with ``=`` is returned unchanged. Range
        operands are clipped to *bounds* ``(column_count, row_count)`` when
        given; cells off the grid read as empty either way.
        """
        if not formula.startswith("="):
            return formula

        parsed = parse_formula(formula)
        if parsed is None:
            return self._evaluate_bare(formula, lookup)

        spec = self._functions.get(parsed.name)
        if spec is None:
            logger.debug("Unsupported function: %s", parsed.name)
            return CellError.NAME
        if len(parsed.args) != spec.arity:
            logger.debug(
                "%s expects %d argument(s), got %d", spec.name, spec.arity, len(parsed.args),
            )
            return CellError.VALUE

        operand = parsed.args[0].strip()
        if spec.operand == CELL:
            if _is_range_text(operand):
                logger.debug("%s needs a single cell, got range %r", spec.name, operand)
                return CellError.VALUE
            values = [self._lookup_cell(operand, lookup)]
        else:
            values = [lookup(addr) for addr in expand_range(operand, bounds)]

        extras = [arg.strip() for arg in parsed.args[1:]]
        return spec.handler(values, *extras)

    def _evaluate_bare(self, formula: str, lookup: ValueLookup) -> Result:
        """``=B2`` evaluates to B2's value; anything else is malformed."""
        body = formula_body(formula)
        try:
            addr = decode(body)
        except InvalidAddress:
            logger.debug("Cannot evaluate formula %r", formula)
            return CellError.VALUE
        return lookup(addr)

    @staticmethod
    def _lookup_cell(text: str, lookup: ValueLookup) -> str:
        try:
            addr = decode(text)
        except InvalidAddress:
            logger.debug("Invalid cell operand %r", text)
            return ""
        return lookup(addr)

    # ------------------------------------------------------------------
    # Reference analysis
    # ------------------------------------------------------------------

    def _reference_operand(self, formula: str) -> tuple[ParsedFormula | None, str] | None:
        """The reference text a formula reads from, with its parsed form.

        Returns None for non-formulas, unknown functions and wrong arity.
        """
        if not formula.startswith("="):
            return None
        parsed = parse_formula(formula)
        if parsed is None:
            body = formula_body(formula)
            return None if _is_range_text(body) else (None, body)
        spec: FunctionSpec | None = self._functions.get(parsed.name)
        if spec is None or len(parsed.args) != spec.arity:
            return None
        operand = parsed.args[0].strip()
        if spec.operand == CELL and _is_range_text(operand):
            return None
        return parsed, operand

    def references(self, formula: str, bounds: Bounds | None = None) -> list[Address]:
        """Every address *formula* reads, in row-major order.

        Malformed operands reference nothing. With *bounds*, addresses off
        the grid are left out.
        """
        found = self._reference_operand(formula)
        if found is None:
            return []
        _, operand = found
        return expand_range(operand, bounds)

    def shift_references(self, formula: str, columns: int, rows: int) -> str:
        """Move the relative parts of the formula's reference operand.

        The formula is returned verbatim when it has no reference operand or
        when a shifted reference would leave the sheet.
        """
        found = self._reference_operand(formula)
        if found is None:
            return formula
        parsed, operand = found
        try:
            shifted = shift_reference(operand, columns, rows)
        except InvalidAddress:
            logger.debug("Keeping %r: shifted reference is invalid", formula)
            return formula
        if parsed is None:
            return f"={shifted}"
        args = [shifted, *parsed.args[1:]]
        return f"={parsed.name}({','.join(args)})"
