"""Recalculator: keeps formula cells consistent with the values they read."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import replace
from typing import TYPE_CHECKING

from gridcalc._address import Address
from gridcalc.calc._evaluator import FormulaEvaluator
from gridcalc.calc._functions import CellError
from gridcalc.calc._graph import DependencyGraph
from gridcalc.calc._protocol import CellDelta, RecalcResult

if TYPE_CHECKING:
    from gridcalc._grid import Grid

logger = logging.getLogger(__name__)


class Recalculator:
    """Owns the dependency graph for one grid and re-evaluates dependents.

    The grid is shared by reference; the recalculator writes display values
    straight into it and holds no copy of its own.

    Usage::

        recalc = Recalculator(grid)
        grid.set(a3, Cell.from_input("=SUM(A1:A2)"))
        recalc.register(a3)
        result = recalc.recalculate({a3})
    """

    def __init__(self, grid: Grid, evaluator: FormulaEvaluator | None = None) -> None:
        self._grid = grid
        self._evaluator = evaluator if evaluator is not None else FormulaEvaluator()
        self._graph = DependencyGraph()

    @property
    def graph(self) -> DependencyGraph:
        return self._graph

    @property
    def evaluator(self) -> FormulaEvaluator:
        return self._evaluator

    # ------------------------------------------------------------------
    # Graph maintenance
    # ------------------------------------------------------------------

    def register(self, address: Address) -> None:
        """Sync the graph with whatever the grid now holds at *address*."""
        formula = self._grid.get(address).formula
        if formula is None:
            self._graph.remove_formula(address)
        else:
            self._graph.set_formula(
                address, formula, self._evaluator.references(formula, self._bounds()),
            )

    def _bounds(self) -> tuple[int, int]:
        return self._grid.column_count, self._grid.row_count

    def rebuild(self) -> None:
        """Rebuild the graph from scratch.

        Edges only cover cells on the grid, so this must run whenever the
        grid changes size or contents wholesale.
        """
        self._graph.clear()
        for address in self._grid.formula_cells():
            self.register(address)

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def recalculate(self, changed: Iterable[Address]) -> RecalcResult:
        """Re-evaluate every formula affected by writes to *changed*.

        Callers must :meth:`register` changed cells first.
        """
        changed_set = frozenset(a.relative() for a in changed)
        affected = self._graph.affected_cells(changed_set)
        return self._evaluate(changed_set, affected)

    def calculate(self) -> RecalcResult:
        """Evaluate every formula cell in the grid."""
        return self._evaluate(frozenset(), set(self._graph.formulas))

    def _evaluate(self, changed: frozenset[Address], affected: set[Address]) -> RecalcResult:
        order, circular = self._graph.evaluation_order(affected)
        old_values = {a: self._grid.value(a) for a in affected}

        if circular:
            logger.warning(
                "Circular reference detected involving: %s",
                ", ".join(sorted(a.key for a in circular)),
            )
            for address in circular:
                self._write(address, CellError.CIRCULAR.code)

        for address in order:
            formula = self._graph.formulas[address]
            result = self._evaluator.evaluate(formula, self._lookup, self._bounds())
            self._write(address, str(result))

        deltas: list[CellDelta] = []
        for address in sorted(affected, key=lambda a: (a.row, a.column)):
            new_value = self._grid.value(address)
            if new_value != old_values[address]:
                deltas.append(CellDelta(
                    address=address,
                    old_value=old_values[address],
                    new_value=new_value,
                    formula=self._graph.formulas.get(address),
                ))

        return RecalcResult(
            changed=changed,
            deltas=tuple(deltas),
            evaluated=tuple(order),
            circular=frozenset(circular),
        )

    def _lookup(self, address: Address) -> str:
        if not self._grid.in_bounds(address):
            return ""
        return self._grid.value(address)

    def _write(self, address: Address, value: str) -> None:
        cell = self._grid.get(address)
        if cell.display_value != value:
            self._grid.set(address, replace(cell, display_value=value))
