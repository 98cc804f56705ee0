"""Tests for gridcalc.calc Recalculator on a shared Grid."""

from __future__ import annotations

import logging

import pytest
from gridcalc._address import Address, decode
from gridcalc._cell import Cell
from gridcalc._grid import Grid
from gridcalc.calc._recalc import Recalculator


def _a(text: str) -> Address:
    return decode(text)


def _write(grid: Grid, recalc: Recalculator, ref: str, raw: str):  # type: ignore[no-untyped-def]
    addr = _a(ref)
    grid.set(addr, Cell.from_input(raw))
    recalc.register(addr)
    return recalc.recalculate({addr})


def _setup() -> tuple[Grid, Recalculator]:
    grid = Grid(20, 10)
    return grid, Recalculator(grid)


class TestRecalculate:
    def test_formula_evaluated_on_write(self) -> None:
        grid, recalc = _setup()
        _write(grid, recalc, "A1", "1")
        _write(grid, recalc, "A2", "2")
        result = _write(grid, recalc, "A3", "=SUM(A1:A2)")
        assert grid.value(_a("A3")) == "3"
        assert result.evaluated == (_a("A3"),)

    def test_dependent_recomputed(self) -> None:
        grid, recalc = _setup()
        _write(grid, recalc, "A1", "1")
        _write(grid, recalc, "A2", "2")
        _write(grid, recalc, "A3", "=SUM(A1:A2)")
        result = _write(grid, recalc, "A1", "5")
        assert grid.value(_a("A3")) == "7"
        assert result.value_of(_a("A3")) == "7"
        (delta,) = result.deltas
        assert delta.old_value == "3"
        assert delta.formula == "=SUM(A1:A2)"

    def test_chain_propagates(self) -> None:
        grid, recalc = _setup()
        _write(grid, recalc, "A1", "2")
        _write(grid, recalc, "B1", "=SUM(A1)")
        _write(grid, recalc, "C1", "=SUM(A1:B1)")
        _write(grid, recalc, "D1", "=C1")
        _write(grid, recalc, "A1", "10")
        assert grid.value(_a("B1")) == "10"
        assert grid.value(_a("C1")) == "20"
        assert grid.value(_a("D1")) == "20"

    def test_unchanged_value_has_no_delta(self) -> None:
        grid, recalc = _setup()
        _write(grid, recalc, "A1", "x")
        _write(grid, recalc, "B1", "=COUNT(A1:A2)")
        result = _write(grid, recalc, "A1", "y")
        assert result.deltas == ()
        assert result.evaluated == (_a("B1"),)

    def test_formula_replaced_by_literal(self) -> None:
        grid, recalc = _setup()
        _write(grid, recalc, "A1", "1")
        _write(grid, recalc, "B1", "=A1")
        _write(grid, recalc, "B1", "plain")
        assert _a("B1") not in recalc.graph
        assert _a("A1") not in recalc.graph.dependents
        _write(grid, recalc, "A1", "9")
        assert grid.value(_a("B1")) == "plain"

    def test_out_of_bounds_reference_reads_empty(self) -> None:
        grid, recalc = _setup()
        _write(grid, recalc, "A1", "=UPPER(Z500)")
        assert grid.value(_a("A1")) == ""


class TestLargeRanges:
    def test_huge_range_on_small_grid(self) -> None:
        grid = Grid(5, 2)
        recalc = Recalculator(grid)
        _write(grid, recalc, "B5", "4")
        _write(grid, recalc, "A1", "=SUM(A2:Z200000)")
        assert grid.value(_a("A1")) == "4"
        assert len(recalc.graph.dependents) == 8
        assert len(recalc.graph.dependencies[_a("A1")]) == 8

    def test_rebuild_picks_up_grown_grid(self) -> None:
        grid = Grid(2, 1)
        recalc = Recalculator(grid)
        _write(grid, recalc, "A1", "=SUM(A2:A5)")
        grid.row_count = 4
        recalc.rebuild()
        _write(grid, recalc, "A4", "7")
        assert grid.value(_a("A1")) == "7"


class TestCircular:
    def test_self_reference(self) -> None:
        grid, recalc = _setup()
        result = _write(grid, recalc, "A1", "=SUM(A1:A2)")
        assert grid.value(_a("A1")) == "#CIRCULAR"
        assert result.circular == {_a("A1")}

    def test_transitive_cycle(self) -> None:
        grid, recalc = _setup()
        _write(grid, recalc, "A1", "=B1")
        _write(grid, recalc, "B1", "=C1")
        _write(grid, recalc, "C1", "=A1")
        for ref in ("A1", "B1", "C1"):
            assert grid.value(_a(ref)) == "#CIRCULAR"

    def test_reader_of_cycle_sees_error_token(self) -> None:
        grid, recalc = _setup()
        _write(grid, recalc, "A1", "=B1")
        _write(grid, recalc, "B1", "=A1")
        _write(grid, recalc, "C1", "=LOWER(A1)")
        assert grid.value(_a("C1")) == "#circular"

    def test_breaking_cycle_recovers(self) -> None:
        grid, recalc = _setup()
        _write(grid, recalc, "A1", "=B1")
        _write(grid, recalc, "B1", "=A1")
        _write(grid, recalc, "A1", "4")
        assert grid.value(_a("A1")) == "4"
        assert grid.value(_a("B1")) == "4"

    def test_cycle_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        grid, recalc = _setup()
        with caplog.at_level(logging.WARNING, logger="gridcalc.calc._recalc"):
            _write(grid, recalc, "B2", "=B2")
        assert "Circular reference detected involving: B2" in caplog.text


class TestRebuild:
    def test_calculate_all(self) -> None:
        grid, recalc = _setup()
        grid.set(_a("A1"), Cell.from_input("3"))
        grid.set(_a("A2"), Cell.from_input("=SUM(A1)"))
        grid.set(_a("A3"), Cell.from_input("=SUM(A1:A2)"))
        recalc.rebuild()
        result = recalc.calculate()
        assert grid.value(_a("A2")) == "3"
        assert grid.value(_a("A3")) == "6"
        assert set(result.evaluated) == {_a("A2"), _a("A3")}
        assert result.changed == frozenset()

    def test_rebuild_drops_stale_formulas(self) -> None:
        grid, recalc = _setup()
        _write(grid, recalc, "B1", "=A1")
        grid.clear()
        recalc.rebuild()
        assert len(recalc.graph) == 0
