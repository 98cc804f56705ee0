"""Tests for gridcalc clipboard snapshots and paste planning."""

from __future__ import annotations

import pytest
from gridcalc._address import Address, decode
from gridcalc._cell import Cell
from gridcalc._clipboard import (
    clipboard_text,
    fill_plan,
    format_rectangle,
    paste_plan,
    take_snapshot,
)
from gridcalc._grid import Grid
from gridcalc.calc._evaluator import FormulaEvaluator
from gridcalc.calc._parser import expand_range


def _a(text: str) -> Address:
    return decode(text)


def _grid(values: dict[str, str], rows: int = 10, columns: int = 10) -> Grid:
    grid = Grid(rows, columns)
    for ref, raw in values.items():
        grid.set(_a(ref), Cell.from_input(raw))
    return grid


def _plan_keys(plan: list[tuple[Address, Cell]]) -> dict[str, str]:
    return {addr.key: cell.raw_input for addr, cell in plan}


class TestSnapshot:
    def test_bounds_and_cells(self) -> None:
        grid = _grid({"B2": "x"})
        snap = take_snapshot(grid, expand_range("B2:C3"))
        assert snap.top_left == _a("B2")
        assert snap.bottom_right == _a("C3")
        assert len(snap) == 4
        assert snap.cells[_a("C3")].is_empty
        assert not snap.cut

    def test_snapshot_is_detached(self) -> None:
        grid = _grid({"A1": "before"})
        snap = take_snapshot(grid, [_a("A1")])
        grid.set(_a("A1"), Cell.from_input("after"))
        assert snap.cells[_a("A1")].raw_input == "before"

    def test_empty_selection_rejected(self) -> None:
        with pytest.raises(ValueError):
            take_snapshot(_grid({}), [])


class TestPastePlan:
    def test_offset_translation(self) -> None:
        grid = _grid({"A1": "1", "B1": "2", "A2": "3", "B2": "4"})
        snap = take_snapshot(grid, expand_range("A1:B2"))
        plan = paste_plan(snap, _a("D4"), grid)
        assert _plan_keys(plan) == {"D4": "1", "E4": "2", "D5": "3", "E5": "4"}

    def test_out_of_bounds_destinations_skipped(self) -> None:
        grid = _grid({"A1": "1", "B1": "2", "A2": "3", "B2": "4"}, rows=3, columns=3)
        snap = take_snapshot(grid, expand_range("A1:B2"))
        plan = paste_plan(snap, _a("C3"), grid)
        assert _plan_keys(plan) == {"C3": "1"}

    def test_formulas_verbatim_by_default(self) -> None:
        grid = _grid({"A3": "=SUM(A1:A2)"})
        snap = take_snapshot(grid, [_a("A3")])
        plan = paste_plan(snap, _a("B3"), grid)
        assert _plan_keys(plan) == {"B3": "=SUM(A1:A2)"}

    def test_formulas_shifted_when_asked(self) -> None:
        grid = _grid({"A3": "=SUM(A1:A2)", "A4": "text"})
        snap = take_snapshot(grid, [_a("A3"), _a("A4")])
        plan = paste_plan(snap, _a("B5"), grid, FormulaEvaluator().shift_references)
        assert _plan_keys(plan) == {"B5": "=SUM(B3:B4)", "B6": "text"}

    def test_style_travels_with_cell(self) -> None:
        grid = Grid(5, 5)
        bold = Cell.from_input("b").style.merge(bold=True)
        grid.set(_a("A1"), Cell.from_input("b", bold))
        snap = take_snapshot(grid, [_a("A1")])
        ((_, cell),) = paste_plan(snap, _a("C2"), grid)
        assert cell.style.bold


class TestFillPlan:
    def test_fill_every_target(self) -> None:
        grid = _grid({"A1": "7"})
        snap = take_snapshot(grid, [_a("A1")])
        plan = fill_plan(snap, expand_range("B1:B3"))
        assert _plan_keys(plan) == {"B1": "7", "B2": "7", "B3": "7"}

    def test_fill_shifts_per_target(self) -> None:
        grid = _grid({"B1": "=UPPER(A1)"})
        snap = take_snapshot(grid, [_a("B1")])
        plan = fill_plan(snap, expand_range("B2:B3"), FormulaEvaluator().shift_references)
        assert _plan_keys(plan) == {"B2": "=UPPER(A2)", "B3": "=UPPER(A3)"}

    def test_multi_cell_snapshot_rejected(self) -> None:
        grid = _grid({})
        snap = take_snapshot(grid, expand_range("A1:A2"))
        with pytest.raises(ValueError, match="single-cell"):
            fill_plan(snap, [_a("C1")])


class TestClipboardText:
    def test_rectangle(self) -> None:
        grid = _grid({"A1": "a", "B1": "b", "A2": "c", "B2": "d"})
        snap = take_snapshot(grid, expand_range("A1:B2"))
        assert clipboard_text(snap) == "a\tb\nc\td"

    def test_display_values_not_formulas(self) -> None:
        grid = Grid(5, 5)
        grid.set(_a("A1"), Cell("=SUM(B1:B2)", "3"))
        assert clipboard_text(take_snapshot(grid, [_a("A1")])) == "3"

    def test_gaps_are_empty_fields(self) -> None:
        grid = _grid({"A1": "a", "C2": "z"})
        snap = take_snapshot(grid, [_a("A1"), _a("C2")])
        assert clipboard_text(snap) == "a\t\t\n\t\tz"

    def test_format_empty(self) -> None:
        assert format_rectangle({}) == ""
