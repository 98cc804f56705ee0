"""Dependency graph for formula cells with topological ordering and cycle detection."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable

from gridcalc._address import Address


def _row_major(address: Address) -> tuple[int, int]:
    return (address.row, address.column)


class DependencyGraph:
    """Tracks which cells each formula reads, and the reverse edges.

    Edges are kept incrementally: :meth:`set_formula` replaces a cell's
    outgoing edges, :meth:`remove_formula` drops them.
    """

    __slots__ = ("dependencies", "dependents", "formulas")

    def __init__(self) -> None:
        # cell -> set of cells it reads from
        self.dependencies: dict[Address, frozenset[Address]] = {}
        # cell -> set of formula cells that read from it (reverse edges)
        self.dependents: dict[Address, set[Address]] = {}
        # cell -> formula string
        self.formulas: dict[Address, str] = {}

    def set_formula(self, cell: Address, formula: str, references: Iterable[Address]) -> None:
        """Register (or re-register) a formula cell and its dependencies."""
        self.remove_formula(cell)
        refs = frozenset(a.relative() for a in references)
        self.formulas[cell] = formula
        self.dependencies[cell] = refs
        for ref in refs:
            self.dependents.setdefault(ref, set()).add(cell)

    def remove_formula(self, cell: Address) -> None:
        """Forget a formula cell's outgoing edges. No-op for non-formula cells."""
        self.formulas.pop(cell, None)
        for ref in self.dependencies.pop(cell, frozenset()):
            readers = self.dependents.get(ref)
            if readers is None:
                continue
            readers.discard(cell)
            if not readers:
                del self.dependents[ref]

    def clear(self) -> None:
        self.dependencies.clear()
        self.dependents.clear()
        self.formulas.clear()

    def __contains__(self, cell: Address) -> bool:
        return cell in self.formulas

    def __len__(self) -> int:
        return len(self.formulas)

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------

    def affected_cells(self, changed: Iterable[Address]) -> set[Address]:
        """Formula cells among *changed* plus every transitive dependent."""
        roots = set(changed)
        affected = {c for c in roots if c in self.formulas}
        queue: deque[Address] = deque(roots)
        visited: set[Address] = set(roots)

        while queue:
            cell = queue.popleft()
            for dep in self.dependents.get(cell, ()):
                affected.add(dep)
                if dep not in visited:
                    visited.add(dep)
                    queue.append(dep)

        return affected

    def _reaches_itself(self, start: Address, within: set[Address]) -> bool:
        """True if *start* is reachable from itself through dependents in *within*."""
        stack = [d for d in self.dependents.get(start, ()) if d in within]
        seen: set[Address] = set()
        while stack:
            cell = stack.pop()
            if cell == start:
                return True
            if cell in seen:
                continue
            seen.add(cell)
            stack.extend(d for d in self.dependents.get(cell, ()) if d in within)
        return False

    def _kahn(self, cells: set[Address]) -> list[Address]:
        """Kahn's algorithm over *cells*; edges leaving the set are ignored.

        Cells left over (on or behind a cycle) are not returned.
        """
        in_degree = {c: len(self.dependencies.get(c, frozenset()) & cells) for c in cells}
        ready = sorted((c for c, n in in_degree.items() if n == 0), key=_row_major)
        queue: deque[Address] = deque(ready)
        order: list[Address] = []
        while queue:
            cell = queue.popleft()
            order.append(cell)
            for dep in sorted(self.dependents.get(cell, ()), key=_row_major):
                if dep in in_degree:
                    in_degree[dep] -= 1
                    if in_degree[dep] == 0:
                        queue.append(dep)
        return order

    def evaluation_order(
        self, cells: Iterable[Address],
    ) -> tuple[list[Address], set[Address]]:
        """Split *cells* into an evaluation order and the cells on a cycle.

        Cycle members (including direct self-references) are excluded from
        the order. Cells that merely read from a cycle stay in the order,
        after the cycle's members have been resolved.
        """
        pending = {c for c in cells if c in self.formulas}
        order = self._kahn(pending)
        if len(order) == len(pending):
            return order, set()

        leftover = pending - set(order)
        circular = {c for c in leftover if self._reaches_itself(c, leftover)}
        return self._kahn(pending - circular), circular

    def topological_order(self) -> list[Address]:
        """All formula cells in evaluation order.

        Raises ValueError if a circular reference is detected.
        """
        order, circular = self.evaluation_order(self.formulas)
        if circular:
            names = ", ".join(sorted(c.key for c in circular))
            raise ValueError(f"Circular reference detected involving: {names}")
        return order
