"""Recalculation result dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field

from gridcalc._address import Address


@dataclass(frozen=True)
class CellDelta:
    """A single cell's display value change from recalculation."""

    address: Address
    old_value: str
    new_value: str
    formula: str | None = None  # the formula that produced new_value


@dataclass(frozen=True)
class RecalcResult:
    """Outcome of one write-triggered recalculation pass."""

    changed: frozenset[Address]  # cells written by the triggering operation
    deltas: tuple[CellDelta, ...] = ()  # formula cells whose value changed
    evaluated: tuple[Address, ...] = ()  # formula cells evaluated, in order
    circular: frozenset[Address] = field(default_factory=frozenset)

    @property
    def propagated_cells(self) -> int:
        return len(self.deltas)

    def value_of(self, address: Address) -> str | None:
        """New value of *address* if this pass changed it."""
        for delta in self.deltas:
            if delta.address == address:
                return delta.new_value
        return None
