"""gridcalc.calc - Formula evaluation and recalculation for gridcalc sheets."""

from gridcalc.calc._evaluator import FormulaEvaluator
from gridcalc.calc._functions import CellError, FunctionRegistry, FunctionSpec, is_supported
from gridcalc.calc._graph import DependencyGraph
from gridcalc.calc._parser import (
    InvalidRange,
    bounding_rectangle,
    clip_rectangle,
    expand_range,
    parse_formula,
    parse_range,
    split_arguments,
)
from gridcalc.calc._protocol import CellDelta, RecalcResult
from gridcalc.calc._recalc import Recalculator

__all__ = [
    "CellDelta",
    "CellError",
    "DependencyGraph",
    "FormulaEvaluator",
    "FunctionRegistry",
    "FunctionSpec",
    "InvalidRange",
    "RecalcResult",
    "Recalculator",
    "bounding_rectangle",
    "clip_rectangle",
    "expand_range",
    "is_supported",
    "parse_formula",
    "parse_range",
    "split_arguments",
]
