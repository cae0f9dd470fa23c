"""
Formula engine for parametric cabinet parts.

Validates and evaluates dimension formulas like "W - 2*T" against a variable
binding. Pure Python, no eval(), no I/O, safe to call from any thread.
"""

from .dimensions import AXES, PartDimensions, evaluate_part_dimensions
from .errors import (
    EvaluationFailed,
    FormulaError,
    FormulaSyntaxError,
    InvalidFormula,
    UnboundVariable,
)
from .evaluator import evaluate_expression, evaluate_formula, parse_formula
from .registry import ALLOWED_FUNCTIONS, ALLOWED_OPERATORS, STANDARD_VARIABLES
from .validator import check_formula, tokenize, validate_formula

__all__ = [
    "ALLOWED_FUNCTIONS",
    "ALLOWED_OPERATORS",
    "AXES",
    "EvaluationFailed",
    "FormulaError",
    "FormulaSyntaxError",
    "InvalidFormula",
    "PartDimensions",
    "STANDARD_VARIABLES",
    "UnboundVariable",
    "check_formula",
    "evaluate_expression",
    "evaluate_formula",
    "evaluate_part_dimensions",
    "parse_formula",
    "tokenize",
    "validate_formula",
]
