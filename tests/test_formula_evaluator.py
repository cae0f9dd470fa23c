"""
Evaluator tests: parsing, precedence, functions and the failure taxonomy.

Tests:
1-4.   Reference formulas from the part catalog
5-10.  Precedence, associativity, unary minus
11-15. Functions, arity, round-half-up
16-24. Failures: syntax, unbound, non-finite, nesting
"""

import math

import pytest

from cabinet_formulas.formulas import (
    EvaluationFailed,
    FormulaError,
    FormulaSyntaxError,
    InvalidFormula,
    UnboundVariable,
    evaluate_expression,
    evaluate_formula,
    parse_formula,
)
from cabinet_formulas.formulas.evaluator import MAX_NESTING_DEPTH, BinaryOp, Call, Negate, Number, Variable
from cabinet_formulas.formulas.registry import round_half_up


# ============================================================
# Reference formulas
# ============================================================

def test_panel_width():
    assert evaluate_formula("W - 2*T", {"W": 24, "T": 0.75}) == 22.5


def test_double_door_width():
    assert evaluate_formula("W/2 - 0.5", {"W": 24}) == 11.5


def test_round_drawer_half():
    """7 / 2 = 3.5 rounds up to 4."""
    assert evaluate_formula("round(H_drawer / 2)", {"H_drawer": 7}) == 4


def test_catalog_formulas(project_variables):
    v = project_variables
    assert evaluate_formula("W - 2*T - 0.125", v) == 22.375
    assert evaluate_formula("D - 0.5", v) == 11.5
    assert evaluate_formula("H - 2*T", v) == 28.5
    assert evaluate_formula("D_drawer - 2*T", v) == 9.5
    assert evaluate_formula("H_drawer - T", v) == 5.25
    assert evaluate_formula("T_bottom", v) == 0.25


def test_result_is_float():
    result = evaluate_formula("W", {"W": 24})
    assert isinstance(result, float)
    assert result == 24.0


# ============================================================
# Precedence and associativity
# ============================================================

def test_multiplication_binds_tighter():
    assert evaluate_formula("2 + 3 * 4", {}) == 14
    assert evaluate_formula("(2 + 3) * 4", {}) == 20


def test_left_associative():
    assert evaluate_formula("W - T - T", {"W": 24, "T": 0.75}) == 22.5
    assert evaluate_formula("W / 2 / 3", {"W": 24}) == 4
    assert evaluate_formula("10 - 4 + 1", {}) == 7


def test_unary_minus():
    v = {"W": 24, "H": 30, "T": 0.75}
    assert evaluate_formula("-W + 30", v) == 6
    assert evaluate_formula("--W", v) == 24
    assert evaluate_formula("-(W - H)", v) == 6
    assert evaluate_formula("2*-T", v) == -1.5
    assert evaluate_formula("-min(W, H)", v) == -24


def test_whitespace_is_ignored_between_tokens():
    v = {"W": 24, "T": 0.75}
    assert evaluate_formula("  W-2*T  ", v) == evaluate_formula("W - 2 * T", v)


def test_mixed_prefix_variables(project_variables):
    """T, T_back and T_bottom in one formula each resolve to their own value."""
    assert evaluate_formula("T + T_back + T_bottom", project_variables) == 1.25
    assert evaluate_formula("H_drawer - H", {"H": 30, "H_drawer": 6}) == -24


def test_parse_tree_shape():
    tree = parse_formula("W - 2*T", {"W": 24, "T": 0.75})
    assert tree == BinaryOp("-", Variable("W"), BinaryOp("*", Number(2.0), Variable("T")))
    assert parse_formula("-min(W, 1)", {"W": 1}) == Negate(Call("min", (Variable("W"), Number(1.0))))


# ============================================================
# Functions
# ============================================================

def test_min_max():
    v = {"W": 24, "H": 30, "D": 12}
    assert evaluate_formula("min(W, H)", v) == 24
    assert evaluate_formula("max(W, H)", v) == 30
    assert evaluate_formula("max(min(W, H), D)", v) == 24


def test_floor_ceil():
    assert evaluate_formula("floor(W / 7)", {"W": 24}) == 3
    assert evaluate_formula("ceil(W / 7)", {"W": 24}) == 4
    assert evaluate_formula("floor(-W / 7)", {"W": 24}) == -4


def test_round_is_half_up():
    """Halves go toward +infinity, not to the nearest even number."""
    assert evaluate_formula("round(2.5)", {}) == 3
    assert evaluate_formula("round(0.5)", {}) == 1
    assert evaluate_formula("round(-2.5)", {}) == -2
    assert evaluate_formula("round(2.49)", {}) == 2
    assert evaluate_formula("round(-2.6)", {}) == -3
    assert round_half_up(0.49999999999999994) == 0


@pytest.mark.parametrize("formula", [
    "min(W)",
    "max(W, W, W)",
    "round(W, 2)",
    "floor()",
    "ceil(W,)",
])
def test_arity_mismatch_is_syntax_error(formula):
    with pytest.raises(FormulaSyntaxError):
        evaluate_formula(formula, {"W": 24})


def test_arity_message():
    with pytest.raises(FormulaSyntaxError, match=r"min\(\) takes exactly 2 arguments, got 1"):
        evaluate_formula("min(W)", {"W": 24})


# ============================================================
# Failures
# ============================================================

@pytest.mark.parametrize("formula", [
    "(W + 1",
    "W + 1)",
    "W +",
    "* W",
    "W ** 2",
    "2 3",
    "1.5.2",
    ".5",
    "W T",
    "()",
    "(W, 1)",
])
def test_malformed_formulas_are_syntax_errors(formula):
    with pytest.raises(FormulaSyntaxError):
        evaluate_formula(formula, {"W": 24, "T": 0.75})


def test_invalid_formula_checked_before_parsing():
    """'X' is rejected by validation even though '(' is also unbalanced."""
    with pytest.raises(InvalidFormula):
        evaluate_formula("(X + 1", {"W": 10})
    with pytest.raises(InvalidFormula):
        evaluate_formula("W; DROP TABLE parts", {"W": 10})


def test_division_by_zero():
    with pytest.raises(EvaluationFailed, match="Division by zero"):
        evaluate_formula("W / (T - T)", {"W": 24, "T": 0.75})
    with pytest.raises(EvaluationFailed):
        evaluate_formula("W / 0", {"W": 24})


def test_overflow_is_evaluation_failure():
    with pytest.raises(EvaluationFailed):
        evaluate_formula("W * 10", {"W": 1e308})


def test_unbound_variable_on_tree_evaluation():
    """A tree evaluated against a smaller binding than it was parsed with."""
    tree = parse_formula("W + T", {"W": 24, "T": 0.75})
    with pytest.raises(UnboundVariable) as exc:
        evaluate_expression(tree, {"W": 24}, "W + T")
    assert exc.value.name == "T"


def test_unchecked_huge_int_on_tree_evaluation():
    tree = parse_formula("W + 1", {"W": 24})
    with pytest.raises(EvaluationFailed, match="too large for a float"):
        evaluate_expression(tree, {"W": 10 ** 400}, "W + 1")


def test_nesting_limit_parentheses():
    deep = "(" * (MAX_NESTING_DEPTH + 5) + "W" + ")" * (MAX_NESTING_DEPTH + 5)
    with pytest.raises(FormulaSyntaxError, match="nested deeper"):
        evaluate_formula(deep, {"W": 1})


def test_nesting_limit_unary():
    with pytest.raises(FormulaSyntaxError, match="nested deeper"):
        evaluate_formula("-" * 100 + "W", {"W": 1})


def test_nesting_within_limit():
    formula = "(" * 20 + "W" + ")" * 20
    assert evaluate_formula(formula, {"W": 3}) == 3


def test_error_kinds_and_base_class():
    for exc_type, kind in [
        (InvalidFormula, "invalid_formula"),
        (FormulaSyntaxError, "syntax_error"),
        (UnboundVariable, "unbound_variable"),
        (EvaluationFailed, "evaluation_failed"),
    ]:
        assert issubclass(exc_type, FormulaError)
        assert issubclass(exc_type, ValueError)
        assert exc_type.kind == kind


def test_error_to_dict():
    with pytest.raises(EvaluationFailed) as exc:
        evaluate_formula("W / 0", {"W": 24})
    body = exc.value.to_dict()
    assert body["error"] == "evaluation_failed"
    assert body["formula"] == "W / 0"
    assert body["axis"] is None


def test_repeated_evaluation_is_identical():
    v = {"W": 23.875, "T": 0.6875, "H": 34.5}
    results = [evaluate_formula("W/3 - 2*T + round(H/7) * 0.1", v) for _ in range(10)]
    assert len(set(results)) == 1
    assert math.isfinite(results[0])
