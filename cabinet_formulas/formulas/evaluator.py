"""
Formula evaluator: tokenizer -> recursive descent parser -> expression tree.

No eval(), no compile(). The only things a formula can reach are the numbers
in the variable binding and the functions in ALLOWED_FUNCTIONS.

Grammar:
    expr    := term (("+" | "-") term)*
    term    := unary (("*" | "/") unary)*
    unary   := "-" unary | primary
    primary := NUMBER | VARIABLE | FUNCTION "(" expr ("," expr)* ")" | "(" expr ")"
"""

import logging
import math
from dataclasses import dataclass
from typing import Mapping, Optional, Union

from .errors import EvaluationFailed, FormulaError, FormulaSyntaxError, UnboundVariable
from .registry import ALLOWED_FUNCTIONS
from .validator import FUNCTION, NUMBER, OPERATOR, SEPARATOR, VARIABLE, Token, check_formula

logger = logging.getLogger(__name__)

# Deepest allowed nesting of parentheses / unary minus / function calls
MAX_NESTING_DEPTH = 64


# --- Expression tree ---

@dataclass(frozen=True)
class Number:
    value: float


@dataclass(frozen=True)
class Variable:
    name: str


@dataclass(frozen=True)
class Negate:
    operand: "Expression"


@dataclass(frozen=True)
class BinaryOp:
    op: str
    left: "Expression"
    right: "Expression"


@dataclass(frozen=True)
class Call:
    function: str
    args: tuple


Expression = Union[Number, Variable, Negate, BinaryOp, Call]


# --- Parser ---

class _FormulaParser:
    """Recursive descent parser over a validated token list."""

    def __init__(self, formula: str, tokens: list[Token]):
        self._formula = formula
        self._tokens = tokens
        self._pos = 0
        self._depth = 0

    def _peek(self) -> Optional[Token]:
        if self._pos < len(self._tokens):
            return self._tokens[self._pos]
        return None

    def _peek_is(self, kind: str, text: str) -> bool:
        tok = self._peek()
        return tok is not None and tok.kind == kind and tok.text == text

    def _consume(self) -> Token:
        tok = self._peek()
        if tok is None:
            self._fail("Unexpected end of formula")
        self._pos += 1
        return tok

    def _expect(self, kind: str, text: str) -> Token:
        tok = self._peek()
        if tok is None or tok.kind != kind or tok.text != text:
            found = "end of formula" if tok is None else f"'{tok.text}' at position {tok.position}"
            self._fail(f"Expected '{text}', found {found}")
        return self._consume()

    def _fail(self, detail: str):
        raise FormulaSyntaxError(self._formula, detail)

    def _enter(self):
        self._depth += 1
        if self._depth > MAX_NESTING_DEPTH:
            self._fail(f"Formula is nested deeper than {MAX_NESTING_DEPTH} levels")

    def _leave(self):
        self._depth -= 1

    def parse(self) -> Expression:
        if not self._tokens:
            self._fail("Formula is empty")
        tree = self._parse_expr()
        tok = self._peek()
        if tok is not None:
            self._fail(f"Unexpected '{tok.text}' at position {tok.position}")
        return tree

    def _parse_expr(self) -> Expression:
        left = self._parse_term()
        while self._peek_is(OPERATOR, "+") or self._peek_is(OPERATOR, "-"):
            op = self._consume().text
            left = BinaryOp(op, left, self._parse_term())
        return left

    def _parse_term(self) -> Expression:
        left = self._parse_unary()
        while self._peek_is(OPERATOR, "*") or self._peek_is(OPERATOR, "/"):
            op = self._consume().text
            left = BinaryOp(op, left, self._parse_unary())
        return left

    def _parse_unary(self) -> Expression:
        if self._peek_is(OPERATOR, "-"):
            self._consume()
            self._enter()
            operand = self._parse_unary()
            self._leave()
            return Negate(operand)
        return self._parse_primary()

    def _parse_primary(self) -> Expression:
        tok = self._consume()

        if tok.kind == NUMBER:
            return Number(float(tok.text))

        if tok.kind == VARIABLE:
            return Variable(tok.text)

        if tok.kind == FUNCTION:
            return self._parse_call(tok)

        if tok.kind == OPERATOR and tok.text == "(":
            self._enter()
            inner = self._parse_expr()
            self._expect(OPERATOR, ")")
            self._leave()
            return inner

        self._fail(f"Unexpected '{tok.text}' at position {tok.position}")

    def _parse_call(self, name_tok: Token) -> Call:
        func = ALLOWED_FUNCTIONS[name_tok.text]
        self._expect(OPERATOR, "(")
        self._enter()
        args = [self._parse_expr()]
        while self._peek_is(SEPARATOR, ","):
            self._consume()
            args.append(self._parse_expr())
        self._expect(OPERATOR, ")")
        self._leave()
        if len(args) != func.arity:
            self._fail(
                f"{func.name}() takes exactly {func.arity} argument"
                f"{'s' if func.arity != 1 else ''}, got {len(args)}"
            )
        return Call(func.name, tuple(args))


# --- Evaluation ---

def _finite(formula: str, value: float, what: str) -> float:
    if not math.isfinite(value):
        raise EvaluationFailed(formula, f"{what} is not a finite number")
    return value


def _eval(node: Expression, variables: Mapping[str, float], formula: str) -> float:
    if isinstance(node, Number):
        return _finite(formula, node.value, "Numeric literal")

    if isinstance(node, Variable):
        if node.name not in variables:
            raise UnboundVariable(formula, node.name)
        return float(variables[node.name])

    if isinstance(node, Negate):
        return -_eval(node.operand, variables, formula)

    if isinstance(node, BinaryOp):
        left = _eval(node.left, variables, formula)
        right = _eval(node.right, variables, formula)
        if node.op == "+":
            result = left + right
        elif node.op == "-":
            result = left - right
        elif node.op == "*":
            result = left * right
        else:
            if right == 0:
                raise EvaluationFailed(formula, "Division by zero")
            result = left / right
        return _finite(formula, result, f"Result of '{node.op}'")

    if isinstance(node, Call):
        args = [_eval(arg, variables, formula) for arg in node.args]
        result = ALLOWED_FUNCTIONS[node.function].fn(*args)
        return _finite(formula, float(result), f"Result of {node.function}()")

    raise TypeError(f"Unknown expression node: {node!r}")


def parse_formula(formula: str, variables: Mapping[str, float]) -> Expression:
    """Validate and parse a formula into an expression tree."""
    tokens = check_formula(formula, variables)
    return _FormulaParser(formula, tokens).parse()


def evaluate_expression(tree: Expression, variables: Mapping[str, float],
                        formula: str = "") -> float:
    """Evaluate an already-parsed expression tree.

    The binding is not re-validated here, so it may differ from the one the
    tree was parsed with.
    """
    try:
        return _eval(tree, variables, formula)
    except OverflowError:
        # float() of an int too large for a float, in an unchecked binding
        raise EvaluationFailed(formula, "Value is too large for a float")


def evaluate_formula(formula: str, variables: Mapping[str, float]) -> float:
    """
    Evaluate a formula against a variable binding.

    Returns a finite float. Raises a FormulaError subclass otherwise:
    InvalidFormula (failed validation), FormulaSyntaxError (bad grammar or
    argument count), UnboundVariable, EvaluationFailed (non-finite result).

        >>> evaluate_formula("W - 2*T", {"W": 24, "T": 0.75})
        22.5
    """
    try:
        tree = parse_formula(formula, variables)
        return evaluate_expression(tree, variables, formula)
    except FormulaError as e:
        logger.info("Formula evaluation failed [%s]: %s", e.kind, e.detail)
        raise
