"""
Formula validator: the allow-list check every formula passes before it is
parsed.

The scan is purely lexical: every character of the formula must belong to a
known variable, an allowed function name followed by "(", a numeric literal,
or a single allowed operator character. Parenthesis balance, argument counts
and division by zero are the evaluator's business.
"""

import logging
import math
import numbers
import re
from typing import Mapping, NamedTuple, Optional

from ..config import settings
from .errors import InvalidFormula
from .registry import ALLOWED_FUNCTIONS, ALLOWED_OPERATORS, ARGUMENT_SEPARATOR

logger = logging.getLogger(__name__)

VARIABLE = "variable"
FUNCTION = "function"
NUMBER = "number"
OPERATOR = "operator"
SEPARATOR = "separator"

_NUMBER_RE = re.compile(r"[0-9]+(?:\.[0-9]+)?")
_IDENTIFIER_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

# Function names, longest first
_FUNCTION_NAMES = sorted(ALLOWED_FUNCTIONS, key=len, reverse=True)


class Token(NamedTuple):
    kind: str
    text: str
    position: int


def check_variables(variables, formula=None) -> None:
    """Raise InvalidFormula unless `variables` maps identifiers to finite numbers."""
    if not isinstance(variables, Mapping):
        raise InvalidFormula(formula, "Variables must be a mapping of name to number")
    for name, value in variables.items():
        if not isinstance(name, str) or not _IDENTIFIER_RE.fullmatch(name):
            raise InvalidFormula(formula, f"Invalid variable name {name!r}")
        if name in ALLOWED_FUNCTIONS:
            raise InvalidFormula(formula, f"Variable name '{name}' shadows a function")
        # Variables match before functions, so "m" would swallow the start of "min("
        if any(func.startswith(name) for func in ALLOWED_FUNCTIONS):
            raise InvalidFormula(formula, f"Variable name '{name}' is the start of a function name")
        if isinstance(value, bool) or not isinstance(value, numbers.Real):
            raise InvalidFormula(formula, f"Variable '{name}' must be a number, got {value!r}")
        try:
            as_float = float(value)
        except OverflowError:
            raise InvalidFormula(formula, f"Variable '{name}' must be finite, got a value too large for a float")
        if not math.isfinite(as_float):
            raise InvalidFormula(formula, f"Variable '{name}' must be finite, got {value!r}")


def _match_function(text: str, pos: int) -> Optional[str]:
    """Function name at `pos` whose next non-space character is "(", if any."""
    for name in _FUNCTION_NAMES:
        if not text.startswith(name, pos):
            continue
        after = pos + len(name)
        while after < len(text) and text[after].isspace():
            after += 1
        if text.startswith("(", after):
            return name
    return None


def tokenize(formula: str, variables: Mapping[str, float],
             max_length: Optional[int] = None) -> list[Token]:
    """
    Split a formula into tokens, raising InvalidFormula on anything outside
    the allowed vocabulary.

    Variable names are tried longest first, so with {H, H_drawer} the text
    "H_drawer" is one token, never "H" followed by junk.
    """
    if not isinstance(formula, str):
        raise InvalidFormula(formula, "Formula must be a string")
    text = formula.strip()
    if not text:
        raise InvalidFormula(formula, "Formula is empty")
    limit = settings.FORMULA_MAX_LENGTH if max_length is None else max_length
    if len(text) > limit:
        raise InvalidFormula(formula, f"Formula is longer than {limit} characters")
    check_variables(variables, formula)

    variable_names = sorted(variables, key=len, reverse=True)
    tokens = []
    pos = 0
    while pos < len(text):
        char = text[pos]
        if char.isspace():
            pos += 1
            continue

        name = next((n for n in variable_names if text.startswith(n, pos)), None)
        if name is not None:
            tokens.append(Token(VARIABLE, name, pos))
            pos += len(name)
            continue

        func = _match_function(text, pos)
        if func is not None:
            tokens.append(Token(FUNCTION, func, pos))
            pos += len(func)
            continue

        match = _NUMBER_RE.match(text, pos)
        if match:
            tokens.append(Token(NUMBER, match.group(), pos))
            pos = match.end()
            continue

        if char in ALLOWED_OPERATORS:
            tokens.append(Token(OPERATOR, char, pos))
        elif char == ARGUMENT_SEPARATOR:
            tokens.append(Token(SEPARATOR, char, pos))
        else:
            ident = _IDENTIFIER_RE.match(text, pos)
            if ident:
                raise InvalidFormula(formula, f"Unknown identifier '{ident.group()}' at position {pos}")
            raise InvalidFormula(formula, f"Disallowed character {char!r} at position {pos}")
        pos += 1

    return tokens


def check_formula(formula: str, variables: Mapping[str, float]) -> list[Token]:
    """Raise InvalidFormula with the reason if the formula fails validation.

    Returns the tokens on success.
    """
    try:
        return tokenize(formula, variables)
    except InvalidFormula as e:
        logger.debug("Formula rejected: %s", e)
        raise


def validate_formula(formula: str, variables: Mapping[str, float]) -> bool:
    """True if the formula only uses the allowed vocabulary and the given variables."""
    try:
        check_formula(formula, variables)
    except InvalidFormula:
        return False
    return True
