"""
Formula vocabulary: the allowed operators, functions and the standard
cabinet variables.

Everything here is read-only after import. Nothing in the engine mutates it,
so validation and evaluation can run from any number of threads without locks.
"""

import math
from types import MappingProxyType
from typing import Callable, NamedTuple

ALLOWED_OPERATORS: frozenset[str] = frozenset("+-*/().")

# Separates function arguments: min(W, H)
ARGUMENT_SEPARATOR = ","


def round_half_up(value: float) -> float:
    """Round to the nearest whole number, halves toward positive infinity.

    round_half_up(2.5) == 3, round_half_up(-2.5) == -2. Python's built-in
    round() would give 2 and -2 (banker's rounding).
    """
    whole = math.floor(value)
    if value - whole >= 0.5:
        whole += 1
    return float(whole)


class FormulaFunction(NamedTuple):
    name: str
    arity: int
    fn: Callable[..., float]


ALLOWED_FUNCTIONS = MappingProxyType({
    "min": FormulaFunction("min", 2, min),
    "max": FormulaFunction("max", 2, max),
    "round": FormulaFunction("round", 1, round_half_up),
    "floor": FormulaFunction("floor", 1, lambda x: float(math.floor(x))),
    "ceil": FormulaFunction("ceil", 1, lambda x: float(math.ceil(x))),
})


# Standard cabinet variables with an example project's values (inches).
# Admin data entry validates formulas against these names.
STANDARD_VARIABLES = MappingProxyType({
    "W": 24.0,          # overall width
    "H": 30.0,          # overall height
    "D": 12.0,          # overall depth
    "T": 0.75,          # carcass material thickness
    "T_door": 0.75,     # door / drawer front thickness
    "T_back": 0.25,     # back panel thickness
    "H_drawer": 6.0,    # drawer height
    "D_drawer": 11.0,   # drawer depth
    "T_bottom": 0.25,   # drawer bottom thickness
})
