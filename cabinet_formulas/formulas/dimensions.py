"""
Dimension assembly: evaluates width/height/depth for one cabinet part.

Stops at the first axis that fails (width, then height, then depth). The
error is tagged with the axis so callers know which formula to fix.
"""

from collections.abc import Mapping as MappingABC
from typing import Mapping, Optional

from pydantic import BaseModel

from .errors import FormulaError
from .evaluator import evaluate_formula

AXES = ("width", "height", "depth")


class PartDimensions(BaseModel):
    """Computed size of a part. None means no formula for that axis, not zero."""
    width: Optional[float] = None
    height: Optional[float] = None
    depth: Optional[float] = None


def _formula_for(part, axis: str) -> Optional[str]:
    key = f"formula_{axis}"
    if isinstance(part, MappingABC):
        formula = part.get(key)
    else:
        formula = getattr(part, key, None)
    if formula is None or (isinstance(formula, str) and not formula.strip()):
        return None
    return formula


def evaluate_part_dimensions(part, variables: Mapping[str, float]) -> PartDimensions:
    """
    Evaluate every formula a part has.

    `part` is a dict or any object with formula_width / formula_height /
    formula_depth attributes (ORM rows, pydantic models).
    """
    values = {}
    for axis in AXES:
        formula = _formula_for(part, axis)
        if formula is None:
            values[axis] = None
            continue
        try:
            values[axis] = evaluate_formula(formula, variables)
        except FormulaError as e:
            raise e.for_axis(axis)
    return PartDimensions(**values)
