"""
Typed failures raised by the formula engine.

Every failure the engine can produce is a FormulaError subclass, so callers
can catch the base class and still tell the cases apart via `kind`.
"""

from typing import Optional


class FormulaError(ValueError):
    """Base class for every formula failure."""

    kind = "formula_error"

    def __init__(self, formula, detail: str, axis: Optional[str] = None):
        self.formula = formula
        self.detail = detail
        self.axis = axis
        super().__init__(self._message())

    def _message(self) -> str:
        where = f" ({self.axis})" if self.axis else ""
        return f"{self.detail}{where}: {self.formula!r}"

    def for_axis(self, axis: str) -> "FormulaError":
        """Tag the error with the dimension axis it came from."""
        self.axis = axis
        self.args = (self._message(),)
        return self

    def prefixed(self, prefix: str) -> "FormulaError":
        """Prefix the detail, e.g. with the name of the part that failed."""
        self.detail = f"{prefix}: {self.detail}"
        self.args = (self._message(),)
        return self

    def to_dict(self) -> dict:
        return {
            "error": self.kind,
            "detail": self.detail,
            "formula": self.formula,
            "axis": self.axis,
        }


class InvalidFormula(FormulaError):
    """Formula text references something outside the allowed vocabulary."""

    kind = "invalid_formula"


class FormulaSyntaxError(FormulaError):
    """Vocabulary is fine but the token sequence is not a valid expression."""

    kind = "syntax_error"


class UnboundVariable(FormulaError):
    """A variable token has no value in the binding used for evaluation."""

    kind = "unbound_variable"

    def __init__(self, formula, name: str, axis: Optional[str] = None):
        self.name = name
        super().__init__(formula, f"Variable '{name}' is not bound", axis=axis)


class EvaluationFailed(FormulaError):
    """Evaluation produced a non-finite value (e.g. division by zero)."""

    kind = "evaluation_failed"
