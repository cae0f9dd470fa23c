from fastapi import APIRouter

from .. import schemas
from ..formulas import (
    ALLOWED_FUNCTIONS,
    ALLOWED_OPERATORS,
    STANDARD_VARIABLES,
    InvalidFormula,
    check_formula,
    evaluate_formula,
)
from ..formulas.registry import ARGUMENT_SEPARATOR

router = APIRouter(prefix="/formulas", tags=["formulas"])


@router.post("/validate", response_model=schemas.FormulaCheckResponse)
def validate(request: schemas.FormulaCheckRequest):
    """Allow-list check only. Without variables, checks against the standard cabinet variables."""
    variables = request.variables if request.variables is not None else STANDARD_VARIABLES
    try:
        check_formula(request.formula, variables)
    except InvalidFormula as e:
        return {"valid": False, "error": e.detail}
    return {"valid": True, "error": None}


@router.post("/evaluate", response_model=schemas.FormulaEvaluateResponse)
def evaluate(request: schemas.FormulaEvaluateRequest):
    # FormulaError is turned into a 422 by the app-level handler
    value = evaluate_formula(request.formula, request.variables)
    return {"formula": request.formula, "value": value}


@router.get("/vocabulary")
def vocabulary():
    """Everything a formula is allowed to contain."""
    return {
        "functions": [{"name": f.name, "arity": f.arity} for f in ALLOWED_FUNCTIONS.values()],
        "operators": sorted(ALLOWED_OPERATORS),
        "argument_separator": ARGUMENT_SEPARATOR,
        "standard_variables": dict(STANDARD_VARIABLES),
    }
