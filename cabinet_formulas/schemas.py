from pydantic import BaseModel, StrictFloat, StrictInt, field_validator
from typing import Optional, List, Dict, Union
from datetime import datetime
from .models import PartType, EDGE_NAMES
from .formulas import PartDimensions  # noqa: F401  (response model for dimension endpoints)

# Variable values come in as JSON numbers; strings and booleans are rejected, not coerced
VariableValue = Union[StrictInt, StrictFloat]
Variables = Dict[str, VariableValue]


def _not_null(v):
    # Omitted fields never reach validators; an explicit null does
    if v is None:
        raise ValueError("may be omitted but not null")
    return v


class CabinetPartBase(BaseModel):
    name: str
    description: Optional[str] = None
    part_type: PartType
    default_formula_width: Optional[str] = None
    default_formula_height: Optional[str] = None
    default_formula_depth: Optional[str] = None

class CabinetPartCreate(CabinetPartBase):
    pass

class CabinetPartUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    part_type: Optional[PartType] = None
    default_formula_width: Optional[str] = None
    default_formula_height: Optional[str] = None
    default_formula_depth: Optional[str] = None

    @field_validator("name", "part_type")
    @classmethod
    def not_null(cls, v):
        return _not_null(v)

class CabinetPart(CabinetPartBase):
    id: int
    created_at: datetime
    class Config:
        from_attributes = True

class PartMaterialCreate(BaseModel):
    material_item_id: int
    is_default: bool = False

class PartMaterial(PartMaterialCreate):
    id: int
    cabinet_part_id: int
    created_at: datetime
    class Config:
        from_attributes = True

class CabinetModelBase(BaseModel):
    name: str
    description: Optional[str] = None

class CabinetModelCreate(CabinetModelBase):
    pass

class CabinetModel(CabinetModelBase):
    id: int
    created_at: datetime
    class Config:
        from_attributes = True


def _check_edges(edges):
    if edges is None:
        return edges
    unknown = [e for e in edges if e not in EDGE_NAMES]
    if unknown:
        raise ValueError(f"Unknown edge(s) {unknown}. Allowed: {EDGE_NAMES}")
    if len(set(edges)) != len(edges):
        raise ValueError("Edge banding lists an edge more than once")
    return [e for e in EDGE_NAMES if e in edges]


class ModelPartBase(BaseModel):
    formula_width: Optional[str] = None
    formula_height: Optional[str] = None
    formula_depth: Optional[str] = None
    edge_banding_config: List[str] = []
    is_required: bool = True
    quantity: int = 1
    notes: Optional[str] = None

    @field_validator("edge_banding_config")
    @classmethod
    def edges_are_known(cls, v):
        return _check_edges(v)

    @field_validator("quantity")
    @classmethod
    def quantity_positive(cls, v):
        if v is not None and v < 1:
            raise ValueError("quantity must be >= 1")
        return v

class ModelPartCreate(ModelPartBase):
    cabinet_part_id: int

class ModelPartUpdate(BaseModel):
    formula_width: Optional[str] = None
    formula_height: Optional[str] = None
    formula_depth: Optional[str] = None
    edge_banding_config: Optional[List[str]] = None
    is_required: Optional[bool] = None
    quantity: Optional[int] = None
    notes: Optional[str] = None

    @field_validator("edge_banding_config", "is_required", "quantity")
    @classmethod
    def not_null(cls, v):
        return _not_null(v)

    @field_validator("edge_banding_config")
    @classmethod
    def edges_are_known(cls, v):
        return _check_edges(v)

    @field_validator("quantity")
    @classmethod
    def quantity_positive(cls, v):
        if v is not None and v < 1:
            raise ValueError("quantity must be >= 1")
        return v

class ModelPart(ModelPartBase):
    id: int
    cabinet_model_id: int
    cabinet_part_id: int
    formula_width: str
    formula_height: str
    created_at: datetime
    cabinet_part: Optional[CabinetPart] = None
    class Config:
        from_attributes = True


# --- Formula engine requests/responses ---

class FormulaCheckRequest(BaseModel):
    formula: str
    variables: Optional[Variables] = None  # None = standard cabinet variables

class FormulaCheckResponse(BaseModel):
    valid: bool
    error: Optional[str] = None

class FormulaEvaluateRequest(BaseModel):
    formula: str
    variables: Variables

class FormulaEvaluateResponse(BaseModel):
    formula: str
    value: float

class VariablesRequest(BaseModel):
    variables: Variables
