import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List
from .. import models, schemas
from ..database import get_db
from ..formulas import STANDARD_VARIABLES, InvalidFormula, check_formula, evaluate_part_dimensions

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cabinet-parts", tags=["cabinet-parts"])

# Default part catalog: (width, height, depth) formulas in the standard variables
DEFAULT_PARTS = [
    {"name": "Top Panel", "description": "Top horizontal panel of the cabinet", "part_type": models.PartType.PANEL,
     "default_formula_width": "W - 2*T", "default_formula_height": "D", "default_formula_depth": "T"},
    {"name": "Bottom Panel", "description": "Bottom horizontal panel of the cabinet", "part_type": models.PartType.PANEL,
     "default_formula_width": "W - 2*T", "default_formula_height": "D", "default_formula_depth": "T"},
    {"name": "Side Panel - Left", "description": "Left vertical side panel", "part_type": models.PartType.PANEL,
     "default_formula_width": "D", "default_formula_height": "H", "default_formula_depth": "T"},
    {"name": "Side Panel - Right", "description": "Right vertical side panel", "part_type": models.PartType.PANEL,
     "default_formula_width": "D", "default_formula_height": "H", "default_formula_depth": "T"},
    {"name": "Back Panel", "description": "Rear panel of the cabinet", "part_type": models.PartType.BACK_PANEL,
     "default_formula_width": "W - 2*T", "default_formula_height": "H - 2*T", "default_formula_depth": "T_back"},
    {"name": "Door - Single", "description": "Single door for cabinet front", "part_type": models.PartType.DOOR,
     "default_formula_width": "W", "default_formula_height": "H", "default_formula_depth": "T_door"},
    {"name": "Door - Left", "description": "Left door for double door cabinet", "part_type": models.PartType.DOOR,
     "default_formula_width": "W/2 - 0.5", "default_formula_height": "H", "default_formula_depth": "T_door"},
    {"name": "Door - Right", "description": "Right door for double door cabinet", "part_type": models.PartType.DOOR,
     "default_formula_width": "W/2 - 0.5", "default_formula_height": "H", "default_formula_depth": "T_door"},
    {"name": "Drawer Front", "description": "Front face of drawer", "part_type": models.PartType.DRAWER_FRONT,
     "default_formula_width": "W", "default_formula_height": "H_drawer", "default_formula_depth": "T_door"},
    {"name": "Drawer Side - Left", "description": "Left side of drawer box", "part_type": models.PartType.DRAWER_BOX,
     "default_formula_width": "D_drawer - 2*T", "default_formula_height": "H_drawer - T", "default_formula_depth": "T"},
    {"name": "Drawer Side - Right", "description": "Right side of drawer box", "part_type": models.PartType.DRAWER_BOX,
     "default_formula_width": "D_drawer - 2*T", "default_formula_height": "H_drawer - T", "default_formula_depth": "T"},
    {"name": "Drawer Back", "description": "Back panel of drawer box", "part_type": models.PartType.DRAWER_BOX,
     "default_formula_width": "W - 2*T", "default_formula_height": "H_drawer - T", "default_formula_depth": "T"},
    {"name": "Drawer Bottom", "description": "Bottom panel of drawer box", "part_type": models.PartType.DRAWER_BOX,
     "default_formula_width": "W - 2*T", "default_formula_height": "D_drawer - 2*T", "default_formula_depth": "T_bottom"},
    {"name": "Shelf", "description": "Adjustable or fixed shelf", "part_type": models.PartType.SHELF,
     "default_formula_width": "W - 2*T - 0.125", "default_formula_height": "D - 0.5", "default_formula_depth": "T"},
]


def require_valid_formulas(fields: dict) -> None:
    """
    Data-entry check: every formula_* / default_formula_* value must pass the
    validator against the standard variables. Raises 400 with the reason.
    """
    for field, value in fields.items():
        if "formula" not in field or value is None:
            continue
        try:
            check_formula(value, STANDARD_VARIABLES)
        except InvalidFormula as e:
            raise HTTPException(status_code=400, detail=f"{field}: {e.detail}")


def get_part_or_404(part_id: int, db: Session) -> models.CabinetPart:
    part = db.query(models.CabinetPart).filter(models.CabinetPart.id == part_id).first()
    if not part:
        raise HTTPException(status_code=404, detail="Cabinet part not found")
    return part


def seed_default_parts(db: Session) -> int:
    """Insert catalog parts that don't exist yet (matched by name). Returns count added."""
    seeded = 0
    for data in DEFAULT_PARTS:
        existing = db.query(models.CabinetPart).filter(models.CabinetPart.name == data["name"]).first()
        if not existing:
            db.add(models.CabinetPart(**data))
            seeded += 1
    db.commit()
    if seeded:
        logger.info("Seeded %d default cabinet parts", seeded)
    return seeded


@router.get("/seed")
def seed_parts(db: Session = Depends(get_db)):
    """Seed the default part catalog. Safe to run multiple times, skips existing."""
    return {"ok": True, "seeded": seed_default_parts(db)}


@router.post("/", response_model=schemas.CabinetPart)
def create_part(part: schemas.CabinetPartCreate, db: Session = Depends(get_db)):
    data = part.model_dump()
    require_valid_formulas(data)
    db_part = models.CabinetPart(**data)
    db.add(db_part)
    db.commit()
    db.refresh(db_part)
    return db_part


@router.get("/", response_model=List[schemas.CabinetPart])
def list_parts(part_type: models.PartType = None, db: Session = Depends(get_db)):
    query = db.query(models.CabinetPart)
    if part_type:
        query = query.filter(models.CabinetPart.part_type == part_type)
    return query.order_by(models.CabinetPart.id).all()


@router.get("/{part_id}", response_model=schemas.CabinetPart)
def get_part(part_id: int, db: Session = Depends(get_db)):
    return get_part_or_404(part_id, db)


@router.patch("/{part_id}", response_model=schemas.CabinetPart)
def update_part(part_id: int, update: schemas.CabinetPartUpdate, db: Session = Depends(get_db)):
    part = get_part_or_404(part_id, db)
    changes = update.model_dump(exclude_unset=True)
    require_valid_formulas(changes)
    for field, value in changes.items():
        setattr(part, field, value)
    db.commit()
    db.refresh(part)
    return part


@router.delete("/{part_id}")
def delete_part(part_id: int, db: Session = Depends(get_db)):
    part = get_part_or_404(part_id, db)
    db.delete(part)
    db.commit()
    return {"ok": True}


@router.post("/{part_id}/dimensions", response_model=schemas.PartDimensions)
def part_dimensions(part_id: int, request: schemas.VariablesRequest, db: Session = Depends(get_db)):
    """Evaluate the part's default formulas against the given variables."""
    part = get_part_or_404(part_id, db)
    formulas = {
        "formula_width": part.default_formula_width,
        "formula_height": part.default_formula_height,
        "formula_depth": part.default_formula_depth,
    }
    return evaluate_part_dimensions(formulas, request.variables)


# --- Material compatibility ---

def _clear_default_material(part: models.CabinetPart) -> None:
    for material in part.materials:
        material.is_default = False


def get_part_material_or_404(part: models.CabinetPart, material_item_id: int) -> models.CabinetPartMaterial:
    for material in part.materials:
        if material.material_item_id == material_item_id:
            return material
    raise HTTPException(status_code=404, detail="Material not linked to this part")


@router.get("/{part_id}/materials", response_model=List[schemas.PartMaterial])
def list_part_materials(part_id: int, db: Session = Depends(get_db)):
    part = get_part_or_404(part_id, db)
    return sorted(part.materials, key=lambda m: m.id)


@router.post("/{part_id}/materials", response_model=schemas.PartMaterial)
def add_part_material(part_id: int, material: schemas.PartMaterialCreate, db: Session = Depends(get_db)):
    """Allow a material for this part. Adding it as default demotes the previous default."""
    part = get_part_or_404(part_id, db)
    if any(m.material_item_id == material.material_item_id for m in part.materials):
        raise HTTPException(status_code=409, detail=f"Material {material.material_item_id} is already linked to this part")
    if material.is_default:
        _clear_default_material(part)
    db_material = models.CabinetPartMaterial(cabinet_part_id=part.id, **material.model_dump())
    db.add(db_material)
    db.commit()
    db.refresh(db_material)
    return db_material


@router.put("/{part_id}/materials/{material_item_id}/default", response_model=schemas.PartMaterial)
def set_default_part_material(part_id: int, material_item_id: int, db: Session = Depends(get_db)):
    part = get_part_or_404(part_id, db)
    material = get_part_material_or_404(part, material_item_id)
    _clear_default_material(part)
    material.is_default = True
    db.commit()
    db.refresh(material)
    return material


@router.delete("/{part_id}/materials/{material_item_id}")
def remove_part_material(part_id: int, material_item_id: int, db: Session = Depends(get_db)):
    part = get_part_or_404(part_id, db)
    material = get_part_material_or_404(part, material_item_id)
    db.delete(material)
    db.commit()
    return {"ok": True}
