from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List
from .. import models, schemas
from ..cutlist import build_cut_list
from ..database import get_db
from ..formulas import AXES
from .parts import get_part_or_404, require_valid_formulas

router = APIRouter(prefix="/cabinet-models", tags=["cabinet-models"])


def get_model_or_404(model_id: int, db: Session) -> models.CabinetModel:
    cabinet_model = db.query(models.CabinetModel).filter(models.CabinetModel.id == model_id).first()
    if not cabinet_model:
        raise HTTPException(status_code=404, detail="Cabinet model not found")
    return cabinet_model


def get_link_or_404(model_id: int, link_id: int, db: Session) -> models.CabinetModelPart:
    link = db.query(models.CabinetModelPart).filter(
        models.CabinetModelPart.id == link_id,
        models.CabinetModelPart.cabinet_model_id == model_id,
    ).first()
    if not link:
        raise HTTPException(status_code=404, detail="Model part not found")
    return link


@router.post("/", response_model=schemas.CabinetModel)
def create_model(cabinet_model: schemas.CabinetModelCreate, db: Session = Depends(get_db)):
    existing = db.query(models.CabinetModel).filter(models.CabinetModel.name == cabinet_model.name).first()
    if existing:
        raise HTTPException(status_code=409, detail=f"Cabinet model '{cabinet_model.name}' already exists")
    db_model = models.CabinetModel(**cabinet_model.model_dump())
    db.add(db_model)
    db.commit()
    db.refresh(db_model)
    return db_model


@router.get("/", response_model=List[schemas.CabinetModel])
def list_models(db: Session = Depends(get_db)):
    return db.query(models.CabinetModel).order_by(models.CabinetModel.name).all()


@router.get("/{model_id}", response_model=schemas.CabinetModel)
def get_model(model_id: int, db: Session = Depends(get_db)):
    return get_model_or_404(model_id, db)


@router.get("/{model_id}/parts", response_model=List[schemas.ModelPart])
def list_model_parts(model_id: int, db: Session = Depends(get_db)):
    cabinet_model = get_model_or_404(model_id, db)
    return sorted(cabinet_model.parts, key=lambda link: link.id)


@router.post("/{model_id}/parts", response_model=schemas.ModelPart)
def add_model_part(model_id: int, link: schemas.ModelPartCreate, db: Session = Depends(get_db)):
    """
    Attach a part to a model. Formulas left out fall back to the part's
    default formulas; width and height must end up set one way or the other.
    """
    get_model_or_404(model_id, db)
    part = get_part_or_404(link.cabinet_part_id, db)

    existing = db.query(models.CabinetModelPart).filter(
        models.CabinetModelPart.cabinet_model_id == model_id,
        models.CabinetModelPart.cabinet_part_id == part.id,
    ).first()
    if existing:
        raise HTTPException(status_code=409, detail=f"Part '{part.name}' is already in this model")

    data = link.model_dump()
    for axis in AXES:
        key = f"formula_{axis}"
        if not data.get(key):
            data[key] = getattr(part, f"default_{key}")
    for key in ("formula_width", "formula_height"):
        if not data.get(key):
            raise HTTPException(status_code=400, detail=f"{key} is required (part has no default)")
    require_valid_formulas(data)

    db_link = models.CabinetModelPart(cabinet_model_id=model_id, **data)
    db.add(db_link)
    db.commit()
    db.refresh(db_link)
    return db_link


@router.patch("/{model_id}/parts/{link_id}", response_model=schemas.ModelPart)
def update_model_part(model_id: int, link_id: int, update: schemas.ModelPartUpdate,
                      db: Session = Depends(get_db)):
    link = get_link_or_404(model_id, link_id, db)
    changes = update.model_dump(exclude_unset=True)
    for key in ("formula_width", "formula_height"):
        if key in changes and not changes[key]:
            raise HTTPException(status_code=400, detail=f"{key} cannot be empty")
    require_valid_formulas(changes)
    for field, value in changes.items():
        setattr(link, field, value)
    db.commit()
    db.refresh(link)
    return link


@router.delete("/{model_id}/parts/{link_id}")
def delete_model_part(model_id: int, link_id: int, db: Session = Depends(get_db)):
    link = get_link_or_404(model_id, link_id, db)
    db.delete(link)
    db.commit()
    return {"ok": True}


@router.post("/{model_id}/cutlist")
def cut_list(model_id: int, request: schemas.VariablesRequest, include_optional: bool = True,
             db: Session = Depends(get_db)):
    """Cut dimensions for every part of the model, for one project's variables."""
    cabinet_model = get_model_or_404(model_id, db)
    links = sorted(cabinet_model.parts, key=lambda link: link.id)
    result = build_cut_list(links, request.variables, include_optional=include_optional)
    result["cabinet_model_id"] = cabinet_model.id
    result["cabinet_model"] = cabinet_model.name
    return result
