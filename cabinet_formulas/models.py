from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey, Enum, Boolean, JSON, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
from .database import Base
import enum


class PartType(str, enum.Enum):
    PANEL = "panel"
    DOOR = "door"
    DRAWER_FRONT = "drawer_front"
    DRAWER_BOX = "drawer_box"
    SHELF = "shelf"
    BACK_PANEL = "back_panel"


# Edges that can carry edge banding, in display order
EDGE_NAMES = ["top", "bottom", "left", "right"]


class CabinetModel(Base):
    """A cabinet design (base 24", wall 30", ...) made of parametric parts."""
    __tablename__ = "cabinet_models"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, nullable=False)
    description = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow)

    parts = relationship("CabinetModelPart", back_populates="cabinet_model", cascade="all, delete-orphan")


class CabinetPart(Base):
    """Generic part type with default dimension formulas."""
    __tablename__ = "cabinet_parts"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(Text)
    part_type = Column(Enum(PartType), nullable=False)
    default_formula_width = Column(Text, nullable=True)
    default_formula_height = Column(Text, nullable=True)
    default_formula_depth = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    model_links = relationship("CabinetModelPart", back_populates="cabinet_part", cascade="all, delete-orphan")
    materials = relationship("CabinetPartMaterial", back_populates="cabinet_part", cascade="all, delete-orphan")


class CabinetModelPart(Base):
    """Links a cabinet model to a part with the formulas used for that model."""
    __tablename__ = "cabinet_model_parts"
    __table_args__ = (
        UniqueConstraint("cabinet_model_id", "cabinet_part_id", name="uq_model_part"),
    )

    id = Column(Integer, primary_key=True, index=True)
    cabinet_model_id = Column(Integer, ForeignKey("cabinet_models.id", ondelete="CASCADE"), nullable=False, index=True)
    cabinet_part_id = Column(Integer, ForeignKey("cabinet_parts.id", ondelete="CASCADE"), nullable=False, index=True)
    formula_width = Column(Text, nullable=False)
    formula_height = Column(Text, nullable=False)
    formula_depth = Column(Text, nullable=True)
    edge_banding_config = Column(JSON, default=list)  # e.g. ["top", "bottom"]
    is_required = Column(Boolean, default=True)
    quantity = Column(Integer, default=1)
    notes = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow)

    cabinet_model = relationship("CabinetModel", back_populates="parts")
    cabinet_part = relationship("CabinetPart", back_populates="model_links")


class CabinetPartMaterial(Base):
    """A material a part may be cut from. At most one per part is the default."""
    __tablename__ = "cabinet_part_materials"
    __table_args__ = (
        UniqueConstraint("cabinet_part_id", "material_item_id", name="uq_part_material"),
    )

    id = Column(Integer, primary_key=True, index=True)
    cabinet_part_id = Column(Integer, ForeignKey("cabinet_parts.id", ondelete="CASCADE"), nullable=False, index=True)
    material_item_id = Column(Integer, nullable=False)  # inventory item id, owned by the inventory service
    is_default = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    cabinet_part = relationship("CabinetPart", back_populates="materials")
