"""create cabinet parts tables

Revision ID: 5a1e0c7d9b21
Revises:
Create Date: 2026-10-18 09:12:40.118302

cabinet_models, cabinet_parts, cabinet_model_parts and cabinet_part_materials
for parametric design.
Idempotent: tables created earlier by Base.metadata.create_all() are skipped.
The default part catalog is seeded by the app on startup, not here.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect


# revision identifiers, used by Alembic.
revision: str = '5a1e0c7d9b21'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

PART_TYPES = ('panel', 'door', 'drawer_front', 'drawer_box', 'shelf', 'back_panel')


def _table_exists(table_name):
    """Check if a table exists."""
    bind = op.get_bind()
    insp = inspect(bind)
    return table_name in insp.get_table_names()


def upgrade() -> None:
    if not _table_exists("cabinet_models"):
        op.create_table(
            "cabinet_models",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("name", sa.String(), nullable=False, unique=True),
            sa.Column("description", sa.Text(), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=True),
        )
        op.create_index("ix_cabinet_models_id", "cabinet_models", ["id"])

    if not _table_exists("cabinet_parts"):
        op.create_table(
            "cabinet_parts",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("name", sa.String(), nullable=False),
            sa.Column("description", sa.Text(), nullable=True),
            # SQLAlchemy stores enum member names
            sa.Column("part_type", sa.Enum(*[t.upper() for t in PART_TYPES], name="parttype"), nullable=False),
            sa.Column("default_formula_width", sa.Text(), nullable=True),
            sa.Column("default_formula_height", sa.Text(), nullable=True),
            sa.Column("default_formula_depth", sa.Text(), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=True),
        )
        op.create_index("ix_cabinet_parts_id", "cabinet_parts", ["id"])

    if not _table_exists("cabinet_model_parts"):
        op.create_table(
            "cabinet_model_parts",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("cabinet_model_id", sa.Integer(),
                      sa.ForeignKey("cabinet_models.id", ondelete="CASCADE"), nullable=False),
            sa.Column("cabinet_part_id", sa.Integer(),
                      sa.ForeignKey("cabinet_parts.id", ondelete="CASCADE"), nullable=False),
            sa.Column("formula_width", sa.Text(), nullable=False),
            sa.Column("formula_height", sa.Text(), nullable=False),
            sa.Column("formula_depth", sa.Text(), nullable=True),
            sa.Column("edge_banding_config", sa.JSON(), nullable=True),
            sa.Column("is_required", sa.Boolean(), nullable=True),
            sa.Column("quantity", sa.Integer(), nullable=True),
            sa.Column("notes", sa.Text(), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=True),
            sa.UniqueConstraint("cabinet_model_id", "cabinet_part_id", name="uq_model_part"),
        )
        op.create_index("ix_cabinet_model_parts_id", "cabinet_model_parts", ["id"])
        op.create_index("ix_cabinet_model_parts_cabinet_model_id", "cabinet_model_parts", ["cabinet_model_id"])
        op.create_index("ix_cabinet_model_parts_cabinet_part_id", "cabinet_model_parts", ["cabinet_part_id"])

    if not _table_exists("cabinet_part_materials"):
        op.create_table(
            "cabinet_part_materials",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("cabinet_part_id", sa.Integer(),
                      sa.ForeignKey("cabinet_parts.id", ondelete="CASCADE"), nullable=False),
            # Inventory items live outside this database, so no foreign key
            sa.Column("material_item_id", sa.Integer(), nullable=False),
            sa.Column("is_default", sa.Boolean(), nullable=False),
            sa.Column("created_at", sa.DateTime(), nullable=True),
            sa.UniqueConstraint("cabinet_part_id", "material_item_id", name="uq_part_material"),
        )
        op.create_index("ix_cabinet_part_materials_id", "cabinet_part_materials", ["id"])
        op.create_index("ix_cabinet_part_materials_cabinet_part_id", "cabinet_part_materials", ["cabinet_part_id"])


def downgrade() -> None:
    op.drop_table("cabinet_part_materials")
    op.drop_table("cabinet_model_parts")
    op.drop_table("cabinet_parts")
    op.drop_table("cabinet_models")
    bind = op.get_bind()
    if bind.dialect.name == "postgresql":
        op.execute(sa.text("DROP TYPE IF EXISTS parttype"))
