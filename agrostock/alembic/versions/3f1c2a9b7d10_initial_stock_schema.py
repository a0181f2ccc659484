"""initial stock schema: farms, products, categories, movements, applications

Revision ID: 3f1c2a9b7d10
Revises:
Create Date: 2026-10-19 09:12:41.503118
"""
from __future__ import annotations

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3f1c2a9b7d10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "farms",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "products",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("farm_id", sa.Uuid(), sa.ForeignKey("farms.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("company", sa.String(255)),
        sa.Column("active_principle", sa.String(255)),
        sa.Column("unit", sa.String(32), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_products_farm_id", "products", ["farm_id"])
    op.create_index("ix_products_name", "products", ["name"])

    op.create_table(
        "categories",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(120), nullable=False, unique=True),
        sa.Column("type", sa.String(32), nullable=False),
        sa.Column("group_name", sa.String(64), nullable=False),
    )
    op.create_index("ix_categories_group_name", "categories", ["group_name"])

    op.create_table(
        "product_categories",
        sa.Column("product_id", sa.Uuid(), sa.ForeignKey("products.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("category_id", sa.Uuid(), sa.ForeignKey("categories.id", ondelete="CASCADE"), primary_key=True),
    )

    op.create_table(
        "stock_movements",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("farm_id", sa.Uuid(), sa.ForeignKey("farms.id", ondelete="CASCADE"), nullable=False),
        sa.Column("product_id", sa.Uuid(), sa.ForeignKey("products.id", ondelete="CASCADE"), nullable=False),
        sa.Column("movement_type", sa.String(10), nullable=False),
        sa.Column("quantity", sa.Numeric(10, 2), nullable=False),
        sa.Column("unit_price", sa.Numeric(10, 2)),
        sa.Column("reference_id", sa.Uuid()),
        sa.Column("reference_type", sa.String(16)),
        sa.Column("movement_date", sa.Date(), nullable=False),
        sa.Column("notes", sa.Text()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "movement_type IN ('entry', 'IN', 'exit', 'OUT')",
            name="ck_stock_movement_type",
        ),
        sa.CheckConstraint(
            "reference_type IN ('entry', 'application')",
            name="ck_stock_movement_reference_type",
        ),
    )
    op.create_index("ix_stock_movements_farm_id", "stock_movements", ["farm_id"])
    op.create_index("ix_stock_movements_product_id", "stock_movements", ["product_id"])
    op.create_index("ix_stock_movements_movement_type", "stock_movements", ["movement_type"])
    op.create_index("ix_stock_movements_reference_id", "stock_movements", ["reference_id"])
    op.create_index("ix_stock_movements_farm_date", "stock_movements", ["farm_id", "movement_date"])

    op.create_table(
        "applications",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("farm_id", sa.Uuid(), sa.ForeignKey("farms.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("application_date", sa.Date(), nullable=False),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("notes", sa.Text()),
        sa.Column("completed_at", sa.DateTime(timezone=True)),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "status IN ('planned', 'completed', 'cancelled', 'PLANNED', 'DONE', 'CANCELED')",
            name="ck_application_status",
        ),
    )
    op.create_index("ix_applications_farm_id", "applications", ["farm_id"])
    op.create_index("ix_applications_status", "applications", ["status"])

    op.create_table(
        "application_products",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "application_id",
            sa.Uuid(),
            sa.ForeignKey("applications.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("product_id", sa.Uuid(), sa.ForeignKey("products.id", ondelete="CASCADE"), nullable=False),
        sa.Column("dosage", sa.Numeric(10, 2), nullable=False),
        sa.Column("quantity_used", sa.Numeric(10, 2)),
        sa.Column("dosage_unit", sa.String(16), nullable=False),
        sa.Column("cost", sa.Numeric(10, 2)),
    )
    op.create_index("ix_application_products_application_id", "application_products", ["application_id"])
    op.create_index("ix_application_products_product_id", "application_products", ["product_id"])


def downgrade() -> None:
    op.drop_table("application_products")
    op.drop_table("applications")
    op.drop_table("stock_movements")
    op.drop_table("product_categories")
    op.drop_table("categories")
    op.drop_table("products")
    op.drop_table("farms")
