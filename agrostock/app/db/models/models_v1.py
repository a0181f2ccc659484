from __future__ import annotations

import uuid
from datetime import datetime, date, timezone
from decimal import Decimal

from sqlalchemy import (
    String,
    DateTime,
    Date,
    Boolean,
    ForeignKey,
    Numeric,
    Text,
    Uuid,
    Index,
    CheckConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from agrostock.app.db.base import Base
from agrostock.app.db.models.core_types import (
    APPLICATION_STATUS_VALUES,
    MOVEMENT_TYPE_VALUES,
    ApplicationStatus,
    CategoryType,
    ReferenceType,
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _in_check(column: str, values) -> str:
    quoted = ", ".join(f"'{v}'" for v in values)
    return f"{column} IN ({quoted})"


# ---------- MASTER DATA ----------
class Farm(Base):
    __tablename__ = "farms"
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)


class Product(Base):
    __tablename__ = "products"
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    farm_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("farms.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    company: Mapped[str | None] = mapped_column(String(255))  # fabricante
    active_principle: Mapped[str | None] = mapped_column(String(255))
    unit: Mapped[str] = mapped_column(String(32), default="L", nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)

    farm: Mapped[Farm] = relationship()
    categories: Mapped[list["Category"]] = relationship(
        secondary="product_categories",
        order_by="Category.name",
        viewonly=True,
    )


class Category(Base):
    __tablename__ = "categories"
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(120), unique=True, nullable=False)
    type: Mapped[str] = mapped_column(String(32), default=CategoryType.predefined.value, nullable=False)
    group_name: Mapped[str] = mapped_column(String(64), nullable=False, index=True)  # defensivos | adjuvantes | custom


class ProductCategory(Base):
    __tablename__ = "product_categories"
    product_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("products.id", ondelete="CASCADE"), primary_key=True)
    category_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("categories.id", ondelete="CASCADE"), primary_key=True)


# ---------- INVENTORY ----------
class StockMovement(Base):
    __tablename__ = "stock_movements"
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    farm_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("farms.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    product_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # 'entry' | 'exit', plus legacy 'IN' | 'OUT'
    movement_type: Mapped[str] = mapped_column(String(10), nullable=False, index=True)
    quantity: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    unit_price: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))  # entries only

    reference_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, index=True)
    reference_type: Mapped[str | None] = mapped_column(String(16))

    movement_date: Mapped[date] = mapped_column(Date, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)

    product: Mapped[Product] = relationship()

    __table_args__ = (
        CheckConstraint(_in_check("movement_type", MOVEMENT_TYPE_VALUES), name="ck_stock_movement_type"),
        CheckConstraint(
            _in_check("reference_type", [r.value for r in ReferenceType]),
            name="ck_stock_movement_reference_type",
        ),
        Index("ix_stock_movements_farm_date", "farm_id", "movement_date"),
    )


# ---------- APPLICATIONS ----------
class Application(Base):
    __tablename__ = "applications"
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    farm_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("farms.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    application_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(
        String(16),
        default=ApplicationStatus.planned.value,
        nullable=False,
        index=True,
    )
    notes: Mapped[str | None] = mapped_column(Text)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)

    products: Mapped[list["ApplicationProduct"]] = relationship(
        back_populates="application",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        CheckConstraint(_in_check("status", APPLICATION_STATUS_VALUES), name="ck_application_status"),
    )


class ApplicationProduct(Base):
    __tablename__ = "application_products"
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    application_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("applications.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    product_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    dosage: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)  # L/ha ou kg/ha
    quantity_used: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))  # dosage * área
    dosage_unit: Mapped[str] = mapped_column(String(16), default="L/ha", nullable=False)
    cost: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))

    application: Mapped[Application] = relationship(back_populates="products")
    product: Mapped[Product] = relationship()
