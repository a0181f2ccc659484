from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class StockEntryCreate(BaseModel):
    product_id: uuid.UUID
    movement_date: date
    quantity: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    unit_price: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    supplier: str | None = Field(default=None, max_length=255)


class StockEntryUpdate(BaseModel):
    product_id: uuid.UUID | None = None
    movement_date: date | None = None
    quantity: Decimal | None = Field(default=None, gt=0, max_digits=10, decimal_places=2)
    unit_price: Decimal | None = Field(default=None, gt=0, max_digits=10, decimal_places=2)
    supplier: str | None = Field(default=None, max_length=255)


class StockEntryRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    product_id: uuid.UUID
    product_name: str | None = None
    categories: list[str] = []
    movement_type: str
    quantity: float
    unit_price: float | None
    movement_date: date
    supplier: str | None = None

    @classmethod
    def from_movement(cls, mv) -> "StockEntryRead":
        product = mv.product
        return cls(
            id=mv.id,
            product_id=mv.product_id,
            product_name=product.name if product else None,
            categories=[c.name for c in product.categories] if product else [],
            movement_type=mv.movement_type,
            quantity=mv.quantity,
            unit_price=mv.unit_price,
            movement_date=mv.movement_date,
            supplier=mv.notes,
        )
