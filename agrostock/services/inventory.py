from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Iterable

from sqlalchemy import select, func
from sqlalchemy.orm import Session, selectinload

from agrostock.app.db.models.models_v1 import (
    Application,
    ApplicationProduct,
    Category,
    Product,
    ProductCategory,
    StockMovement,
)
from agrostock.app.db.models.core_types import (
    MOVEMENT_KIND_ALIASES,
    PLANNED_APPLICATION_STATUSES,
    MovementKind,
    ReferenceType,
)
from agrostock.app.schemas.stock_movement import StockEntryCreate, StockEntryUpdate
from agrostock.services.stock_balance import (
    MovementRecord,
    ProductRecord,
    StockBalance,
    StockDiagnostics,
    compute_balances,
    weighted_average_price,
)

logger = logging.getLogger(__name__)

# valeurs movement_type stockées pour chaque nature ('IN' / 'OUT' = lignes legacy)
ENTRY_MOVEMENT_TYPES = sorted(k for k, v in MOVEMENT_KIND_ALIASES.items() if v is MovementKind.entry)


class NotFoundError(LookupError):
    pass


@dataclass(frozen=True)
class FarmContext:
    """Périmètre explicite de chaque requête de stock : la ferme sélectionnée."""

    farm_id: uuid.UUID


def _to_float(value) -> float | None:
    return float(value) if value is not None else None


# ---------- CHARGEURS (lecture seule) ----------
class ProductCatalog:
    def __init__(self, db: Session):
        self.db = db

    def list(self, farm_id: uuid.UUID) -> list[ProductRecord]:
        rows = self.db.execute(
            select(Product.id, Product.name, Product.unit)
            .where(Product.farm_id == farm_id)
            .where(Product.active.is_(True))
            .order_by(Product.name)
        ).all()
        return [ProductRecord(id=pid, name=name, unit=unit) for pid, name, unit in rows]


class MovementLedger:
    def __init__(self, db: Session):
        self.db = db

    def list(self, farm_id: uuid.UUID) -> list[MovementRecord]:
        rows = self.db.execute(
            select(StockMovement)
            .where(StockMovement.farm_id == farm_id)
            .order_by(StockMovement.movement_date.desc())
        ).scalars().all()
        return [
            MovementRecord(
                id=mv.id,
                product_id=mv.product_id,
                kind=mv.movement_type,
                quantity=float(mv.quantity),
                unit_price=_to_float(mv.unit_price),
                date=mv.movement_date,
            )
            for mv in rows
        ]

    def entries(self, farm_id: uuid.UUID) -> list[StockMovement]:
        """Entrées (achats) avec produit et catégories, les plus récentes d'abord."""
        return list(
            self.db.execute(
                select(StockMovement)
                .where(StockMovement.farm_id == farm_id)
                .where(StockMovement.movement_type.in_(ENTRY_MOVEMENT_TYPES))
                .options(selectinload(StockMovement.product).selectinload(Product.categories))
                .order_by(StockMovement.movement_date.desc(), StockMovement.created_at.desc())
            ).scalars().all()
        )


class PlannedConsumptionIndex:
    def __init__(self, db: Session):
        self.db = db

    def sums_by_product(self, farm_id: uuid.UUID) -> dict[uuid.UUID, float]:
        """
        Quantité réservée par produit = SUM(quantity_used) des applications
        encore planifiées de la ferme.
        """
        rows = self.db.execute(
            select(
                ApplicationProduct.product_id,
                func.coalesce(func.sum(ApplicationProduct.quantity_used), 0).label("planned_qty"),
            )
            .join(Application, Application.id == ApplicationProduct.application_id)
            .where(Application.farm_id == farm_id)
            .where(Application.status.in_(PLANNED_APPLICATION_STATUSES))
            .group_by(ApplicationProduct.product_id)
        ).all()
        return {pid: float(qty or 0) for pid, qty in rows}


def categories_by_product(db: Session, product_ids: Iterable[uuid.UUID]) -> dict[uuid.UUID, list[str]]:
    product_ids = list({pid for pid in product_ids if pid is not None})
    if not product_ids:
        return {}

    rows = db.execute(
        select(ProductCategory.product_id, Category.name)
        .join(Category, Category.id == ProductCategory.category_id)
        .where(ProductCategory.product_id.in_(product_ids))
        .order_by(Category.name)
    ).all()

    out: dict[uuid.UUID, list[str]] = {}
    for pid, name in rows:
        if name:
            out.setdefault(pid, []).append(name)
    return out


# ---------- RAPPORT ----------
def fetch_stock_balance(
    db: Session,
    farm: FarmContext,
    *,
    diagnostics: StockDiagnostics | None = None,
) -> list[StockBalance]:
    """
    Solde actuel par produit pour une ferme.

    Toutes les sources sont chargées avant le calcul ; une erreur de chargement
    remonte telle quelle, jamais de rapport partiel.
    """
    movements = MovementLedger(db).list(farm.farm_id)
    products = ProductCatalog(db).list(farm.farm_id)
    planned = PlannedConsumptionIndex(db).sums_by_product(farm.farm_id)

    product_ids = {mv.product_id for mv in movements} | {p.id for p in products}
    categories = categories_by_product(db, product_ids)

    balances = compute_balances(
        movements,
        products,
        planned,
        categories,
        diagnostics=diagnostics,
    )
    logger.info(
        "Stock balance for farm %s: %d products from %d movements",
        farm.farm_id,
        len(balances),
        len(movements),
    )
    return balances


def product_average_price(db: Session, farm: FarmContext, product_id: uuid.UUID) -> float:
    """Coût moyen pondéré des entrées d'un produit de la ferme (prix des lignes d'application)."""
    _get_farm_product(db, farm, product_id)

    rows = db.execute(
        select(StockMovement.id, StockMovement.movement_type, StockMovement.quantity, StockMovement.unit_price)
        .where(StockMovement.farm_id == farm.farm_id)
        .where(StockMovement.product_id == product_id)
        .where(StockMovement.movement_type.in_(ENTRY_MOVEMENT_TYPES))
    ).all()
    return weighted_average_price(
        MovementRecord(
            id=mid,
            product_id=product_id,
            kind=kind,
            quantity=float(qty or 0),
            unit_price=_to_float(price),
        )
        for mid, kind, qty, price in rows
    )


# ---------- ENTRÉES DE STOCK ----------
def _get_farm_product(db: Session, farm: FarmContext, product_id: uuid.UUID) -> Product:
    product = db.get(Product, product_id)
    if product is None or product.farm_id != farm.farm_id:
        raise NotFoundError("Product not found")
    return product


def _get_farm_entry(db: Session, farm: FarmContext, entry_id: uuid.UUID) -> StockMovement:
    mv = db.execute(
        select(StockMovement)
        .where(StockMovement.id == entry_id)
        .where(StockMovement.farm_id == farm.farm_id)
        .where(StockMovement.movement_type.in_(ENTRY_MOVEMENT_TYPES))
    ).scalar_one_or_none()
    if mv is None:
        raise NotFoundError("Stock entry not found")
    return mv


def create_stock_entry(db: Session, farm: FarmContext, payload: StockEntryCreate) -> StockMovement:
    _get_farm_product(db, farm, payload.product_id)

    mv = StockMovement(
        farm_id=farm.farm_id,
        product_id=payload.product_id,
        movement_type=MovementKind.entry.value,
        quantity=payload.quantity,
        unit_price=payload.unit_price,
        reference_type=ReferenceType.entry.value,
        movement_date=payload.movement_date,
        notes=payload.supplier or None,
    )
    db.add(mv)
    db.commit()
    db.refresh(mv)
    logger.info("Stock entry %s created for product %s", mv.id, mv.product_id)
    return mv


def update_stock_entry(
    db: Session,
    farm: FarmContext,
    entry_id: uuid.UUID,
    payload: StockEntryUpdate,
) -> StockMovement:
    mv = _get_farm_entry(db, farm, entry_id)
    changes = payload.model_dump(exclude_unset=True)

    # colonnes obligatoires : un null explicite ne change rien
    if changes.get("product_id") is not None:
        _get_farm_product(db, farm, changes["product_id"])
        mv.product_id = changes["product_id"]
    if changes.get("quantity") is not None:
        mv.quantity = changes["quantity"]
    if changes.get("unit_price") is not None:
        mv.unit_price = changes["unit_price"]
    if changes.get("movement_date") is not None:
        mv.movement_date = changes["movement_date"]
    if "supplier" in changes:
        mv.notes = changes["supplier"] or None

    db.commit()
    db.refresh(mv)
    return mv


def delete_stock_entry(db: Session, farm: FarmContext, entry_id: uuid.UUID) -> None:
    mv = _get_farm_entry(db, farm, entry_id)
    db.delete(mv)
    db.commit()
    logger.info("Stock entry %s deleted", entry_id)
