from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from agrostock.app.api.deps import get_db, get_farm
from agrostock.app.schemas.product import AveragePriceRead, ProductRead
from agrostock.services.inventory import FarmContext, NotFoundError, ProductCatalog, product_average_price

router = APIRouter(prefix="/products")


@router.get("", response_model=list[ProductRead])
def list_products(farm: FarmContext = Depends(get_farm), db: Session = Depends(get_db)):
    return ProductCatalog(db).list(farm.farm_id)


@router.get("/{product_id}/average-price", response_model=AveragePriceRead)
def get_average_price(
    product_id: uuid.UUID,
    farm: FarmContext = Depends(get_farm),
    db: Session = Depends(get_db),
):
    """Coût moyen pondéré des entrées de la ferme, base du coût des applications."""
    try:
        average_price = product_average_price(db, farm, product_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return {"product_id": product_id, "average_price": average_price}
