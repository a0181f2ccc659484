from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from agrostock.app.api.deps import get_db, get_farm
from agrostock.app.schemas.stock_balance import SortColumn, SortDirection, StockBalanceRead
from agrostock.services.inventory import FarmContext, fetch_stock_balance
from agrostock.services.stock_balance import sort_balances

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/stock")


@router.get(
    "/balance",
    response_model=list[StockBalanceRead],
)
def get_stock_balance(
    sort: SortColumn | None = None,
    direction: SortDirection | None = None,
    farm: FarmContext = Depends(get_farm),
    db: Session = Depends(get_db),
):
    """
    Solde de stock (READ ONLY)
    - calculé à chaque appel, jamais persisté
    - trié par nom de produit, ou par `sort` / `direction`
    """
    try:
        balances = fetch_stock_balance(db, farm)
    except SQLAlchemyError as exc:
        logger.exception("Failed to load stock balance for farm %s", farm.farm_id)
        raise HTTPException(status_code=503, detail="Failed to load stock balance") from exc

    if sort is not None:
        balances = sort_balances(balances, sort, direction)

    return [StockBalanceRead.from_balance(b) for b in balances]
