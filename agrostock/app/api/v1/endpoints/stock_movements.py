from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from agrostock.app.api.deps import get_db, get_farm
from agrostock.app.schemas.stock_movement import StockEntryCreate, StockEntryRead, StockEntryUpdate
from agrostock.services.inventory import (
    FarmContext,
    MovementLedger,
    NotFoundError,
    create_stock_entry,
    delete_stock_entry,
    update_stock_entry,
)

router = APIRouter(prefix="/stock-movements")


# ---------- Endpoints ----------
@router.get("/entries", response_model=list[StockEntryRead])
def list_entries(farm: FarmContext = Depends(get_farm), db: Session = Depends(get_db)):
    return [StockEntryRead.from_movement(mv) for mv in MovementLedger(db).entries(farm.farm_id)]


@router.post("/entries", response_model=StockEntryRead, status_code=201)
def create_entry(
    payload: StockEntryCreate,
    farm: FarmContext = Depends(get_farm),
    db: Session = Depends(get_db),
):
    try:
        mv = create_stock_entry(db, farm, payload)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return StockEntryRead.from_movement(mv)


@router.patch("/entries/{entry_id}", response_model=StockEntryRead)
def update_entry(
    entry_id: uuid.UUID,
    payload: StockEntryUpdate,
    farm: FarmContext = Depends(get_farm),
    db: Session = Depends(get_db),
):
    try:
        mv = update_stock_entry(db, farm, entry_id, payload)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return StockEntryRead.from_movement(mv)


@router.delete("/entries/{entry_id}", status_code=204)
def delete_entry(
    entry_id: uuid.UUID,
    farm: FarmContext = Depends(get_farm),
    db: Session = Depends(get_db),
):
    try:
        delete_stock_entry(db, farm, entry_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return Response(status_code=204)
