from __future__ import annotations

import uuid
from typing import Generator

from fastapi import Query

from agrostock.app.db.session import SessionLocal
from agrostock.services.inventory import FarmContext


def get_db() -> Generator:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_farm(farm_id: uuid.UUID = Query(..., description="Fazenda selecionada")) -> FarmContext:
    return FarmContext(farm_id=farm_id)
