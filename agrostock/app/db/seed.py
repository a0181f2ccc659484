from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from agrostock.app.core.logging import setup_logging
from agrostock.app.db.session import SessionLocal
from agrostock.app.db.models.models_v1 import Category, Farm
from agrostock.app.db.models.core_types import CategoryType

logger = logging.getLogger(__name__)

PREDEFINED_CATEGORIES = {
    "defensivos": [
        "Herbicidas",
        "Inseticidas",
        "Fungicidas",
        "Acaricidas",
        "Nematicidas",
        "Bactericidas",
        "Biológicos",
        "Reguladores de Crescimento",
        "Formicidas",
        "Moluscicidas",
    ],
    "adjuvantes": [
        "Óleo Mineral",
        "Óleo Vegetal",
        "Antideriva",
        "Espalhante",
        "Adesivo (Fixador)",
        "Umectante",
        "Redutor de pH (Acidificante)",
        "Antiespumante",
        "Sequestrante de Cátions",
        "Fertilizante Foliar",
        "Limpa Tanque",
        "Corante Marcador",
    ],
}

DEMO_FARM_NAME = "Fazenda Demonstração"


def run_seed(db: Session | None = None) -> Farm:
    """Idempotent: demo farm + predefined category catalogue."""
    owns_session = db is None
    db = db or SessionLocal()
    try:
        # 1) Farm
        farm = db.scalar(select(Farm).where(Farm.name == DEMO_FARM_NAME))
        if not farm:
            farm = Farm(name=DEMO_FARM_NAME, description="Seed data")
            db.add(farm)

        # 2) Categories (ON CONFLICT (name) DO NOTHING)
        existing = set(db.scalars(select(Category.name)).all())
        created = 0
        for group_name, names in PREDEFINED_CATEGORIES.items():
            for name in names:
                if name in existing:
                    continue
                db.add(Category(name=name, type=CategoryType.predefined.value, group_name=group_name))
                created += 1

        db.commit()
        logger.info("SEED OK: farm=%s, %d new categories", farm.name, created)
        return farm
    finally:
        if owns_session:
            db.close()


if __name__ == "__main__":
    setup_logging()
    run_seed()
