import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from agrostock.app.api.deps import get_db
from agrostock.app.db.base import Base
from agrostock.app.db.models import models_v1  # noqa: F401  (registers tables on Base.metadata)
from agrostock.app.main import app


@pytest.fixture(scope="function")
def engine():
    """
    Base SQLite en mémoire, neuve pour chaque test.

    StaticPool: une seule connexion partagée, sinon chaque connexion
    verrait sa propre base vide (et TestClient tourne dans un autre thread).
    """
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture(scope="function")
def db_session(engine) -> Session:
    SessionTest = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    session = SessionTest()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(db_session):
    def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.pop(get_db, None)


@pytest.fixture(scope="function")
def farm_data(db_session):
    """
    GIVEN une ferme avec:
    - Glifosato (L): entrée 100 @ 2.00, entrée 50 @ 3.00, sortie 30
      + application planifiée de 20 L, application réalisée de 99 L (ignorée)
    - Óleo Mineral (L): aucun mouvement, 15 L planifiés (status legacy PLANNED)
    - Adubo Foliar (Kg): entrée legacy IN 10 @ 5.00, sortie legacy OUT 4
    - une autre ferme avec son propre produit et ses mouvements
    """
    from datetime import date
    from types import SimpleNamespace

    from agrostock.app.db.models.models_v1 import (
        Application,
        ApplicationProduct,
        Category,
        Farm,
        Product,
        ProductCategory,
        StockMovement,
    )

    farm = Farm(name="Fazenda Boa Vista")
    other_farm = Farm(name="Fazenda Vizinha")
    db_session.add_all([farm, other_farm])
    db_session.flush()

    glifosato = Product(farm_id=farm.id, name="Glifosato", unit="L", company="AgroQuímica")
    oleo = Product(farm_id=farm.id, name="Óleo Mineral", unit="L")
    adubo = Product(farm_id=farm.id, name="Adubo Foliar", unit="Kg")
    other_product = Product(farm_id=other_farm.id, name="Atrazina", unit="L")
    db_session.add_all([glifosato, oleo, adubo, other_product])
    db_session.flush()

    herbicidas = Category(name="Herbicidas", group_name="defensivos")
    dessecantes = Category(name="Dessecantes", type="custom", group_name="custom")
    adjuvante = Category(name="Óleo Mineral", group_name="adjuvantes")
    db_session.add_all([herbicidas, dessecantes, adjuvante])
    db_session.flush()
    db_session.add_all(
        [
            ProductCategory(product_id=glifosato.id, category_id=herbicidas.id),
            ProductCategory(product_id=glifosato.id, category_id=dessecantes.id),
            ProductCategory(product_id=oleo.id, category_id=adjuvante.id),
        ]
    )

    def movement(product, kind, qty, price=None, day=1, farm_id=None):
        return StockMovement(
            farm_id=farm_id or farm.id,
            product_id=product.id,
            movement_type=kind,
            quantity=qty,
            unit_price=price,
            movement_date=date(2026, 3, day),
        )

    db_session.add_all(
        [
            movement(glifosato, "entry", 100, 2, day=1),
            movement(glifosato, "entry", 50, 3, day=5),
            movement(glifosato, "exit", 30, day=9),
            movement(adubo, "IN", 10, 5, day=2),
            movement(adubo, "OUT", 4, day=3),
            movement(other_product, "entry", 500, 1, day=4, farm_id=other_farm.id),
        ]
    )

    def application(status, farm_id=None):
        return Application(
            farm_id=farm_id or farm.id,
            name=f"Aplicação {status}",
            application_date=date(2026, 4, 1),
            status=status,
        )

    planned = application("planned")
    planned_legacy = application("PLANNED")
    done = application("completed")
    other_planned = application("planned", farm_id=other_farm.id)
    db_session.add_all([planned, planned_legacy, done, other_planned])
    db_session.flush()

    db_session.add_all(
        [
            ApplicationProduct(application_id=planned.id, product_id=glifosato.id, dosage=2, quantity_used=20),
            ApplicationProduct(application_id=planned_legacy.id, product_id=oleo.id, dosage=0.5, quantity_used=15),
            ApplicationProduct(application_id=done.id, product_id=glifosato.id, dosage=3, quantity_used=99),
            ApplicationProduct(
                application_id=other_planned.id, product_id=other_product.id, dosage=1, quantity_used=40
            ),
        ]
    )
    db_session.commit()

    return SimpleNamespace(
        farm=farm,
        other_farm=other_farm,
        glifosato=glifosato,
        oleo=oleo,
        adubo=adubo,
        other_product=other_product,
    )
