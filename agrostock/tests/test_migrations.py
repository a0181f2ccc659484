import os

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

ALEMBIC_DIR = os.path.join(os.path.dirname(__file__), "..", "alembic")

TABLES = {
    "farms",
    "products",
    "categories",
    "product_categories",
    "stock_movements",
    "applications",
    "application_products",
}


def _alembic_config(url=None) -> Config:
    cfg = Config()
    cfg.set_main_option("script_location", os.path.abspath(ALEMBIC_DIR))
    if url is not None:
        cfg.set_main_option("sqlalchemy.url", url)
    return cfg


def _tables(url):
    engine = create_engine(url)
    try:
        return set(inspect(engine).get_table_names())
    finally:
        engine.dispose()


def test_upgrade_uses_database_url_from_environment(tmp_path, monkeypatch):
    env_url = f"sqlite:///{tmp_path / 'env.db'}"
    ini_url = f"sqlite:///{tmp_path / 'ini.db'}"
    monkeypatch.setenv("DATABASE_URL", env_url)

    command.upgrade(_alembic_config(ini_url), "head")

    assert TABLES <= _tables(env_url)
    assert not (tmp_path / "ini.db").exists()


def test_upgrade_falls_back_to_ini_url(tmp_path, monkeypatch):
    """
    GIVEN aucun DATABASE_URL
    THEN sqlalchemy.url de la config alembic est utilisé
    """
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.setattr("dotenv.load_dotenv", lambda *args, **kwargs: False)
    ini_url = f"sqlite:///{tmp_path / 'ini.db'}"

    command.upgrade(_alembic_config(ini_url), "head")

    assert TABLES <= _tables(ini_url)


def test_downgrade_drops_schema(tmp_path, monkeypatch):
    url = f"sqlite:///{tmp_path / 'roundtrip.db'}"
    monkeypatch.setenv("DATABASE_URL", url)
    cfg = _alembic_config()

    command.upgrade(cfg, "head")
    command.downgrade(cfg, "base")

    assert not (TABLES & _tables(url))
