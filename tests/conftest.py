import importlib
import os

import pytest
from alembic import command
from alembic.config import Config
from fastapi.testclient import TestClient

TEST_SECRET_KEY = "test-secret"

os.environ.setdefault("SECRET_KEY", TEST_SECRET_KEY)


def alembic_config(database_url: str) -> Config:
    config = Config("alembic.ini")
    config.set_main_option("sqlalchemy.url", database_url)
    return config


def _reload_app_modules():
    """Rebuild settings, engine and app so they see the current environment."""
    modules = [
        importlib.import_module(name)
        for name in ("app.brandlog.core.config", "app.brandlog.db.session", "app.main")
    ]
    for module in modules:
        importlib.reload(module)
    _, session, main = modules
    return session, main


@pytest.fixture()
def migrate_sqlite(tmp_path, monkeypatch):
    """Return a factory that migrates a fresh SQLite file to head and returns its URL."""

    def _migrate(name: str = "brandlog-test.db") -> str:
        url = f"sqlite+pysqlite:///{tmp_path / name}"
        monkeypatch.setenv("DATABASE_URL", url)
        command.upgrade(alembic_config(url), "head")
        return url

    monkeypatch.setenv("SECRET_KEY", TEST_SECRET_KEY)
    return _migrate


@pytest.fixture()
def database_url(migrate_sqlite) -> str:
    return migrate_sqlite()


@pytest.fixture()
def client(database_url: str):
    session, main = _reload_app_modules()
    with TestClient(main.create_app()) as test_client:
        yield test_client
    session.engine.dispose()


@pytest.fixture()
def db_session(client):
    from app.brandlog.db.session import SessionLocal

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
