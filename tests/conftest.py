# tests/conftest.py
from __future__ import annotations
import os
import tempfile

# Settings are read once and cached; point them at a throwaway data root first.
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DATA_ROOT", tempfile.mkdtemp(prefix="tagger-test-"))

import pytest
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from tagger.common.settings import get_settings
from tagger.database.core.main import build_engine
from tagger.database.models import Base  # <-- imports every model/table


@pytest.fixture(scope="session")
def db_url(tmp_path_factory):
    cfg = get_settings()
    if cfg.use_testcontainers:
        from testcontainers.postgres import PostgresContainer

        with PostgresContainer(cfg.test_db_image) as pg:
            # Force psycopg driver in the URL returned by testcontainers (it defaults to psycopg2)
            yield pg.get_connection_url().replace("psycopg2", "psycopg")
    else:
        path = tmp_path_factory.mktemp("db") / "test.sqlite3"
        yield f"sqlite:///{path.as_posix()}"


@pytest.fixture(scope="session")
def db_engine(db_url) -> Engine:
    engine = build_engine(db_url)

    # Skip Alembic here; just create tables from models (migrations have their own test)
    Base.metadata.create_all(bind=engine)

    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def session_factory(db_engine):
    """
    A sessionmaker for code that opens and commits its own transactions
    (AssociationStore, TaggingService, ScanService). Every table is emptied
    after the test.
    """
    factory = sessionmaker(bind=db_engine, expire_on_commit=False, future=True, autoflush=False)
    try:
        yield factory
    finally:
        with db_engine.begin() as conn:
            for table in reversed(Base.metadata.sorted_tables):
                conn.execute(table.delete())
