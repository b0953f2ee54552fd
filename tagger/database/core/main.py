# tagger/database/core/main.py
from __future__ import annotations

from typing import Optional

from sqlalchemy import MetaData, create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from tagger.common.settings import get_settings

_settings = get_settings()

NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    # Schema only applies to postgres; sqlite has a single namespace
    metadata = MetaData(
        schema=_settings.db_schema if _settings.db_schema and _settings.db_schema.lower() != "public" else None,
        naming_convention=NAMING_CONVENTION,
    )


def _install_sqlite_pragmas(engine: Engine, *, wal: bool) -> None:
    """
    SQLite only enforces FOREIGN KEY (and so ON DELETE CASCADE) when asked to,
    per connection. WAL lets readers proceed while a writer holds the lock.
    """
    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, _):
        cur = dbapi_conn.cursor()
        try:
            cur.execute("PRAGMA foreign_keys=ON")
            if wal:
                cur.execute("PRAGMA journal_mode=WAL")
        finally:
            cur.close()


def build_engine(url: Optional[str] = None, *, echo: Optional[bool] = None) -> Engine:
    """Create an Engine for `url` (defaults to settings) with the dialect-specific setup."""
    db = _settings.db
    url = url or _settings.database_url
    echo = db.echo if echo is None else echo

    if make_url(url).get_backend_name() == "sqlite":
        engine = create_engine(
            url,
            echo=echo,
            connect_args={"timeout": db.sqlite_busy_timeout_sec, "check_same_thread": False},
            future=True,
        )
        _install_sqlite_pragmas(engine, wal=db.sqlite_wal)
        return engine

    engine = create_engine(
        url,
        echo=echo,
        pool_size=db.pool_size,
        max_overflow=db.max_overflow,
        pool_pre_ping=db.pool_pre_ping,
        pool_recycle=db.pool_recycle,
        future=True,
    )

    # Ensure the app schema is first, then public (so extensions remain visible)
    if _settings.db_schema and _settings.db_schema.lower() != "public":
        @event.listens_for(engine, "connect")
        def _set_search_path(dbapi_conn, _):
            with dbapi_conn.cursor() as cur:
                cur.execute(f'SET search_path TO "{_settings.db_schema}", public')

    return engine


engine = build_engine()

SessionLocal = sessionmaker(bind=engine, expire_on_commit=False, future=True, autoflush=False)

