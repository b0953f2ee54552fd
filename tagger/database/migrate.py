# tagger/database/migrate.py
from __future__ import annotations

from pathlib import Path
from typing import Optional

from alembic import command
from alembic.config import Config

from tagger.common.logging import get_logger
from tagger.common.settings import get_settings

logger = get_logger(__name__)

SCRIPT_LOCATION = Path(__file__).resolve().parent / "alembic"


def alembic_config(url: Optional[str] = None) -> Config:
    """An Alembic Config pointing at the packaged migrations, no alembic.ini needed."""
    url = url or get_settings().database_url
    cfg = Config()
    cfg.set_main_option("script_location", str(SCRIPT_LOCATION))
    # ConfigParser interpolation: a literal '%' (url-encoded passwords) must be doubled
    cfg.set_main_option("sqlalchemy.url", url.replace("%", "%%"))
    return cfg


def upgrade(url: Optional[str] = None, revision: str = "head") -> None:
    logger.info("migrating database to %s", revision)
    command.upgrade(alembic_config(url), revision)


def downgrade(url: Optional[str] = None, revision: str = "base") -> None:
    logger.info("downgrading database to %s", revision)
    command.downgrade(alembic_config(url), revision)
