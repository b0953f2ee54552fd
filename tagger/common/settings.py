# tagger/common/settings.py
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict
from tagger.common.strings.splitters import csv_to_list


def _to_bool(v: str | bool | int | None, default: bool = False) -> bool:
    if isinstance(v, bool):
        return v
    if v is None:
        return default
    s = str(v).strip().lower()
    return s in {"1", "true", "yes", "y", "on"}


class APIConfig(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8000
    prefix: str = "/api"

    cors_allow_origins: List[str] = Field(default_factory=lambda: ["http://localhost:5173"])
    cors_allow_methods: List[str] = Field(default_factory=lambda: ["GET", "POST", "DELETE", "OPTIONS"])
    cors_allow_headers: List[str] = Field(default_factory=lambda: ["*"])
    cors_allow_credentials: bool = False

    @field_validator("cors_allow_origins", "cors_allow_methods", "cors_allow_headers", mode="before")
    @classmethod
    def _split_csv(cls, v):
        return csv_to_list(v)


class DBConfig(BaseModel):
    driver: str = "sqlite"                 # sqlite | postgresql+psycopg
    name: str = "data.sqlite3"             # database name, or file name under data_root for sqlite
    host: str = "localhost"
    port: int = 5432
    user: str = "tagger"
    password: str = "tagger"
    schema_name: str = ""                  # postgres only; empty = default search_path
    echo: bool = False
    pool_size: int = 10
    max_overflow: int = 20
    pool_pre_ping: bool = True
    pool_recycle: int = 1800

    sqlite_wal: bool = True
    sqlite_busy_timeout_sec: float = 5.0
    auto_migrate: bool = False

    # Optional single URL (if set, it takes precedence)
    url: Optional[str] = None

    @field_validator("echo", "sqlite_wal", "auto_migrate", mode="before")
    @classmethod
    def _boolify(cls, v):
        return _to_bool(v)

    @property
    def is_sqlite(self) -> bool:
        return self.driver.startswith("sqlite")


class ScanConfig(BaseModel):
    root: Optional[Path] = None
    recursive: bool = True
    include_hidden: bool = False


class Settings(BaseSettings):
    # -------- App / Env --------
    app_name: str = "tagger"
    app_env: str = "development"  # development|test|staging|production
    log_level: str = "INFO"

    # -------- Storage --------
    data_root: Path = Path(".tagger")
    database_url_override: Optional[str] = Field(default=None, alias="DATABASE_URL")

    # -------- Sub-configs --------
    api: APIConfig = APIConfig()
    db: DBConfig = DBConfig()
    scan: ScanConfig = ScanConfig()

    # -------- Testcontainers / CI toggles --------
    use_testcontainers: bool = False
    test_db_image: str = "postgres:15-alpine"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    @field_validator("use_testcontainers", mode="before")
    @classmethod
    def _boolify(cls, v):
        return _to_bool(v)

    # ===== Convenience: DB URL & schema =====
    @computed_field  # type: ignore[misc]
    @property
    def database_url(self) -> str:
        if self.database_url_override:
            return self.database_url_override
        if self.db.url:
            return self.db.url
        if self.db.is_sqlite:
            return f"{self.db.driver}:///{self.sqlite_path.as_posix()}"
        return f"{self.db.driver}://{self.db.user}:{self.db.password}@{self.db.host}:{self.db.port}/{self.db.name}"

    @computed_field  # type: ignore[misc]
    @property
    def sqlite_path(self) -> Path:
        return self.data_root / self.db.name

    @computed_field  # type: ignore[misc]
    @property
    def db_schema(self) -> str:
        return self.db.schema_name


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Global settings accessor (cached). Use this everywhere you need config:
        from tagger.common.settings import get_settings
        cfg = get_settings()
    """
    s = Settings()  # pydantic_settings will read from .env automatically
    if s.app_env in ("development", "test"):
        s.data_root.mkdir(parents=True, exist_ok=True)
    return s
