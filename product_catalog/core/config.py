from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from product_catalog.core.errors import ConfigError


class Settings(BaseSettings):
    """
    Configuration for product-catalog-api.

    The POSTGRES_* connection parameters are required: if any of them is missing
    or malformed the settings cannot be built and the service must not start.

    DATABASE_URL, when present, overrides the URL built from POSTGRES_* (tests and
    CI point it at SQLite), but the POSTGRES_* values are still validated.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # --- Service ---
    app_name: str = Field(default="product-catalog-api", validation_alias="APP_NAME")
    app_version: str = Field(default="0.1.0", validation_alias="APP_VERSION")
    environment: str = Field(default="local", validation_alias="APP_ENV")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    port: int = Field(default=3000, validation_alias="PORT")

    # Single browser origin allowed by CORS; None disables cross-origin access.
    frontend_url: Optional[str] = Field(default=None, validation_alias="FRONTEND_URL")

    # -------------------------
    # Database
    # -------------------------
    # Empty values count as missing.
    postgres_host: str = Field(min_length=1, validation_alias="POSTGRES_HOST")
    postgres_port: int = Field(validation_alias="POSTGRES_PORT")
    postgres_user: str = Field(min_length=1, validation_alias="POSTGRES_USER")
    postgres_password: str = Field(min_length=1, validation_alias="POSTGRES_PASSWORD")
    postgres_db: str = Field(min_length=1, validation_alias="POSTGRES_DB")

    database_url: Optional[str] = Field(default=None, validation_alias="DATABASE_URL")
    db_dialect: str = Field(default="postgresql+psycopg", validation_alias="DB_DIALECT")
    db_connect_timeout: int = Field(default=10, validation_alias="DB_CONNECT_TIMEOUT")

    # Create missing tables at startup. This is not a migration tool.
    db_synchronize: bool = Field(default=True, validation_alias="DB_SYNCHRONIZE")

    @property
    def database_url_resolved(self) -> str:
        """
        Return DATABASE_URL if set, otherwise build it from POSTGRES_*.
        """
        if self.database_url and self.database_url.strip():
            return self.database_url.strip()

        return (
            f"{self.db_dialect}://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @property
    def cors_origins(self) -> list[str]:
        origin = (self.frontend_url or "").strip().rstrip("/")
        return [origin] if origin else []


def _describe(exc: ValidationError) -> str:
    problems = []
    for err in exc.errors():
        name = ".".join(str(p) for p in err.get("loc", ())) or "<settings>"
        problems.append(f"{name}: {err.get('msg')}")
    return "; ".join(problems)


def load_settings(**overrides) -> Settings:
    """
    Build and validate Settings once, translating pydantic errors into ConfigError.

    Keyword overrides are forwarded to Settings (e.g. ``_env_file=None`` in tests).
    """
    try:
        return Settings(**overrides)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {_describe(e)}") from e


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
