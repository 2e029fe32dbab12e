# product_catalog/core/db.py
from __future__ import annotations

from functools import lru_cache
from typing import Any, Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from product_catalog.core.config import get_settings
from product_catalog.core.logging import get_logger

logger = get_logger(__name__)


class Base(DeclarativeBase):
    """Declarative base for SQLAlchemy models."""


def build_engine(url: str, *, connect_timeout: int = 10) -> Engine:
    backend = make_url(url).get_backend_name()
    kwargs: dict[str, Any] = {"pool_pre_ping": True}

    if backend == "sqlite":
        # TestClient runs handlers in a worker thread.
        kwargs["connect_args"] = {"check_same_thread": False}
        if make_url(url).database in (None, "", ":memory:"):
            # One shared connection, otherwise every checkout sees an empty database.
            kwargs["poolclass"] = StaticPool
    elif backend == "postgresql":
        kwargs["connect_args"] = {"connect_timeout": connect_timeout}

    return create_engine(url, **kwargs)


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    settings = get_settings()
    return build_engine(settings.database_url_resolved, connect_timeout=settings.db_connect_timeout)


@lru_cache(maxsize=1)
def get_sessionmaker() -> sessionmaker[Session]:
    return sessionmaker(
        bind=get_engine(),
        autocommit=False,
        autoflush=False,
        class_=Session,
    )


def sync_schema(engine: Engine) -> None:
    """
    Create tables that do not exist yet. Existing tables are left untouched.
    """
    # Models must be imported so they register on Base.metadata.
    from product_catalog import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("Schema synchronised (%s)", ", ".join(sorted(Base.metadata.tables)))


def get_db() -> Generator[Session, None, None]:
    """
    Request-scoped session: opened per request and always closed.
    """
    SessionLocal = get_sessionmaker()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
