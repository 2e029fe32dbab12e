import os
from datetime import datetime, timedelta, timezone
from typing import Any, Mapping, Optional

import pytest

# Environment must be in place before product_catalog.main is imported: the app
# validates its settings at import time.
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("LOG_LEVEL", "INFO")
os.environ.setdefault("POSTGRES_HOST", "127.0.0.1")
os.environ.setdefault("POSTGRES_PORT", "5432")
os.environ.setdefault("POSTGRES_USER", "catalog_test_app")
os.environ.setdefault("POSTGRES_PASSWORD", "catalog_test_app_pwd")
os.environ.setdefault("POSTGRES_DB", "catalog_test_db")
os.environ.setdefault("FRONTEND_URL", "http://localhost:5173")
# Tests never talk to Postgres: one shared in-memory SQLite database.
os.environ["DATABASE_URL"] = "sqlite://"

from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402

from product_catalog.core.db import Base, build_engine, get_engine, sync_schema  # noqa: E402
from product_catalog.main import app  # noqa: E402
from product_catalog.models import Product  # noqa: E402

VALID_DESCRIPTION = "A compact bluetooth speaker with deep bass."  # 43 chars


@pytest.fixture()
def client():
    Base.metadata.drop_all(bind=get_engine())
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def db_session():
    engine = build_engine("sqlite://")
    sync_schema(engine)
    with Session(engine) as session:
        yield session
    engine.dispose()


class FixedClock:
    """Deterministic clock; every call advances by one second."""

    def __init__(self, start: Optional[datetime] = None) -> None:
        self.now = start or datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + timedelta(seconds=1)
        return current


class InMemoryProductGateway:
    """ProductGateway kept in a dict; lets ProductService be tested without a database."""

    def __init__(self) -> None:
        self.rows: dict[int, Product] = {}
        self.next_id = 1
        self.calls: list[str] = []

    def find_all(self) -> list[Product]:
        self.calls.append("find_all")
        return [self.rows[k] for k in sorted(self.rows)]

    def find_by_id(self, product_id: int, *, for_update: bool = False) -> Optional[Product]:
        self.calls.append("find_by_id")
        return self.rows.get(product_id)

    def insert(self, values: Mapping[str, Any]) -> Product:
        self.calls.append("insert")
        product = Product(id=self.next_id, **values)
        self.rows[product.id] = product
        self.next_id += 1
        return product

    def update(self, product_id: int, values: Mapping[str, Any]) -> Optional[Product]:
        self.calls.append("update")
        product = self.rows.get(product_id)
        if product is None:
            return None
        for name, value in values.items():
            setattr(product, name, value)
        return product

    def delete(self, product: Product) -> None:
        self.calls.append("delete")
        del self.rows[product.id]


@pytest.fixture()
def gateway() -> InMemoryProductGateway:
    return InMemoryProductGateway()


@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock()
