from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator, Mapping, Optional, Protocol

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from product_catalog.core.errors import StorageError
from product_catalog.core.logging import get_logger
from product_catalog.models import Product

logger = get_logger(__name__)


class ProductGateway(Protocol):
    """Everything ProductService needs from storage."""

    def find_all(self) -> list[Product]: ...

    def find_by_id(self, product_id: int, *, for_update: bool = False) -> Optional[Product]: ...

    def insert(self, values: Mapping[str, Any]) -> Product: ...

    def update(self, product_id: int, values: Mapping[str, Any]) -> Optional[Product]: ...

    def delete(self, product: Product) -> None: ...


class SqlProductRepository:
    """ProductGateway backed by one SQLAlchemy session (one request)."""

    def __init__(self, db: Session) -> None:
        self.db = db

    @contextmanager
    def _storage(self, operation: str) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("Storage failure during %s", operation)
            raise StorageError(f"Storage failure during {operation}") from e

    def find_all(self) -> list[Product]:
        with self._storage("find_all"):
            return list(self.db.execute(select(Product).order_by(Product.id)).scalars().all())

    def find_by_id(self, product_id: int, *, for_update: bool = False) -> Optional[Product]:
        with self._storage("find_by_id"):
            stmt = select(Product).where(Product.id == product_id)
            if for_update:
                # Row lock until commit; SQLite ignores it.
                stmt = stmt.with_for_update()
            return self.db.execute(stmt).scalars().first()

    def insert(self, values: Mapping[str, Any]) -> Product:
        with self._storage("insert"):
            product = Product(**values)
            self.db.add(product)
            self.db.commit()
            self.db.refresh(product)
            return product

    def update(self, product_id: int, values: Mapping[str, Any]) -> Optional[Product]:
        with self._storage("update"):
            product = self.db.get(Product, product_id)
            if product is None:
                return None
            for name, value in values.items():
                setattr(product, name, value)
            self.db.commit()
            self.db.refresh(product)
            return product

    def delete(self, product: Product) -> None:
        with self._storage("delete"):
            self.db.delete(product)
            self.db.commit()
