"""
Product use cases.

ProductService sits between the HTTP routes and the storage gateway. It owns
input validation, the single "does this product exist" lookup shared by get,
update and delete, and timestamp stamping. It never returns live ORM objects:
callers get ProductRead snapshots, which stay valid after the session closes
or the row is deleted.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Mapping, Union

from product_catalog.core.errors import NotFoundError
from product_catalog.core.logging import get_logger
from product_catalog.models import ID_MAX, Product
from product_catalog.repositories import ProductGateway
from product_catalog.schemas import ProductCreate, ProductRead, ProductUpdate, parse_input

logger = get_logger(__name__)

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def merge_update(current: ProductRead, patch: ProductUpdate, now: datetime) -> ProductRead:
    """
    Apply the fields present in ``patch`` on top of ``current``.

    ``id`` and ``created_at`` are never touched. ``updated_at`` becomes ``now``,
    clamped so it never moves backwards.
    """
    changes: dict[str, Any] = patch.changes()
    changes["updated_at"] = max(now, current.updated_at)
    return current.model_copy(update=changes)


class ProductService:
    def __init__(self, gateway: ProductGateway, clock: Clock = utcnow) -> None:
        self.gateway = gateway
        self.clock = clock

    def _load(self, product_id: int, *, for_update: bool = False) -> Product:
        # Ids outside the key range cannot exist (and overflow some drivers).
        if not 1 <= product_id <= ID_MAX:
            raise NotFoundError(product_id)
        product = self.gateway.find_by_id(product_id, for_update=for_update)
        if product is None:
            logger.debug("Product %s not found", product_id)
            raise NotFoundError(product_id)
        return product

    def list_products(self) -> list[ProductRead]:
        return [ProductRead.model_validate(p) for p in self.gateway.find_all()]

    def get_product(self, product_id: int) -> ProductRead:
        return ProductRead.model_validate(self._load(product_id))

    def create_product(self, data: Union[ProductCreate, Mapping[str, Any]]) -> ProductRead:
        payload = parse_input(ProductCreate, data)
        now = self.clock()
        product = self.gateway.insert({**payload.model_dump(), "created_at": now, "updated_at": now})
        logger.info("Created product %s", product.id)
        return ProductRead.model_validate(product)

    def update_product(self, product_id: int, data: Union[ProductUpdate, Mapping[str, Any]]) -> ProductRead:
        patch = parse_input(ProductUpdate, data)
        current = ProductRead.model_validate(self._load(product_id, for_update=True))

        merged = merge_update(current, patch, self.clock())
        values = {name: getattr(merged, name) for name in (*patch.changes(), "updated_at")}

        product = self.gateway.update(product_id, values)
        if product is None:
            # Removed between the lookup and the write.
            raise NotFoundError(product_id)
        logger.info("Updated product %s (%s)", product_id, ", ".join(sorted(values)))
        return ProductRead.model_validate(product)

    def delete_product(self, product_id: int) -> ProductRead:
        product = self._load(product_id, for_update=True)
        snapshot = ProductRead.model_validate(product)
        self.gateway.delete(product)
        logger.info("Deleted product %s", product_id)
        return snapshot
