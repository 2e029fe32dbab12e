from fastapi import Depends
from sqlalchemy.orm import Session

from product_catalog.core.db import get_db
from product_catalog.repositories import SqlProductRepository
from product_catalog.services import ProductService


def get_product_service(db: Session = Depends(get_db)) -> ProductService:
    return ProductService(SqlProductRepository(db))
