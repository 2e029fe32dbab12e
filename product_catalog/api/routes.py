from typing import Annotated

from fastapi import APIRouter, Depends, Path, status

from product_catalog.core.deps import get_product_service
from product_catalog.models import ID_MAX
from product_catalog.schemas import ProductCreate, ProductRead, ProductUpdate
from product_catalog.services import ProductService

router = APIRouter(prefix="/products", tags=["products"])

# Ids outside the primary key's range can never exist; reject them before storage.
ProductId = Annotated[int, Path(ge=1, le=ID_MAX)]


@router.get("", response_model=list[ProductRead])
def http_list_products(service: ProductService = Depends(get_product_service)):
    return service.list_products()


@router.get("/{product_id}", response_model=ProductRead)
def http_get_product(product_id: ProductId, service: ProductService = Depends(get_product_service)):
    return service.get_product(product_id)


@router.post("", response_model=ProductRead, status_code=status.HTTP_201_CREATED)
def http_create_product(payload: ProductCreate, service: ProductService = Depends(get_product_service)):
    return service.create_product(payload)


@router.put("/{product_id}", response_model=ProductRead)
def http_update_product(
    product_id: ProductId,
    payload: ProductUpdate,
    service: ProductService = Depends(get_product_service),
):
    return service.update_product(product_id, payload)


@router.delete("/{product_id}", response_model=ProductRead)
def http_delete_product(product_id: ProductId, service: ProductService = Depends(get_product_service)):
    return service.delete_product(product_id)
