from typing import Optional

from fastapi import APIRouter, Depends

from storefront.dependencies.cart_session import get_optional_cart_session
from storefront.dependencies.clients import get_catalog_client
from storefront.services.catalog_client import CatalogClient

router = APIRouter()


@router.get("")
def list_products(
    page: Optional[int] = None,
    category: Optional[str] = None,
    session_id: Optional[str] = Depends(get_optional_cart_session),
    catalog: CatalogClient = Depends(get_catalog_client),
):
    params = {k: v for k, v in {"page": page, "categoria": category}.items() if v is not None}
    return catalog.list_products(params or None, owner=session_id)


@router.get("/{product_id}")
def get_product(
    product_id: str,
    session_id: Optional[str] = Depends(get_optional_cart_session),
    catalog: CatalogClient = Depends(get_catalog_client),
):
    return catalog.get_product(product_id, owner=session_id)
