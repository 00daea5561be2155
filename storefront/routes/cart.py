from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from storefront.database import get_session
from storefront.dependencies.cart_session import get_cart_session
from storefront.dependencies.clients import get_catalog_client, get_fee_config
from storefront.schemas.cart_schemas import (
    CartAddRequest,
    CartLine,
    CartResponse,
    CartSummary,
    CartUpdateRequest,
)
from storefront.schemas.pricing_schemas import FeeConfig
from storefront.services import cart_service
from storefront.services.catalog_client import CatalogClient
from storefront.services.order_totals import compute_order_totals
from storefront.utils.formatting import format_price_with_symbol

router = APIRouter()


def build_cart_response(session: Session, session_id: str, fee_config: FeeConfig) -> CartResponse:
    items = cart_service.get_cart_items(session, session_id)
    totals = compute_order_totals(cart_service.to_line_items(items), fee_config)

    return CartResponse(
        items=[
            CartLine(
                product_id=item.product_id,
                name=item.name,
                unit_price=item.unit_price,
                quantity=item.quantity,
                units_per_item=item.units_per_item,
                line_total=item.unit_price * item.quantity,
                units=item.units_per_item * item.quantity,
            )
            for item in items
        ],
        summary=CartSummary(
            subtotal=totals.subtotal,
            total_units=totals.total_units,
            shipping=totals.shipping_fee,
            free_shipping=totals.is_free_shipping,
            surcharge=totals.surcharge,
            surcharge_label=totals.surcharge_label,
            total=totals.grand_total,
            display_total=format_price_with_symbol(totals.grand_total),
        ),
    )


# View Cart

@router.get("", response_model=CartResponse)
def get_cart(
    session: Session = Depends(get_session),
    session_id: str = Depends(get_cart_session),
    fee_config: FeeConfig = Depends(get_fee_config),
):
    return build_cart_response(session, session_id, fee_config)


# Add to Cart

@router.post("/add", response_model=CartResponse)
def add_to_cart(
    data: CartAddRequest,
    session: Session = Depends(get_session),
    session_id: str = Depends(get_cart_session),
    catalog: CatalogClient = Depends(get_catalog_client),
    fee_config: FeeConfig = Depends(get_fee_config),
):
    # Price and pack size always come from the catalog, never from the request
    product = catalog.get_product(data.product_id, owner=session_id)
    line = cart_service.line_item_from_product(product, data.quantity)

    cart_service.add_to_cart(session, session_id, line)
    return build_cart_response(session, session_id, fee_config)


# Update Cart

@router.put("/update/{product_id}", response_model=CartResponse)
def update_cart_item(
    product_id: str,
    data: CartUpdateRequest,
    session: Session = Depends(get_session),
    session_id: str = Depends(get_cart_session),
    fee_config: FeeConfig = Depends(get_fee_config),
):
    if not cart_service.find_cart_item(session, session_id, product_id):
        raise HTTPException(404, "Cart item not found")

    cart_service.update_quantity(session, session_id, product_id, data.quantity)
    return build_cart_response(session, session_id, fee_config)


# Remove Cart

@router.delete("/remove/{product_id}", response_model=CartResponse)
def remove_item(
    product_id: str,
    session: Session = Depends(get_session),
    session_id: str = Depends(get_cart_session),
    fee_config: FeeConfig = Depends(get_fee_config),
):
    if not cart_service.remove_from_cart(session, session_id, product_id):
        raise HTTPException(404, "Item not found")

    return build_cart_response(session, session_id, fee_config)


# Clear Cart

@router.delete("/clear")
def clear_cart_endpoint(
    session: Session = Depends(get_session),
    session_id: str = Depends(get_cart_session),
):
    cart_service.clear_cart(session, session_id)
    return {"message": "Cart cleared"}
