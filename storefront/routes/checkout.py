from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from storefront.config import settings
from storefront.database import get_session
from storefront.dependencies.cart_session import get_cart_session
from storefront.dependencies.clients import get_fee_config, get_order_client
from storefront.schemas.checkout_schemas import (
    CheckoutSubmitResponse,
    CurrentOrderRecord,
    CustomerForm,
    NormalizedOrder,
    OrderStatusUpdate,
)
from storefront.schemas.pricing_schemas import FeeConfig, OrderTotals
from storefront.services import cart_service, order_storage
from storefront.services.checkout_flow import CheckoutSubmission
from storefront.services.order_client import OrderServiceClient
from storefront.services.order_totals import compute_order_totals

router = APIRouter()


@router.get("/summary", response_model=OrderTotals)
def checkout_summary(
    session: Session = Depends(get_session),
    session_id: str = Depends(get_cart_session),
    fee_config: FeeConfig = Depends(get_fee_config),
):
    """Totals shown before submit. The surcharge is a preview; the order service charges its own."""
    items = cart_service.get_cart_items(session, session_id)
    if not items:
        raise HTTPException(400, "Your cart is empty.")

    return compute_order_totals(cart_service.to_line_items(items), fee_config)


@router.post("/submit", response_model=CheckoutSubmitResponse)
def submit_checkout(
    form: CustomerForm,
    session: Session = Depends(get_session),
    session_id: str = Depends(get_cart_session),
    order_client: OrderServiceClient = Depends(get_order_client),
    fee_config: FeeConfig = Depends(get_fee_config),
):
    submission = CheckoutSubmission(
        order_client,
        fee_config,
        remember_order=lambda order: order_storage.save_current_order(session, session_id, order),
        clear_cart=lambda: cart_service.clear_cart(session, session_id),
    )

    items = cart_service.to_line_items(cart_service.get_cart_items(session, session_id))
    order = submission.submit(items, form)

    return CheckoutSubmitResponse(
        state=submission.state.value,
        order=order,
        redirect_url=order.checkout_url or f"/pedido-confirmado/{order.order_id}",
    )


@router.get("/current-order", response_model=CurrentOrderRecord)
def get_current_order(
    session: Session = Depends(get_session),
    session_id: str = Depends(get_cart_session),
):
    record = order_storage.load_current_order(
        session, session_id, expiry_days=settings.order_expiry_days
    )
    if record is None:
        raise HTTPException(404, "No current order")
    return record


@router.put("/current-order/status", response_model=CurrentOrderRecord)
def update_current_order_status(
    data: OrderStatusUpdate,
    session: Session = Depends(get_session),
    session_id: str = Depends(get_cart_session),
):
    record = order_storage.update_order_status(session, session_id, data.status)
    if record is None:
        raise HTTPException(404, "No current order")
    return record


@router.delete("/current-order")
def clear_current_order(
    session: Session = Depends(get_session),
    session_id: str = Depends(get_cart_session),
):
    order_storage.clear_current_order(session, session_id)
    return {"message": "Current order cleared"}


@router.get("/orders/{order_id}", response_model=NormalizedOrder)
def get_order(
    order_id: str,
    session: Session = Depends(get_session),
    session_id: str = Depends(get_cart_session),
    order_client: OrderServiceClient = Depends(get_order_client),
):
    order = order_client.get_order(order_id)

    # Keep the stored copy of the shopper's current order in step
    record = order_storage.load_current_order(
        session, session_id, expiry_days=settings.order_expiry_days
    )
    if record and record.order.order_id == order.order_id:
        order_storage.save_current_order(session, session_id, order, status=order.status)

    return order


@router.post("/orders/{order_id}/retry-payment", response_model=NormalizedOrder)
def retry_payment(
    order_id: str,
    session: Session = Depends(get_session),
    session_id: str = Depends(get_cart_session),
    order_client: OrderServiceClient = Depends(get_order_client),
):
    order = order_client.retry_payment(order_id)

    record = order_storage.load_current_order(
        session, session_id, expiry_days=settings.order_expiry_days
    )
    if record and record.order.order_id == order.order_id:
        order_storage.save_current_order(session, session_id, order, status=record.status)

    return order
