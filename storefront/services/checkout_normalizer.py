"""
Translation between storefront state and the order service wire format.

Outbound we are strict: one CheckoutRequest shape. Inbound we are permissive:
the order service has renamed fields over time (``ordenId`` → ``orderId``,
flat ``total`` → ``totals.total``) and every known variant is accepted, but
downstream code only ever sees a NormalizedOrder.
"""
import math
from datetime import datetime
from typing import Any, Iterable, Mapping, Optional, Union
from uuid import uuid4

from pydantic import ValidationError

from storefront.exceptions import MalformedResponse
from storefront.schemas.checkout_schemas import (
    CheckoutLineItem,
    CheckoutRequest,
    CheckoutSnapshot,
    CheckoutTotals,
    CustomerForm,
    CustomerInfo,
    NormalizedOrder,
    SnapshotLineItem,
)
from storefront.schemas.pricing_schemas import FeeConfig, LineItem, OrderTotals
from storefront.services.cart_aggregator import to_line_item
from storefront.services.order_totals import compute_order_totals

ORDER_ID_KEYS = ("orderId", "ordenId", "pedidoId", "_id")
STATUS_KEYS = ("orderStatus", "status", "estado")
MISSING = object()


def to_customer_info(form: CustomerForm) -> CustomerInfo:
    return CustomerInfo(
        name=form.nombre,
        email=form.email,
        phone=form.whatsapp,
        street=form.domicilio,
        city=form.localidad,
        state=form.provincia,
        postal_code=form.codigo_postal,
        notes=form.notas_adicionales,
    )


def to_checkout_request(
    line_items: Iterable[Union[LineItem, Mapping[str, Any]]],
    customer_form: Union[CustomerForm, Mapping[str, Any]],
    totals: Optional[OrderTotals] = None,
    fee_config: Optional[FeeConfig] = None,
) -> CheckoutRequest:
    items = [to_line_item(raw) for raw in line_items]
    form = (
        customer_form
        if isinstance(customer_form, CustomerForm)
        else CustomerForm.model_validate(customer_form)
    )
    if totals is None:
        totals = compute_order_totals(items, fee_config)

    snapshot = CheckoutSnapshot(
        client_reference=uuid4().hex,
        created_at=datetime.utcnow(),
        items=[
            SnapshotLineItem(
                product_id=item.id,
                name=item.name,
                quantity=item.quantity,
                unit_price=item.unit_price,
                units_per_item=item.units_per_item,
            )
            for item in items
        ],
        total_units=totals.total_units,
        surcharge_preview=totals.surcharge,
    )

    return CheckoutRequest(
        line_items=[
            CheckoutLineItem(product_id=item.id, quantity=item.quantity)
            for item in items
        ],
        customer=to_customer_info(form),
        totals=CheckoutTotals(
            subtotal=totals.subtotal,
            shipping_fee=totals.shipping_fee,
            total=totals.base_total,
        ),
        subtotal=totals.subtotal,
        shipping_fee=totals.shipping_fee,
        total=totals.base_total,
        total_units=totals.total_units,
        customer_id=form.cliente_id,
        snapshot=snapshot,
    )


def _first(raw: Mapping[str, Any], *paths: str) -> Any:
    """First non-null value among dotted ``paths``."""
    for path in paths:
        value: Any = raw
        for part in path.split("."):
            if not isinstance(value, Mapping):
                value = MISSING
                break
            value = value.get(part, MISSING)
        if value is not MISSING and value is not None:
            return value
    return None


def _text(value: Any) -> Optional[str]:
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        return None
    return str(value)


def _number(value: Any, integer: bool = False) -> Optional[float]:
    """Numbers and plain numeric strings; anything else (``"99.000,00"``, dicts) is dropped."""
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            value = float(value)
        except ValueError:
            return None
    if not isinstance(value, (int, float)) or math.isnan(value) or math.isinf(value):
        return None
    if integer:
        return int(value) if float(value).is_integer() else None
    return value


def from_checkout_response(raw: Any) -> NormalizedOrder:
    if not isinstance(raw, Mapping):
        raise MalformedResponse("Order service returned an unexpected body")

    order_id = _first(raw, *ORDER_ID_KEYS)
    if order_id in (None, ""):
        raise MalformedResponse(
            "Order service reported success without an order identifier",
            details={"keys": sorted(raw.keys())},
        )

    if not isinstance(order_id, (str, int)) or isinstance(order_id, bool):
        raise MalformedResponse(
            "Order service returned an unusable order identifier",
            details={"order_id": repr(order_id)},
        )

    items = raw.get("items")

    try:
        return NormalizedOrder(
            order_id=str(order_id),
            order_number=_text(_first(raw, "orderNumber", "numeroPedido")) or "",
            status=_text(_first(raw, *STATUS_KEYS)) or "pending",
            items=[i for i in items if isinstance(i, Mapping)] if isinstance(items, list) else [],
            subtotal=_number(_first(raw, "totals.subtotal", "subtotal")),
            shipping_fee=_number(_first(
                raw, "totals.shippingCost", "totals.shippingFee", "shippingFee", "costoEnvio"
            )),
            total=_number(_first(raw, "totals.total", "total")),
            total_units=_number(_first(raw, "totalUnits", "cantidadProductos"), integer=True),
            checkout_url=_text(_first(raw, "checkoutUrl")),
            sandbox_url=_text(_first(raw, "sandboxUrl", "sandboxCheckoutUrl")),
            preference_id=_text(_first(raw, "payment.mp_preference_id", "preferenceId")),
        )
    except ValidationError as e:
        raise MalformedResponse(
            f"Order service returned an unreadable order: {e.errors()[0]['msg']}"
        ) from e
