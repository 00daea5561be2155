from typing import Any, Iterable, Mapping, Optional, Union

from storefront.schemas.pricing_schemas import FeeConfig, LineItem, OrderTotals
from storefront.services.cart_aggregator import aggregate
from storefront.services.shipping_policy import quote_shipping
from storefront.services.surcharge import quote_surcharge_for


def compute_order_totals(
    line_items: Iterable[Union[LineItem, Mapping[str, Any]]],
    fee_config: Optional[FeeConfig] = None,
) -> OrderTotals:
    """Cart → shipping → surcharge, in that order. Every total shown or sent comes from here."""
    cart = aggregate(line_items)
    shipping = quote_shipping(cart.total_units)

    base_total = cart.subtotal + shipping.fee
    surcharge = quote_surcharge_for(base_total, fee_config or FeeConfig())

    return OrderTotals(
        subtotal=cart.subtotal,
        total_units=cart.total_units,
        shipping_fee=shipping.fee,
        is_free_shipping=shipping.is_free,
        base_total=base_total,
        surcharge=surcharge.surcharge,
        surcharge_label=surcharge.label if surcharge.surcharge > 0 else None,
        grand_total=base_total + surcharge.surcharge,
    )
