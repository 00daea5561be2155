from storefront.constants.pricing import FLAT_SHIPPING_FEE, FREE_SHIPPING_THRESHOLD
from storefront.exceptions import InvalidInput
from storefront.schemas.pricing_schemas import ShippingQuote


def quote_shipping(total_units: int) -> ShippingQuote:
    """Single source of truth for the shipping fee."""
    if isinstance(total_units, bool) or not isinstance(total_units, int):
        raise InvalidInput(f"Unit count must be an integer, got {total_units!r}")

    if total_units < 0:
        raise InvalidInput("Unit count cannot be negative")

    is_free = total_units >= FREE_SHIPPING_THRESHOLD
    fee = 0 if is_free else FLAT_SHIPPING_FEE

    return ShippingQuote(fee=fee, is_free=is_free)
