from typing import Any, Iterable, List, Mapping, Union

from pydantic import ValidationError

from storefront.exceptions import InvalidLineItem
from storefront.schemas.pricing_schemas import CartAggregate, LineItem


def to_line_item(raw: Union[LineItem, Mapping[str, Any]]) -> LineItem:
    if isinstance(raw, LineItem):
        return raw

    try:
        return LineItem.model_validate(raw)
    except ValidationError as e:
        raise InvalidLineItem(f"Invalid line item: {e.errors()[0]['msg']}") from e


def aggregate(line_items: Iterable[Union[LineItem, Mapping[str, Any]]]) -> CartAggregate:
    """
    Reduce cart lines to ``subtotal`` and ``total_units``.

    total_units is unit-weighted: Σ(units_per_item × quantity), never Σ(quantity).
    """
    items: List[LineItem] = [to_line_item(raw) for raw in line_items]

    subtotal = 0
    total_units = 0

    for item in items:
        if item.unit_price < 0:
            raise InvalidLineItem(f"Line {item.id}: unit price cannot be negative")
        if item.quantity < 0:
            raise InvalidLineItem(f"Line {item.id}: quantity cannot be negative")
        if item.units_per_item < 0:
            raise InvalidLineItem(f"Line {item.id}: pack size cannot be negative")

        subtotal += item.unit_price * item.quantity
        total_units += item.units_per_item * item.quantity

    return CartAggregate(subtotal=subtotal, total_units=total_units)
