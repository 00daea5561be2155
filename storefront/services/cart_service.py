import logging
from datetime import datetime
from typing import Any, List, Mapping, Optional

from sqlmodel import Session, select

from storefront.exceptions import InvalidLineItem
from storefront.models.cart import CartItem
from storefront.schemas.pricing_schemas import LineItem

logger = logging.getLogger(__name__)


def line_item_from_product(product: Mapping[str, Any], quantity: int = 1) -> LineItem:
    """Catalog payload (``_id``, ``nombre``, ``precio``, ``cantidadUnidades``) → LineItem."""
    product_id = product.get("_id") or product.get("id")
    if product_id is None:
        raise InvalidLineItem("Product has no identifier")

    return LineItem(
        id=product_id,
        name=product.get("nombre") or product.get("name"),
        unit_price=product.get("precio", product.get("price")),
        quantity=quantity,
        units_per_item=product.get("cantidadUnidades", product.get("unitsPerItem")),
    )


def to_line_items(cart_items: List[CartItem]) -> List[LineItem]:
    return [
        LineItem(
            id=item.product_id,
            name=item.name,
            unit_price=item.unit_price,
            quantity=item.quantity,
            units_per_item=item.units_per_item,
        )
        for item in cart_items
    ]


def get_cart_items(session: Session, session_id: str) -> List[CartItem]:
    return session.exec(
        select(CartItem)
        .where(CartItem.session_id == session_id)
        .order_by(CartItem.id)
    ).all()


def find_cart_item(session: Session, session_id: str, product_id: str) -> Optional[CartItem]:
    return session.exec(
        select(CartItem).where(
            CartItem.session_id == session_id,
            CartItem.product_id == product_id,
        )
    ).first()


def add_to_cart(session: Session, session_id: str, line: LineItem) -> CartItem:
    if line.quantity < 1:
        raise InvalidLineItem("Quantity must be at least 1")
    if line.unit_price < 0:
        raise InvalidLineItem("Unit price cannot be negative")
    if line.units_per_item < 0:
        raise InvalidLineItem("Pack size cannot be negative")

    existing = find_cart_item(session, session_id, line.id)

    if existing:
        existing.quantity += line.quantity
        # Catalog data wins, the price may have changed since the first add
        existing.unit_price = line.unit_price
        existing.units_per_item = line.units_per_item
        existing.name = line.name or existing.name
        existing.updated_at = datetime.utcnow()
        item = existing
    else:
        item = CartItem(
            session_id=session_id,
            product_id=line.id,
            name=line.name,
            unit_price=line.unit_price,
            quantity=line.quantity,
            units_per_item=line.units_per_item,
        )

    session.add(item)
    session.commit()
    session.refresh(item)
    return item


def update_quantity(
    session: Session, session_id: str, product_id: str, quantity: int
) -> Optional[CartItem]:
    """Set the quantity of a line; 0 or less removes it. None when the line is not in the cart."""
    item = find_cart_item(session, session_id, product_id)
    if not item:
        return None

    if quantity <= 0:
        session.delete(item)
        session.commit()
        return None

    item.quantity = quantity
    item.updated_at = datetime.utcnow()
    session.add(item)
    session.commit()
    session.refresh(item)
    return item


def remove_from_cart(session: Session, session_id: str, product_id: str) -> bool:
    item = find_cart_item(session, session_id, product_id)
    if not item:
        return False

    session.delete(item)
    session.commit()
    return True


def clear_cart(session: Session, session_id: str) -> None:
    items = get_cart_items(session, session_id)

    for item in items:
        session.delete(item)

    session.commit()
    logger.info(f"Cleared {len(items)} cart lines for session {session_id}")
