from typing import List, Optional

from pydantic import BaseModel


class CartAddRequest(BaseModel):
    product_id: str
    quantity: int = 1


class CartUpdateRequest(BaseModel):
    quantity: int


class CartLine(BaseModel):
    product_id: str
    name: Optional[str] = None
    unit_price: float
    quantity: int
    units_per_item: int
    line_total: float
    units: int


class CartSummary(BaseModel):
    subtotal: float
    total_units: int
    shipping: float
    free_shipping: bool
    surcharge: int
    surcharge_label: Optional[str] = None
    total: float
    display_total: str


class CartResponse(BaseModel):
    items: List[CartLine]
    summary: CartSummary
