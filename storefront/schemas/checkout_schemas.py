from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


# Checkout form, field names as the storefront form posts them
class CustomerForm(CamelModel):
    nombre: str = ""
    email: str = ""
    whatsapp: str = ""
    domicilio: str = ""
    localidad: str = ""
    provincia: str = ""
    codigo_postal: str = ""
    notas_adicionales: str = ""
    cliente_id: Optional[str] = None


class CustomerInfo(CamelModel):
    name: str
    email: str
    phone: str
    street: str
    city: str
    state: str
    postal_code: str
    notes: str = ""


class CheckoutLineItem(CamelModel):
    product_id: str
    quantity: int


class SnapshotLineItem(CamelModel):
    product_id: str
    name: Optional[str] = None
    quantity: int
    unit_price: float
    units_per_item: int


class CheckoutTotals(CamelModel):
    subtotal: float
    shipping_fee: float
    total: float


class CheckoutSnapshot(CamelModel):
    """Frozen copy of what the shopper saw when they pressed submit."""

    client_reference: str
    created_at: datetime
    items: List[SnapshotLineItem]
    total_units: int
    surcharge_preview: int = 0


class CheckoutRequest(CamelModel):
    line_items: List[CheckoutLineItem]
    customer: CustomerInfo
    totals: CheckoutTotals

    # Flattened copies for consumers that predate ``totals``
    subtotal: float
    shipping_fee: float
    total: float

    total_units: int
    customer_id: Optional[str] = None
    snapshot: CheckoutSnapshot


class NormalizedOrder(BaseModel):
    order_id: str
    order_number: str = ""
    status: str = "pending"
    items: List[Dict[str, Any]] = Field(default_factory=list)
    subtotal: Optional[float] = None
    shipping_fee: Optional[float] = None
    total: Optional[float] = None
    total_units: Optional[int] = None
    checkout_url: Optional[str] = None
    sandbox_url: Optional[str] = None
    preference_id: Optional[str] = None


class CheckoutSubmitResponse(BaseModel):
    state: str
    order: NormalizedOrder
    redirect_url: Optional[str] = None


class OrderStatusUpdate(BaseModel):
    status: str


class CurrentOrderRecord(BaseModel):
    order: NormalizedOrder
    status: str
    timestamp: datetime
    order_number: str
