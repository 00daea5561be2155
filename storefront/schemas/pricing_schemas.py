from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel


class LineItem(BaseModel):
    """
    One cart line as the pricing pipeline sees it.

    ``units_per_item`` is how many physical pieces one unit of ``quantity``
    stands for (a 12-pack counts as 12 towards free shipping). Missing
    multipliers default to 1 here, once, at ingestion.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    id: str
    unit_price: float = 0
    quantity: int = 1
    units_per_item: int = 1
    name: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> Any:
        if value is None:
            return value
        return str(value)

    @field_validator("quantity", mode="before")
    @classmethod
    def _default_quantity(cls, value: Any) -> Any:
        return 1 if value is None else value

    @field_validator("units_per_item", mode="before")
    @classmethod
    def _default_pack_size(cls, value: Any) -> Any:
        # A pack of 0 (or a blank field) is a single piece
        return 1 if value in (None, "", 0) else value

    @field_validator("unit_price", mode="before")
    @classmethod
    def _default_price(cls, value: Any) -> Any:
        return 0 if value is None else value


class CartAggregate(BaseModel):
    subtotal: float
    total_units: int


class ShippingQuote(BaseModel):
    fee: float
    is_free: bool


class SurchargeQuote(BaseModel):
    surcharge: int
    label: Optional[str] = None


FeeMode = Literal["absorb", "pass_through"]


class FeeConfig(BaseModel):
    mode: FeeMode = "absorb"
    percent: float = 0
    fixed: float = 0
    label: str = "Recargo Mercado Pago"


class OrderTotals(BaseModel):
    subtotal: float
    total_units: int
    shipping_fee: float
    is_free_shipping: bool
    base_total: float           # subtotal + shipping, what the order service is sent
    surcharge: int              # preview only, the order service decides
    surcharge_label: Optional[str] = None
    grand_total: float          # base_total + surcharge
