from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime


class CartItem(SQLModel, table=True):
    __tablename__ = "cart_item"

    id: Optional[int] = Field(default=None, primary_key=True)
    session_id: str = Field(index=True)
    product_id: str = Field(index=True)

    name: Optional[str] = None
    unit_price: float
    quantity: int = 1
    units_per_item: int = 1  # pieces in one pack

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
