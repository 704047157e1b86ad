from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from .cart import Cart


class CartItemAdd(BaseModel):
    product_id: str
    quantity: int = Field(default=1, ge=1)


class CartItemUpdate(BaseModel):
    # Zero or below removes the line
    quantity: int


class CartLineResponse(BaseModel):
    product_id: str
    name: str
    price: Decimal
    image_url: Optional[str]
    quantity: int
    line_total: Decimal

    class Config:
        from_attributes = True


class CartResponse(BaseModel):
    session_id: str
    user_id: Optional[str]
    is_active: bool
    items: List[CartLineResponse] = []
    total_items: int = 0
    total_price: Decimal = Decimal("0")

    @classmethod
    def build(cls, session, cart: Cart) -> "CartResponse":
        return cls(
            session_id=session.session_id,
            user_id=session.user_id,
            is_active=session.is_active,
            items=[CartLineResponse.model_validate(line) for line in cart],
            total_items=cart.total_items,
            total_price=cart.total_price,
        )
