from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from .models import OrderStatus


class ShippingAddress(BaseModel):
    full_name: str = Field(min_length=1)
    phone: str = Field(min_length=1)
    street: str = Field(min_length=1)
    city: str = Field(min_length=1)
    state: str = Field(min_length=1)
    zip_code: str = Field(min_length=1)

    @field_validator("*")
    @classmethod
    def not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("This field is required")
        return value

    def format(self) -> str:
        return (
            f"{self.full_name}, {self.phone}, {self.street}, "
            f"{self.city}, {self.state} {self.zip_code}"
        )


class CheckoutRequest(BaseModel):
    session_id: str
    shipping: ShippingAddress


class OrderItemResponse(BaseModel):
    id: str
    product_id: str
    product_name: Optional[str]
    quantity: int
    price: Decimal
    line_total: Decimal

    class Config:
        from_attributes = True


class OrderResponse(BaseModel):
    id: str
    user_id: str
    total_amount: Decimal
    shipping_address: str
    status: OrderStatus
    created_at: Optional[datetime]
    items: List[OrderItemResponse] = []

    class Config:
        from_attributes = True


class CheckoutResponse(BaseModel):
    order: OrderResponse
    message: str = "Order placed successfully! It will be delivered with cash on delivery."
    redirect_to: str = "/"


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class OrderStatusUpdateResponse(BaseModel):
    order: OrderResponse
    updated: bool
