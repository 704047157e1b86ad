from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class ProductCreate(BaseModel):
    """Admin "Add New Product" form. Numeric fields may arrive as strings."""

    name: str = Field(min_length=1, max_length=255)
    description: str = ""
    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    image_url: Optional[str] = None
    stock_quantity: int = Field(ge=0)
    category: str = Field(min_length=1, max_length=100)

    @field_validator("name", "category")
    @classmethod
    def not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("image_url")
    @classmethod
    def empty_image_is_none(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            return None
        return value


class ProductResponse(BaseModel):
    id: str
    name: str
    description: str
    price: Decimal
    image_url: Optional[str]
    stock_quantity: int
    category: str
    created_at: Optional[datetime]
    in_stock: bool

    class Config:
        from_attributes = True
