from pydantic import BaseModel, Field, field_serializer, field_validator
from pydantic.alias_generators import to_camel
from decimal import Decimal
from typing import List

from voltedge.schemas.product import ProductSnapshot
from voltedge.schemas.notification import Toast


class CartItem(BaseModel):
    product_id: str
    product: ProductSnapshot
    quantity: int = Field(gt=0)

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class Cart(BaseModel):
    """Stored cart shape: ordered line items plus the cached total."""
    items: List[CartItem] = []
    total: Decimal = Decimal("0")

    class Config:
        alias_generator = to_camel
        populate_by_name = True

    @field_validator("items")
    @classmethod
    def unique_products(cls, items: List[CartItem]) -> List[CartItem]:
        seen = set()
        for item in items:
            if item.product_id in seen:
                raise ValueError(f"Duplicate cart line for product {item.product_id}")
            seen.add(item.product_id)
        return items

    @field_serializer("total", when_used="json")
    def serialize_total(self, total: Decimal) -> float:
        return float(total)


class CartItemAdd(BaseModel):
    product_id: str
    quantity: int = Field(1, ge=1)

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class CartItemUpdate(BaseModel):
    quantity: int


class CartResponse(BaseModel):
    items: List[CartItem]
    total: Decimal
    item_count: int
    notifications: List[Toast] = []

    class Config:
        alias_generator = to_camel
        populate_by_name = True

    @field_serializer("total", when_used="json")
    def serialize_total(self, total: Decimal) -> float:
        return float(total)
