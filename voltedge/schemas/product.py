from pydantic import BaseModel, field_serializer
from pydantic.alias_generators import to_camel
from decimal import Decimal
from typing import Optional, List


class ProductImage(BaseModel):
    url: str
    alt_text: Optional[str] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        extra = "ignore"


class CategoryRef(BaseModel):
    id: str
    name: Optional[str] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        extra = "ignore"


class ProductSnapshot(BaseModel):
    """
    Copy of a backend product taken when it is added to a cart.
    Later edits on the backend do not change it.
    """
    id: str
    name: str
    description: Optional[str] = None
    price: Decimal
    stock: Optional[int] = None
    sku: Optional[str] = None
    low_stock_threshold: Optional[int] = None
    category_id: Optional[str] = None
    category: Optional[CategoryRef] = None
    images: List[ProductImage] = []

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        extra = "ignore"

    @field_serializer("price", when_used="json")
    def serialize_price(self, price: Decimal) -> float:
        return float(price)
