from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from typing import Any, Dict, List
import enum

from voltedge.schemas.cart import CartResponse


class PaymentMethod(str, enum.Enum):
    CREDIT_CARD = "CREDIT_CARD"
    PAY_ON_DELIVERY = "PAY_ON_DELIVERY"


class CheckoutRequest(BaseModel):
    shipping_address_id: str
    billing_address_id: str
    payment_method: PaymentMethod
    coupon_codes: List[str] = []

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class CheckoutResponse(BaseModel):
    order: Dict[str, Any]
    cart: CartResponse
