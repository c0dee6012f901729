import logging

from voltedge.core.backend_client import BackendClient
from voltedge.schemas.notification import Toast
from voltedge.schemas.order import CheckoutRequest
from voltedge.services.cart import CartStore

logger = logging.getLogger(__name__)


class EmptyCartError(ValueError):
    pass


async def place_order(
    store: CartStore,
    client: BackendClient,
    access_token: str,
    data: CheckoutRequest
) -> dict:
    """
    Turn the cart into a backend order.
    1. Refuse an empty cart
    2. Send order to backend (BackendAPIError propagates, cart untouched)
    3. Clear cart
    """
    cart = store.get_cart()
    if not cart.items:
        raise EmptyCartError("Cart is empty")

    order = await client.create_order(
        access_token=access_token,
        shipping_address_id=data.shipping_address_id,
        billing_address_id=data.billing_address_id,
        payment_method=data.payment_method.value,
        items=[
            {"productId": item.product_id, "quantity": item.quantity}
            for item in cart.items
        ],
        coupon_codes=data.coupon_codes,
    )

    store.clear()

    order_id = str(order.get("id", ""))
    logger.info(f"Order placed: id={order_id}, total={cart.total}")
    store.toast(Toast(
        level="success",
        message="Order placed successfully!",
        description=f"Order #{order_id[:8]} has been placed.",
    ))
    return order
