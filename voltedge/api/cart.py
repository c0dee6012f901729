from fastapi import APIRouter, Depends, HTTPException
from pydantic import ValidationError
from typing import Optional
import logging

from voltedge.api.dependencies import get_access_token, get_backend_client, get_cart_store, get_toast_queue
from voltedge.core.backend_client import BackendClient
from voltedge.core.notifications import ToastQueue
from voltedge.schemas.cart import CartItemAdd, CartItemUpdate, CartResponse
from voltedge.schemas.product import ProductSnapshot
from voltedge.services.cart import CartStore

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/cart", tags=["cart"])


def build_cart_response(store: CartStore, toasts: ToastQueue) -> CartResponse:
    cart = store.get_cart()
    return CartResponse(
        items=cart.items,
        total=cart.total,
        item_count=store.item_count,
        notifications=toasts.drain()
    )


@router.get("", response_model=CartResponse)
async def get_cart(
    store: CartStore = Depends(get_cart_store),
    toasts: ToastQueue = Depends(get_toast_queue)
):
    """Get current shopping cart."""
    return build_cart_response(store, toasts)


@router.post("/items", response_model=CartResponse)
async def add_to_cart(
    item: CartItemAdd,
    store: CartStore = Depends(get_cart_store),
    toasts: ToastQueue = Depends(get_toast_queue),
    client: BackendClient = Depends(get_backend_client),
    access_token: Optional[str] = Depends(get_access_token)
):
    """Snapshot the product from the backend and add it to the cart."""
    product_data = await client.get_product(item.product_id, access_token=access_token)
    try:
        product = ProductSnapshot.model_validate(product_data)
    except ValidationError as e:
        logger.error(f"Backend returned an unusable product {item.product_id}: {str(e)}")
        raise HTTPException(status_code=502, detail="Backend returned an invalid product")

    store.add_item(product, item.quantity)
    return build_cart_response(store, toasts)


@router.put("/items/{product_id}", response_model=CartResponse)
async def update_cart_item(
    product_id: str,
    item: CartItemUpdate,
    store: CartStore = Depends(get_cart_store),
    toasts: ToastQueue = Depends(get_toast_queue)
):
    """Set item quantity. A quantity of zero or less removes the item."""
    store.update_quantity(product_id, item.quantity)
    return build_cart_response(store, toasts)


@router.delete("/items/{product_id}", response_model=CartResponse)
async def remove_from_cart(
    product_id: str,
    store: CartStore = Depends(get_cart_store),
    toasts: ToastQueue = Depends(get_toast_queue)
):
    """Remove item from cart."""
    store.remove_item(product_id)
    return build_cart_response(store, toasts)


@router.delete("", response_model=CartResponse)
async def clear_cart(
    store: CartStore = Depends(get_cart_store),
    toasts: ToastQueue = Depends(get_toast_queue)
):
    """Clear entire cart."""
    store.clear()
    return build_cart_response(store, toasts)
