from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from typing import Optional
import logging

from voltedge.api.cart import build_cart_response
from voltedge.api.dependencies import get_access_token, get_backend_client, get_cart_store, get_toast_queue
from voltedge.core.backend_client import BackendClient
from voltedge.core.notifications import ToastQueue
from voltedge.schemas.order import CheckoutRequest, CheckoutResponse
from voltedge.services.cart import CartStore
from voltedge.services.checkout import EmptyCartError, place_order

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/orders", tags=["orders"])


@router.post("", response_model=CheckoutResponse, status_code=201)
async def create_order(
    order_data: CheckoutRequest,
    store: CartStore = Depends(get_cart_store),
    toasts: ToastQueue = Depends(get_toast_queue),
    client: BackendClient = Depends(get_backend_client),
    access_token: Optional[str] = Depends(get_access_token)
):
    """
    Place an order for the current cart contents.
    The cart is only cleared once the backend has accepted the order.
    """
    if not access_token:
        return JSONResponse(status_code=401, content={"error": "Please log in to place an order"})

    try:
        order = await place_order(store, client, access_token, order_data)
    except EmptyCartError as e:
        return JSONResponse(status_code=400, content={"error": str(e)})

    return CheckoutResponse(order=order, cart=build_cart_response(store, toasts))
