"""
Cart store: the in-memory cart for one session.

Mutations are synchronous and never raise. After each change the store
recomputes the total, saves through its storage adapter, calls every
subscriber with the new cart, then raises a toast.
"""
import logging
from decimal import Decimal
from typing import Callable, List, Optional

from voltedge.core.notifications import LoggingNotifier, Notifier
from voltedge.schemas.cart import Cart, CartItem
from voltedge.schemas.notification import Toast, ToastAction
from voltedge.schemas.product import ProductSnapshot
from voltedge.services.cart_storage import CartStorage, empty_cart

logger = logging.getLogger(__name__)

Subscriber = Callable[[Cart], None]


def calculate_total(items: List[CartItem]) -> Decimal:
    return sum((item.product.price * item.quantity for item in items), Decimal("0"))


class CartStore:
    def __init__(self, storage: CartStorage, notifier: Optional[Notifier] = None):
        self.storage = storage
        self.notifier = notifier if notifier is not None else LoggingNotifier()
        self._cart = empty_cart()
        self._subscribers: List[Subscriber] = []

    @classmethod
    def open(cls, storage: CartStorage, notifier: Optional[Notifier] = None) -> "CartStore":
        store = cls(storage, notifier)
        store.load()
        return store

    def load(self) -> Cart:
        """Replace the in-memory cart with whatever the storage slot holds."""
        self._cart = self.storage.load()
        return self._cart

    @property
    def cart(self) -> Cart:
        return self._cart

    def get_cart(self) -> Cart:
        return self._cart

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self._cart.items)

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def add_item(self, product: ProductSnapshot, quantity: int = 1) -> Cart:
        if quantity < 1:
            logger.warning(f"Ignoring add of {quantity} x product {product.id}")
            return self._cart

        items = list(self._cart.items)
        index = self._find(product.id)
        if index is not None:
            existing = items[index]
            items[index] = existing.model_copy(update={"quantity": existing.quantity + quantity})
        else:
            items.append(CartItem(product_id=product.id, product=product.model_copy(deep=True), quantity=quantity))

        self._commit(items)
        logger.info(f"Added to cart: product_id={product.id}, quantity={quantity}")
        self.toast(Toast(
            level="success",
            message=f"Added {product.name} to cart",
            description=f"Quantity: {quantity}",
            action=ToastAction(label="View Cart", href="/cart"),
        ))
        return self._cart

    def update_quantity(self, product_id: str, quantity: int) -> Cart:
        """Set an absolute quantity. Zero or less removes the line; unknown ids are ignored."""
        if quantity <= 0:
            return self.remove_item(product_id)

        index = self._find(product_id)
        if index is None:
            logger.debug(f"Quantity update for product not in cart: {product_id}")
            return self._cart

        items = list(self._cart.items)
        items[index] = items[index].model_copy(update={"quantity": quantity})
        self._commit(items)
        logger.info(f"Updated cart item: product_id={product_id}, quantity={quantity}")
        return self._cart

    def remove_item(self, product_id: str) -> Cart:
        index = self._find(product_id)
        if index is None:
            logger.debug(f"Remove for product not in cart: {product_id}")
            return self._cart

        removed = self._cart.items[index]
        items = [item for item in self._cart.items if item.product_id != product_id]
        self._commit(items)
        logger.info(f"Removed from cart: product_id={product_id}")
        self.toast(Toast(level="info", message=f"Removed {removed.product.name} from cart"))
        return self._cart

    def clear(self) -> Cart:
        self._commit([])
        logger.info("Cart cleared")
        self.toast(Toast(level="info", message="Cart cleared"))
        return self._cart

    def _find(self, product_id: str) -> Optional[int]:
        for index, item in enumerate(self._cart.items):
            if item.product_id == product_id:
                return index
        return None

    def _commit(self, items: List[CartItem]):
        self._cart = Cart(items=items, total=calculate_total(items))
        self.storage.save(self._cart)

        for callback in list(self._subscribers):
            try:
                callback(self._cart)
            except Exception as e:
                logger.error(f"Cart subscriber failed: {str(e)}")

    def toast(self, toast: Toast):
        """Raise a toast. Notification failures are only logged."""
        try:
            self.notifier.notify(toast)
        except Exception as e:
            logger.error(f"Cart notification failed: {str(e)}")
