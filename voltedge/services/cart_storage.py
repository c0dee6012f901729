"""
Persistence adapters for the cart.

Every adapter owns exactly one durable slot and exposes load()/save().
Neither method raises: read problems fall back to an empty cart and write
problems are logged, so losing persistence never blocks a cart mutation.
"""
import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from base64 import b64encode
from pathlib import Path
from typing import MutableMapping, Optional

from pydantic import ValidationError
from sqlalchemy.orm import sessionmaker

from voltedge.db.models import CartSlot
from voltedge.schemas.cart import Cart

logger = logging.getLogger(__name__)

# Signature, timestamp, cookie name and attributes added around the encoded session
SESSION_COOKIE_OVERHEAD = 160


class CartTooLargeError(Exception):
    pass


def empty_cart() -> Cart:
    return Cart(items=[], total=0)


class CartStorage(ABC):
    """Base adapter. Subclasses only move raw JSON strings in and out of their slot."""

    def __init__(self, key: str):
        self.key = key

    @abstractmethod
    def _read(self) -> Optional[str]:
        ...

    @abstractmethod
    def _write(self, payload: str) -> None:
        ...

    def load(self) -> Cart:
        try:
            raw = self._read()
        except Exception as e:
            logger.error(f"Error loading cart from storage ({self.key}): {str(e)}")
            return empty_cart()

        if not raw:
            return empty_cart()

        try:
            cart = Cart.model_validate_json(raw)
        except (ValidationError, ValueError, TypeError) as e:
            logger.error(f"Discarding unreadable cart in storage ({self.key}): {str(e)}")
            return empty_cart()

        # total is a projection of items; never trust the stored figure
        total = sum((item.product.price * item.quantity for item in cart.items), 0)
        return Cart(items=cart.items, total=total)

    def save(self, cart: Cart) -> None:
        try:
            self._write(cart.model_dump_json(by_alias=True))
        except Exception as e:
            logger.error(f"Error saving cart to storage ({self.key}): {str(e)}")


class MemoryCartStorage(CartStorage):
    """
    Slot in a plain dict. Pass a shared `slots` dict to keep carts between
    store instances; nothing is ever evicted, so use it for development and
    tests only.
    """

    def __init__(self, key: str = "voltedge_cart", slots: Optional[dict] = None):
        super().__init__(key)
        self.slots = slots if slots is not None else {}

    @property
    def payload(self) -> Optional[str]:
        return self.slots.get(self.key)

    @payload.setter
    def payload(self, value: str):
        self.slots[self.key] = value

    def _read(self) -> Optional[str]:
        return self.payload

    def _write(self, payload: str) -> None:
        self.payload = payload


class SessionCartStorage(CartStorage):
    """
    Slot inside the signed session cookie (request.session).

    Starlette serializes the whole session into one cookie, so a write that
    would push the cookie past `max_cookie_bytes` is refused.
    """

    def __init__(self, session: MutableMapping, key: str = "voltedge_cart", max_cookie_bytes: int = 4096):
        super().__init__(key)
        self.session = session
        self.max_cookie_bytes = max_cookie_bytes

    def estimated_cookie_size(self, payload: str) -> int:
        data = {**self.session, self.key: payload}
        return len(b64encode(json.dumps(data).encode("utf-8"))) + SESSION_COOKIE_OVERHEAD

    def _read(self) -> Optional[str]:
        return self.session.get(self.key)

    def _write(self, payload: str) -> None:
        size = self.estimated_cookie_size(payload)
        if size > self.max_cookie_bytes:
            raise CartTooLargeError(
                f"Session cookie would be {size} bytes, limit is {self.max_cookie_bytes}"
            )
        self.session[self.key] = payload


class FileCartStorage(CartStorage):
    """One JSON file per slot under a directory."""

    def __init__(self, directory: str, key: str = "voltedge_cart"):
        super().__init__(key)
        self.path = Path(directory) / f"{key}.json"

    def _read(self) -> Optional[str]:
        if not self.path.exists():
            return None
        return self.path.read_text(encoding="utf-8")

    def _write(self, payload: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_path, self.path)
        except Exception:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise


class SqlCartStorage(CartStorage):
    """One row per slot in the cart_slots table."""

    def __init__(self, session_factory: sessionmaker, key: str = "voltedge_cart"):
        super().__init__(key)
        self.session_factory = session_factory

    def _read(self) -> Optional[str]:
        with self.session_factory() as db:
            slot = db.get(CartSlot, self.key)
            return slot.payload if slot else None

    def _write(self, payload: str) -> None:
        with self.session_factory() as db:
            slot = db.get(CartSlot, self.key)
            if slot:
                slot.payload = payload
            else:
                db.add(CartSlot(key=self.key, payload=payload))
            db.commit()
