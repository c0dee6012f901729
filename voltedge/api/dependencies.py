import uuid
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPBearer
from fastapi.security.http import HTTPAuthorizationCredentials

from voltedge.core.backend_client import BackendClient, backend_client
from voltedge.core.config import settings
from voltedge.core.notifications import ToastQueue
from voltedge.db.session import SessionLocal
from voltedge.services.cart import CartStore
from voltedge.services.cart_storage import (
    CartStorage,
    FileCartStorage,
    MemoryCartStorage,
    SessionCartStorage,
    SqlCartStorage,
)

security = HTTPBearer(auto_error=False)

# memory backend (development and tests only): payloads live for the process lifetime
_memory_slots: dict[str, str] = {}


def get_session_id(request: Request) -> str:
    """Stable id for the browser session, kept in the signed session cookie."""
    session_id = request.session.get("session_id")
    if not session_id:
        session_id = uuid.uuid4().hex
        request.session["session_id"] = session_id
    return session_id


def get_cart_storage(request: Request) -> CartStorage:
    backend = settings.CART_STORAGE_BACKEND
    key = settings.CART_STORAGE_KEY

    if backend == "session":
        return SessionCartStorage(request.session, key=key, max_cookie_bytes=settings.SESSION_COOKIE_MAX_BYTES)

    slot_key = f"{key}_{get_session_id(request)}"
    if backend == "file":
        return FileCartStorage(settings.CART_STORAGE_DIR, key=slot_key)
    if backend == "database":
        return SqlCartStorage(SessionLocal, key=slot_key)
    return MemoryCartStorage(key=slot_key, slots=_memory_slots)


def get_toast_queue() -> ToastQueue:
    return ToastQueue()


def get_cart_store(
    storage: CartStorage = Depends(get_cart_storage),
    toasts: ToastQueue = Depends(get_toast_queue),
) -> CartStore:
    """One store per request, loaded from the caller's slot."""
    return CartStore.open(storage, toasts)


def get_backend_client() -> BackendClient:
    return backend_client


async def get_access_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[str]:
    """Bearer token to forward to the backend, if the caller sent one."""
    if credentials is None:
        return None
    return credentials.credentials
