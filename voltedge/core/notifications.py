import logging
from typing import List, Protocol

from voltedge.schemas.notification import Toast

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def notify(self, toast: Toast) -> None:
        ...


class LoggingNotifier:
    """Writes toasts to the log. Used when nobody is there to see them."""

    def notify(self, toast: Toast) -> None:
        logger.info(f"[{toast.level}] {toast.message}")


class ToastQueue:
    """Collects toasts raised during a request so they can be returned with the response."""

    def __init__(self):
        self._toasts: List[Toast] = []

    def notify(self, toast: Toast) -> None:
        self._toasts.append(toast)

    def drain(self) -> List[Toast]:
        toasts, self._toasts = self._toasts, []
        return toasts
