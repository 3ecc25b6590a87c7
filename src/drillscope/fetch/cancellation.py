"""Cooperative cancellation token."""

import threading
from typing import Optional

from drillscope.fetch.errors import CancellationSignal

__all__ = ['CancellationToken']


class CancellationToken:
    """One-shot cancellation flag shared between a consumer and its work.

    Cancellation is cooperative: work observes it by calling
    :meth:`raise_if_cancelled` or by waiting on :meth:`wait`. Transports
    that cannot be interrupted simply finish, and their result is
    discarded by the supersession layer.
    """

    def __init__(self, label: str = ""):
        self.label = label
        self._event = threading.Event()

    def cancel(self) -> None:
        """Request cancellation. Safe to call more than once."""
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise CancellationSignal(f"Retrieval cancelled: {self.label}")

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block up to ``timeout`` seconds. Returns True if cancelled meanwhile."""
        return self._event.wait(timeout)

    def __repr__(self):
        state = "cancelled" if self.cancelled else "active"
        return f"CancellationToken({self.label!r}, {state})"
