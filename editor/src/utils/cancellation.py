"""Cooperative cancellation flag shared by the session and compositing jobs."""

import threading

from utils.errors import CompositeCancelled


class CancellationToken:
    """Set once when the editor closes; checked at step boundaries.

    Backed by a threading.Event because compositing steps run in executor
    threads while the flag is set from the UI thread.
    """

    def __init__(self):
        self._event = threading.Event()

    def cancel(self):
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self):
        """Raise CompositeCancelled if cancel() was called"""
        if self._event.is_set():
            raise CompositeCancelled("Brand kit session was closed")
