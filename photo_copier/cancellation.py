"""Cooperative cancellation shared by the scanner, workers and executor."""

import threading

from .errors import OperationCancelled


class CancelToken:
    """Thread-safe cancellation token."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self, op: str = "", path: str = "") -> None:
        """Raise OperationCancelled when the token has been set."""
        if self._event.is_set():
            raise OperationCancelled(op=op, path=path)
