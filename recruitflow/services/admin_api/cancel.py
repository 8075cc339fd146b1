"""Cancellation tokens tying in-flight requests to their owning session."""

from __future__ import annotations

import threading

from .models import RequestCancelled


class CancelToken:
    """One-way cancellation flag shared between an owner and its requests.

    Once cancelled a token stays cancelled; owners hand out a fresh token
    for subsequent work instead of resetting this one.
    """

    __slots__ = ("_event", "reason")

    def __init__(self) -> None:
        self._event = threading.Event()
        self.reason: str | None = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self, reason: str = "cancelled") -> None:
        if not self._event.is_set():
            self.reason = reason
            self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise RequestCancelled(f"Request cancelled: {self.reason}")


__all__ = ["CancelToken"]
