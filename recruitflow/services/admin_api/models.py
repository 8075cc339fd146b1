"""Exceptions raised by the admin API client."""

from __future__ import annotations

from typing import Any


class ApiError(RuntimeError):
    """Base error raised for admin API failures."""

    def __init__(self, message: str, *, status_code: int | None = None, payload: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload or {}

    @property
    def server_message(self) -> str | None:
        """Return the ``message`` field the API attaches to failures, if any."""

        message = self.payload.get("message") or self.payload.get("error")
        return str(message) if message else None


class ApiAuthError(ApiError):
    """Raised when the API rejects the bearer credential (401/403)."""


class ApiNotFound(ApiError):
    """Raised when the requested resource does not exist."""


class ApiRequestError(ApiError):
    """Raised for transport failures and unexpected HTTP statuses."""


class RequestCancelled(ApiError):
    """Raised when a request's owning operation was cancelled."""


__all__ = [
    "ApiError",
    "ApiAuthError",
    "ApiNotFound",
    "ApiRequestError",
    "RequestCancelled",
]
