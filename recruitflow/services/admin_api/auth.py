"""Bearer credential injection for admin API requests."""

from __future__ import annotations

import threading

from requests import PreparedRequest
from requests.auth import AuthBase

from .config import AdminApiConfig, load_token

AUTHORIZATION_HEADER = "Authorization"


class BearerAuth(AuthBase):
    """Attach ``Authorization: Bearer <token>`` to every outgoing request.

    The token is resolved once from env/config on first use so a missing
    credential fails at the first request rather than at construction.
    """

    def __init__(self, config: AdminApiConfig | None = None, *, token: str | None = None) -> None:
        self._config = config
        self._token = token
        self._lock = threading.Lock()

    @property
    def token(self) -> str:
        with self._lock:
            if self._token is None:
                self._token = load_token(self._config)
            return self._token

    def __call__(self, request: PreparedRequest) -> PreparedRequest:
        request.headers[AUTHORIZATION_HEADER] = f"Bearer {self.token}"
        return request


__all__ = ["BearerAuth", "AUTHORIZATION_HEADER"]
