"""HTTP utilities for the admin API."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

import requests
from requests import Response
from requests.exceptions import ConnectionError, RequestException, Timeout

from recruitflow.core.logger import get_logger

from .auth import BearerAuth
from .cancel import CancelToken
from .config import AdminApiConfig, load_timeout
from .models import ApiAuthError, ApiNotFound, ApiRequestError, RequestCancelled

LOGGER = get_logger()

USER_AGENT = "RecruitFlow-Importer/1.0"


@dataclass(slots=True)
class RequestDiagnostics:
    """Captured diagnostics for troubleshooting."""

    method: str
    url: str
    status: int | None


class HttpClient:
    """Request helper wrapping auth, timeouts, cancellation, and error mapping.

    Requests are never retried automatically; callers surface failures and
    let the user re-trigger the action.
    """

    def __init__(
        self,
        config: AdminApiConfig,
        *,
        session: requests.Session | None = None,
        auth: BearerAuth | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._config = config
        self._session = session or requests.Session()
        self._session.verify = config.verify_tls
        self._session.trust_env = config.trust_env
        if config.proxies:
            self._session.proxies.update(config.proxies)
        self._session.headers.setdefault("User-Agent", USER_AGENT)
        self._auth = auth or BearerAuth(config)
        self._logger = logger or LOGGER
        self._timeout = load_timeout(config)

    @property
    def session(self) -> requests.Session:
        return self._session

    def request(
        self,
        method: str,
        path: str,
        *,
        json_body: Mapping[str, object] | None = None,
        files: Mapping[str, Any] | None = None,
        expected_status: Iterable[int] | None = None,
        timeout: float | None = None,
        cancel_token: CancelToken | None = None,
    ) -> Response:
        """Perform an authenticated request against the admin API.

        Any 2xx status is accepted unless ``expected_status`` narrows it.
        """

        url = self._compose_url(path)
        diagnostics = RequestDiagnostics(method=method, url=url, status=None)
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()

        try:
            response = self._session.request(
                method,
                url,
                json=json_body,
                files=files,
                auth=self._auth,
                timeout=timeout or self._timeout,
            )
        except Timeout as exc:
            self._logger.warning(
                "admin_api.http timeout method=%s url=%s", diagnostics.method, diagnostics.url, exc_info=exc
            )
            self._discard_if_cancelled(cancel_token, diagnostics)
            raise ApiRequestError("Request timed out", payload={"url": url}) from exc
        except (ConnectionError, RequestException) as exc:
            self._logger.warning(
                "admin_api.http request_failed method=%s url=%s error=%s",
                diagnostics.method,
                diagnostics.url,
                type(exc).__name__,
                exc_info=exc,
            )
            self._discard_if_cancelled(cancel_token, diagnostics)
            raise ApiRequestError("Request failed", payload={"url": url}) from exc

        diagnostics.status = response.status_code
        self._discard_if_cancelled(cancel_token, diagnostics)

        status = response.status_code
        if expected_status is None:
            accepted = 200 <= status < 300
        else:
            accepted = status in tuple(expected_status)
        if accepted:
            self._logger.debug("admin_api.http ok method=%s url=%s status=%d", method, url, status)
            return response

        payload = self._safe_json(response)
        message = str(payload.get("message") or f"Unexpected status {status}")
        self._logger.error(
            "admin_api.http failed method=%s url=%s status=%d message=%s",
            diagnostics.method,
            diagnostics.url,
            status,
            message,
        )
        if status in (401, 403):
            raise ApiAuthError(message, status_code=status, payload=payload)
        if status == 404:
            raise ApiNotFound(message, status_code=status, payload=payload)
        raise ApiRequestError(message, status_code=status, payload=payload)

    def request_json(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        """Perform a request and decode a JSON object body."""

        response = self.request(method, path, **kwargs)
        try:
            payload = response.json()
        except ValueError as exc:
            raise ApiRequestError(
                "Response body is not valid JSON",
                status_code=response.status_code,
                payload=self._safe_json(response),
            ) from exc
        if not isinstance(payload, dict):
            raise ApiRequestError("Response body is not a JSON object", status_code=response.status_code)
        return payload

    def close(self) -> None:
        self._session.close()

    # Internal helpers -------------------------------------------------

    def _discard_if_cancelled(self, token: CancelToken | None, diagnostics: RequestDiagnostics) -> None:
        if token is None or not token.cancelled:
            return
        self._logger.info(
            "admin_api.http discarding_late_completion method=%s url=%s status=%s reason=%s",
            diagnostics.method,
            diagnostics.url,
            diagnostics.status,
            token.reason,
        )
        raise RequestCancelled(f"Request cancelled: {token.reason}", status_code=diagnostics.status)

    def _compose_url(self, path: str) -> str:
        base = self._config.base_url.rstrip("/")
        if path.startswith("http://") or path.startswith("https://"):
            return path
        if not path.startswith("/"):
            path = f"/{path}"
        return f"{base}{path}"

    def _safe_json(self, response: Response) -> dict[str, Any]:
        try:
            data = response.json()
        except ValueError:
            text = response.text
            if len(text) > 200:
                text = text[:200] + "..."
            return {"body": text}
        return data if isinstance(data, dict) else {"body": data}


__all__ = ["HttpClient", "USER_AGENT"]
