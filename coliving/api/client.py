"""httpx-based client for the co-living backend.

Every call goes through :meth:`ApiClient.request`, which

  * attaches ``Authorization: Bearer <token>`` from the Session Manager,
  * maps transport and protocol failures to ColivingError(NETWORK_ERROR),
  * maps HTTP >= 400 to ApiError with the backend's ``message`` /
    ``errors[]`` body, and
  * decodes the body into a pydantic schema, failing closed with
    ColivingError(DECODE_ERROR) when the shape is wrong.

A 401 is reported as UNAUTHORIZED and left to the caller; the session
is not touched here.
"""

from __future__ import annotations

import logging
from typing import Any, Literal, Mapping, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from coliving.config import Settings, settings
from coliving.exceptions import ApiError, ColivingError, ColivingErrorCodes
from coliving.session import SessionManager

log = logging.getLogger("coliving.api")

M = TypeVar("M", bound=BaseModel)
AuthMode = Literal["required", "optional", "none"]


def decode(schema: type[M], data: Any, context: str = "response") -> M:
    """Validate ``data`` against ``schema`` or raise DECODE_ERROR."""
    try:
        return schema.model_validate(data)
    except ValidationError as e:
        raise ColivingError(
            code=ColivingErrorCodes.DECODE_ERROR,
            message=f"{context}: unexpected response shape ({e.error_count()} errors)",
            cause=e,
        ) from e


def _error_body(resp: httpx.Response) -> tuple[str, list[str]]:
    try:
        body = resp.json()
    except ValueError:
        return "", []
    if not isinstance(body, dict):
        return "", []
    message = body.get("message")
    errors = [
        str(e.get("message"))
        for e in body.get("errors") or []
        if isinstance(e, dict) and e.get("message")
    ]
    return (message if isinstance(message, str) else ""), errors


class ApiClient:
    """Thin async wrapper over the backend REST API."""

    def __init__(
        self,
        sessions: SessionManager | None = None,
        config: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._sessions = sessions
        self._config = config or settings
        self._transport = transport

    @property
    def base_url(self) -> str:
        return self._config.api_base_url.rstrip("/")

    @property
    def config(self) -> Settings:
        return self._config

    @property
    def sessions(self) -> SessionManager | None:
        return self._sessions

    def absolute_url(self, path: str | None) -> str | None:
        """Resolve a backend-relative asset path such as ``/uploads/x.jpg``."""
        if not path:
            return None
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    def _make_client(self, timeout: float | None = None) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Accept": "application/json"},
            timeout=timeout if timeout is not None else self._config.request_timeout,
            transport=self._transport,
        )

    def _auth_headers(self, auth: AuthMode, context: str) -> dict[str, str]:
        if auth == "none":
            return {}
        headers = self._sessions.bearer_headers() if self._sessions else {}
        if auth == "required" and not headers:
            raise ColivingError(
                code=ColivingErrorCodes.UNAUTHORIZED,
                message=f"{context}: please log in first",
            )
        return headers

    def _handle_error(self, resp: httpx.Response, context: str) -> None:
        if resp.status_code < 400:
            return
        message, errors = _error_body(resp)
        if resp.status_code == 401:
            code = ColivingErrorCodes.UNAUTHORIZED
            message = message or "Session expired. Please log in again."
        elif resp.status_code == 404:
            code = ColivingErrorCodes.NOT_FOUND
        else:
            code = ColivingErrorCodes.HTTP_ERROR
        log.warning("%s failed: HTTP %d %s", context, resp.status_code, message or resp.text[:200])
        raise ApiError(
            code=code,
            message=message or (errors[0] if errors else f"HTTP {resp.status_code}"),
            status_code=resp.status_code,
            errors=errors,
        )

    async def request_json(
        self,
        method: str,
        path: str,
        *,
        auth: AuthMode = "required",
        params: Mapping[str, Any] | None = None,
        json: Any = None,
        data: Mapping[str, Any] | None = None,
        files: Mapping[str, Any] | None = None,
        timeout: float | None = None,
    ) -> Any:
        """Send one request and return the decoded JSON body (None for empty bodies)."""
        context = f"{method} {path}"
        headers = self._auth_headers(auth, context)
        try:
            async with self._make_client(timeout) as client:
                resp = await client.request(
                    method,
                    path,
                    headers=headers,
                    params=params,
                    json=json,
                    data=data,
                    files=files,
                )
        except httpx.HTTPError as e:
            log.warning("%s: request failed: %s", context, e)
            raise ColivingError(
                code=ColivingErrorCodes.NETWORK_ERROR,
                message=f"{context}: {e.__class__.__name__}",
                cause=e,
            ) from e

        log.debug("%s -> %d", context, resp.status_code)
        self._handle_error(resp, context)

        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise ColivingError(
                code=ColivingErrorCodes.DECODE_ERROR,
                message=f"{context}: response is not JSON",
                cause=e,
            ) from e

    async def request(
        self,
        method: str,
        path: str,
        schema: type[M],
        **kwargs: Any,
    ) -> M:
        """Send one request and decode its body into ``schema``."""
        data = await self.request_json(method, path, **kwargs)
        return decode(schema, data if data is not None else {}, f"{method} {path}")
