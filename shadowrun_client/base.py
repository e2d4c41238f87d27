"""Shared HTTP plumbing for the Shadowrun API clients.

`BaseApiClient` owns everything that is common to every call:

- the credential is read from the token provider right before each request
  and attached as `Authorization: Bearer <token>` when present;
- a 401 answer clears the stored credential, notifies the host through
  `on_auth_expired` and is raised as `AuthError`;
- every other failure is normalized into the `errors` taxonomy.

Each call is single-shot; nothing is retried.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, NoReturn, Optional, Type
from urllib.parse import quote

import httpx

from shadowrun_client.auth.events import AuthExpired, AuthExpiredHandler
from shadowrun_client.auth.token_store import FileTokenStore, TokenProvider
from shadowrun_client.config import CONTENT_TYPE, DEFAULT_TIMEOUT_SECONDS, ClientSettings
from shadowrun_client.errors import AuthError, RequestTimeoutError, ServerError, TransportError
from shadowrun_client.schemas.base import BaseSchema
from shadowrun_client.schemas.envelope import ErrorEnvelope, SuccessEnvelope, parse_envelope


def path_segment(value: str) -> str:
    """Percent-encode a caller-supplied value for use as one path segment."""
    return quote(value, safe="")


class BaseApiClient:
    """Async HTTP core shared by the gateway and console clients.

    Args:
        base_url: Backend origin. Defaults to `ClientSettings().api_url`.
        token_provider: Where the bearer token is read from (and cleared on 401).
            Defaults to a `FileTokenStore` at `ClientSettings().token_store_path`.
        on_auth_expired: Called once with an `AuthExpired` record for every 401.
        timeout: Per-request timeout in seconds.
        client: Optional caller-owned `httpx.AsyncClient` (not closed by `aclose()`).
        settings: Optional pre-built settings instead of reading the environment.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        token_provider: Optional[TokenProvider] = None,
        on_auth_expired: Optional[AuthExpiredHandler] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        client: Optional[httpx.AsyncClient] = None,
        settings: Optional[ClientSettings] = None,
    ) -> None:
        if base_url is None:
            settings = settings or ClientSettings()
            base_url = settings.api_url
        if token_provider is None:
            settings = settings or ClientSettings()
            token_provider = FileTokenStore(settings.token_store_path)
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._token_provider = token_provider
        self._on_auth_expired = on_auth_expired
        self._owns_client = client is None
        self._http = client or httpx.AsyncClient(timeout=timeout, follow_redirects=True)
        self._logger = logging.getLogger(type(self).__module__)

    @property
    def token_provider(self) -> TokenProvider:
        return self._token_provider

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    def _headers(self) -> Dict[str, str]:
        headers: Dict[str, str] = {"Content-Type": CONTENT_TYPE}
        token = self._token_provider.get()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    async def _send(self, method: str, path: str, *, body: Optional[BaseSchema] = None, json: Any = None) -> httpx.Response:
        """Issue one request and return the checked response.

        Raises:
            RequestTimeoutError: The request timed out.
            TransportError: Any other transport-level failure.
            AuthError: The server answered 401.
            ServerError: The server answered with another non-2xx status.
        """
        url = self._url(path)
        if body is not None:
            json = body.model_dump(mode="json", exclude_none=True)
        self._logger.debug("%s._send: %s %s", type(self).__name__, method, url)
        try:
            r = await self._http.request(method, url, headers=self._headers(), json=json, timeout=self.timeout)
        except httpx.TimeoutException as e:
            self._logger.warning("%s._send: %s %s timed out", type(self).__name__, method, url)
            raise RequestTimeoutError(f"{method} {path} timed out after {self.timeout}s") from e
        except httpx.TransportError as e:
            self._logger.warning("%s._send: %s %s failed: %s", type(self).__name__, method, url, e)
            raise TransportError(f"{method} {path} failed: {e}") from e
        await self._check_response(r)
        self._logger.debug("%s._send: %s %s -> %s", type(self).__name__, method, url, r.status_code)
        return r

    async def _check_response(self, r: httpx.Response) -> None:
        """Raise the matching client error for a non-2xx response.

        Also used as the response check of chat streams, so the body of a
        streamed error response is read here before it is inspected.
        """
        if r.status_code == 401:
            self._handle_unauthorized(r.request)
        if r.is_success:
            return
        await r.aread()
        details = self._body(r)
        raise ServerError(
            self._error_message(details, r),
            status_code=r.status_code,
            details=details,
        )

    def _handle_unauthorized(self, request: httpx.Request) -> NoReturn:
        raise AuthError(self._expire_credential(request.method, str(request.url)))

    def _expire_credential(self, method: str, url: str) -> AuthExpired:
        """Clear the stored credential and notify the host once."""
        self._token_provider.clear()
        event = AuthExpired(method=method, url=url)
        self._logger.warning(
            "%s: 401 Unauthorized for %s %s; stored credential cleared",
            type(self).__name__,
            event.method,
            event.url,
        )
        if self._on_auth_expired is not None:
            try:
                self._on_auth_expired(event)
            except Exception:
                self._logger.exception("on_auth_expired handler raised")
        return event

    @staticmethod
    def _body(r: httpx.Response) -> Any:
        if not r.content:
            return None
        try:
            return r.json()
        except ValueError:
            return r.text

    @staticmethod
    def _error_message(details: Any, r: httpx.Response) -> str:
        if isinstance(details, dict):
            for key in ("error", "message", "detail"):
                value = details.get(key)
                if isinstance(value, str) and value:
                    return value
        return f"HTTP {r.status_code} {r.reason_phrase}".strip()

    def _json(self, r: httpx.Response) -> Any:
        if not r.content:
            return None
        try:
            return r.json()
        except ValueError as e:
            raise ServerError("Response body is not valid JSON", status_code=r.status_code, details=r.text) from e

    async def _call_envelope(
        self,
        method: str,
        path: str,
        body: Optional[BaseSchema] = None,
        model: Optional[Type[Any]] = None,
    ) -> SuccessEnvelope[Any]:
        """Send a request to an envelope endpoint and unwrap the result.

        Returns:
            The success envelope, with `data` validated against `model` when
            given and otherwise exactly as the server sent it.

        Raises:
            ServerError: The envelope reported `status: "error"` (`.error`
                carries the server string verbatim) or the body was not an envelope.
        """
        r = await self._send(method, path, body=body)
        payload = self._json(r)
        try:
            envelope = parse_envelope(payload, model)
        except ValueError as e:
            raise ServerError(
                f"Unexpected response shape from {method} {path}", status_code=r.status_code, details=payload
            ) from e
        if isinstance(envelope, ErrorEnvelope):
            self._logger.info("%s: %s %s returned error envelope: %s", type(self).__name__, method, path, envelope.error)
            raise ServerError(envelope.error, status_code=r.status_code, details=payload)
        return envelope
