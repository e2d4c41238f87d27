"""Error types raised by the Shadowrun API clients.

Purpose:
- Give callers one small taxonomy for every failure a call can end in:
  the request never got an answer (`TransportError`), the credential was
  rejected (`AuthError`), or the server answered with an error
  (`ServerError`).
- Expose HTTP-oriented context (status code, raw body) for diagnosis.

Usage:
- Catch `ApiClientError` for any failure and inspect `status_code` or `details`.
- Catch `ServerError` and read `.error` to show the server's message verbatim.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from shadowrun_client.auth.events import AuthExpired


class ApiClientError(Exception):
    """Base error for all client failures.

    Args:
        message: Human-readable error description.
        status_code: Optional HTTP status code associated with the failure.
        details: Optional payload from the server (parsed JSON or raw text).
    """

    def __init__(self, message: str, *, status_code: Optional[int] = None, details: Optional[Any] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details


class TransportError(ApiClientError):
    """The request never reached the server, or no response came back."""


NetworkError = TransportError


class RequestTimeoutError(TransportError):
    """The request did not complete within the configured timeout."""


class AuthError(ApiClientError):
    """The server answered 401 Unauthorized.

    By the time this is raised the stored credential has already been cleared
    and the `AuthExpired` notification has been delivered.
    """

    def __init__(self, event: "AuthExpired") -> None:
        super().__init__(
            f"Authentication expired for {event.method} {event.url}",
            status_code=event.status_code,
        )
        self.event = event


class ServerError(ApiClientError):
    """The server answered but reported a failure.

    `error` holds the server's error string unchanged when the body was an
    error envelope; otherwise it falls back to the message.
    """

    def __init__(
        self,
        error: str,
        *,
        status_code: Optional[int] = None,
        details: Optional[Any] = None,
    ) -> None:
        super().__init__(error, status_code=status_code, details=details)
        self.error = error
