"""Transport interfaces for the Shadowrun client.

Defines the Protocol the chat stream relies on to abstract the Server-Sent
Events connection. The concrete transport lives alongside it in `sse.py`.
"""

from __future__ import annotations

from typing import AsyncIterator, Protocol

from .sse import BasicSseTransport, parse_sse_lines


class SseTransport(Protocol):
    """Protocol for async Server-Sent Events (SSE) transports.

    Implementations manage the lifecycle of a persistent HTTP stream
    delivering text/event-stream data to consumers.

    Examples:
        >>> await transport.connect("/api/chat?input=hi")
        >>> async for line in transport.aiter():
        ...     print(line)
        >>> await transport.close()
    """

    async def connect(self, path: str) -> None:
        """Open a streaming connection.

        Args:
            path: HTTP path (with query string) relative to the configured base URL.

        Raises:
            Exception: If the connection cannot be established.
        """
        ...

    def aiter(self) -> AsyncIterator[str]:
        """Iterate over decoded SSE lines of the open connection."""
        ...

    async def close(self) -> None:
        """Close the current streaming connection and release resources."""
        ...


__all__ = [
    "BasicSseTransport",
    "SseTransport",
    "parse_sse_lines",
]
