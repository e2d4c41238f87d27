"""Typed chat stream handle.

A `ChatStream` is returned synchronously by
`ApiGatewayClient.create_chat_stream`. Nothing touches the network until the
caller starts iterating; the first iteration opens the SSE connection and
yields `ChatEvent` records until the server says it is done, the stream
ends, or reading fails.

A stream is single-use. To listen again, create a new one.
"""

from __future__ import annotations

import json
import logging
from typing import AsyncIterator, Optional, Union
from urllib.parse import urlencode

import httpx
from pydantic import ValidationError

from shadowrun_client.errors import RequestTimeoutError, TransportError
from shadowrun_client.schemas.dto import ChatStreamQuery
from shadowrun_client.schemas.events import (
    DoneEvent,
    ErrorEvent,
    SseEvent,
    TokenEvent,
    chat_event_adapter,
)
from shadowrun_client.transport import SseTransport, parse_sse_lines

logger = logging.getLogger(__name__)

DONE_SENTINEL = "[DONE]"

_TYPED_EVENTS = frozenset({"token", "done", "error"})


def decode_chat_event(sse: SseEvent) -> Optional[Union[TokenEvent, DoneEvent, ErrorEvent]]:
    """Map one framed SSE event to a typed chat event.

    - `event: done`, or a `[DONE]` data line, is a `DoneEvent`
    - `event: error` is an `ErrorEvent` carrying the data as message
    - JSON data with a `type` of token/done/error is validated as that event
    - any other non-empty data is a `TokenEvent` with the data verbatim

    Returns None for events that carry nothing (e.g. keep-alives).
    """
    data = sse.data
    if sse.event == "done" or data.strip() == DONE_SENTINEL:
        return DoneEvent()
    if sse.event == "error":
        return ErrorEvent(message=data or "stream error")
    if not data:
        return None
    if data.lstrip().startswith("{"):
        try:
            payload = json.loads(data)
        except ValueError:
            payload = None
        if isinstance(payload, dict) and payload.get("type") in _TYPED_EVENTS:
            try:
                return chat_event_adapter.validate_python(payload)
            except ValidationError:
                logger.debug("decode_chat_event: %r is not a valid %s event", data, payload.get("type"))
    return TokenEvent(text=data)


class ChatStream:
    """Lazy, single-use handle on one chat SSE connection.

    Args:
        base_url: Backend origin the stream path is resolved against.
        path: Endpoint path, e.g. `/api/chat`.
        query: The four query parameters, URL-encoded in declaration order.
        transport: SSE transport used to open and read the connection.

    Examples:
        >>> stream = client.create_chat_stream("look around", "s1", "u1", "player")
        >>> async with stream:
        ...     async for event in stream:
        ...         if event.type == "token":
        ...             print(event.text, end="")
    """

    def __init__(self, base_url: str, path: str, query: ChatStreamQuery, transport: SseTransport) -> None:
        self.base_url = base_url.rstrip("/")
        self.path = path
        self.params = query
        self.query = urlencode(query.model_dump())
        self._transport = transport
        self._started = False
        self._closed = False

    @property
    def url(self) -> str:
        return f"{self.base_url}{self.target}"

    @property
    def target(self) -> str:
        return f"{self.path}?{self.query}"

    @property
    def started(self) -> bool:
        return self._started

    @property
    def closed(self) -> bool:
        return self._closed

    def __aiter__(self) -> AsyncIterator[Union[TokenEvent, DoneEvent, ErrorEvent]]:
        return self.events()

    async def __aenter__(self) -> "ChatStream":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    def _claim(self) -> None:
        if self._closed:
            raise RuntimeError("ChatStream is closed; create a new stream to listen again")
        if self._started:
            raise RuntimeError("ChatStream can only be iterated once; create a new stream to restart")
        self._started = True

    async def _open(self) -> None:
        logger.debug("ChatStream._open: GET %s", self.url)
        try:
            await self._transport.connect(self.target)
        except httpx.TimeoutException as e:
            raise RequestTimeoutError(f"GET {self.path} timed out while connecting") from e
        except httpx.TransportError as e:
            raise TransportError(f"GET {self.path} failed: {e}") from e

    async def raw_events(self) -> AsyncIterator[SseEvent]:
        """Yield framed SSE events as they arrive.

        Raises:
            RuntimeError: The stream was already iterated or closed.
            AuthError: The server answered 401 when connecting.
            ServerError: The server answered another non-2xx status when connecting.
            TransportError: The connection could not be opened.
            httpx.TransportError: Reading failed (after any reconnect attempts).
        """
        self._claim()
        try:
            await self._open()
            async for evt in parse_sse_lines(self._transport.aiter()):
                yield evt
        finally:
            await self.aclose()

    async def events(self) -> AsyncIterator[Union[TokenEvent, DoneEvent, ErrorEvent]]:
        """Yield typed chat events.

        Iteration ends after the first `DoneEvent`. A stream that ends without
        one gets a trailing `DoneEvent`; a read failure is reported as a single
        `ErrorEvent` instead. Connection-time failures are raised.
        """
        raw = self.raw_events()
        try:
            async for sse in raw:
                evt = decode_chat_event(sse)
                if evt is None:
                    continue
                yield evt
                if isinstance(evt, DoneEvent):
                    return
        except (httpx.TransportError, httpx.StreamError) as e:
            logger.warning("ChatStream.events: stream %s failed: %s", self.path, e)
            yield ErrorEvent(message=f"stream interrupted: {e}")
            return
        finally:
            await raw.aclose()
        yield DoneEvent()

    async def aclose(self) -> None:
        """Close the connection. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        await self._transport.close()
        logger.debug("ChatStream.aclose: closed %s", self.path)
