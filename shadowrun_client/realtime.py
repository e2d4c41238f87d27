"""Real-time console channel over WebSocket.

`ConsoleSocket` keeps one WebSocket open to `/ws/{session_id}` on the
backend origin (`http` becomes `ws`, `https` becomes `wss`) and hands every
JSON message to a callback. When the connection drops it reconnects with a
linear backoff (`reconnect_delay * attempt`) for up to
`max_reconnect_attempts` tries. The counter resets after every successful
open. A 401 during the handshake is never retried.

Usually obtained from `ConsoleApiClient.console_socket()`, which wires the
bearer header and the 401 handling of the HTTP client into the socket.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, Optional, Protocol, Union

from websockets.asyncio.client import connect as ws_connect
from websockets.exceptions import ConnectionClosed, InvalidStatus, WebSocketException

from shadowrun_client.base import path_segment
from shadowrun_client.config import DEFAULT_TIMEOUT_SECONDS
from shadowrun_client.transport.sse import HeadersFactory

logger = logging.getLogger(__name__)

MessageHandler = Callable[[Any], None]
ConnectionHandler = Callable[[bool], None]
UnauthorizedHandler = Callable[[str], None]

DEFAULT_MAX_RECONNECT_ATTEMPTS = 5
DEFAULT_RECONNECT_DELAY_SECONDS = 1.0


class WebSocketConnection(Protocol):
    """The slice of a websockets `ClientConnection` the console socket uses."""

    async def send(self, message: str) -> None: ...

    async def close(self) -> None: ...

    def __aiter__(self) -> AsyncIterator[Union[str, bytes]]: ...


Connector = Callable[[str, Dict[str, str]], Awaitable[WebSocketConnection]]


async def open_websocket(url: str, headers: Dict[str, str]) -> WebSocketConnection:
    return await ws_connect(url, additional_headers=headers, open_timeout=DEFAULT_TIMEOUT_SECONDS)


def websocket_url(base_url: str, session_id: str) -> str:
    return f"{base_url.rstrip('/').replace('http', 'ws', 1)}/ws/{path_segment(session_id)}"


class ConsoleSocket:
    """Reconnecting WebSocket for live console messages of one session.

    Args:
        base_url: Backend origin (http or https).
        headers_factory: Called before every (re)connect; only its
            `Authorization` header is sent with the handshake.
        on_unauthorized: Called with the socket URL when the handshake is
            answered with 401. Reconnecting stops afterwards.
        connector: Opens one connection. Defaults to `websockets`.
        max_reconnect_attempts: Reconnects tried after a drop before giving up.
        reconnect_delay: Base delay in seconds, multiplied by the attempt number.
    """

    def __init__(
        self,
        base_url: str,
        *,
        headers_factory: Optional[HeadersFactory] = None,
        on_unauthorized: Optional[UnauthorizedHandler] = None,
        connector: Optional[Connector] = None,
        max_reconnect_attempts: int = DEFAULT_MAX_RECONNECT_ATTEMPTS,
        reconnect_delay: float = DEFAULT_RECONNECT_DELAY_SECONDS,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.max_reconnect_attempts = max_reconnect_attempts
        self.reconnect_delay = reconnect_delay
        self._headers_factory = headers_factory
        self._on_unauthorized = on_unauthorized
        self._connector: Connector = connector or open_websocket
        self._session_id: Optional[str] = None
        self._on_message: Optional[MessageHandler] = None
        self._on_connection: Optional[ConnectionHandler] = None
        self._conn: Optional[WebSocketConnection] = None
        self._task: Optional[asyncio.Task[None]] = None
        self._attempts = 0

    @property
    def session_id(self) -> Optional[str]:
        return self._session_id

    @property
    def is_connected(self) -> bool:
        return self._conn is not None

    @property
    def running(self) -> bool:
        """True while the socket is connected or still trying to reconnect."""
        return self._task is not None and not self._task.done()

    def _headers(self) -> Dict[str, str]:
        if self._headers_factory is None:
            return {}
        return {k: v for k, v in self._headers_factory().items() if k.lower() == "authorization"}

    async def connect(
        self,
        session_id: str,
        on_message: MessageHandler,
        on_connection: Optional[ConnectionHandler] = None,
    ) -> None:
        """Start listening to a session in the background.

        Returns as soon as the connection loop is scheduled. Connection state
        changes are reported through `on_connection`.

        Raises:
            RuntimeError: The socket is already running; call `disconnect()` first.
        """
        if self.running:
            raise RuntimeError("ConsoleSocket is already connected; call disconnect() first")
        self._session_id = session_id
        self._on_message = on_message
        self._on_connection = on_connection
        self._attempts = 0
        self._task = asyncio.create_task(self._run(websocket_url(self.base_url, session_id)))

    async def send(self, data: Any) -> bool:
        """Send `data` as one JSON text frame.

        Returns:
            False (and logs a warning) when no connection is open.
        """
        conn = self._conn
        if conn is None:
            logger.warning("ConsoleSocket.send: not connected, message dropped")
            return False
        await conn.send(json.dumps(data))
        return True

    async def disconnect(self) -> None:
        """Close the connection and stop reconnecting. Callbacks are released."""
        self._session_id = None
        self._on_message = None
        self._on_connection = None
        task, self._task = self._task, None
        conn, self._conn = self._conn, None
        if conn is not None:
            await conn.close()
        if task is not None:
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
        logger.debug("ConsoleSocket.disconnect: closed")

    def _notify_connection(self, connected: bool) -> None:
        if self._on_connection is None:
            return
        try:
            self._on_connection(connected)
        except Exception:
            logger.exception("ConsoleSocket: on_connection handler raised")

    def _dispatch(self, raw: Union[str, bytes]) -> None:
        text = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else raw
        try:
            data = json.loads(text)
        except ValueError:
            logger.error("ConsoleSocket: failed to parse message %r", text[:200])
            return
        if self._on_message is None:
            return
        try:
            self._on_message(data)
        except Exception:
            logger.exception("ConsoleSocket: on_message handler raised")

    async def _run(self, url: str) -> None:
        while True:
            logger.debug("ConsoleSocket._run: connecting %s", url)
            try:
                conn = await self._connector(url, self._headers())
            except InvalidStatus as e:
                self._notify_connection(False)
                if e.response.status_code == 401:
                    logger.warning("ConsoleSocket: 401 Unauthorized for %s; not reconnecting", url)
                    if self._on_unauthorized is not None:
                        self._on_unauthorized(url)
                    return
                logger.warning("ConsoleSocket: handshake rejected for %s: %s", url, e)
            except (OSError, asyncio.TimeoutError, WebSocketException) as e:
                logger.warning("ConsoleSocket: cannot connect %s: %s", url, e)
                self._notify_connection(False)
            else:
                self._conn = conn
                self._attempts = 0
                logger.info("ConsoleSocket: connected %s", url)
                self._notify_connection(True)
                try:
                    async for raw in conn:
                        self._dispatch(raw)
                except ConnectionClosed as e:
                    logger.warning("ConsoleSocket: connection lost: %s", e)
                finally:
                    if self._conn is conn:
                        self._conn = None
                logger.info("ConsoleSocket: disconnected %s", url)
                self._notify_connection(False)
            if self._session_id is None:
                return
            if self._attempts >= self.max_reconnect_attempts:
                logger.warning("ConsoleSocket: giving up on %s after %d reconnects", url, self._attempts)
                return
            self._attempts += 1
            delay = self.reconnect_delay * self._attempts
            logger.info(
                "ConsoleSocket: reconnecting in %ss (attempt %d/%d)", delay, self._attempts, self.max_reconnect_attempts
            )
            await asyncio.sleep(delay)
