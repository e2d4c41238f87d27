"""Server-Sent Events (SSE) transport utilities.

Provides a minimal SSE transport built on `httpx.AsyncClient` with optional
reconnect, backoff, idle timeout, and maximum total time controls, plus the
line-to-event framing used by the chat stream.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import AsyncIterable, AsyncIterator, Awaitable, Callable, Dict, List, Optional

import httpx

from shadowrun_client.schemas.events import SseEvent

HeadersFactory = Callable[[], Dict[str, str]]
ResponseCheck = Callable[[httpx.Response], Awaitable[None]]


class BasicSseTransport:
    """Minimal SSE transport using httpx.AsyncClient.

    - connect(path): start a streamed GET request
    - aiter(): yield raw SSE lines (already decoded)
    - close(): close the underlying response, and the client if this transport created it

    Usage guidelines:
    - Pass `headers_factory` when headers must be rebuilt for every (re)connect,
      e.g. to pick up a credential that changed since the last attempt.
    - Pass `response_check` to normalize non-2xx answers; by default
      `raise_for_status()` is used.
    - Set `include_blank_lines=True` when you need explicit event boundaries.
    - Use reconnect/backoff parameters to handle flaky networks.
    """

    def __init__(
        self,
        base_url: str,
        *,
        client: Optional[httpx.AsyncClient] = None,
        headers_factory: Optional[HeadersFactory] = None,
        response_check: Optional[ResponseCheck] = None,
        connect_timeout: float = 10.0,
        include_blank_lines: bool = False,
        reconnect: bool = False,
        max_retries: int = 3,
        backoff_initial: float = 0.5,
        backoff_factor: float = 2.0,
        backoff_max: float = 8.0,
        idle_timeout: Optional[float] = None,
        max_total_seconds: Optional[float] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(follow_redirects=True)
        # Reads are unbounded: a chat stream may stay quiet for a long time.
        self._timeout = httpx.Timeout(connect_timeout, read=None)
        self._headers_factory = headers_factory
        self._response_check = response_check
        self._response: Optional[httpx.Response] = None
        self._include_blank = include_blank_lines
        self._reconnect = reconnect
        self._max_retries = max_retries
        self._backoff_initial = backoff_initial
        self._backoff_factor = backoff_factor
        self._backoff_max = backoff_max
        self._path: Optional[str] = None
        self._logger = logging.getLogger(__name__)
        self._idle_timeout = idle_timeout
        self._max_total = max_total_seconds

    def _headers(self) -> Dict[str, str]:
        """Build headers for SSE requests.

        Returns:
            `Accept: text/event-stream` merged with whatever the headers factory supplies.
        """
        h = {"Accept": "text/event-stream", "Cache-Control": "no-cache"}
        if self._headers_factory is not None:
            h.update(self._headers_factory())
        return h

    async def connect(self, path: str) -> None:
        """Establish the streaming connection to the given path (relative).

        Args:
            path: Relative path under the base URL, query string included.

        Raises:
            httpx.HTTPStatusError: If the initial request returns a non-2xx response
                and no `response_check` was supplied.
            httpx.TransportError: For transport-level HTTP issues.
        """
        self._path = path
        await self._do_connect()

    async def _do_connect(self) -> None:
        """(Re)open the streaming HTTP request, dropping any previous response."""
        assert self._path is not None
        if self._response is not None:
            await self._response.aclose()
            self._response = None
        url = f"{self._base_url}/{self._path.lstrip('/')}"
        self._logger.debug("SSE connect: GET %s", url)
        req = self._client.build_request("GET", url, headers=self._headers(), timeout=self._timeout)
        response = await self._client.send(req, stream=True)
        try:
            if self._response_check is not None:
                await self._response_check(response)
            else:
                response.raise_for_status()
        except BaseException:
            await response.aclose()
            raise
        self._response = response

    def _backoff(self, retries: int) -> float:
        return min(self._backoff_initial * (self._backoff_factor**retries), self._backoff_max)

    async def aiter(self) -> AsyncIterator[str]:
        """Iterate over raw SSE lines with optional reconnect/backoff behavior.

        A stream the server ends normally is finished. Only read failures and
        idle timeouts count as a dropped connection and trigger a reconnect.

        Returns:
            An async iterator of decoded SSE lines. When `include_blank_lines` is False,
            blank lines (event boundaries) are skipped.

        Raises:
            RuntimeError: If `connect()` was not called before iteration.
            httpx.TransportError: For read failures once reconnects are exhausted
                (or immediately when reconnect is disabled).
        """
        if self._response is None:
            raise RuntimeError("SSE not connected. Call connect() first.")
        retries = 0
        start = time.monotonic()
        while True:
            assert self._response is not None
            line_iter = self._response.aiter_lines()
            try:
                while True:
                    if self._max_total is not None and (time.monotonic() - start) >= self._max_total:
                        return
                    try:
                        nxt = line_iter.__anext__()
                        if self._idle_timeout is not None:
                            line = await asyncio.wait_for(nxt, timeout=self._idle_timeout)
                        else:
                            line = await nxt
                    except StopAsyncIteration:
                        self._logger.debug("SSE stream ended")
                        return
                    except asyncio.TimeoutError:
                        reason = "SSE idle timeout"
                        break
                    if (not line) and not self._include_blank:
                        continue
                    yield line
            except (httpx.TransportError, httpx.StreamError):
                if not self._reconnect or retries >= self._max_retries:
                    self._logger.error("SSE stream error; giving up", exc_info=True)
                    raise
                reason = "SSE error"
            if not self._reconnect or retries >= self._max_retries:
                return
            sleep_s = self._backoff(retries)
            self._logger.warning(
                "%s; reconnecting in %ss (attempt %s/%s)", reason, sleep_s, retries + 1, self._max_retries
            )
            retries += 1
            await asyncio.sleep(sleep_s)
            await self._do_connect()

    async def close(self) -> None:
        """Close the current SSE response (if any) and the client if owned."""
        if self._response is not None:
            await self._response.aclose()
            self._response = None
        if self._owns_client:
            await self._client.aclose()


async def parse_sse_lines(lines: AsyncIterable[str]) -> AsyncIterator[SseEvent]:
    """Frame raw SSE lines into events.

    - Multiple data: lines are joined with \\n
    - Comments (lines starting with ":") are ignored
    - Event boundary is a blank line
    - A pending event is flushed when the lines run out
    """
    buf_id: Optional[str] = None
    buf_event: Optional[str] = None
    buf_data: List[str] = []
    async for line in lines:
        if not line.strip():
            if buf_id is not None or buf_event is not None or buf_data:
                yield SseEvent(id=buf_id, event=buf_event, data="\n".join(buf_data))
                buf_id, buf_event, buf_data = None, None, []
            continue
        if line.startswith(":"):
            continue
        # field parsing: key: value (value may be empty)
        if ":" in line:
            key, val = line.split(":", 1)
            if val.startswith(" "):
                val = val[1:]
        else:
            key, val = line, ""
        key = key.strip()
        if key == "id":
            buf_id = val
        elif key == "event":
            buf_event = val
        elif key == "data":
            buf_data.append(val)
    if buf_id is not None or buf_event is not None or buf_data:
        yield SseEvent(id=buf_id, event=buf_event, data="\n".join(buf_data))
