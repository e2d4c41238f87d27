from __future__ import annotations

from typing import Any, Optional

import httpx

from shadowrun_client.base import BaseApiClient, path_segment
from shadowrun_client.schemas.dto import (
    ChatStreamQuery,
    CreateSessionRequest,
    GenerateImageRequest,
    JoinSessionRequest,
    LlmRequest,
)
from shadowrun_client.schemas.envelope import LlmResponse, SuccessEnvelope
from shadowrun_client.stream import ChatStream
from shadowrun_client.transport.sse import BasicSseTransport

CHAT_STREAM_PATH = "/api/chat"


class ApiGatewayClient(BaseApiClient):
    """
    Async client for the companion backend's session, LLM and image endpoints.

    Responsibilities:
    - create_session / join_session
    - send_llm_request
    - create_chat_stream (server-sent events)
    - generate_image

    Every non-streaming call returns the backend's success envelope and raises
    `ServerError` when the envelope reports an error. Role and session id
    values are forwarded as given; validating them is up to the caller.
    """

    def __init__(self, *args: Any, sse_client: Optional[httpx.AsyncClient] = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._sse_client = sse_client

    async def create_session(self, name: str, user_id: str) -> SuccessEnvelope[Any]:
        body = CreateSessionRequest(name=name, user_id=user_id)
        envelope = await self._call_envelope("POST", "/api/session", body)
        self._logger.debug("ApiGatewayClient.create_session: created name=%s", name)
        return envelope

    async def join_session(self, session_id: str, user_id: str, role: str) -> SuccessEnvelope[Any]:
        body = JoinSessionRequest(user_id=user_id, role=role)
        return await self._call_envelope("POST", f"/api/session/{path_segment(session_id)}/join", body)

    async def send_llm_request(self, input: str, session_id: str, user_id: str) -> SuccessEnvelope[LlmResponse]:
        body = LlmRequest(input=input, session_id=session_id, user_id=user_id)
        return await self._call_envelope("POST", "/api/llm", body, model=LlmResponse)

    async def generate_image(
        self, session_id: str, description: str, style: Optional[str] = None
    ) -> SuccessEnvelope[Any]:
        body = GenerateImageRequest(description=description, style=style)
        return await self._call_envelope(
            "POST", f"/api/session/{path_segment(session_id)}/generate-image", body
        )

    def create_chat_stream(
        self,
        input: str,
        session_id: str,
        user_id: str,
        role: str,
        *,
        reconnect: bool = False,
        max_retries: int = 3,
        backoff_initial: float = 0.5,
        backoff_factor: float = 2.0,
        backoff_max: float = 8.0,
        idle_timeout: Optional[float] = None,
        max_total_seconds: Optional[float] = None,
    ) -> ChatStream:
        """Return a handle on the chat event stream without connecting.

        The connection opens when the caller starts iterating the handle, and
        the credential is read at that moment (and again on every reconnect).
        The caller owns the handle and must close it.

        Args:
            input: Prompt text.
            session_id: Session the prompt belongs to.
            user_id: Identifier of the requesting user.
            role: Participant role, forwarded unchecked.
            reconnect: Reopen the stream when it drops (off by default).
            max_retries: Reconnect attempts before giving up.
            backoff_initial: First reconnect delay in seconds.
            backoff_factor: Multiplier applied to the delay after each attempt.
            backoff_max: Upper bound of the reconnect delay.
            idle_timeout: Seconds without a line before the stream is considered dead.
            max_total_seconds: Hard cap on the stream's lifetime.
        """
        query = ChatStreamQuery(input=input, session_id=session_id, user_id=user_id, role=role)
        transport = BasicSseTransport(
            self.base_url,
            client=self._sse_client or self._http,
            headers_factory=self._headers,
            response_check=self._check_response,
            connect_timeout=self.timeout,
            include_blank_lines=True,
            reconnect=reconnect,
            max_retries=max_retries,
            backoff_initial=backoff_initial,
            backoff_factor=backoff_factor,
            backoff_max=backoff_max,
            idle_timeout=idle_timeout,
            max_total_seconds=max_total_seconds,
        )
        stream = ChatStream(self.base_url, CHAT_STREAM_PATH, query, transport)
        self._logger.debug("ApiGatewayClient.create_chat_stream: prepared %s", stream.url)
        return stream
