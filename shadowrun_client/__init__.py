"""Shadowrun companion API client.

Async client for the tabletop-RPG companion backend: session management,
LLM requests, image generation, the server-sent chat stream and the
live console WebSocket.

Typical use::

    from shadowrun_client import ApiGatewayClient, FileTokenStore

    async with ApiGatewayClient(token_provider=FileTokenStore(), on_auth_expired=go_to_sign_in) as api:
        envelope = await api.create_session("Run1", "u1")
        async with api.create_chat_stream("look around", envelope.data["id"], "u1", "player") as stream:
            async for event in stream:
                ...

The base URL comes from `SHADOWRUN_API_URL` (default `http://localhost:5000`).
"""

from .auth import AuthExpired, AuthExpiredHandler, FileTokenStore, InMemoryTokenStore, TokenProvider
from .client import ApiGatewayClient
from .config import ClientSettings
from .console import ConsoleApiClient
from .errors import (
    ApiClientError,
    AuthError,
    NetworkError,
    RequestTimeoutError,
    ServerError,
    TransportError,
)
from .schemas import (
    ChatEvent,
    DoneEvent,
    ErrorEnvelope,
    ErrorEvent,
    LlmResponse,
    SessionRole,
    SuccessEnvelope,
    TokenEvent,
)
from .realtime import ConsoleSocket
from .stream import ChatStream

__all__ = [
    "ApiClientError",
    "ApiGatewayClient",
    "AuthError",
    "AuthExpired",
    "AuthExpiredHandler",
    "ChatEvent",
    "ChatStream",
    "ClientSettings",
    "ConsoleApiClient",
    "ConsoleSocket",
    "DoneEvent",
    "ErrorEnvelope",
    "ErrorEvent",
    "FileTokenStore",
    "InMemoryTokenStore",
    "LlmResponse",
    "NetworkError",
    "RequestTimeoutError",
    "ServerError",
    "SessionRole",
    "SuccessEnvelope",
    "TokenEvent",
    "TokenProvider",
]
