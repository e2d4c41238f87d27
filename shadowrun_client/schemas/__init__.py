from .console import CommandResponse, DiceRoll, SessionInfo
from .dto import (
    ChatStreamQuery,
    CreateSessionRequest,
    GenerateImageRequest,
    JoinSessionRequest,
    LlmRequest,
    SessionRole,
)
from .envelope import ApiResponse, ErrorEnvelope, LlmResponse, SuccessEnvelope, parse_envelope
from .events import ChatEvent, DoneEvent, ErrorEvent, SseEvent, TokenEvent

__all__ = [
    "ApiResponse",
    "ChatEvent",
    "ChatStreamQuery",
    "CommandResponse",
    "CreateSessionRequest",
    "DiceRoll",
    "DoneEvent",
    "ErrorEnvelope",
    "ErrorEvent",
    "GenerateImageRequest",
    "JoinSessionRequest",
    "LlmRequest",
    "LlmResponse",
    "SessionInfo",
    "SessionRole",
    "SseEvent",
    "SuccessEnvelope",
    "TokenEvent",
    "parse_envelope",
]
