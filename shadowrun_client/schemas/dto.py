from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import Field

from .base import BaseSchema


class SessionRole(str, Enum):
    """Roles a participant can take in a session.

    Offered for callers' convenience; the client forwards whatever role string
    it is given without checking it against this set.
    """

    PLAYER = "player"
    GM = "gm"
    OBSERVER = "observer"


class CreateSessionRequest(BaseSchema):
    name: str = Field(..., description="Display name of the new session.", examples=["Run1"])
    user_id: str = Field(..., description="Identifier of the creating user.", examples=["u1"])


class JoinSessionRequest(BaseSchema):
    user_id: str = Field(..., description="Identifier of the joining user.")
    role: str = Field(..., description="Requested role, usually a SessionRole value.", examples=["player"])


class LlmRequest(BaseSchema):
    input: str = Field(..., description="Player or GM prompt forwarded to the LLM.")
    session_id: str = Field(..., description="Session the prompt belongs to.")
    user_id: str = Field(..., description="Identifier of the requesting user.")


class ChatStreamQuery(BaseSchema):
    """Query parameters of the chat stream endpoint.

    Field order is the order the parameters appear in the query string.
    """

    input: str
    session_id: str
    user_id: str
    role: str


class GenerateImageRequest(BaseSchema):
    description: str = Field(..., description="Scene or character description to illustrate.")
    style: Optional[str] = Field(None, description="Optional art style hint; omitted from the body when unset.")
