"""Server-sent event records.

`SseEvent` is one framed event as it came off the wire. `ChatEvent` is the
typed view consumers work with: a discriminated union keyed on `type`.
"""

from __future__ import annotations

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class SseEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: Optional[str] = None
    event: Optional[str] = None
    data: str = ""


class TokenEvent(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    type: Literal["token"] = "token"
    text: str


class DoneEvent(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    type: Literal["done"] = "done"


class ErrorEvent(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    type: Literal["error"] = "error"
    message: str


ChatEvent = Annotated[Union[TokenEvent, DoneEvent, ErrorEvent], Field(discriminator="type")]

chat_event_adapter: TypeAdapter[Union[TokenEvent, DoneEvent, ErrorEvent]] = TypeAdapter(ChatEvent)
