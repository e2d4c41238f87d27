from __future__ import annotations

import pytest

from shadowrun_client.schemas.events import DoneEvent, ErrorEvent, SseEvent, TokenEvent
from shadowrun_client.stream import decode_chat_event


@pytest.mark.parametrize(
    "sse, expected",
    [
        (SseEvent(data="You hear sirens."), TokenEvent(text="You hear sirens.")),
        (SseEvent(event="done", data=""), DoneEvent()),
        (SseEvent(data="[DONE]"), DoneEvent()),
        (SseEvent(event="error", data="LLM quota exceeded"), ErrorEvent(message="LLM quota exceeded")),
        (SseEvent(event="error", data=""), ErrorEvent(message="stream error")),
        (SseEvent(data='{"type": "token", "text": "Hoi"}'), TokenEvent(text="Hoi")),
        (SseEvent(data='{"type": "done"}'), DoneEvent()),
        (SseEvent(data='{"type": "error", "message": "boom"}'), ErrorEvent(message="boom")),
    ],
)
def test_decode_chat_event(sse: SseEvent, expected: object) -> None:
    assert decode_chat_event(sse) == expected


def test_decode_untyped_json_is_kept_as_token_text() -> None:
    data = '{"type": "roll_result", "result": {"hits": 3}}'
    assert decode_chat_event(SseEvent(data=data)) == TokenEvent(text=data)


def test_decode_invalid_typed_json_falls_back_to_token_text() -> None:
    data = '{"type": "token"}'
    assert decode_chat_event(SseEvent(data=data)) == TokenEvent(text=data)


def test_decode_empty_event_is_skipped() -> None:
    assert decode_chat_event(SseEvent(id="5", data="")) is None
