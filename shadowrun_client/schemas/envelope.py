"""Response envelope shared by every non-streaming gateway endpoint.

The backend wraps its payloads in a tagged union::

    {"status": "success", "data": ...}
    {"status": "error", "error": "..."}

`parse_envelope` discriminates on `status` and never reshapes `data` when no
model is requested.
"""

from __future__ import annotations

from typing import Any, Generic, Literal, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .base import ResponseSchema

DataT = TypeVar("DataT")


class SuccessEnvelope(BaseModel, Generic[DataT]):
    model_config = ConfigDict(extra="ignore")

    status: Literal["success"] = "success"
    data: Optional[DataT] = Field(None, description="Endpoint-specific payload.")


class ErrorEnvelope(BaseModel):
    model_config = ConfigDict(extra="ignore")

    status: Literal["error"] = "error"
    error: str = Field(..., description="Server-provided error message, passed through verbatim.")


ApiResponse = Union[SuccessEnvelope[Any], ErrorEnvelope]


class LlmResponse(ResponseSchema):
    response: str = Field(..., description="Generated text.")
    status: Optional[Literal["success", "error"]] = None
    error: Optional[str] = None


def parse_envelope(
    payload: Any, model: Optional[Type[Any]] = None
) -> Union[SuccessEnvelope[Any], ErrorEnvelope]:
    """Validate a decoded JSON body into a success or error envelope.

    Args:
        payload: Decoded JSON body.
        model: Optional type to validate `data` against. When omitted, `data`
            is returned exactly as decoded.

    Raises:
        ValueError: If the payload is not an envelope (missing or unknown
            `status`, or a `data` that does not fit `model`).
    """
    if not isinstance(payload, dict):
        raise ValueError(f"Envelope must be a JSON object, got {type(payload).__name__}")
    status = payload.get("status")
    try:
        if status == "error":
            return ErrorEnvelope.model_validate(payload)
        if status == "success":
            return SuccessEnvelope[model or Any].model_validate(payload)  # type: ignore[index]
    except ValidationError as e:
        raise ValueError(f"Malformed {status} envelope: {e}") from e
    raise ValueError(f"Unknown envelope status: {status!r}")
