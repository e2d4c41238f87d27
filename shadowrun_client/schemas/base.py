"""Pydantic base schema utilities for the client models.

- `BaseSchema`: request descriptors. Immutable, snake_case on the wire, no
  unknown fields.
- `ResponseSchema`: payloads coming back from the backend. Unknown fields
  are kept so nothing the server sends is silently dropped.
- `CamelSchema`: console API payloads, which use camelCase keys.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


def _to_camel(s: str) -> str:
    """Convert snake_case to camelCase for JSON aliasing."""
    parts = s.split("_")
    return parts[0] + "".join(p.capitalize() or "_" for p in parts[1:])


class BaseSchema(BaseModel):
    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
    )


class ResponseSchema(BaseModel):
    model_config = ConfigDict(
        extra="allow",
        populate_by_name=True,
    )


class CamelSchema(BaseModel):
    """Shared base for camelCase payloads.

    - Enables populate_by_name for using either snake_case or camelCase
    - Uses a snake->camel alias generator for JSON interop
    """

    model_config = ConfigDict(
        populate_by_name=True,
        extra="allow",
        alias_generator=_to_camel,  # snake_case -> camelCase aliases
    )
