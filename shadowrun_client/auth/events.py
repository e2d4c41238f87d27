"""Authentication lifecycle events.

The client never navigates anywhere on its own. When the backend rejects the
credential it emits an `AuthExpired` record to the handler supplied by the
hosting application, which decides what "go back to the sign-in page" means.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable

from pydantic import BaseModel, ConfigDict, Field


class AuthExpired(BaseModel):
    """Emitted once for every response that came back 401 Unauthorized."""

    model_config = ConfigDict(frozen=True)

    method: str = Field(..., description="HTTP method of the rejected request.", examples=["POST"])
    url: str = Field(..., description="Full URL of the rejected request.")
    status_code: int = Field(401, description="Transport-level status that triggered the event.")
    occurred_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="UTC timestamp at which the rejection was observed.",
    )


AuthExpiredHandler = Callable[[AuthExpired], None]
