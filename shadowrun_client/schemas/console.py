from __future__ import annotations

from typing import Any, List, Literal, Optional

from pydantic import Field

from .base import CamelSchema


class SessionInfo(CamelSchema):
    id: str
    name: str
    player_count: int = 0
    max_players: int = 6
    game_state: Literal["waiting", "active", "paused"] = "waiting"
    is_gm: bool = Field(False, alias="isGM")


class CommandResponse(CamelSchema):
    success: bool
    output: str = ""
    data: Optional[Any] = None
    broadcast: Optional[bool] = None


class DiceRoll(CamelSchema):
    dice: str
    results: List[int] = Field(default_factory=list)
    total: int = 0
    hits: Optional[int] = None
    glitches: Optional[int] = None
    critical_glitch: Optional[bool] = None
