from __future__ import annotations

from typing import Any, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from shadowrun_client.base import BaseApiClient, path_segment
from shadowrun_client.errors import ServerError
from shadowrun_client.realtime import ConsoleSocket
from shadowrun_client.schemas.console import CommandResponse, DiceRoll, SessionInfo

ModelT = TypeVar("ModelT", bound=BaseModel)


class ConsoleApiClient(BaseApiClient):
    """
    Async client for the console endpoints (session lobby, commands, dice).

    These endpoints answer with plain JSON objects rather than envelopes. Auth
    header handling, 401 handling and error normalization are the same as for
    `ApiGatewayClient`.
    """

    def _model(self, model: Type[ModelT], payload: Any, what: str) -> ModelT:
        try:
            return model.model_validate(payload)
        except ValidationError as e:
            raise ServerError(f"Unexpected response shape from {what}", details=payload) from e

    async def create_session(self, name: str, max_players: int = 6) -> SessionInfo:
        r = await self._send("POST", "/sessions", json={"name": name, "maxPlayers": max_players})
        return self._model(SessionInfo, self._json(r), "create_session")

    async def join_session(self, session_id: str, password: Optional[str] = None) -> SessionInfo:
        body: Dict[str, Any] = {} if password is None else {"password": password}
        r = await self._send("POST", f"/sessions/{path_segment(session_id)}/join", json=body)
        return self._model(SessionInfo, self._json(r), "join_session")

    async def leave_session(self, session_id: str) -> None:
        await self._send("POST", f"/sessions/{path_segment(session_id)}/leave")

    async def get_active_sessions(self) -> List[SessionInfo]:
        r = await self._send("GET", "/sessions")
        data = self._json(r)
        if not isinstance(data, list):
            raise ServerError("Unexpected response shape from get_active_sessions", status_code=r.status_code, details=data)
        sessions = [self._model(SessionInfo, item, "get_active_sessions") for item in data]
        self._logger.debug("ConsoleApiClient.get_active_sessions: got %d sessions", len(sessions))
        return sessions

    async def get_session_info(self, session_id: str) -> SessionInfo:
        r = await self._send("GET", f"/sessions/{path_segment(session_id)}")
        return self._model(SessionInfo, self._json(r), "get_session_info")

    async def execute_command(self, session_id: str, command: str) -> CommandResponse:
        r = await self._send("POST", f"/sessions/{path_segment(session_id)}/command", json={"command": command})
        return self._model(CommandResponse, self._json(r), "execute_command")

    async def roll_dice(self, session_id: str, notation: str) -> DiceRoll:
        r = await self._send("POST", f"/sessions/{path_segment(session_id)}/roll", json={"notation": notation})
        return self._model(DiceRoll, self._json(r), "roll_dice")

    def console_socket(self, **kwargs: Any) -> ConsoleSocket:
        """Build a `ConsoleSocket` for live session messages.

        The socket sends this client's bearer token with every handshake, and
        a 401 handshake clears the credential and notifies `on_auth_expired`
        exactly like an HTTP 401. Keyword arguments go to `ConsoleSocket`.
        """
        return ConsoleSocket(
            self.base_url,
            headers_factory=self._headers,
            on_unauthorized=self._socket_unauthorized,
            **kwargs,
        )

    def _socket_unauthorized(self, url: str) -> None:
        self._expire_credential("GET", url)
