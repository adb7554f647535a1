from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class MessageType(str, Enum):
    """WebSocket message types."""

    # Core
    PING = "ping"
    PONG = "pong"
    CONNECTED = "connected"
    ERROR = "error"

    # Game
    GAME_ACTION = "game_action"
    GAME_UPDATE = "game_update"
    SYNC_STATE = "sync_state"
    GAME_STATE = "game_state"
    GAME_ERROR = "game_error"


class WSCloseCode:
    """WebSocket close codes (RFC 6455)."""

    NORMAL = 1000
    GOING_AWAY = 1001


class WSClientMessage(BaseModel):
    """Message sent from client to server."""

    type: MessageType
    request_id: str | None = None
    payload: dict[str, Any] | None = None


class WSServerMessage(BaseModel):
    """Message sent from server to client."""

    type: MessageType
    request_id: str | None = None
    payload: dict[str, Any] | None = None


# --- Payload schemas ---


class ConnectedPayload(BaseModel):
    """Payload for the 'connected' message."""

    connection_id: str
    room_id: str
    player_id: str | None = None
    players_online: list[str] = Field(
        default_factory=list, description="Player ids with an open connection in the room"
    )
    state: dict[str, Any] | None = Field(
        None, description="Current game state, if a game is running in the room"
    )


class PongPayload(BaseModel):
    """Payload for the 'pong' message."""

    server_time: datetime = Field(default_factory=lambda: datetime.now())


class ErrorPayload(BaseModel):
    """Payload for error messages (ERROR, GAME_ERROR)."""

    error_code: str
    message: str


# --- Game payload schemas ---


class GameActionPayload(BaseModel):
    """Payload for GAME_ACTION messages from client.

    Contains the action type and action-specific data.
    """

    action_type: str = Field(
        ..., description="Action type: 'roll', 'move', 'dismiss_effect', 'rescue', 'pass_turn'"
    )
    token_id: str | None = Field(None, description="Token ID for move action")
    move_index: int | None = Field(None, ge=0, description="Valid-move index for move action")
    player_id: str | None = Field(None, description="Player to unfreeze for rescue action")


class GameUpdatePayload(BaseModel):
    """Payload for GAME_UPDATE messages to clients.

    Carries the new authoritative state together with the events that
    produced it, broadcast to all room members after every accepted action.
    """

    state: dict[str, Any] = Field(..., description="Full game state (serialized)")
    events: list[dict[str, Any]] = Field(
        ..., description="List of game events (serialized)"
    )


class GameStatePayload(BaseModel):
    """Payload for GAME_STATE messages to clients.

    Contains the full game state for reconciliation or initial sync.
    """

    state: dict[str, Any] = Field(..., description="Full game state (serialized)")
