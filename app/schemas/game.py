"""Pydantic schemas for the local-play game REST API."""

from typing import Any

from pydantic import BaseModel, Field

from app.schemas.ludo import GameMode, LudoGameState, PlayerSeed


class CreateGameRequest(BaseModel):
    """Request body for starting a pass-and-play game."""

    room_id: str | None = Field(
        None, description="Room to host the game in; generated when omitted"
    )
    players: list[PlayerSeed] = Field(..., description="Players in turn order (2-4)")
    game_mode: GameMode = GameMode.FRIENDS


class MoveRequest(BaseModel):
    """Request body for applying one of the current valid moves."""

    token_id: str
    move_index: int = Field(..., ge=0)


class RescueRequest(BaseModel):
    """Request body for unfreezing a player."""

    player_id: str


class GameResponse(BaseModel):
    """New game state plus the events that produced it."""

    state: LudoGameState
    events: list[dict[str, Any]] = Field(default_factory=list)


class GameErrorDetail(BaseModel):
    error_code: str
    message: str
