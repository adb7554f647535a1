"""Shared types for WebSocket message handlers."""

from dataclasses import dataclass
from typing import TYPE_CHECKING, TypeVar

from pydantic import BaseModel, ValidationError

from app.schemas.ws import (
    ErrorPayload,
    MessageType,
    WSClientMessage,
    WSServerMessage,
)

if TYPE_CHECKING:
    from app.services.game.service import LudoGameService
    from app.services.websocket.manager import ConnectionManager


@dataclass
class HandlerContext:
    """Everything a handler may touch for one client message."""

    connection_id: str
    room_id: str
    player_id: str | None
    message: WSClientMessage
    manager: "ConnectionManager"
    game_service: "LudoGameService"

    @property
    def request_id(self) -> str | None:
        return self.message.request_id


@dataclass
class HandlerResult:
    """What to send back to the sender and, optionally, to the rest of the room."""

    success: bool
    response: WSServerMessage | None = None
    broadcast: WSServerMessage | None = None
    room_id: str | None = None


def error_response(
    ctx: HandlerContext,
    error_code: str,
    message: str,
    error_type: MessageType = MessageType.GAME_ERROR,
) -> HandlerResult:
    return HandlerResult(
        success=False,
        response=WSServerMessage(
            type=error_type,
            request_id=ctx.request_id,
            payload=ErrorPayload(error_code=error_code, message=message).model_dump(),
        ),
    )


T = TypeVar("T", bound=BaseModel)


def validate_payload(
    ctx: HandlerContext, schema: type[T]
) -> tuple[T | None, HandlerResult | None]:
    """Validate the message payload against schema.

    Returns:
        (payload, None) on success, (None, VALIDATION_ERROR result) otherwise.
    """
    try:
        return schema.model_validate(ctx.message.payload or {}), None
    except ValidationError as e:
        return None, error_response(ctx, "VALIDATION_ERROR", str(e))
