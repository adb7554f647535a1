import json
import logging
import time
from collections import defaultdict, deque

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect
from fastapi.websockets import WebSocketState
from pydantic import ValidationError

from app.schemas.ws import (
    ErrorPayload,
    MessageType,
    WSClientMessage,
    WSServerMessage,
)
from app.services.game.service import get_game_service
from app.services.websocket.handlers import HandlerContext, dispatch
from app.services.websocket.manager import get_connection_manager

logger = logging.getLogger(__name__)

router = APIRouter(tags=["websocket"])

# Rate limiting configuration
MAX_MESSAGE_SIZE = 16 * 1024  # 16 KB
MAX_MESSAGES_PER_SECOND = 10
RATE_LIMIT_WINDOW = 1.0  # seconds


class RateLimiter:
    """Sliding-window message budget per connection."""

    def __init__(
        self, max_messages: int = MAX_MESSAGES_PER_SECOND, window: float = RATE_LIMIT_WINDOW
    ):
        self.max_messages = max_messages
        self.window = window
        self._recent: defaultdict[str, deque[float]] = defaultdict(deque)

    def is_allowed(self, connection_id: str) -> bool:
        now = time.monotonic()
        recent = self._recent[connection_id]
        while recent and recent[0] <= now - self.window:
            recent.popleft()

        if len(recent) >= self.max_messages:
            return False
        recent.append(now)
        return True

    def remove(self, connection_id: str) -> None:
        self._recent.pop(connection_id, None)


# Global rate limiter instance
_rate_limiter = RateLimiter()


def _error_message(error_code: str, message: str) -> WSServerMessage:
    return WSServerMessage(
        type=MessageType.ERROR,
        payload=ErrorPayload(error_code=error_code, message=message).model_dump(),
    )


class FrameRejected(Exception):
    """A client frame that never reaches a handler."""

    def __init__(self, error_code: str, message: str):
        super().__init__(message)
        self.error_code = error_code
        self.message = message


def parse_frame(connection_id: str, frame: dict) -> WSClientMessage:
    """Turn a raw ASGI receive event into a client message.

    Raises:
        FrameRejected: Binary frame, oversized text, rate limit hit, bad JSON
            or an envelope that fails validation.
    """
    raw_text = frame.get("text")
    if raw_text is None:
        raise FrameRejected("UNSUPPORTED_DATA", "Only text frames are accepted")

    if len(raw_text.encode("utf-8")) > MAX_MESSAGE_SIZE:
        raise FrameRejected(
            "MESSAGE_TOO_LARGE",
            f"Message exceeds maximum size of {MAX_MESSAGE_SIZE} bytes",
        )

    if not _rate_limiter.is_allowed(connection_id):
        raise FrameRejected("RATE_LIMITED", "Too many messages, please slow down")

    try:
        return WSClientMessage.model_validate(json.loads(raw_text))
    except json.JSONDecodeError:
        raise FrameRejected("INVALID_JSON", "Invalid JSON format") from None
    except ValidationError as e:
        logger.debug("Envelope validation failed for connection %s: %s", connection_id, e)
        raise FrameRejected("INVALID_MESSAGE", "Invalid message format") from None


@router.websocket("/ws/{room_id}")
async def websocket_endpoint(
    websocket: WebSocket,
    room_id: str,
    player_id: str | None = Query(None, description="Player this connection acts for"),
):
    """WebSocket endpoint for an online Ludo room.

    Clients connect with: ws://host/api/v1/ws/<room_id>?player_id=<id>

    Connections without player_id, or with one that holds no seat in the
    room's game, are spectators: they receive every update and may sync
    and ping, but game actions are refused. Pass-and-play games are driven
    over the REST API. On connect the server sends a 'connected' message
    with the current game state, if any.
    """
    await websocket.accept()

    game_service = get_game_service()
    manager = get_connection_manager()

    state = await game_service.get_state(room_id)
    connection = await manager.connect(
        websocket,
        room_id,
        player_id,
        state.model_dump(mode="json") if state is not None else None,
    )
    connection_id = connection.connection_id

    try:
        while websocket.client_state == WebSocketState.CONNECTED:
            frame = await websocket.receive()
            if frame.get("type") == "websocket.disconnect":
                break

            try:
                message = parse_frame(connection_id, frame)
            except FrameRejected as e:
                logger.warning("Frame rejected for connection %s: %s", connection_id, e.error_code)
                await manager.send_to_connection(
                    connection_id, _error_message(e.error_code, e.message)
                )
                continue

            result = await dispatch(
                HandlerContext(
                    connection_id=connection_id,
                    room_id=room_id,
                    player_id=player_id,
                    message=message,
                    manager=manager,
                    game_service=game_service,
                )
            )
            if result is None:
                await manager.send_to_connection(
                    connection_id,
                    _error_message(
                        "UNSUPPORTED_MESSAGE",
                        f"Message type '{message.type.value}' is not accepted by the server",
                    ),
                )
                continue

            if result.response:
                await manager.send_to_connection(connection_id, result.response)

            # Everyone else in the room gets the new state
            if result.broadcast and result.room_id:
                await manager.send_to_room(
                    result.room_id, result.broadcast, exclude_connection=connection_id
                )

    except WebSocketDisconnect as e:
        logger.info("WS disconnected: connection %s, code %s", connection_id, e.code)
    except Exception as e:
        logger.error("WS error for connection %s in room %s: %s", connection_id, room_id, e)
    finally:
        _rate_limiter.remove(connection_id)
        await manager.disconnect(connection_id)
