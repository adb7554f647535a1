"""REST endpoints for local (pass-and-play) Ludo games.

Every accepted transition is also pushed as a GAME_UPDATE to the WebSocket
connections watching the room.
"""

import logging
import uuid

from fastapi import APIRouter, HTTPException, status

from app.schemas.game import (
    CreateGameRequest,
    GameErrorDetail,
    GameResponse,
    MoveRequest,
    RescueRequest,
)
from app.schemas.ws import MessageType, WSServerMessage
from app.services.game.engine import (
    DismissEffectAction,
    GameAction,
    MoveAction,
    PassTurnAction,
    ProcessResult,
    RescueAction,
    RollAction,
)
from app.services.game.service import get_game_service
from app.services.websocket.handlers.game import build_game_update
from app.services.websocket.manager import get_connection_manager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ludo", tags=["ludo"])

# Host-level failures with a dedicated status; engine rejections are 400
_ERROR_STATUS = {
    "GAME_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "ROOM_EXISTS": status.HTTP_409_CONFLICT,
    "TOO_MANY_GAMES": status.HTTP_503_SERVICE_UNAVAILABLE,
    "EFFECT_PENDING": status.HTTP_409_CONFLICT,
}


def _to_response(result: ProcessResult) -> GameResponse:
    """Convert a ProcessResult to a response, raising on failure."""
    if not result.success:
        error_code = result.error_code or "PROCESSING_ERROR"
        raise HTTPException(
            status_code=_ERROR_STATUS.get(error_code, status.HTTP_400_BAD_REQUEST),
            detail=GameErrorDetail(
                error_code=error_code,
                message=result.error_message or "Failed to process action",
            ).model_dump(),
        )

    return GameResponse(
        state=result.state,
        events=[event.model_dump(mode="json") for event in result.events],
    )


def _game_not_found(room_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=GameErrorDetail(
            error_code="GAME_NOT_FOUND",
            message=f"No game in progress for room {room_id}",
        ).model_dump(),
    )


async def _publish(room_id: str, result: ProcessResult) -> None:
    if not result.success:
        return
    sent = await get_connection_manager().send_to_room(
        room_id,
        WSServerMessage(type=MessageType.GAME_UPDATE, payload=build_game_update(result)),
    )
    logger.debug("Pushed REST update for room %s to %d connections", room_id, sent)


async def _submit(room_id: str, action: GameAction) -> GameResponse:
    logger.info("POST /ludo/games/%s - action: %s", room_id, action.action_type)
    result = await get_game_service().submit(room_id, action)
    await _publish(room_id, result)
    return _to_response(result)


@router.post("/games", response_model=GameResponse, status_code=status.HTTP_201_CREATED)
async def create_game(request: CreateGameRequest):
    """Start a local game.

    Players are seated in the given order and colored red, blue, green and
    yellow. A room id is generated when none is supplied.

    Raises:
        HTTPException 400: Fewer than 2 or more than 4 players, or duplicate ids.
        HTTPException 409: A game is already running in the room.
    """
    room_id = request.room_id or str(uuid.uuid4())
    logger.info(
        "POST /ludo/games - room: %s, players: %d, mode: %s",
        room_id,
        len(request.players),
        request.game_mode.value,
    )

    result = await get_game_service().create_game(
        room_id=room_id,
        players=request.players,
        game_mode=request.game_mode,
    )
    await _publish(room_id, result)
    return _to_response(result)


@router.get("/games/{room_id}", response_model=GameResponse)
async def get_game(room_id: str):
    """Fetch the current state of a game."""
    state = await get_game_service().get_state(room_id)
    if state is None:
        raise _game_not_found(room_id)
    return GameResponse(state=state)


@router.delete("/games/{room_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_game(room_id: str):
    """End a game and discard its state."""
    deleted = await get_game_service().delete_game(room_id)
    if not deleted:
        raise _game_not_found(room_id)


@router.post("/games/{room_id}/roll", response_model=GameResponse)
async def roll(room_id: str):
    """Roll for the current player. A roll with no legal move passes automatically.

    Raises:
        HTTPException 409: A special-tile prompt is waiting to be dismissed.
    """
    return await _submit(room_id, RollAction())


@router.post("/games/{room_id}/move", response_model=GameResponse)
async def move(room_id: str, request: MoveRequest):
    """Apply the valid move at move_index; token_id must match it."""
    return await _submit(
        room_id, MoveAction(token_id=request.token_id, move_index=request.move_index)
    )


@router.post("/games/{room_id}/dismiss-effect", response_model=GameResponse)
async def dismiss_effect(room_id: str):
    """Dismiss the pending special-tile prompt, applying a freeze if it was one."""
    return await _submit(room_id, DismissEffectAction())


@router.post("/games/{room_id}/rescue", response_model=GameResponse)
async def rescue(room_id: str, request: RescueRequest):
    """Unfreeze a player."""
    return await _submit(room_id, RescueAction(player_id=request.player_id))


@router.post("/games/{room_id}/pass", response_model=GameResponse)
async def pass_turn(room_id: str):
    """Pass a turn stalled on a roll with no legal move."""
    return await _submit(room_id, PassTurnAction())
