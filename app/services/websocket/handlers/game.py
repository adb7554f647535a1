"""Handlers for GAME_ACTION and SYNC_STATE messages."""

import logging

from app.schemas.ws import (
    GameActionPayload,
    GameStatePayload,
    GameUpdatePayload,
    MessageType,
    WSServerMessage,
)
from app.services.game.engine import ProcessResult, build_action_from_payload

from . import handler
from .base import HandlerContext, HandlerResult, error_response, validate_payload

logger = logging.getLogger(__name__)


def build_game_update(result: ProcessResult) -> dict:
    """Serialize an accepted transition as a GAME_UPDATE payload."""
    return GameUpdatePayload(
        state=result.state.model_dump(mode="json"),
        events=[event.model_dump(mode="json") for event in result.events],
    ).model_dump()


async def _holds_seat(ctx: HandlerContext) -> bool:
    if ctx.player_id is None:
        return False
    state = await ctx.game_service.get_state(ctx.room_id)
    # Without a game the submit reports GAME_NOT_FOUND
    return state is None or any(p.id == ctx.player_id for p in state.players)


@handler(MessageType.GAME_ACTION)
async def handle_game_action(ctx: HandlerContext) -> HandlerResult:
    """Run a player's action against the room's game.

    The sender gets a GAME_UPDATE tagged with its request_id and the rest of
    the room gets the same update untagged. Rejections go to the sender only,
    as GAME_ERROR.

    Only connections opened with the player_id of a seat in the game may act;
    the rest of the room can watch and sync but gets NOT_SEATED.
    """
    payload, validation_error = validate_payload(ctx, GameActionPayload)
    if validation_error:
        return validation_error

    if not await _holds_seat(ctx):
        logger.warning(
            "Game action %s from unseated connection %s in room %s",
            payload.action_type,
            ctx.connection_id,
            ctx.room_id,
        )
        return error_response(
            ctx, "NOT_SEATED", "Only a seated player of this game can send game actions"
        )

    try:
        action = build_action_from_payload(payload.model_dump(exclude_none=True))
    except ValueError as e:
        return error_response(ctx, "INVALID_ACTION", str(e))

    result = await ctx.game_service.submit(ctx.room_id, action, ctx.player_id)
    if not result.success:
        logger.info(
            "Game action %s rejected for player %s in room %s: %s",
            payload.action_type,
            ctx.player_id,
            ctx.room_id,
            result.error_code,
        )
        return error_response(
            ctx,
            result.error_code or "PROCESSING_ERROR",
            result.error_message or "Failed to process action",
        )

    update = build_game_update(result)
    logger.info(
        "Game action %s applied in room %s: %d events",
        payload.action_type,
        ctx.room_id,
        len(result.events),
    )

    return HandlerResult(
        success=True,
        response=WSServerMessage(
            type=MessageType.GAME_UPDATE, request_id=ctx.request_id, payload=update
        ),
        broadcast=WSServerMessage(type=MessageType.GAME_UPDATE, payload=update),
        room_id=ctx.room_id,
    )


@handler(MessageType.SYNC_STATE)
async def handle_sync_state(ctx: HandlerContext) -> HandlerResult:
    """Send the room's current game state to the requester."""
    state = await ctx.game_service.get_state(ctx.room_id)
    if state is None:
        return error_response(ctx, "GAME_NOT_FOUND", "No game in progress for this room")

    payload = GameStatePayload(state=state.model_dump(mode="json")).model_dump()
    return HandlerResult(
        success=True,
        response=WSServerMessage(
            type=MessageType.GAME_STATE, request_id=ctx.request_id, payload=payload
        ),
    )
