"""Handler for PING messages."""

import logging

from app.schemas.ws import MessageType, PongPayload, WSServerMessage

from . import handler
from .base import HandlerContext, HandlerResult

logger = logging.getLogger(__name__)


@handler(MessageType.PING)
async def handle_ping(ctx: HandlerContext) -> HandlerResult:
    """Keep the connection alive: refresh its heartbeat and answer with PONG."""
    await ctx.manager.heartbeat(ctx.connection_id)
    logger.debug("Ping/pong for connection %s in room %s", ctx.connection_id, ctx.room_id)

    pong = WSServerMessage(
        type=MessageType.PONG,
        request_id=ctx.request_id,
        payload=PongPayload().model_dump(mode="json"),
    )
    return HandlerResult(success=True, response=pong)
