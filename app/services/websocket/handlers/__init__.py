"""WebSocket message handler registry and dispatcher.

Handlers register themselves per MessageType with the @handler decorator;
the router hands every parsed client message to dispatch().
"""

import logging
from collections.abc import Awaitable, Callable

from app.schemas.ws import MessageType

from .base import HandlerContext, HandlerResult

logger = logging.getLogger(__name__)

HandlerFunc = Callable[[HandlerContext], Awaitable[HandlerResult]]

_handlers: dict[MessageType, HandlerFunc] = {}


def handler(message_type: MessageType) -> Callable[[HandlerFunc], HandlerFunc]:
    """Register the decorated coroutine as the handler for message_type.

    Usage:
        @handler(MessageType.SYNC_STATE)
        async def handle_sync_state(ctx: HandlerContext) -> HandlerResult:
            ...
    """

    def decorator(func: HandlerFunc) -> HandlerFunc:
        if message_type in _handlers:
            logger.warning("Replacing handler for %s with %s", message_type, func.__name__)
        _handlers[message_type] = func
        return func

    return decorator


def registered_types() -> set[MessageType]:
    return set(_handlers)


async def dispatch(ctx: HandlerContext) -> HandlerResult | None:
    """Run the handler registered for the message's type.

    Returns:
        The handler's result, or None when the type has no handler.
    """
    handler_func = _handlers.get(ctx.message.type)
    if handler_func is None:
        logger.debug(
            "Unhandled message type %s in room %s (connection %s)",
            ctx.message.type,
            ctx.room_id,
            ctx.connection_id,
        )
        return None

    return await handler_func(ctx)


# Import handlers to trigger registration
from . import game  # noqa: E402, F401
from . import ping  # noqa: E402, F401

__all__ = [
    "HandlerContext",
    "HandlerResult",
    "dispatch",
    "handler",
    "registered_types",
]
