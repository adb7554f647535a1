"""Single entry point the host uses to apply any action to a game."""

import logging

from app.schemas.ludo import LudoGameState

from .actions import (
    DismissEffectAction,
    GameAction,
    MoveAction,
    PassTurnAction,
    RescueAction,
    RollAction,
)
from .effects import clear_special_effect, rescue_player
from .movement import apply_move
from .rolling import Dice, pass_turn, roll_dice
from .validation import ProcessResult, validate_action

logger = logging.getLogger(__name__)


def process_action(
    state: LudoGameState,
    action: GameAction,
    player_id: str | None = None,
    dice: Dice | None = None,
) -> ProcessResult:
    """Validate an action, run its transition and number the resulting events.

    Args:
        state: Current game state.
        action: The action to process.
        player_id: The player attempting the action; None for pass-and-play.
        dice: Die used by roll actions; defaults to the engine's random die.

    Returns:
        ProcessResult with the new state and sequenced events, or the first
        failed check. Failures never carry a state.
    """
    action_type = type(action).__name__
    logger.info(
        "Processing action: type=%s, player=%s, room=%s",
        action_type,
        player_id,
        state.room_id,
    )
    logger.debug("Action details: %s", action)

    validation = validate_action(state, action, player_id)
    if not validation.is_valid:
        logger.warning(
            "Action validation failed: code=%s, message=%s, player=%s, action=%s",
            validation.error_code,
            validation.error_message,
            player_id,
            action_type,
        )
        return ProcessResult.from_validation(validation)

    if isinstance(action, RollAction):
        result = roll_dice(state, dice)

    elif isinstance(action, MoveAction):
        result = apply_move(state, action.token_id, action.move_index)

    elif isinstance(action, DismissEffectAction):
        result = clear_special_effect(state)

    elif isinstance(action, RescueAction):
        result = rescue_player(state, action.player_id)

    elif isinstance(action, PassTurnAction):
        result = pass_turn(state)

    else:
        logger.error("Unknown action type received: %s", action_type)
        return ProcessResult.failure(
            "UNKNOWN_ACTION",
            f"Unknown action type: {action_type}",
        )

    if result.success and result.state is not None:
        result = assign_event_sequences(result)
        logger.info(
            "Action processed successfully: type=%s, player=%s, events_generated=%d",
            action_type,
            player_id,
            len(result.events),
        )
        logger.debug("Generated events: %s", [e.event_type for e in result.events])
    else:
        logger.warning(
            "Action processing failed: type=%s, player=%s, error=%s",
            action_type,
            player_id,
            result.error_code,
        )

    return result


def assign_event_sequences(result: ProcessResult) -> ProcessResult:
    """Assign monotonically increasing sequence numbers to events.

    Updates each event's seq field and advances the state's event_seq counter.
    """
    if result.state is None or not result.events:
        return result

    current_seq = result.state.event_seq
    for event in result.events:
        event.seq = current_seq
        current_seq += 1

    new_state = result.state.model_copy(update={"event_seq": current_seq})

    return ProcessResult.ok(new_state, result.events)
