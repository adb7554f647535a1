"""Dice roll processing logic and turn advancement."""

import logging
import random
from collections.abc import Callable

from app.schemas.ludo import LudoGameState

from .events import (
    AnyGameEvent,
    AwaitingMove,
    DiceRolled,
    ExtraRollGranted,
    FrozenTurnSkipped,
    NoLegalMoves,
    TurnEnded,
    TurnStarted,
)
from .legal_moves import calculate_valid_moves
from .validation import ProcessResult, check_can_pass, check_can_roll

logger = logging.getLogger(__name__)

# Returns a die face, 1-6
Dice = Callable[[], int]

_rng = random.Random()


def default_dice() -> int:
    return _rng.randint(1, 6)


def seeded_dice(seed: int | None) -> Dice:
    """Build an independent die, reproducible when seed is given."""
    rng = random.Random(seed)
    return lambda: rng.randint(1, 6)


def get_next_player_index(current_index: int, num_players: int) -> int:
    """Calculate the next player's index (0-indexed, wrapping)."""
    return (current_index + 1) % num_players


def reset_roll_phase() -> dict:
    """Field updates that put the turn back into the roll phase."""
    return {
        "dice_value": None,
        "can_roll": True,
        "can_move": False,
        "valid_moves": [],
    }


def pass_to_next_player(
    state: LudoGameState,
    reason: str,
    events: list[AnyGameEvent],
) -> dict:
    """Field updates handing the turn to the next player.

    Appends TurnEnded/TurnStarted to events.
    """
    current_player = state.current_player
    next_index = get_next_player_index(state.current_player_index, len(state.players))
    next_player = state.players[next_index]
    next_turn_number = state.turn_number + 1

    events.append(
        TurnEnded(
            player_id=current_player.id,
            reason=reason,
            next_player_id=next_player.id,
        )
    )
    events.append(TurnStarted(player_id=next_player.id, turn_number=next_turn_number))

    logger.info(
        "Turn ended (%s): player=%s, next_player=%s, turn=%d",
        reason,
        current_player.id,
        next_player.id,
        next_turn_number,
    )
    return {
        "current_player_index": next_index,
        "turn_number": next_turn_number,
        **reset_roll_phase(),
    }


def roll_dice(state: LudoGameState, dice: Dice | None = None) -> ProcessResult:
    """Roll for the current player and compute their valid moves.

    Handles:
    - Frozen players: the roll is consumed to unfreeze them and the turn passes
    - Transitioning to the move phase if moves are available
    - Surfacing NoLegalMoves otherwise; only pass_turn is then accepted

    Args:
        state: Current game state.
        dice: Die to draw from; defaults to the module's random die.

    Returns:
        ProcessResult with new state and events.

    Raises:
        ValueError: If the die returns a value outside 1-6.
    """
    validation = check_can_roll(state)
    if not validation.is_valid:
        return ProcessResult.from_validation(validation)

    current_player = state.current_player
    events: list[AnyGameEvent] = []

    if current_player.id in state.frozen_players:
        logger.info("Frozen player skips roll: player=%s", current_player.id)
        events.append(FrozenTurnSkipped(player_id=current_player.id))
        updates = pass_to_next_player(state, "frozen", events)
        new_state = state.model_copy(
            update={
                **updates,
                "frozen_players": state.frozen_players - {current_player.id},
            }
        )
        return ProcessResult.ok(new_state, events)

    dice_value = (dice or default_dice)()
    if not 1 <= dice_value <= 6:
        raise ValueError(f"Dice returned {dice_value}, expected 1-6")

    logger.info("Dice rolled: player=%s, value=%d", current_player.id, dice_value)
    events.append(DiceRolled(player_id=current_player.id, value=dice_value))

    valid_moves = calculate_valid_moves(state, current_player, dice_value)
    logger.debug(
        "Valid moves for roll %d: %s",
        dice_value,
        [m.token_id for m in valid_moves] or "none",
    )

    if valid_moves:
        events.append(
            AwaitingMove(
                player_id=current_player.id,
                token_ids=[m.token_id for m in valid_moves],
                dice_value=dice_value,
            )
        )
    else:
        logger.info(
            "No legal moves available: player=%s, roll=%d",
            current_player.id,
            dice_value,
        )
        events.append(NoLegalMoves(player_id=current_player.id, dice_value=dice_value))

    new_state = state.model_copy(
        update={
            "dice_value": dice_value,
            "can_roll": False,
            "can_move": bool(valid_moves),
            "valid_moves": valid_moves,
        }
    )
    return ProcessResult.ok(new_state, events)


def pass_turn(state: LudoGameState) -> ProcessResult:
    """Advance past a roll that produced no legal move.

    A stalled 6 keeps the same player rolling, like any other 6; every other
    value hands the turn to the next player.

    Args:
        state: Game state stalled after roll_dice reported NoLegalMoves.

    Returns:
        ProcessResult with the next roll phase.
    """
    validation = check_can_pass(state)
    if not validation.is_valid:
        return ProcessResult.from_validation(validation)

    current_player = state.current_player

    events: list[AnyGameEvent] = []
    if state.dice_value == 6:
        logger.info("Stalled on a 6: player=%s rolls again", current_player.id)
        events.append(ExtraRollGranted(player_id=current_player.id))
        new_state = state.model_copy(update=reset_roll_phase())
        return ProcessResult.ok(new_state, events)

    updates = pass_to_next_player(state, "no_legal_moves", events)
    return ProcessResult.ok(state.model_copy(update=updates), events)
