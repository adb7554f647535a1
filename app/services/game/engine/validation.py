"""Validation layer for game actions and ProcessResult pattern.

Separates validation from processing logic:
- check_* functions guard each transition's phase preconditions
- validate_action() adds turn ownership on top, for actions coming from players
- ProcessResult replaces exceptions (and silent no-ops) for control flow
"""

import logging
from dataclasses import dataclass, field
from enum import Enum

from app.schemas.ludo import LudoGameState

from .actions import (
    GameAction,
    MoveAction,
    PassTurnAction,
    RescueAction,
    RollAction,
)
from .events import AnyGameEvent

logger = logging.getLogger(__name__)


class ErrorCode(str, Enum):
    NOT_ROLL_PHASE = "NOT_ROLL_PHASE"
    NOT_MOVE_PHASE = "NOT_MOVE_PHASE"
    NOT_PASS_PHASE = "NOT_PASS_PHASE"
    INVALID_MOVE_INDEX = "INVALID_MOVE_INDEX"
    TOKEN_MISMATCH = "TOKEN_MISMATCH"
    GAME_ALREADY_WON = "GAME_ALREADY_WON"
    INVALID_PLAYER_COUNT = "INVALID_PLAYER_COUNT"
    DUPLICATE_PLAYER = "DUPLICATE_PLAYER"
    NO_LEGAL_MOVES = "NO_LEGAL_MOVES"
    NOT_YOUR_TURN = "NOT_YOUR_TURN"
    UNKNOWN_PLAYER = "UNKNOWN_PLAYER"


@dataclass
class ProcessResult:
    """Result of processing a game action.

    Either ok (new state plus the events that produced it) or a failure
    carrying an error code suitable for client localization. A failure never
    carries a state; the caller keeps the one it already has.
    """

    state: LudoGameState | None = None
    events: list[AnyGameEvent] = field(default_factory=list)
    success: bool = True
    error_code: str | None = None
    error_message: str | None = None

    @classmethod
    def ok(
        cls,
        state: LudoGameState,
        events: list[AnyGameEvent] | None = None,
    ) -> "ProcessResult":
        """Create a successful result with new state and events."""
        return cls(
            state=state,
            events=events or [],
            success=True,
        )

    @classmethod
    def failure(cls, code: str, message: str) -> "ProcessResult":
        """Create a failure result with error details."""
        return cls(
            state=None,
            events=[],
            success=False,
            error_code=code,
            error_message=message,
        )

    @classmethod
    def from_validation(cls, validation: "ValidationResult") -> "ProcessResult":
        return cls.failure(
            validation.error_code or "VALIDATION_ERROR",
            validation.error_message or "Invalid action",
        )


@dataclass
class ValidationResult:
    """Result of validating an action before processing."""

    is_valid: bool = True
    error_code: str | None = None
    error_message: str | None = None

    @classmethod
    def ok(cls) -> "ValidationResult":
        """Create a successful validation result."""
        return cls(is_valid=True)

    @classmethod
    def error(cls, code: ErrorCode, message: str) -> "ValidationResult":
        """Create a validation failure with error details."""
        logger.warning("Validation failed: %s - %s", code.value, message)
        return cls(
            is_valid=False,
            error_code=code.value,
            error_message=message,
        )


def is_awaiting_pass(state: LudoGameState) -> bool:
    """True right after a roll that produced no legal move."""
    return state.dice_value is not None and not state.can_roll and not state.can_move


def check_not_won(state: LudoGameState) -> ValidationResult:
    if state.winner_id is not None:
        return ValidationResult.error(
            ErrorCode.GAME_ALREADY_WON,
            f"Game already won by {state.winner_id}",
        )
    return ValidationResult.ok()


def check_can_roll(state: LudoGameState) -> ValidationResult:
    validation = check_not_won(state)
    if not validation.is_valid:
        return validation

    if not state.can_roll:
        return ValidationResult.error(
            ErrorCode.NOT_ROLL_PHASE,
            "Cannot roll dice - waiting for a move",
        )
    return ValidationResult.ok()


def check_can_move(state: LudoGameState, token_id: str, move_index: int) -> ValidationResult:
    """Check that (token_id, move_index) names one of the current valid moves."""
    validation = check_not_won(state)
    if not validation.is_valid:
        return validation

    if is_awaiting_pass(state):
        return ValidationResult.error(
            ErrorCode.NO_LEGAL_MOVES,
            f"Roll of {state.dice_value} has no legal move - the turn must be passed",
        )

    if not state.can_move:
        return ValidationResult.error(
            ErrorCode.NOT_MOVE_PHASE,
            "Cannot move - roll the dice first",
        )

    if move_index < 0 or move_index >= len(state.valid_moves):
        return ValidationResult.error(
            ErrorCode.INVALID_MOVE_INDEX,
            f"Move index {move_index} is out of range (0-{len(state.valid_moves) - 1})",
        )

    expected = state.valid_moves[move_index].token_id
    if expected != token_id:
        return ValidationResult.error(
            ErrorCode.TOKEN_MISMATCH,
            f"Move {move_index} is for token '{expected}', not '{token_id}'",
        )
    return ValidationResult.ok()


def check_can_pass(state: LudoGameState) -> ValidationResult:
    validation = check_not_won(state)
    if not validation.is_valid:
        return validation

    if not is_awaiting_pass(state):
        return ValidationResult.error(
            ErrorCode.NOT_PASS_PHASE,
            "Cannot pass - the turn is not stalled on a roll without legal moves",
        )
    return ValidationResult.ok()


def validate_action(
    state: LudoGameState,
    action: GameAction,
    player_id: str | None = None,
) -> ValidationResult:
    """Validate an action before processing.

    Checks:
    - The game has not been won
    - It's the acting player's turn (roll, move, pass) unless player_id is
      None, which is how pass-and-play hosts submit actions
    - The action matches the current roll/move phase
    - For rescues, the target is a player in this game

    Dismissing a prompt and rescuing a partner are open to every participant.

    Args:
        state: Current game state.
        action: The action to validate.
        player_id: The player attempting the action, or None for local play.

    Returns:
        ValidationResult indicating success or failure with error details.
    """
    action_type = type(action).__name__
    logger.debug(
        "Validating action: type=%s, player=%s, turn=%d",
        action_type,
        player_id,
        state.turn_number,
    )

    validation = check_not_won(state)
    if not validation.is_valid:
        return validation

    if isinstance(action, (RollAction, MoveAction, PassTurnAction)):
        current_id = state.current_player.id
        if player_id is not None and player_id != current_id:
            logger.warning(
                "Validation failed: NOT_YOUR_TURN, current=%s, attempted=%s",
                current_id,
                player_id,
            )
            return ValidationResult.error(
                ErrorCode.NOT_YOUR_TURN,
                "It's not your turn",
            )

    if isinstance(action, RollAction):
        return check_can_roll(state)

    if isinstance(action, MoveAction):
        return check_can_move(state, action.token_id, action.move_index)

    if isinstance(action, PassTurnAction):
        return check_can_pass(state)

    if isinstance(action, RescueAction):
        if all(p.id != action.player_id for p in state.players):
            return ValidationResult.error(
                ErrorCode.UNKNOWN_PLAYER,
                f"Player '{action.player_id}' is not in this game",
            )

    logger.debug("Action validated successfully: type=%s", action_type)
    return ValidationResult.ok()
