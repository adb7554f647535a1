"""Game engine module - pure functional Ludo turn-state logic.

This module provides the core game engine with:
- Transition functions over LudoGameState (roll, move, pass, dismiss, rescue)
- Action types for explicit user inputs
- Event types for WebSocket broadcasts
- ProcessResult pattern for error handling

No transition performs I/O; randomness is confined to the injectable die
used by roll_dice.

Usage:
    from app.services.game.engine import (
        process_action,
        ProcessResult,
        RollAction,
        MoveAction,
    )

    # Process an action
    result = process_action(state, RollAction(), player_id)

    if result.success:
        new_state = result.state
        events = result.events  # Broadcast these via WebSocket
    else:
        # Handle error
        print(f"Error: {result.error_code} - {result.error_message}")
"""

# Actions - explicit user inputs
from .actions import (
    DismissEffectAction,
    GameAction,
    MoveAction,
    PassTurnAction,
    RescueAction,
    RollAction,
    build_action_from_payload,
)

# Transitions
from .effects import clear_special_effect, rescue_player

# Events - for WebSocket broadcasts
from .events import (
    AnyGameEvent,
    AwaitingMove,
    DiceRolled,
    ExtraRollGranted,
    FrozenTurnSkipped,
    GameEnded,
    GameEvent,
    GameStarted,
    NoLegalMoves,
    PlayerFrozen,
    PlayerRescued,
    SpecialEffectCleared,
    SpecialTileTriggered,
    TokenCaptured,
    TokenFinished,
    TokenMoved,
    TurnEnded,
    TurnStarted,
)

# Legal moves
from .legal_moves import calculate_valid_moves, has_any_valid_moves
from .movement import apply_move, check_win_condition

# Main processing
from .process import assign_event_sequences, process_action
from .rolling import Dice, default_dice, pass_turn, roll_dice, seeded_dice

# Result types
from .validation import ErrorCode, ProcessResult, ValidationResult, validate_action

__all__ = [
    # Actions
    "GameAction",
    "RollAction",
    "MoveAction",
    "DismissEffectAction",
    "RescueAction",
    "PassTurnAction",
    "build_action_from_payload",
    # Events
    "GameEvent",
    "AnyGameEvent",
    "GameStarted",
    "DiceRolled",
    "AwaitingMove",
    "NoLegalMoves",
    "FrozenTurnSkipped",
    "TokenMoved",
    "TokenCaptured",
    "TokenFinished",
    "SpecialTileTriggered",
    "SpecialEffectCleared",
    "PlayerFrozen",
    "PlayerRescued",
    "ExtraRollGranted",
    "TurnStarted",
    "TurnEnded",
    "GameEnded",
    # Transitions
    "roll_dice",
    "apply_move",
    "pass_turn",
    "clear_special_effect",
    "rescue_player",
    "Dice",
    "default_dice",
    "seeded_dice",
    # Processing
    "process_action",
    "assign_event_sequences",
    "check_win_condition",
    # Validation
    "ErrorCode",
    "ProcessResult",
    "ValidationResult",
    "validate_action",
    # Legal moves
    "calculate_valid_moves",
    "has_any_valid_moves",
]
