"""Game event types - emitted during state transitions for broadcasts.

Events describe what happened during a game action, enabling:
- Efficient WebSocket updates (clients animate exactly what changed)
- Surfacing special-tile prompts to the prompt selection layer
- Action replay / audit logging
"""

from typing import Annotated, Literal

from pydantic import BaseModel, Field

from app.schemas.ludo import GameMode, SpecialTileType


class GameEvent(BaseModel):
    """Base class for all game events."""

    event_type: str
    seq: int = 0  # Sequence number assigned during processing


class GameStarted(GameEvent):
    """A match has been created and is ready for the first roll."""

    event_type: Literal["game_started"] = "game_started"
    room_id: str
    player_order: list[str] = Field(..., description="Player IDs in turn order")
    game_mode: GameMode


class DiceRolled(GameEvent):
    """A player rolled the dice."""

    event_type: Literal["dice_rolled"] = "dice_rolled"
    player_id: str
    value: int = Field(..., ge=1, le=6)


class AwaitingMove(GameEvent):
    """Game is waiting for the player to pick one of the valid moves."""

    event_type: Literal["awaiting_move"] = "awaiting_move"
    player_id: str
    token_ids: list[str] = Field(..., description="Movable token IDs, in move-index order")
    dice_value: int


class NoLegalMoves(GameEvent):
    """The roll produced no legal move; the turn must be passed."""

    event_type: Literal["no_legal_moves"] = "no_legal_moves"
    player_id: str
    dice_value: int


class FrozenTurnSkipped(GameEvent):
    """A frozen player's roll was consumed to unfreeze them."""

    event_type: Literal["frozen_turn_skipped"] = "frozen_turn_skipped"
    player_id: str


class TokenMoved(GameEvent):
    """A token was moved on the board."""

    event_type: Literal["token_moved"] = "token_moved"
    player_id: str
    token_id: str
    from_tile_id: str
    to_tile_id: str
    from_progress: int
    to_progress: int
    dice_value: int


class TokenCaptured(GameEvent):
    """An opponent token was captured and sent home."""

    event_type: Literal["token_captured"] = "token_captured"
    capturing_player_id: str
    capturing_token_id: str
    captured_player_id: str
    captured_token_id: str
    tile_id: str


class TokenFinished(GameEvent):
    """A token completed its journey."""

    event_type: Literal["token_finished"] = "token_finished"
    player_id: str
    token_id: str
    finished_tokens: int


class SpecialTileTriggered(GameEvent):
    """A move landed on a heat/bond/freeze tile; a prompt should be shown."""

    event_type: Literal["special_tile_triggered"] = "special_tile_triggered"
    player_id: str
    tile_id: str
    effect_type: SpecialTileType


class SpecialEffectCleared(GameEvent):
    """The host dismissed the pending special-tile prompt."""

    event_type: Literal["special_effect_cleared"] = "special_effect_cleared"
    player_id: str
    effect_type: SpecialTileType


class PlayerFrozen(GameEvent):
    """A player will lose their next roll."""

    event_type: Literal["player_frozen"] = "player_frozen"
    player_id: str


class PlayerRescued(GameEvent):
    """A frozen player was freed before paying the penalty."""

    event_type: Literal["player_rescued"] = "player_rescued"
    player_id: str


class ExtraRollGranted(GameEvent):
    """The same player rolls again (rolled a 6)."""

    event_type: Literal["extra_roll_granted"] = "extra_roll_granted"
    player_id: str


class TurnStarted(GameEvent):
    """A new turn has begun."""

    event_type: Literal["turn_started"] = "turn_started"
    player_id: str
    turn_number: int


class TurnEnded(GameEvent):
    """A player's turn has ended."""

    event_type: Literal["turn_ended"] = "turn_ended"
    player_id: str
    reason: str = Field(
        ...,
        description="Why turn ended: 'moved', 'no_legal_moves', 'frozen'",
    )
    next_player_id: str


class GameEnded(GameEvent):
    """The game has finished."""

    event_type: Literal["game_ended"] = "game_ended"
    winner_id: str


# Union of all event types for type checking
AnyGameEvent = Annotated[
    GameStarted
    | DiceRolled
    | AwaitingMove
    | NoLegalMoves
    | FrozenTurnSkipped
    | TokenMoved
    | TokenCaptured
    | TokenFinished
    | SpecialTileTriggered
    | SpecialEffectCleared
    | PlayerFrozen
    | PlayerRescued
    | ExtraRollGranted
    | TurnStarted
    | TurnEnded
    | GameEnded,
    Field(discriminator="event_type"),
]
