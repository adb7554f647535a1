"""Token movement processing logic."""

import logging

from app.schemas.ludo import LudoGameState, LudoPlayer, SpecialEffect

from .board import FINISHED, TOKENS_PER_PLAYER, special_tile_at
from .captures import send_home
from .events import (
    AnyGameEvent,
    ExtraRollGranted,
    GameEnded,
    SpecialTileTriggered,
    TokenCaptured,
    TokenFinished,
    TokenMoved,
)
from .rolling import get_next_player_index, pass_to_next_player, reset_roll_phase
from .validation import ProcessResult, check_can_move

logger = logging.getLogger(__name__)

EXTRA_ROLL_VALUE = 6


def _owner_of(players: list[LudoPlayer], token_id: str) -> LudoPlayer:
    return next(p for p in players if any(t.id == token_id for t in p.tokens))


def apply_move(state: LudoGameState, token_id: str, move_index: int) -> ProcessResult:
    """Apply one of the current valid moves.

    In order:
    1. Relocate the mover's token to the move's target
    2. Send a captured opponent token home
    3. Count the token as finished if it reached the end
    4. Attach a special effect when landing on a heat/bond/freeze tile
    5. Record the winner once someone has finished all tokens
    6. Keep the turn on a 6 (unless the game was won), else pass it on
    7. Reset to the roll phase

    Args:
        state: Current game state, in the move phase.
        token_id: Token the player chose; must match the move at move_index.
        move_index: Index into state.valid_moves.

    Returns:
        ProcessResult with new state and events.
    """
    validation = check_can_move(state, token_id, move_index)
    if not validation.is_valid:
        return ProcessResult.from_validation(validation)

    move = state.valid_moves[move_index]
    current_player = state.current_player
    token = next(t for t in current_player.tokens if t.id == token_id)
    dice_value = state.dice_value
    events: list[AnyGameEvent] = []

    logger.info(
        "Processing move: player=%s, token=%s, %s -> %s, roll=%d",
        current_player.id,
        token_id,
        token.position,
        move.target_tile_id,
        dice_value,
    )

    # 1 + 3. Relocate the token and count finishes
    reached_finish = move.target_tile_id == FINISHED
    updated_tokens = [
        t.model_copy(
            update={
                "position": move.target_tile_id,
                "path_progress": move.target_progress,
            }
        )
        if t.id == token_id
        else t
        for t in current_player.tokens
    ]
    updated_player = current_player.model_copy(
        update={
            "tokens": updated_tokens,
            "finished_tokens": current_player.finished_tokens + (1 if reached_finish else 0),
        }
    )
    players = [
        updated_player if p.id == current_player.id else p for p in state.players
    ]

    events.append(
        TokenMoved(
            player_id=current_player.id,
            token_id=token_id,
            from_tile_id=token.position,
            to_tile_id=move.target_tile_id,
            from_progress=token.path_progress,
            to_progress=move.target_progress,
            dice_value=dice_value,
        )
    )

    # 2. Capture
    if move.will_capture and move.captured_token_id:
        captured_owner = _owner_of(players, move.captured_token_id)
        players = send_home(players, move.captured_token_id)
        events.append(
            TokenCaptured(
                capturing_player_id=current_player.id,
                capturing_token_id=token_id,
                captured_player_id=captured_owner.id,
                captured_token_id=move.captured_token_id,
                tile_id=move.target_tile_id,
            )
        )

    if reached_finish:
        logger.info(
            "Token finished: player=%s, token=%s, finished=%d/%d",
            current_player.id,
            token_id,
            updated_player.finished_tokens,
            TOKENS_PER_PLAYER,
        )
        events.append(
            TokenFinished(
                player_id=current_player.id,
                token_id=token_id,
                finished_tokens=updated_player.finished_tokens,
            )
        )

    # 4. Special tile
    special_effect = None
    effect_type = special_tile_at(move.target_tile_id)
    if effect_type is not None:
        special_effect = SpecialEffect(
            type=effect_type,
            tile_id=move.target_tile_id,
            player_id=current_player.id,
        )
        logger.info(
            "Special tile triggered: player=%s, tile=%s, type=%s",
            current_player.id,
            move.target_tile_id,
            effect_type.value,
        )
        events.append(
            SpecialTileTriggered(
                player_id=current_player.id,
                tile_id=move.target_tile_id,
                effect_type=effect_type,
            )
        )

    # 5. Win check
    moved_state = state.model_copy(
        update={"players": players, "special_effect": special_effect}
    )
    winner_id = check_win_condition(moved_state)

    # 6 + 7. Turn advancement
    if winner_id is not None:
        events.append(GameEnded(winner_id=winner_id))
        logger.info("Game won: player=%s, room=%s", winner_id, state.room_id)
        # Terminal: the index still advances but no new turn is started
        new_state = moved_state.model_copy(
            update={
                "winner_id": winner_id,
                "current_player_index": get_next_player_index(
                    state.current_player_index, len(state.players)
                ),
                "turn_number": state.turn_number + 1,
                **reset_roll_phase(),
            }
        )
    elif dice_value == EXTRA_ROLL_VALUE:
        logger.info("Rolled a 6: player=%s goes again", current_player.id)
        events.append(ExtraRollGranted(player_id=current_player.id))
        new_state = moved_state.model_copy(update=reset_roll_phase())
    else:
        new_state = moved_state.model_copy(
            update=pass_to_next_player(moved_state, "moved", events)
        )

    return ProcessResult.ok(new_state, events)


def check_win_condition(state: LudoGameState) -> str | None:
    """Check if any player has won the game.

    A player wins once finished_tokens reaches TOKENS_PER_PLAYER.

    Args:
        state: Current game state.

    Returns:
        The winning player's id, or None if no winner yet.
    """
    for player in state.players:
        logger.debug(
            "Win check: player=%s, finished=%d/%d",
            player.id,
            player.finished_tokens,
            TOKENS_PER_PLAYER,
        )
        if player.finished_tokens >= TOKENS_PER_PLAYER:
            return player.id
    return None

