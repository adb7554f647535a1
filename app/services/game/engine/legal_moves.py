"""Legal move calculation for tokens."""

from app.schemas.ludo import LudoGameState, LudoPlayer, ValidMove

from .board import FINISHED, HOME, MAX_PROGRESS, start_tile_id, tile_for_progress
from .captures import check_capture

ENTRY_ROLL = 6


def calculate_valid_moves(
    state: LudoGameState,
    player: LudoPlayer,
    dice_value: int,
) -> list[ValidMove]:
    """Determine legal moves for a player given a roll.

    A move is legal if:
    - Token at home and the roll is a 6 (enters on the color's start tile)
    - Token on the board and path_progress + roll <= MAX_PROGRESS

    Finished tokens never move.

    Args:
        state: Current game state, used for capture checks.
        player: The player whose tokens to check.
        dice_value: The dice roll value.

    Returns:
        Moves in token order, each annotated with its capture outcome.
    """
    moves: list[ValidMove] = []

    for token in player.tokens:
        if token.position == HOME:
            if dice_value != ENTRY_ROLL:
                continue
            target_tile_id = start_tile_id(player.color)
            target_progress = 0

        elif token.position == FINISHED:
            continue

        else:
            target_progress = token.path_progress + dice_value
            # No overshoot - must land exactly on the finish
            if target_progress > MAX_PROGRESS:
                continue
            target_tile_id = tile_for_progress(player.color, target_progress)

        capture = check_capture(state, target_tile_id, player.id)
        moves.append(
            ValidMove(
                token_id=token.id,
                target_tile_id=target_tile_id,
                target_progress=target_progress,
                will_capture=capture.will_capture,
                captured_token_id=capture.captured_token_id,
            )
        )

    return moves


def has_any_valid_moves(player: LudoPlayer, dice_value: int) -> bool:
    """Quick check if player has any legal moves.

    Cheaper than calculate_valid_moves() since it skips capture checks.
    """
    for token in player.tokens:
        if token.position == HOME:
            if dice_value == ENTRY_ROLL:
                return True
        elif token.position != FINISHED:
            if token.path_progress + dice_value <= MAX_PROGRESS:
                return True
    return False
