"""Capture detection and resolution logic."""

import logging
from dataclasses import dataclass

from app.schemas.ludo import LudoGameState, LudoPlayer

from .board import HOME, is_start_tile, main_index

logger = logging.getLogger(__name__)


@dataclass
class CaptureCheck:
    """Whether landing on a tile captures an opponent token."""

    will_capture: bool = False
    captured_token_id: str | None = None


def check_capture(
    state: LudoGameState,
    target_tile_id: str,
    moving_player_id: str,
) -> CaptureCheck:
    """Check whether moving onto target_tile_id captures an opponent token.

    Captures only happen on shared main-path tiles that are not a start tile.
    Safe lanes, home and finished are never contested. Only the first
    opponent token found on the tile is reported.

    Args:
        state: Current game state.
        target_tile_id: Tile the moving token would land on.
        moving_player_id: Owner of the moving token.

    Returns:
        CaptureCheck describing the capture, if any.
    """
    if main_index(target_tile_id) is None:
        return CaptureCheck()

    if is_start_tile(target_tile_id):
        logger.debug("No capture on start tile %s", target_tile_id)
        return CaptureCheck()

    for player in state.players:
        if player.id == moving_player_id:
            continue

        for token in player.tokens:
            if token.position == target_tile_id:
                logger.debug(
                    "Capture target found: tile=%s, token=%s, owner=%s",
                    target_tile_id,
                    token.id,
                    player.id,
                )
                return CaptureCheck(will_capture=True, captured_token_id=token.id)

    return CaptureCheck()


def send_home(players: list[LudoPlayer], token_id: str) -> list[LudoPlayer]:
    """Send a captured token back home.

    Applied across every player's token list; the captured token id is unique
    so at most one token changes.

    Args:
        players: Current player list.
        token_id: The captured token.

    Returns:
        New player list with the token at home.
    """
    logger.info("Sending token home: token=%s", token_id)

    updated_players = []
    for player in players:
        if not any(t.id == token_id for t in player.tokens):
            updated_players.append(player)
            continue

        updated_tokens = [
            t.model_copy(update={"position": HOME, "path_progress": -1})
            if t.id == token_id
            else t
            for t in player.tokens
        ]
        updated_players.append(player.model_copy(update={"tokens": updated_tokens}))

    return updated_players
