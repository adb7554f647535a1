"""Special-tile effect resolution and freeze/rescue handling.

Heat and bond tiles are narrative hooks: the host shows a themed prompt and
then dismisses the effect. Freeze works in two phases so the prompt can be
shown before the penalty takes hold: landing only attaches the effect, and
the player is frozen when the effect is dismissed.
"""

import logging

from app.schemas.ludo import LudoGameState, SpecialEffect, SpecialTileType

from .events import AnyGameEvent, PlayerFrozen, PlayerRescued, SpecialEffectCleared
from .validation import ProcessResult, check_not_won

logger = logging.getLogger(__name__)


def _apply_freeze_on_dismiss(
    state: LudoGameState,
    effect: SpecialEffect,
    events: list[AnyGameEvent],
) -> set[str]:
    if effect.type != SpecialTileType.FREEZE:
        return state.frozen_players

    logger.info("Player frozen: player=%s, tile=%s", effect.player_id, effect.tile_id)
    events.append(PlayerFrozen(player_id=effect.player_id))
    return state.frozen_players | {effect.player_id}


def clear_special_effect(state: LudoGameState) -> ProcessResult:
    """Dismiss the pending special-tile effect.

    Clearing when nothing is pending succeeds without events.
    """
    validation = check_not_won(state)
    if not validation.is_valid:
        return ProcessResult.from_validation(validation)

    effect = state.special_effect
    if effect is None:
        logger.debug("No special effect to clear in room %s", state.room_id)
        return ProcessResult.ok(state)

    events: list[AnyGameEvent] = [
        SpecialEffectCleared(player_id=effect.player_id, effect_type=effect.type)
    ]
    frozen_players = _apply_freeze_on_dismiss(state, effect, events)

    new_state = state.model_copy(
        update={"special_effect": None, "frozen_players": frozen_players}
    )
    return ProcessResult.ok(new_state, events)


def rescue_player(state: LudoGameState, player_id: str) -> ProcessResult:
    """Unfreeze a player. Idempotent; no event when they were not frozen."""
    validation = check_not_won(state)
    if not validation.is_valid:
        return ProcessResult.from_validation(validation)

    if player_id not in state.frozen_players:
        logger.debug("Rescue ignored, player %s is not frozen", player_id)
        return ProcessResult.ok(state)

    logger.info("Player rescued: player=%s", player_id)
    new_state = state.model_copy(
        update={"frozen_players": state.frozen_players - {player_id}}
    )
    return ProcessResult.ok(new_state, [PlayerRescued(player_id=player_id)])
