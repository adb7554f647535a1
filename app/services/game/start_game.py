import logging

from app.schemas.ludo import (
    GameMode,
    LudoColor,
    LudoGameState,
    LudoPlayer,
    LudoToken,
    PlayerSeed,
)
from app.services.game.engine.board import HOME, PLAYER_COLORS, TOKENS_PER_PLAYER
from app.services.game.engine.events import AnyGameEvent, GameStarted, TurnStarted
from app.services.game.engine.validation import (
    ErrorCode,
    ProcessResult,
    ValidationResult,
)

logger = logging.getLogger(__name__)

MIN_PLAYERS = 2
MAX_PLAYERS = len(PLAYER_COLORS)


def validate_players(players: list[PlayerSeed]) -> ValidationResult:
    """Validate the joining players before creating a match."""
    if not MIN_PLAYERS <= len(players) <= MAX_PLAYERS:
        return ValidationResult.error(
            ErrorCode.INVALID_PLAYER_COUNT,
            f"A game needs {MIN_PLAYERS}-{MAX_PLAYERS} players, got {len(players)}",
        )

    player_ids: set[str] = set()
    for player in players:
        if player.id in player_ids:
            return ValidationResult.error(
                ErrorCode.DUPLICATE_PLAYER,
                f"Duplicate player ID found: {player.id}",
            )
        player_ids.add(player.id)

    return ValidationResult.ok()


def _create_initial_tokens(player_id: str, color: LudoColor) -> list[LudoToken]:
    """Create initial tokens for a player, all at home."""
    return [
        LudoToken(
            id=f"{color.value}_token_{i}",
            player_id=player_id,
            color=color,
            position=HOME,
            path_progress=-1,
        )
        for i in range(TOKENS_PER_PLAYER)
    ]


def _initialize_players(players: list[PlayerSeed]) -> list[LudoPlayer]:
    """Initialize players; colors follow join order."""
    ludo_players = []
    for index, seed in enumerate(players):
        color = PLAYER_COLORS[index]
        ludo_players.append(
            LudoPlayer(
                id=seed.id,
                nickname=seed.nickname,
                color=color,
                avatar_color=seed.avatar_color,
                tokens=_create_initial_tokens(seed.id, color),
                finished_tokens=0,
            )
        )
    return ludo_players


def create_initial_state(
    room_id: str,
    players: list[PlayerSeed],
    game_mode: GameMode,
) -> ProcessResult:
    """
    Validate the players and return a fresh LudoGameState.

    Args:
        room_id: Identifier of the hosting room.
        players: 2-4 joining players, in turn order.
        game_mode: Tag passed through to prompt selection.

    Returns:
        ProcessResult with the initial state (first player to roll), or an
        INVALID_PLAYER_COUNT / DUPLICATE_PLAYER failure.
    """
    validation = validate_players(players)
    if not validation.is_valid:
        return ProcessResult.from_validation(validation)

    ludo_players = _initialize_players(players)
    state = LudoGameState(
        room_id=room_id,
        players=ludo_players,
        current_player_index=0,
        dice_value=None,
        can_roll=True,
        can_move=False,
        valid_moves=[],
        special_effect=None,
        winner_id=None,
        turn_number=1,
        game_mode=game_mode,
        frozen_players=set(),
    )

    events: list[AnyGameEvent] = [
        GameStarted(
            room_id=room_id,
            player_order=[p.id for p in ludo_players],
            game_mode=game_mode,
        ),
        TurnStarted(player_id=ludo_players[0].id, turn_number=1),
    ]

    logger.info(
        "Game created: room=%s, players=%s, mode=%s",
        room_id,
        [f"{p.nickname}:{p.color.value}" for p in ludo_players],
        game_mode.value,
    )
    return ProcessResult.ok(state, events)
