"""Shared fixtures for engine, hosting and API tests."""

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.schemas.ludo import GameMode, LudoGameState, PlayerSeed
from app.services.game.engine.board import FINISHED, tile_for_progress
from app.services.game.service import LudoGameService, set_game_service
from app.services.game.start_game import create_initial_state
from app.services.websocket.manager import ConnectionManager, set_connection_manager

# Fixed ids for deterministic testing
PLAYER_1_ID = "player-1"
PLAYER_2_ID = "player-2"
PLAYER_3_ID = "player-3"
PLAYER_4_ID = "player-4"

ROOM_ID = "room-1"


def create_seed(player_id: str, nickname: str | None = None) -> PlayerSeed:
    """Helper to create a joining player."""
    return PlayerSeed(
        id=player_id,
        nickname=nickname or player_id.title(),
        avatar_color="#ff00aa",
    )


def create_state(num_players: int = 2, game_mode: GameMode = GameMode.FRIENDS) -> LudoGameState:
    """Helper to create a fresh game with the first num_players fixed ids."""
    ids = [PLAYER_1_ID, PLAYER_2_ID, PLAYER_3_ID, PLAYER_4_ID][:num_players]
    result = create_initial_state(ROOM_ID, [create_seed(pid) for pid in ids], game_mode)
    assert result.success
    return result.state


def place_tokens(
    state: LudoGameState,
    player_index: int,
    progress_by_token: dict[int, int],
) -> LudoGameState:
    """Helper to move a player's tokens to the given path progress.

    Token indexes not listed stay where they are. Progress -1 is home and
    57 is finished; finished_tokens is recounted.
    """
    player = state.players[player_index]
    tokens = []
    for index, token in enumerate(player.tokens):
        if index in progress_by_token:
            progress = progress_by_token[index]
            token = token.model_copy(
                update={
                    "position": tile_for_progress(player.color, progress),
                    "path_progress": progress,
                }
            )
        tokens.append(token)

    updated = player.model_copy(
        update={
            "tokens": tokens,
            "finished_tokens": sum(1 for t in tokens if t.position == FINISHED),
        }
    )
    players = [updated if i == player_index else p for i, p in enumerate(state.players)]
    return state.model_copy(update={"players": players})


def scripted_dice(*values: int):
    """Helper to build a die that returns the given faces in order."""
    faces: Iterator[int] = iter(values)
    return lambda: next(faces)


def token_of(state: LudoGameState, token_id: str):
    """Helper to look a token up across all players."""
    for player in state.players:
        for token in player.tokens:
            if token.id == token_id:
                return token
    raise KeyError(token_id)


@pytest.fixture
def two_player_game() -> LudoGameState:
    """Fresh two-player game; red (player 1) to roll."""
    return create_state(2)


@pytest.fixture
def four_player_game() -> LudoGameState:
    """Fresh four-player game; red (player 1) to roll."""
    return create_state(4)


@pytest.fixture
def red_on_board(two_player_game: LudoGameState) -> LudoGameState:
    """Red has one token on the board at progress 10 (main_10)."""
    return place_tokens(two_player_game, 0, {0: 10})


@pytest.fixture
def dice_faces() -> list[int]:
    """Faces the hosted game's die will return, in order; tests append to it."""
    return []


@pytest.fixture
def game_service(dice_faces: list[int]) -> Iterator[LudoGameService]:
    """Fresh global game service drawing from dice_faces."""
    service = LudoGameService(max_rooms=2, dice=lambda: dice_faces.pop(0))
    set_game_service(service)
    yield service
    set_game_service(None)


@pytest.fixture
def client(game_service: LudoGameService) -> Iterator[TestClient]:
    """TestClient with fresh global services and the app lifespan running."""
    set_connection_manager(ConnectionManager())
    with TestClient(app) as test_client:
        yield test_client
    set_connection_manager(None)


GAMES_URL = "/api/v1/ludo/games"


def players_body(*player_ids: str) -> list[dict]:
    """Helper to build the players list of a create-game request."""
    return [
        {"id": pid, "nickname": pid.title(), "avatar_color": "#ff00aa"}
        for pid in player_ids
    ]


def create_game(
    client: TestClient,
    room_id: str = "room-a",
    player_ids: tuple[str, ...] = (PLAYER_1_ID, PLAYER_2_ID),
):
    """Helper to start a game through the REST API."""
    return client.post(
        GAMES_URL,
        json={"room_id": room_id, "players": players_body(*player_ids), "game_mode": "couple"},
    )
