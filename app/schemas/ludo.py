from enum import Enum

from pydantic import BaseModel, Field


class LudoColor(str, Enum):
    RED = "red"
    BLUE = "blue"
    GREEN = "green"
    YELLOW = "yellow"


# Passed through to prompt selection, never interpreted by the engine
class GameMode(str, Enum):
    COUPLE = "couple"
    FRIENDS = "friends"


class SpecialTileType(str, Enum):
    HEAT = "heat"
    BOND = "bond"
    FREEZE = "freeze"


# Defined before the match from the joining players
class PlayerSeed(BaseModel):
    id: str = Field(..., min_length=1)
    nickname: str
    avatar_color: str


class LudoToken(BaseModel):
    id: str
    player_id: str
    color: LudoColor
    position: str = "home"  # "home" | "main_<i>" | "safe_<color>_<i>" | "finished"
    path_progress: int = -1


class LudoPlayer(BaseModel):
    id: str
    nickname: str
    color: LudoColor
    avatar_color: str
    tokens: list[LudoToken]
    finished_tokens: int = 0


class ValidMove(BaseModel):
    token_id: str
    target_tile_id: str
    target_progress: int
    will_capture: bool = False
    captured_token_id: str | None = None


class SpecialEffect(BaseModel):
    type: SpecialTileType
    tile_id: str
    player_id: str


class LudoGameState(BaseModel):
    """Complete state of one Ludo match.

    Mutated only through the engine transitions in
    app.services.game.engine, each of which returns a new copy.
    """

    room_id: str
    players: list[LudoPlayer]
    current_player_index: int = 0
    dice_value: int | None = None
    can_roll: bool = True
    can_move: bool = False
    valid_moves: list[ValidMove] = []
    special_effect: SpecialEffect | None = None
    winner_id: str | None = None
    turn_number: int = 1
    game_mode: GameMode = GameMode.FRIENDS
    frozen_players: set[str] = set()
    event_seq: int = 0  # Next sequence number for events (monotonically increasing)

    @property
    def current_player(self) -> LudoPlayer:
        return self.players[self.current_player_index]
