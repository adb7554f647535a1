"""Velvet Ludo game services.

- engine/: pure transitions over LudoGameState
- start_game.py: building a fresh match from the joining players
- service.py: in-memory hosting, one game per room
"""

from .engine import ProcessResult, process_action
from .service import LudoGameService, get_game_service, set_game_service
from .start_game import MAX_PLAYERS, MIN_PLAYERS, create_initial_state, validate_players

__all__ = [
    "MAX_PLAYERS",
    "MIN_PLAYERS",
    "LudoGameService",
    "ProcessResult",
    "create_initial_state",
    "get_game_service",
    "process_action",
    "set_game_service",
    "validate_players",
]
