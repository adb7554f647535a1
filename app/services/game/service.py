"""Game service for hosting live Ludo matches."""

import asyncio
import logging

from app.config import get_settings
from app.schemas.ludo import GameMode, LudoGameState, PlayerSeed
from app.services.game.engine import (
    Dice,
    GameAction,
    NoLegalMoves,
    PassTurnAction,
    ProcessResult,
    RollAction,
    assign_event_sequences,
    process_action,
    seeded_dice,
)
from app.services.game.start_game import create_initial_state

logger = logging.getLogger(__name__)


def _game_not_found(room_id: str) -> ProcessResult:
    return ProcessResult.failure(
        "GAME_NOT_FOUND",
        f"No game in progress for room {room_id}",
    )


class LudoGameService:
    """Holds one LudoGameState per room and serializes transitions.

    Every action for a room runs under that room's asyncio.Lock, so two
    racing moves never read the same stale state. A lock is kept only while
    its room has a game. Storage is in-memory; a game lives until it is
    deleted or the process exits.

    A roll is refused with EFFECT_PENDING while a special-tile prompt waits
    to be dismissed, so the next move cannot overwrite a freeze before it
    takes hold.
    """

    def __init__(self, max_rooms: int | None = None, dice: Dice | None = None):
        settings = get_settings()
        self._max_rooms = max_rooms or settings.MAX_ROOMS
        self._dice = dice or seeded_dice(settings.DICE_SEED)

        self._games: dict[str, LudoGameState] = {}
        self._locks: dict[str, asyncio.Lock] = {}

        logger.info("LudoGameService initialized with max_rooms=%d", self._max_rooms)

    def _lock_for(self, room_id: str) -> asyncio.Lock:
        return self._locks.setdefault(room_id, asyncio.Lock())

    def _discard_idle_lock(self, room_id: str) -> None:
        """Forget a room's lock once the room has no game and nobody holds it."""
        lock = self._locks.get(room_id)
        if lock is not None and room_id not in self._games and not lock.locked():
            del self._locks[room_id]

    async def create_game(
        self,
        room_id: str,
        players: list[PlayerSeed],
        game_mode: GameMode,
    ) -> ProcessResult:
        """Create a match for a room.

        Returns:
            ProcessResult with the initial state, or ROOM_EXISTS /
            TOO_MANY_GAMES / an engine validation failure.
        """
        try:
            async with self._lock_for(room_id):
                if room_id in self._games:
                    logger.warning("Game already exists for room %s", room_id)
                    return ProcessResult.failure(
                        "ROOM_EXISTS",
                        f"A game is already running in room {room_id}",
                    )

                if len(self._games) >= self._max_rooms:
                    logger.warning("Game limit reached (%d rooms)", self._max_rooms)
                    return ProcessResult.failure(
                        "TOO_MANY_GAMES",
                        "Server is hosting the maximum number of games",
                    )

                result = create_initial_state(room_id, players, game_mode)
                if not result.success:
                    return result

                result = assign_event_sequences(result)
                self._games[room_id] = result.state
                logger.info(
                    "Game created for room %s (%d live games)", room_id, len(self._games)
                )
                return result
        finally:
            self._discard_idle_lock(room_id)

    async def get_state(self, room_id: str) -> LudoGameState | None:
        """Get the current state for a room, or None if no game is live."""
        return self._games.get(room_id)

    async def delete_game(self, room_id: str) -> bool:
        """Discard a room's game. Returns False if there was none."""
        if room_id not in self._games:
            logger.debug("No game to delete for room %s", room_id)
            return False

        async with self._lock_for(room_id):
            state = self._games.pop(room_id, None)
        self._locks.pop(room_id, None)

        if state is None:
            logger.debug("Game for room %s was deleted concurrently", room_id)
            return False

        logger.info("Game deleted for room %s", room_id)
        return True

    async def submit(
        self,
        room_id: str,
        action: GameAction,
        player_id: str | None = None,
    ) -> ProcessResult:
        """Run an action against a room's game and store the new state.

        A roll that leaves the player without a legal move is followed by an
        automatic pass, so the room never stalls waiting for one.

        Args:
            room_id: The room whose game to act on.
            action: The action to process.
            player_id: Acting player, or None for pass-and-play.

        Returns:
            ProcessResult with the stored state and all events produced.
        """
        if room_id not in self._games:
            return _game_not_found(room_id)

        try:
            async with self._lock_for(room_id):
                state = self._games.get(room_id)
                if state is None:
                    return _game_not_found(room_id)
                return self._apply(room_id, state, action, player_id)
        finally:
            self._discard_idle_lock(room_id)

    def _apply(
        self,
        room_id: str,
        state: LudoGameState,
        action: GameAction,
        player_id: str | None,
    ) -> ProcessResult:
        if (
            isinstance(action, RollAction)
            and state.special_effect is not None
            and state.winner_id is None
        ):
            logger.info(
                "Roll refused in room %s: %s prompt still pending",
                room_id,
                state.special_effect.type.value,
            )
            return ProcessResult.failure(
                "EFFECT_PENDING",
                "Dismiss the special tile prompt before rolling",
            )

        result = process_action(state, action, player_id, self._dice)
        if not result.success:
            logger.info(
                "Action rejected in room %s: %s - %s",
                room_id,
                result.error_code,
                result.error_message,
            )
            return result

        if isinstance(action, RollAction) and any(
            isinstance(e, NoLegalMoves) for e in result.events
        ):
            logger.debug("Auto-passing turn in room %s", room_id)
            passed = process_action(result.state, PassTurnAction(), player_id)
            if passed.success:
                result = ProcessResult.ok(passed.state, result.events + passed.events)
            else:
                logger.error(
                    "Auto-pass failed in room %s: %s",
                    room_id,
                    passed.error_code,
                )

        self._games[room_id] = result.state
        return result

    def get_game_count(self) -> int:
        """Get the number of live games."""
        return len(self._games)

    def get_lock_count(self) -> int:
        """Get the number of room locks held in memory."""
        return len(self._locks)


# Global service instance
_game_service: LudoGameService | None = None


def get_game_service() -> LudoGameService:
    """Get the global LudoGameService instance."""
    global _game_service
    if _game_service is None:
        _game_service = LudoGameService()
    return _game_service


def set_game_service(service: LudoGameService | None) -> None:
    """Set the global LudoGameService instance."""
    global _game_service
    _game_service = service
