"""Tests for the per-room game service."""

import asyncio

from app.schemas.ludo import GameMode
from app.services.game.engine import (
    DiceRolled,
    DismissEffectAction,
    ExtraRollGranted,
    MoveAction,
    PlayerFrozen,
    NoLegalMoves,
    RollAction,
    TurnEnded,
    TurnStarted,
)
from app.services.game.service import LudoGameService

from .conftest import PLAYER_1_ID, PLAYER_2_ID, PLAYER_3_ID, create_seed, place_tokens


def create(service: LudoGameService, room_id: str = "room-a", *player_ids: str):
    seeds = [create_seed(pid) for pid in (player_ids or (PLAYER_1_ID, PLAYER_2_ID))]
    return asyncio.run(service.create_game(room_id, seeds, GameMode.FRIENDS))


class TestCreateGame:
    def test_create_stores_state(self, game_service):
        result = create(game_service)

        assert result.success
        assert [e.seq for e in result.events] == [0, 1]
        stored = asyncio.run(game_service.get_state("room-a"))
        assert stored == result.state
        assert stored.event_seq == 2
        assert game_service.get_game_count() == 1

    def test_room_can_only_host_one_game(self, game_service):
        create(game_service)

        result = create(game_service)

        assert result.error_code == "ROOM_EXISTS"

    def test_game_limit(self, game_service):
        create(game_service, "room-a")
        create(game_service, "room-b")

        result = create(game_service, "room-c")

        assert result.error_code == "TOO_MANY_GAMES"
        assert game_service.get_game_count() == 2

    def test_invalid_players_are_not_stored(self, game_service):
        result = create(game_service, "room-a", PLAYER_1_ID)

        assert result.error_code == "INVALID_PLAYER_COUNT"
        assert asyncio.run(game_service.get_state("room-a")) is None

    def test_delete_game(self, game_service):
        create(game_service)

        assert asyncio.run(game_service.delete_game("room-a")) is True
        assert asyncio.run(game_service.delete_game("room-a")) is False
        assert asyncio.run(game_service.get_state("room-a")) is None


class TestSubmit:
    def test_unknown_room(self, game_service):
        result = asyncio.run(game_service.submit("nowhere", RollAction()))

        assert result.error_code == "GAME_NOT_FOUND"

    def test_roll_without_moves_passes_automatically(self, game_service, dice_faces):
        create(game_service)
        dice_faces.append(3)

        result = asyncio.run(game_service.submit("room-a", RollAction(), PLAYER_1_ID))

        assert result.success
        assert [type(e) for e in result.events] == [
            DiceRolled,
            NoLegalMoves,
            TurnEnded,
            TurnStarted,
        ]
        assert [e.seq for e in result.events] == [2, 3, 4, 5]
        state = asyncio.run(game_service.get_state("room-a"))
        assert state.current_player_index == 1
        assert state.turn_number == 2
        assert state.can_roll is True
        assert state.event_seq == 6

    def test_stalled_six_keeps_the_turn(self, game_service, dice_faces):
        create(game_service)
        state = asyncio.run(game_service.get_state("room-a"))
        game_service._games["room-a"] = place_tokens(
            state, 0, {0: 57, 1: 57, 2: 57, 3: 53}
        )
        dice_faces.append(6)

        result = asyncio.run(game_service.submit("room-a", RollAction()))

        assert isinstance(result.events[-1], ExtraRollGranted)
        assert result.state.current_player_index == 0
        assert result.state.can_roll is True

    def test_rejected_action_keeps_stored_state(self, game_service):
        create(game_service)
        before = asyncio.run(game_service.get_state("room-a"))

        result = asyncio.run(
            game_service.submit(
                "room-a", MoveAction(token_id="red_token_0", move_index=0), PLAYER_1_ID
            )
        )

        assert result.error_code == "NOT_MOVE_PHASE"
        assert asyncio.run(game_service.get_state("room-a")) is before

    def test_wrong_player(self, game_service):
        create(game_service, "room-a", PLAYER_1_ID, PLAYER_2_ID, PLAYER_3_ID)

        result = asyncio.run(game_service.submit("room-a", RollAction(), PLAYER_3_ID))

        assert result.error_code == "NOT_YOUR_TURN"

    def test_concurrent_rolls_are_serialized(self, game_service, dice_faces):
        create(game_service)
        dice_faces.extend([6, 6])

        async def race():
            return await asyncio.gather(
                game_service.submit("room-a", RollAction(), PLAYER_1_ID),
                game_service.submit("room-a", RollAction(), PLAYER_1_ID),
            )

        first, second = asyncio.run(race())

        assert first.success
        assert second.error_code == "NOT_ROLL_PHASE"
        assert dice_faces == [6]


class TestPendingEffect:
    def land_red_on_freeze(self, game_service, dice_faces):
        create(game_service)
        state = asyncio.run(game_service.get_state("room-a"))
        game_service._games["room-a"] = place_tokens(state, 0, {0: 15})
        dice_faces.append(3)
        asyncio.run(game_service.submit("room-a", RollAction()))
        moved = asyncio.run(
            game_service.submit("room-a", MoveAction(token_id="red_token_0", move_index=0))
        )
        assert moved.state.special_effect is not None
        assert moved.state.current_player_index == 1

    def test_roll_waits_for_dismiss(self, game_service, dice_faces):
        self.land_red_on_freeze(game_service, dice_faces)
        dice_faces.append(2)

        result = asyncio.run(game_service.submit("room-a", RollAction(), PLAYER_2_ID))

        assert result.error_code == "EFFECT_PENDING"
        assert dice_faces == [2]
        state = asyncio.run(game_service.get_state("room-a"))
        assert state.special_effect is not None
        assert state.can_roll is True

    def test_freeze_takes_hold_before_next_roll(self, game_service, dice_faces):
        self.land_red_on_freeze(game_service, dice_faces)

        dismissed = asyncio.run(game_service.submit("room-a", DismissEffectAction()))
        assert any(isinstance(e, PlayerFrozen) for e in dismissed.events)

        dice_faces.append(2)
        rolled = asyncio.run(game_service.submit("room-a", RollAction(), PLAYER_2_ID))

        assert rolled.success
        assert rolled.state.frozen_players == {PLAYER_1_ID}


class TestRoomLocks:
    def test_unknown_rooms_leave_no_locks(self, game_service):
        for i in range(50):
            result = asyncio.run(game_service.submit(f"nowhere-{i}", RollAction()))
            assert result.error_code == "GAME_NOT_FOUND"

        assert game_service.get_lock_count() == 0

    def test_failed_creates_leave_no_locks(self, game_service):
        create(game_service, "room-a", PLAYER_1_ID)
        create(game_service, "room-a")
        create(game_service, "room-b")
        create(game_service, "room-c")

        assert game_service.get_game_count() == 2
        assert game_service.get_lock_count() == 2

    def test_delete_drops_the_lock(self, game_service):
        create(game_service)

        asyncio.run(game_service.delete_game("room-a"))

        assert game_service.get_lock_count() == 0
