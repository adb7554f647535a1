"""Tests for action validation and payload parsing."""

import pytest
from pydantic import ValidationError

from app.services.game.engine import (
    DismissEffectAction,
    MoveAction,
    PassTurnAction,
    RescueAction,
    RollAction,
    build_action_from_payload,
    roll_dice,
    validate_action,
)
from app.services.game.engine.validation import ErrorCode, ValidationResult

from .conftest import PLAYER_1_ID, PLAYER_2_ID, scripted_dice


class TestTurnOwnership:
    @pytest.mark.parametrize("action", [RollAction(), PassTurnAction()])
    def test_turn_actions_by_other_player(self, two_player_game, action):
        validation = validate_action(two_player_game, action, PLAYER_2_ID)

        assert not validation.is_valid
        assert validation.error_code == "NOT_YOUR_TURN"

    def test_current_player_may_roll(self, two_player_game):
        assert validate_action(two_player_game, RollAction(), PLAYER_1_ID).is_valid

    def test_no_player_skips_ownership_check(self, two_player_game):
        assert validate_action(two_player_game, RollAction(), None).is_valid

    def test_dismiss_and_rescue_are_open_to_everyone(self, two_player_game):
        assert validate_action(two_player_game, DismissEffectAction(), PLAYER_2_ID).is_valid
        assert validate_action(
            two_player_game, RescueAction(player_id=PLAYER_1_ID), PLAYER_2_ID
        ).is_valid


class TestPhaseChecks:
    def test_move_before_roll(self, two_player_game):
        action = MoveAction(token_id="red_token_0", move_index=0)

        validation = validate_action(two_player_game, action, PLAYER_1_ID)

        assert validation.error_code == "NOT_MOVE_PHASE"

    def test_pass_before_roll(self, two_player_game):
        validation = validate_action(two_player_game, PassTurnAction(), PLAYER_1_ID)

        assert validation.error_code == "NOT_PASS_PHASE"

    def test_won_game_is_checked_before_turn(self, two_player_game):
        state = two_player_game.model_copy(update={"winner_id": PLAYER_1_ID})

        validation = validate_action(state, RollAction(), PLAYER_2_ID)

        assert validation.error_code == "GAME_ALREADY_WON"

    def test_valid_move(self, two_player_game):
        state = roll_dice(two_player_game, scripted_dice(6)).state
        action = MoveAction(token_id="red_token_2", move_index=2)

        assert validate_action(state, action, PLAYER_1_ID).is_valid


class TestValidationResult:
    def test_error_stores_code_value(self):
        result = ValidationResult.error(ErrorCode.TOKEN_MISMATCH, "wrong token")

        assert result.is_valid is False
        assert result.error_code == "TOKEN_MISMATCH"
        assert result.error_message == "wrong token"


class TestBuildActionFromPayload:
    def test_builds_each_action_type(self):
        assert isinstance(build_action_from_payload({"action_type": "roll"}), RollAction)
        assert isinstance(
            build_action_from_payload({"action_type": "dismiss_effect"}), DismissEffectAction
        )
        assert isinstance(build_action_from_payload({"action_type": "pass_turn"}), PassTurnAction)

        move = build_action_from_payload(
            {"action_type": "move", "token_id": "red_token_1", "move_index": 1}
        )
        assert isinstance(move, MoveAction)
        assert move.token_id == "red_token_1"
        assert move.move_index == 1

        rescue = build_action_from_payload({"action_type": "rescue", "player_id": PLAYER_2_ID})
        assert rescue.player_id == PLAYER_2_ID

    def test_unknown_action_type(self):
        with pytest.raises(ValueError, match="Unknown action type"):
            build_action_from_payload({"action_type": "teleport"})

    def test_move_without_token(self):
        with pytest.raises(ValidationError):
            build_action_from_payload({"action_type": "move", "move_index": 0})
