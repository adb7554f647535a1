"""Game action types - explicit user inputs separated from game state."""

from typing import Annotated, Literal

from pydantic import BaseModel, Field


class RollAction(BaseModel):
    """Player rolls the dice. The value is drawn by the server."""

    action_type: Literal["roll"] = "roll"


class MoveAction(BaseModel):
    """Player picks one of the current valid moves."""

    action_type: Literal["move"] = "move"
    token_id: str = Field(..., description="ID of the token to move")
    move_index: int = Field(..., description="Index into the state's valid_moves")


class DismissEffectAction(BaseModel):
    """Host dismisses the special-tile prompt once it has been resolved."""

    action_type: Literal["dismiss_effect"] = "dismiss_effect"


class RescueAction(BaseModel):
    """A partner frees a frozen player."""

    action_type: Literal["rescue"] = "rescue"
    player_id: str = Field(..., description="ID of the player to unfreeze")


class PassTurnAction(BaseModel):
    """Pass after a roll that produced no legal move."""

    action_type: Literal["pass_turn"] = "pass_turn"


# Union type for all game actions
GameAction = Annotated[
    RollAction | MoveAction | DismissEffectAction | RescueAction | PassTurnAction,
    Field(discriminator="action_type"),
]


def build_action_from_payload(payload: dict) -> GameAction:
    """Build a typed action from a raw payload dict.

    Args:
        payload: Dict with 'action_type' key and action-specific fields.

    Returns:
        The appropriate GameAction subtype.

    Raises:
        ValueError: If action_type is missing or unknown.
        pydantic.ValidationError: If action-specific fields are invalid.
    """
    action_type = payload.get("action_type")

    if action_type == "roll":
        return RollAction.model_validate(payload)
    elif action_type == "move":
        return MoveAction.model_validate(payload)
    elif action_type == "dismiss_effect":
        return DismissEffectAction.model_validate(payload)
    elif action_type == "rescue":
        return RescueAction.model_validate(payload)
    elif action_type == "pass_turn":
        return PassTurnAction.model_validate(payload)
    else:
        raise ValueError(f"Unknown action type: {action_type}")
