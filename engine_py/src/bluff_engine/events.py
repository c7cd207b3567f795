"""
Event models exchanged with presentation and narration layers.
"""

import time
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, model_validator

from .constants import ACTION_CHALLENGE, ACTION_PASS, ACTION_PLACE, DECLARABLE_VALUES
from .errors import GameError
from .models import Action, Card


class ActionType(str, Enum):
    """Inbound action types."""
    PLACE = ACTION_PLACE
    CHALLENGE = ACTION_CHALLENGE
    PASS = ACTION_PASS


class OutboundEventType(str, Enum):
    """Outbound event types."""
    STATE_CHANGED = "state_changed"
    BOT_ACTION = "bot_action"
    ERROR = "error"


class ErrorCode(str, Enum):
    """Rejection codes reported to callers."""
    INVALID_EVENT = "INVALID_EVENT"
    INVALID_TURN = "INVALID_TURN"
    ILLEGAL_CARDS = "ILLEGAL_CARDS"
    NO_PENDING_CLAIM = "NO_PENDING_CLAIM"
    UNKNOWN_PLAYER = "UNKNOWN_PLAYER"
    GAME_NOT_READY = "GAME_NOT_READY"


class ActionRequest(BaseModel):
    """An action submitted by a human client."""
    type: ActionType
    card_ids: List[str] = Field(default_factory=list, max_length=60)
    declared_value: Optional[str] = None
    target_seq: Optional[int] = None

    @model_validator(mode='after')
    def check_payload(self):
        if self.type == ActionType.PLACE:
            if not self.card_ids:
                raise ValueError('place requires at least one card id')
            if self.declared_value not in DECLARABLE_VALUES:
                raise ValueError(f'invalid declared value: {self.declared_value}')
        return self

    def to_action(self, player_id: str) -> Action:
        if self.type == ActionType.PLACE:
            cards = [Card.from_id(card_id) for card_id in self.card_ids]
            return Action.place(player_id, cards, self.declared_value)
        if self.type == ActionType.CHALLENGE:
            return Action.challenge(player_id, target_seq=self.target_seq)
        return Action.pass_turn(player_id)


class StateChangedEvent(BaseModel):
    type: OutboundEventType = OutboundEventType.STATE_CHANGED
    version: int
    state: Dict[str, Any]
    timestamp: float


class BotActionEvent(BaseModel):
    type: OutboundEventType = OutboundEventType.BOT_ACTION
    bot_id: str
    action: Dict[str, Any]
    flavor_line: Optional[str] = None
    timestamp: float


class ErrorEvent(BaseModel):
    type: OutboundEventType = OutboundEventType.ERROR
    code: ErrorCode
    message: str
    timestamp: float


def parse_action_request(data: Dict[str, Any]) -> ActionRequest:
    """
    Parse raw client data into an ActionRequest.

    Raises:
        ValueError: If the type is unknown or the payload is malformed
    """
    if not data.get("type"):
        raise ValueError("Missing action type")
    try:
        return ActionRequest(**data)
    except Exception as e:
        raise ValueError(f"Invalid action data: {str(e)}")


def create_state_changed_event(state: Dict[str, Any]) -> StateChangedEvent:
    return StateChangedEvent(version=state["version"], state=state, timestamp=time.time())


def create_bot_action_event(bot_id: str, action: Dict[str, Any]) -> BotActionEvent:
    return BotActionEvent(
        bot_id=bot_id,
        action=action,
        flavor_line=action.get("flavor_line"),
        timestamp=time.time()
    )


def create_error_event(error: GameError) -> ErrorEvent:
    return ErrorEvent(code=ErrorCode(error.code), message=error.message, timestamp=time.time())
