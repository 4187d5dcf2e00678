"""
WebSocket message models and validation.
"""

import math
import time
from enum import Enum
from typing import Any, Dict, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from ..constants import SUBSCRIBE_BOARD, SUBSCRIBE_CARD, SUBSCRIBE_NONE
from ..errors import ValidationError


class MessageType(str, Enum):
    """Inbound message types."""
    SUBSCRIBE = "subscribe"
    COMMAND = "command"


class OutboundType(str, Enum):
    COMMAND_RESULT = "command_result"


def _as_text(v):
    if v is None:
        return ""
    return str(v)


# Inbound messages
class SubscribeMessage(BaseModel):
    """Declare which events this connection wants."""
    type: MessageType = MessageType.SUBSCRIBE
    mode: str = SUBSCRIBE_NONE
    cardId: str = ""

    @field_validator('mode', 'cardId', mode='before')
    @classmethod
    def coerce_text(cls, v):
        return _as_text(v)

    @property
    def normalized_mode(self) -> str:
        if self.mode in (SUBSCRIBE_BOARD, SUBSCRIBE_CARD):
            return self.mode
        return SUBSCRIBE_NONE


class CommandMessage(BaseModel):
    """Command sent over the push connection."""
    type: MessageType = MessageType.COMMAND
    requestId: str = ""
    action: str = ""
    token: Optional[str] = None
    payload: Dict[str, Any] = Field(default_factory=dict)

    @field_validator('requestId', 'action', mode='before')
    @classmethod
    def coerce_text(cls, v):
        return _as_text(v)

    @field_validator('payload', mode='before')
    @classmethod
    def coerce_payload(cls, v):
        return v if isinstance(v, dict) else {}


InboundMessage = Union[SubscribeMessage, CommandMessage]


def parse_inbound_message(data: Any) -> Optional[InboundMessage]:
    """
    Parse a decoded WebSocket frame.

    Returns:
        The parsed message, or None when the frame is not a message this
        server understands
    """
    if not isinstance(data, dict):
        return None
    message_type = data.get("type")
    try:
        if message_type == MessageType.SUBSCRIBE.value:
            return SubscribeMessage(**data)
        if message_type == MessageType.COMMAND.value:
            return CommandMessage(**data)
    except PydanticValidationError:
        return None
    return None


# Outbound messages
class EventEnvelope(BaseModel):
    """Pushed state or card-state event."""
    type: str
    sequenceNumber: int
    boardSeed: str
    timestamp: int
    payload: Dict[str, Any]


class CommandResult(BaseModel):
    """Reply to a command sent over the push connection."""
    type: OutboundType = OutboundType.COMMAND_RESULT
    requestId: str = ""
    ok: bool
    status: int
    data: Optional[Dict[str, Any]] = None
    error: Optional[str] = None

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


def create_envelope(event_type: str, sequence_number: int, board_seed: int, payload: Dict[str, Any]) -> EventEnvelope:
    return EventEnvelope(
        type=event_type,
        sequenceNumber=sequence_number,
        boardSeed=str(board_seed),
        timestamp=int(time.time() * 1000),
        payload=payload
    )


def create_command_result(request_id: str, data: Optional[Dict[str, Any]]) -> CommandResult:
    return CommandResult(requestId=request_id, ok=True, status=200, data=data or {})


def create_command_error(request_id: str, status: int, error: str) -> CommandResult:
    return CommandResult(requestId=request_id, ok=False, status=status, error=error)


# Command payloads
class UnlockPayload(BaseModel):
    pin: str = ""

    @field_validator('pin', mode='before')
    @classmethod
    def coerce_pin(cls, v):
        return _as_text(v)


class ChangePinPayload(BaseModel):
    currentPin: str = ""
    nextPin: str = ""

    @field_validator('currentPin', 'nextPin', mode='before')
    @classmethod
    def coerce_pin(cls, v):
        return _as_text(v)


class CallingStylePayload(BaseModel):
    callingStyle: str = ""


class CallNumberPayload(BaseModel):
    number: Any = None

    @field_validator('number', mode='before')
    @classmethod
    def coerce_number(cls, v):
        # Integral values become ints; anything else is left for the engine to reject.
        if isinstance(v, bool):
            return v
        try:
            number = float(v)
        except (TypeError, ValueError):
            return v
        return int(number) if number.is_integer() else v


class GameTypePayload(BaseModel):
    gameType: str = ""


class LedTestPayload(BaseModel):
    enabled: bool


class BrightnessPayload(BaseModel):
    value: Optional[float] = None

    @field_validator('value', mode='before')
    @classmethod
    def coerce_value(cls, v):
        try:
            number = float(v)
        except (TypeError, ValueError):
            return None
        return number if math.isfinite(number) else None


class ThemePayload(BaseModel):
    theme: Optional[int] = None
    id: Optional[int] = None

    @property
    def resolved(self) -> Optional[int]:
        return self.theme if self.theme is not None else self.id


class ColorPayload(BaseModel):
    hex: Optional[str] = None
    color: Optional[str] = None

    @property
    def resolved(self) -> Optional[str]:
        return self.hex or self.color


class JoinCardPayload(BaseModel):
    pin: str = ""
    numbers: List[Any] = Field(default_factory=list)
    cardId: Optional[str] = None

    @field_validator('pin', mode='before')
    @classmethod
    def coerce_pin(cls, v):
        return _as_text(v)

    @field_validator('numbers', mode='before')
    @classmethod
    def coerce_numbers(cls, v):
        return v if isinstance(v, list) else []

    @field_validator('cardId', mode='before')
    @classmethod
    def coerce_card_id(cls, v):
        return None if v is None else str(v)


class MarkCellPayload(BaseModel):
    cardId: str = ""
    cellIndex: int = -1
    marked: bool = False

    @field_validator('cardId', mode='before')
    @classmethod
    def coerce_card_id(cls, v):
        return _as_text(v)

    @field_validator('cellIndex', mode='before')
    @classmethod
    def coerce_cell_index(cls, v):
        # Unusable indexes become -1 so the engine reports them after the card lookup.
        if isinstance(v, bool):
            return -1
        try:
            number = float(v)
        except (TypeError, ValueError):
            return -1
        return int(number) if number.is_integer() else -1

    @field_validator('marked', mode='before')
    @classmethod
    def coerce_marked(cls, v):
        return bool(v)


class CardRefPayload(BaseModel):
    cardId: str = ""

    @field_validator('cardId', mode='before')
    @classmethod
    def coerce_card_id(cls, v):
        return _as_text(v)


PayloadModel = TypeVar("PayloadModel", bound=BaseModel)


def parse_payload(model: Type[PayloadModel], payload: Optional[Dict[str, Any]], message: str = "invalid") -> PayloadModel:
    """Validate a command payload, raising the engine's ValidationError."""
    try:
        return model(**(payload or {}))
    except PydanticValidationError:
        raise ValidationError(message)
