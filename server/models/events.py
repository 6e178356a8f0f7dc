# server/models/events.py
"""Inbound client events and outbound server events."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from models.errors import InvalidInput


class ServerEvent(str, Enum):
    ROOM_CREATED = "roomCreated"
    ROOM_JOINED = "roomJoined"
    PLAYER_JOINED = "playerJoined"
    PLAYER_LEFT = "playerLeft"
    AUTO_START_COUNTDOWN = "autoStartCountdown"
    GAME_START = "gameStart"
    GAME_UPDATE = "gameUpdate"
    GAME_RESTARTED = "gameRestarted"
    GAME_OVER = "gameOver"
    PLAYER_DIED = "playerDied"
    MESSAGE = "message"
    ERROR = "error"


@dataclass
class OutboundMessage:
    """A server event addressed to a fixed list of connections."""

    recipients: List[str]
    event: ServerEvent
    payload: Dict[str, Any]


class ClientEvent(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class CreateRoomEvent(ClientEvent):
    playerName: Optional[str] = Field(default=None, max_length=32)
    difficulty: Optional[str] = "easy"
    numBots: Optional[int] = Field(
        default=None, validation_alias=AliasChoices("numBots", "botCount")
    )

    @field_validator("difficulty", mode="before")
    @classmethod
    def _lenient_difficulty(cls, value):
        # Unknown names are mapped to easy when the room is created.
        return value if isinstance(value, str) else None

    @field_validator("numBots", mode="before")
    @classmethod
    def _lenient_bot_count(cls, value):
        # Anything that is not a number falls back to the default roster size.
        try:
            return int(value)
        except (TypeError, ValueError):
            return None


class JoinRoomEvent(ClientEvent):
    roomId: str = Field(min_length=1)
    playerName: Optional[str] = Field(default=None, max_length=32)

    @field_validator("roomId")
    @classmethod
    def _normalize_room_id(cls, value: str) -> str:
        return value.strip().upper()


class PlayerInputEvent(ClientEvent):
    keys: Dict[str, bool]
    timestamp: Optional[float] = None


class ShootEvent(ClientEvent):
    targetWorldX: float = Field(validation_alias=AliasChoices("targetWorldX", "mouseWorldX"))
    targetWorldY: float = Field(validation_alias=AliasChoices("targetWorldY", "mouseWorldY"))
    timestamp: float


class StartGameEvent(ClientEvent):
    pass


class RestartGameEvent(ClientEvent):
    pass


CLIENT_EVENTS = {
    "createRoom": CreateRoomEvent,
    "joinRoom": JoinRoomEvent,
    "playerInput": PlayerInputEvent,
    "shoot": ShootEvent,
    "startGame": StartGameEvent,
    "restartGame": RestartGameEvent,
}

# High-frequency events whose rejection is silent.
BEST_EFFORT_EVENTS = {"playerInput", "shoot"}


def message_kind(message: Any) -> Optional[str]:
    if not isinstance(message, dict):
        return None
    kind = message.get("type", message.get("event"))
    return kind if isinstance(kind, str) else None


def parse_client_message(message: Any) -> Tuple[str, ClientEvent]:
    """Validate a raw client frame into a typed event.

    Frames are either ``{"type": kind, **fields}`` or
    ``{"event": kind, "data": {...}}``.
    """
    kind = message_kind(message)
    if kind is None:
        raise InvalidInput("Message must be an object with a 'type' field")

    model = CLIENT_EVENTS.get(kind)
    if model is None:
        raise InvalidInput(f"Unknown event type: {kind}")

    data = message.get("data") if "event" in message and "type" not in message else message
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise InvalidInput(f"Payload for {kind} must be an object")

    try:
        return kind, model.model_validate(data)
    except ValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        raise InvalidInput(f"Invalid {kind} payload: {fields}") from e
