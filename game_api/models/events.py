from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from .records import Move, Player


class EventType(str, Enum):
    CONNECTED = "connected"
    MOVE = "move"
    PLAYER_JOINED = "player-joined"
    PLAYER_REMOVED = "player-removed"
    PLAYER_DISCONNECTED = "player-disconnected"


class CloseCode(int, Enum):
    """Websocket close codes used when a handshake is rejected."""

    MISSING_PARAMETER = 4000
    INVALID_API_KEY = 4001
    GAME_NOT_FOUND = 4002
    ACCESS_DENIED = 4003


class _Event(BaseModel):
    model_config = {"alias_generator": to_camel, "populate_by_name": True}

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


# === Realtime events === #


class ConnectedEvent(_Event):
    type: Literal["connected"] = EventType.CONNECTED.value
    message: str
    game_id: str
    username: str


class MoveEvent(_Event):
    type: Literal["move"] = EventType.MOVE.value
    game_id: str
    move: Move
    player_name: str


class PlayerJoinedEvent(_Event):
    type: Literal["player-joined"] = EventType.PLAYER_JOINED.value
    game_id: str
    player: Player


class PlayerRemovedEvent(_Event):
    type: Literal["player-removed"] = EventType.PLAYER_REMOVED.value
    game_id: str
    player_id: str


class PlayerDisconnectedEvent(_Event):
    type: Literal["player-disconnected"] = EventType.PLAYER_DISCONNECTED.value
    game_id: str
    username: str


GameEvent = Annotated[
    Union[
        ConnectedEvent,
        MoveEvent,
        PlayerJoinedEvent,
        PlayerRemovedEvent,
        PlayerDisconnectedEvent,
    ],
    Field(discriminator="type"),
]
