from .records import User, Game, Player, Move, utcnow, new_id
from .events import (
    EventType,
    CloseCode,
    GameEvent,
    ConnectedEvent,
    MoveEvent,
    PlayerJoinedEvent,
    PlayerRemovedEvent,
    PlayerDisconnectedEvent,
)
