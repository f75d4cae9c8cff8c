from fastapi import Depends

from ..models.events import MoveEvent, PlayerJoinedEvent, PlayerRemovedEvent
from ..models.records import Move, Player
from .connection_registry import ConnectionRegistry, get_connection_registry


class GameEventPublisher:
    """Turns completed store mutations into realtime events for a game's sockets.

    Route handlers call these only once the mutation has been written, usually
    through BackgroundTasks so the HTTP response does not wait on delivery.
    """

    def __init__(self, registry: ConnectionRegistry):
        self.registry = registry

    async def player_joined(self, game_id: str, player: Player) -> int:
        return await self.registry.broadcast(
            game_id, PlayerJoinedEvent(game_id=game_id, player=player)
        )

    async def player_removed(self, game_id: str, player_id: str) -> int:
        return await self.registry.broadcast(
            game_id, PlayerRemovedEvent(game_id=game_id, player_id=player_id)
        )

    async def move_recorded(self, game_id: str, move: Move, player_name: str) -> int:
        return await self.registry.broadcast(
            game_id, MoveEvent(game_id=game_id, move=move, player_name=player_name)
        )


async def get_event_publisher(
    registry: ConnectionRegistry = Depends(get_connection_registry),
) -> GameEventPublisher:
    return GameEventPublisher(registry)
