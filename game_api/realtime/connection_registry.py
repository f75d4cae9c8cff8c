import asyncio
import logging
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from fastapi import WebSocket
from pydantic import BaseModel, Field

from ..models.events import GameEvent, PlayerDisconnectedEvent
from ..models.records import utcnow

logger = logging.getLogger(__name__)


class ConnectionState(str, Enum):
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSED = "closed"


class Connection(BaseModel):
    websocket: WebSocket
    user_id: str
    username: str
    game_id: str
    state: ConnectionState = ConnectionState.CONNECTING
    connected_at: datetime = Field(default_factory=utcnow)

    model_config = {"arbitrary_types_allowed": True}


class ConnectionRegistry:
    """
    Live websocket connections grouped by game.

    register() and unregister() never await, so on a single event loop a
    broadcast always sees either the old or the new set of connections.
    """

    def __init__(self):
        self.connections: Dict[str, List[Connection]] = {}  # game_id -> connections

    def register(self, connection: Connection):
        """Admit an authenticated connection and mark it open."""
        connection.state = ConnectionState.OPEN
        self.connections.setdefault(connection.game_id, []).append(connection)
        logger.info(
            f"User {connection.username} connected to game {connection.game_id}"
        )

    def unregister(self, connection: Connection) -> bool:
        """Remove a connection and mark it closed. Returns False if it was not registered."""
        connection.state = ConnectionState.CLOSED
        game_connections = self.connections.get(connection.game_id, [])
        # Identity, not equality: pydantic and starlette both define __eq__.
        index = next(
            (i for i, c in enumerate(game_connections) if c is connection), None
        )
        if index is None:
            return False

        del game_connections[index]
        if not game_connections:
            del self.connections[connection.game_id]
        return True

    async def release(self, connection: Connection):
        """Close out a connection and tell the rest of the game it left."""
        if not self.unregister(connection):
            return

        duration = (utcnow() - connection.connected_at).total_seconds()
        logger.info(
            f"User {connection.username} disconnected from game {connection.game_id} "
            f"after {duration:.1f}s"
        )
        await self.broadcast(
            connection.game_id,
            PlayerDisconnectedEvent(
                game_id=connection.game_id, username=connection.username
            ),
        )

    async def broadcast(self, game_id: str, event: GameEvent) -> int:
        """
        Send an event to every open connection of a game.

        Sends run concurrently against a snapshot of the game's connections.
        A failed send is logged and dropped; it is never retried and does not
        affect the other recipients.

        Returns:
            int: number of connections the event was delivered to
        """
        targets = [
            c for c in self.connections.get(game_id, []) if c.state == ConnectionState.OPEN
        ]
        if not targets:
            return 0

        message = event.to_json()
        results = await asyncio.gather(*(self._deliver(c, message) for c in targets))
        delivered = sum(1 for ok in results if ok)
        logger.debug(
            f"Broadcast {event.type} to game {game_id}: {delivered}/{len(targets)} delivered"
        )
        return delivered

    async def _deliver(self, connection: Connection, message: str) -> bool:
        if connection.state != ConnectionState.OPEN:
            return False
        try:
            await connection.websocket.send_text(message)
            return True
        except Exception as e:
            logger.warning(
                f"Failed to send to {connection.username} in game {connection.game_id}: {e}"
            )
            return False

    def get_connections(self, game_id: str) -> List[Connection]:
        return list(self.connections.get(game_id, []))

    def connection_count(self, game_id: Optional[str] = None) -> int:
        if game_id is not None:
            return len(self.connections.get(game_id, []))
        return sum(len(c) for c in self.connections.values())

    async def shutdown(self):
        """Close every open socket"""
        logger.info("Shutting down connection registry...")
        for game_connections in list(self.connections.values()):
            for connection in list(game_connections):
                self.unregister(connection)
                try:
                    await connection.websocket.close(code=1001, reason="Server shutdown")
                except Exception as e:
                    logger.warning(f"Error closing socket for {connection.username}: {e}")
        self.connections.clear()
        logger.info("Connection registry shutdown complete")


# Global registry instance
_connection_registry: Optional[ConnectionRegistry] = None


def _get_connection_registry() -> ConnectionRegistry:
    """Get or create the connection registry singleton"""
    global _connection_registry
    if _connection_registry is None:
        _connection_registry = ConnectionRegistry()
    return _connection_registry


async def startup_connection_registry():
    """Initialize the connection registry on startup"""
    _get_connection_registry()
    logger.info("Connection registry initialized")


async def get_connection_registry() -> ConnectionRegistry:
    if _connection_registry is None:
        raise ValueError(
            "ConnectionRegistry has not been initialized, did you forget to call startup_connection_registry()?"
        )
    return _connection_registry


async def shutdown_connection_registry():
    """Close all sockets on shutdown"""
    global _connection_registry
    if _connection_registry:
        await _connection_registry.shutdown()
        _connection_registry = None
