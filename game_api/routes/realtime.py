import asyncio
import json
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect

from game_api.auth import authenticate, is_owner_or_player
from game_api.models import CloseCode, ConnectedEvent
from game_api.realtime import Connection, ConnectionRegistry, get_connection_registry
from game_api.repositories import (
    GamesRepository,
    UserRepository,
    get_games_repository,
    get_user_repository,
)

logger = logging.getLogger(__name__)

realtime_router = APIRouter()


@realtime_router.websocket("/ws")
async def game_events(
    websocket: WebSocket,
    api_key: Optional[str] = Query(None, alias="apiKey"),
    game_id: Optional[str] = Query(None, alias="gameId"),
    registry: ConnectionRegistry = Depends(get_connection_registry),
    user_repo: UserRepository = Depends(get_user_repository),
    games_repo: GamesRepository = Depends(get_games_repository),
):
    """
    Realtime event stream for one game.

    - Accepts the socket, then checks the API key and game access
    - Rejected sockets are closed with 4000-4003 and never registered
    - Admitted sockets get a `connected` event, then every event of the game
      until they close
    """
    await websocket.accept()

    if not api_key or not game_id:
        await websocket.close(
            code=CloseCode.MISSING_PARAMETER, reason="Missing apiKey or gameId parameter"
        )
        return

    user = await authenticate(api_key, user_repo)
    if user is None:
        await websocket.close(code=CloseCode.INVALID_API_KEY, reason="Invalid API key")
        return

    game = await games_repo.get_game_by_id(game_id)
    if game is None:
        await websocket.close(code=CloseCode.GAME_NOT_FOUND, reason="Game not found")
        return

    if not is_owner_or_player(game, user.id):
        logger.info(f"User {user.username} denied realtime access to game {game_id}")
        await websocket.close(
            code=CloseCode.ACCESS_DENIED,
            reason="Access denied: Not a player or owner of this game",
        )
        return

    connection = Connection(
        websocket=websocket, user_id=user.id, username=user.username, game_id=game_id
    )
    registry.register(connection)

    try:
        # Registered first: once a client sees `connected` it gets every later event.
        await websocket.send_text(
            ConnectedEvent(
                message=f"Connected to game {game.name}",
                game_id=game_id,
                username=user.username,
            ).to_json()
        )

        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                break

            data = frame.get("text")
            if data is None:
                logger.warning(f"Ignoring binary frame from {user.username} in game {game_id}")
                continue
            try:
                message = json.loads(data)
                logger.info(f"Message from {user.username} in game {game_id}: {message}")
            except json.JSONDecodeError as e:
                logger.warning(f"Invalid message format from {user.username}: {e}")

    except WebSocketDisconnect:
        pass
    except Exception as e:
        logger.error(f"WebSocket error for {user.username} in game {game_id}: {e}")
    finally:
        # Shielded so the rest of the game still hears about the disconnect
        # when this handler is cancelled rather than closed.
        await asyncio.shield(registry.release(connection))
