import logging
from typing import Any, List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, status
from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from game_api.auth import get_current_user, require_owner, require_owner_or_player
from game_api.core import APITags, NotFoundError, ValidationError
from game_api.models import Game, Move, Player, User
from game_api.realtime import GameEventPublisher, get_event_publisher
from game_api.repositories import GamesRepository, get_games_repository

logger = logging.getLogger(__name__)

games_router = APIRouter(prefix="/games")


class _Schema(BaseModel):
    model_config = {"alias_generator": to_camel, "populate_by_name": True}


# === Request bodies === #
# Untyped on purpose: handlers check values only after the 404 and 403 checks.


class CreateGameRequest(_Schema):
    name: Any = None


class UpdateGameRequest(_Schema):
    name: Any = None
    status: Any = None


class AddPlayerRequest(_Schema):
    name: Any = None


class CreateMoveRequest(_Schema):
    player_id: Any = Field(None, description="Player making the move")
    data: Any = Field(None, description="Opaque move payload (JSON object)")


# === Responses === #


class MessageResponse(_Schema):
    message: str


class GameResponse(_Schema):
    game: Game


class GameMessageResponse(GameResponse):
    message: str


class GameListResponse(_Schema):
    count: int
    games: List[Game]


class PlayerResponse(_Schema):
    message: str
    player: Player


class PlayerListResponse(_Schema):
    game_id: str
    count: int
    players: List[Player]


class MoveResponse(_Schema):
    move: Move


class MoveMessageResponse(MoveResponse):
    message: str


class MoveListResponse(_Schema):
    game_id: str
    count: int
    moves: List[Move]


def _require_name(value: Any, message: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(message)
    return value.strip()


def _optional_text(value: Any, message: str) -> Optional[str]:
    """Stripped text, or None when the field is absent or blank."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(message)
    return value.strip() or None


async def _get_game_or_404(repo: GamesRepository, game_id: str) -> Game:
    game = await repo.get_game_by_id(game_id)
    if game is None:
        raise NotFoundError("Game not found")
    return game


# === Games === #


@games_router.post(
    "",
    response_model=GameMessageResponse,
    status_code=status.HTTP_201_CREATED,
    tags=[APITags.GAMES],
)
async def create_game(
    request: CreateGameRequest,
    user: User = Depends(get_current_user),
    repo: GamesRepository = Depends(get_games_repository),
):
    name = _require_name(request.name, "Invalid game name")
    game = await repo.create_game(user.id, name)
    return GameMessageResponse(message="Game created successfully", game=game)


@games_router.get("", response_model=GameListResponse, tags=[APITags.GAMES])
async def list_games(
    user: User = Depends(get_current_user),
    repo: GamesRepository = Depends(get_games_repository),
):
    """List the games owned by the authenticated user."""
    games = await repo.list_games_by_owner(user.id)
    return GameListResponse(count=len(games), games=games)


@games_router.get(
    "/{game_id}",
    response_model=GameResponse,
    tags=[APITags.GAMES],
)
async def get_game(
    game_id: str,
    user: User = Depends(get_current_user),
    repo: GamesRepository = Depends(get_games_repository),
):
    game = await _get_game_or_404(repo, game_id)
    require_owner(game, user.id)
    return GameResponse(game=game)


@games_router.put(
    "/{game_id}",
    response_model=GameMessageResponse,
    tags=[APITags.GAMES],
)
async def update_game(
    game_id: str,
    request: UpdateGameRequest,
    user: User = Depends(get_current_user),
    repo: GamesRepository = Depends(get_games_repository),
):
    """Rename a game or change its status. Blank fields are ignored."""
    game = await _get_game_or_404(repo, game_id)
    require_owner(game, user.id)

    updates = {}
    name = _optional_text(request.name, "Invalid game name")
    if name:
        updates["name"] = name
    game_status = _optional_text(request.status, "Invalid status")
    if game_status:
        updates["status"] = game_status

    updated = await repo.update_game(game_id, updates)
    if updated is None:
        raise NotFoundError("Game not found")
    return GameMessageResponse(message="Game updated successfully", game=updated)


@games_router.delete("/{game_id}", response_model=MessageResponse, tags=[APITags.GAMES])
async def delete_game(
    game_id: str,
    user: User = Depends(get_current_user),
    repo: GamesRepository = Depends(get_games_repository),
):
    game = await _get_game_or_404(repo, game_id)
    require_owner(game, user.id)

    await repo.delete_game(game_id)
    return MessageResponse(message="Game deleted successfully")


# === Players === #


@games_router.post(
    "/{game_id}/players",
    response_model=PlayerResponse,
    status_code=status.HTTP_201_CREATED,
    tags=[APITags.PLAYERS],
)
async def add_player(
    game_id: str,
    request: AddPlayerRequest,
    background_tasks: BackgroundTasks,
    user: User = Depends(get_current_user),
    repo: GamesRepository = Depends(get_games_repository),
    publisher: GameEventPublisher = Depends(get_event_publisher),
):
    """Add a player to the roster and notify the game's sockets (player-joined)."""
    game = await _get_game_or_404(repo, game_id)
    require_owner(game, user.id)
    name = _require_name(request.name, "Invalid player name")

    player = await repo.add_player(game_id, name)
    if player is None:
        raise NotFoundError("Game not found")

    background_tasks.add_task(publisher.player_joined, game_id, player)
    return PlayerResponse(message="Player added successfully", player=player)


@games_router.get(
    "/{game_id}/players", response_model=PlayerListResponse, tags=[APITags.PLAYERS]
)
async def list_players(
    game_id: str,
    user: User = Depends(get_current_user),
    repo: GamesRepository = Depends(get_games_repository),
):
    game = await _get_game_or_404(repo, game_id)
    require_owner(game, user.id)

    return PlayerListResponse(
        game_id=game_id, count=len(game.players), players=game.players
    )


@games_router.delete(
    "/{game_id}/players/{player_id}",
    response_model=MessageResponse,
    tags=[APITags.PLAYERS],
)
async def remove_player(
    game_id: str,
    player_id: str,
    background_tasks: BackgroundTasks,
    user: User = Depends(get_current_user),
    repo: GamesRepository = Depends(get_games_repository),
    publisher: GameEventPublisher = Depends(get_event_publisher),
):
    """Remove a player from the roster and notify the game's sockets (player-removed)."""
    game = await _get_game_or_404(repo, game_id)
    require_owner(game, user.id)

    if not await repo.remove_player(game_id, player_id):
        raise NotFoundError("Player not found")

    background_tasks.add_task(publisher.player_removed, game_id, player_id)
    return MessageResponse(message="Player removed successfully")


# === Moves === #


@games_router.post(
    "/{game_id}/moves",
    response_model=MoveMessageResponse,
    status_code=status.HTTP_201_CREATED,
    tags=[APITags.MOVES],
)
async def create_move(
    game_id: str,
    request: CreateMoveRequest,
    background_tasks: BackgroundTasks,
    user: User = Depends(get_current_user),
    repo: GamesRepository = Depends(get_games_repository),
    publisher: GameEventPublisher = Depends(get_event_publisher),
):
    """
    Record a move for one of the game's players and push it to the game's
    sockets. The move payload is stored as-is.
    """
    game = await _get_game_or_404(repo, game_id)
    require_owner_or_player(
        game,
        user.id,
        "Access denied: Only players and the game owner can post moves",
    )

    if not isinstance(request.player_id, str) or not request.player_id:
        raise ValidationError("Invalid playerId")
    if not isinstance(request.data, dict):
        raise ValidationError("Invalid move data (must be JSON object)")

    player = game.find_player(request.player_id)
    if player is None:
        raise NotFoundError("Player not found in this game")

    move = await repo.add_move(game_id, player.id, request.data)
    if move is None:
        raise NotFoundError("Game not found")

    background_tasks.add_task(publisher.move_recorded, game_id, move, player.name)
    return MoveMessageResponse(message="Move added successfully", move=move)


@games_router.get(
    "/{game_id}/moves", response_model=MoveListResponse, tags=[APITags.MOVES]
)
async def list_moves(
    game_id: str,
    user: User = Depends(get_current_user),
    repo: GamesRepository = Depends(get_games_repository),
):
    game = await _get_game_or_404(repo, game_id)
    require_owner_or_player(
        game,
        user.id,
        "Access denied: Only players and the game owner can view moves",
    )

    return MoveListResponse(game_id=game_id, count=len(game.moves), moves=game.moves)


@games_router.get(
    "/{game_id}/moves/{move_id}",
    response_model=MoveResponse,
    tags=[APITags.MOVES],
)
async def get_move(
    game_id: str,
    move_id: str,
    user: User = Depends(get_current_user),
    repo: GamesRepository = Depends(get_games_repository),
):
    # Single-move lookup is owner-only, unlike the move list.
    game = await _get_game_or_404(repo, game_id)
    require_owner(game, user.id)

    move = game.find_move(move_id)
    if move is None:
        raise NotFoundError("Move not found")
    return MoveResponse(move=move)
