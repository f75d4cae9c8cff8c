import logging
from typing import Any, Dict, List, Optional

from fastapi import Depends

from ..database.json_store import JsonStore, get_json_store
from ..models.records import Game, Move, Player, utcnow

logger = logging.getLogger(__name__)

# Fields a caller may change through update_game.
UPDATABLE_FIELDS = ("name", "status")


def _find(games: List[Dict[str, Any]], game_id: str) -> Optional[Dict[str, Any]]:
    return next((g for g in games if g.get("id") == game_id), None)


def _store(document: Dict[str, Any], game: Game):
    """Replace a game document in place, refreshing updatedAt."""
    game.updated_at = utcnow()
    document.clear()
    document.update(game.to_document())


class GamesRepository:
    """Games with their embedded players and moves.

    Lookups that miss return None, False or an empty list. Deciding whether
    that is a 404 is left to the caller.
    """

    def __init__(self, store: JsonStore):
        self.store = store
        self.collection = store.games

    async def create_game(self, owner_id: str, name: str) -> Game:
        game = Game(name=name, owner_id=owner_id)
        async with self.collection.transaction() as games:
            games.append(game.to_document())
        logger.info(f"Game created: {game.name} ({game.id}) owner={owner_id}")
        return game

    async def list_games_by_owner(self, owner_id: str) -> List[Game]:
        games = await self.collection.snapshot()
        return [Game(**g) for g in games if g.get("ownerId") == owner_id]

    async def get_game_by_id(self, game_id: str) -> Optional[Game]:
        games = await self.collection.snapshot()
        document = _find(games, game_id)
        return Game(**document) if document else None

    async def update_game(self, game_id: str, updates: Dict[str, Any]) -> Optional[Game]:
        """Merge the given fields into the game and refresh updatedAt."""
        changes = {k: v for k, v in updates.items() if k in UPDATABLE_FIELDS}
        async with self.collection.transaction() as games:
            document = _find(games, game_id)
            if document is None:
                return None

            game = Game(**{**document, **changes})
            _store(document, game)

        logger.info(f"Game {game_id} updated: {changes}")
        return game

    async def delete_game(self, game_id: str) -> bool:
        async with self.collection.transaction() as games:
            document = _find(games, game_id)
            if document is None:
                return False
            games.remove(document)

        logger.info(f"Game {game_id} deleted")
        return True

    async def add_player(self, game_id: str, name: str) -> Optional[Player]:
        async with self.collection.transaction() as games:
            document = _find(games, game_id)
            if document is None:
                return None

            game = Game(**document)
            player = Player(name=name)
            game.players.append(player)
            _store(document, game)

        logger.info(f"Player {player.name} ({player.id}) added to game {game_id}")
        return player

    async def remove_player(self, game_id: str, player_id: str) -> bool:
        async with self.collection.transaction() as games:
            document = _find(games, game_id)
            if document is None:
                return False

            game = Game(**document)
            player = game.find_player(player_id)
            if player is None:
                return False

            game.players.remove(player)
            _store(document, game)

        logger.info(f"Player {player_id} removed from game {game_id}")
        return True

    async def list_players(self, game_id: str) -> List[Player]:
        game = await self.get_game_by_id(game_id)
        return game.players if game else []

    async def add_move(
        self, game_id: str, player_id: str, move_data: Dict[str, Any]
    ) -> Optional[Move]:
        # Moves are append-only: nothing in this repository edits or drops one.
        async with self.collection.transaction() as games:
            document = _find(games, game_id)
            if document is None:
                return None

            game = Game(**document)
            move = Move(player_id=player_id, data=move_data)
            game.moves.append(move)
            _store(document, game)

        logger.debug(f"Move {move.id} recorded in game {game_id} by player {player_id}")
        return move

    async def list_moves(self, game_id: str) -> List[Move]:
        game = await self.get_game_by_id(game_id)
        return game.moves if game else []

    async def get_move(self, game_id: str, move_id: str) -> Optional[Move]:
        game = await self.get_game_by_id(game_id)
        return game.find_move(move_id) if game else None


def get_games_repository(store: JsonStore = Depends(get_json_store)) -> GamesRepository:
    """Dependency injector for GamesRepository"""
    return GamesRepository(store)
