"""Authorization rules for games.

Ownership and player membership are separate: the owner is never added to
the player list, yet is always allowed wherever a player is.
"""

from ..core.errors import AuthorizationError
from ..models.records import Game


def is_owner(game: Game, user_id: str) -> bool:
    return game.owner_id == user_id


def is_owner_or_player(game: Game, user_id: str) -> bool:
    return is_owner(game, user_id) or any(p.id == user_id for p in game.players)


def require_owner(game: Game, user_id: str, message: str = "Access denied"):
    if not is_owner(game, user_id):
        raise AuthorizationError(message)


def require_owner_or_player(game: Game, user_id: str, message: str = "Access denied"):
    if not is_owner_or_player(game, user_id):
        raise AuthorizationError(message)
