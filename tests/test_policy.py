import pytest

from game_api.auth import is_owner, is_owner_or_player, require_owner, require_owner_or_player
from game_api.core import AuthorizationError
from game_api.models import Game, Player


@pytest.fixture()
def game():
    return Game(name="G", owner_id="owner", players=[Player(id="p1", name="Alice")])


def test_owner_is_authorized_without_being_a_player(game):
    assert all(p.id != "owner" for p in game.players)
    assert is_owner(game, "owner")
    assert is_owner_or_player(game, "owner")


def test_player_is_not_owner(game):
    assert not is_owner(game, "p1")
    assert is_owner_or_player(game, "p1")


def test_stranger_is_neither(game):
    assert not is_owner(game, "someone")
    assert not is_owner_or_player(game, "someone")


def test_require_helpers_raise_authorization_error(game):
    require_owner(game, "owner")
    require_owner_or_player(game, "p1")

    with pytest.raises(AuthorizationError) as exc_info:
        require_owner(game, "p1")
    assert exc_info.value.status_code == 403

    with pytest.raises(AuthorizationError, match="Only players"):
        require_owner_or_player(game, "someone", "Only players allowed")
