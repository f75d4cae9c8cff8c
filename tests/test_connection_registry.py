import asyncio
import json

import pytest
from fastapi import WebSocket

from game_api.models import PlayerJoinedEvent, Player
from game_api.realtime import Connection, ConnectionRegistry, ConnectionState, GameEventPublisher


class FakeWebSocket(WebSocket):
    """Records outgoing frames instead of talking to a client."""

    def __init__(self, fail=False, delay=0.0):
        self.scope = {"type": "websocket"}
        self.sent = []
        self.fail = fail
        self.delay = delay
        self.closed_with = None

    async def send_text(self, data):
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise RuntimeError("socket is gone")
        self.sent.append(json.loads(data))

    async def close(self, code=1000, reason=None):
        self.closed_with = code


def make_connection(game_id="g1", username="alice", **ws_kwargs):
    return Connection(
        websocket=FakeWebSocket(**ws_kwargs),
        user_id=f"user-{username}",
        username=username,
        game_id=game_id,
    )


def joined(game_id="g1"):
    return PlayerJoinedEvent(game_id=game_id, player=Player(name="Alice"))


@pytest.fixture()
def registry():
    return ConnectionRegistry()


def test_register_and_unregister(registry):
    conn = make_connection()
    assert conn.state == ConnectionState.CONNECTING

    registry.register(conn)
    assert conn.state == ConnectionState.OPEN
    assert registry.connection_count("g1") == 1

    assert registry.unregister(conn) is True
    assert conn.state == ConnectionState.CLOSED
    assert registry.connection_count("g1") == 0
    assert "g1" not in registry.connections
    assert registry.unregister(conn) is False


def test_unregister_uses_identity(registry):
    first = make_connection()
    second = make_connection()
    registry.register(first)
    registry.register(second)

    registry.unregister(second)
    assert registry.get_connections("g1")[0] is first


@pytest.mark.asyncio
async def test_broadcast_reaches_every_open_connection_of_the_game(registry):
    a, b = make_connection(username="a"), make_connection(username="b")
    elsewhere = make_connection(game_id="g2")
    for conn in (a, b, elsewhere):
        registry.register(conn)

    delivered = await registry.broadcast("g1", joined())

    assert delivered == 2
    assert [e["type"] for e in a.websocket.sent] == ["player-joined"]
    assert [e["type"] for e in b.websocket.sent] == ["player-joined"]
    assert elsewhere.websocket.sent == []


@pytest.mark.asyncio
async def test_broadcast_to_unknown_game_is_a_noop(registry):
    assert await registry.broadcast("nobody", joined("nobody")) == 0


@pytest.mark.asyncio
async def test_failed_send_is_swallowed(registry):
    dead = make_connection(username="dead", fail=True)
    alive = make_connection(username="alive")
    registry.register(dead)
    registry.register(alive)

    delivered = await registry.broadcast("g1", joined())

    assert delivered == 1
    assert len(alive.websocket.sent) == 1
    # Failed sends are not retried and do not evict the connection.
    assert registry.connection_count("g1") == 2


@pytest.mark.asyncio
async def test_slow_socket_does_not_hold_up_others(registry):
    slow = make_connection(username="slow", delay=0.2)
    fast = make_connection(username="fast")
    registry.register(slow)
    registry.register(fast)

    task = asyncio.create_task(registry.broadcast("g1", joined()))
    await asyncio.sleep(0.05)
    assert len(fast.websocket.sent) == 1
    assert slow.websocket.sent == []

    assert await task == 2


@pytest.mark.asyncio
async def test_release_notifies_remaining_connections_once(registry):
    leaving = make_connection(username="leaving")
    staying = make_connection(username="staying")
    registry.register(leaving)
    registry.register(staying)

    await registry.release(leaving)
    await registry.release(leaving)

    assert staying.websocket.sent == [
        {"type": "player-disconnected", "gameId": "g1", "username": "leaving"}
    ]
    assert leaving.websocket.sent == []

    await registry.broadcast("g1", joined())
    assert leaving.websocket.sent == []
    assert len(staying.websocket.sent) == 2


@pytest.mark.asyncio
async def test_release_of_unregistered_connection_is_silent(registry):
    other = make_connection(username="other")
    registry.register(other)

    await registry.release(make_connection(username="never-admitted"))

    assert other.websocket.sent == []


@pytest.mark.asyncio
async def test_shutdown_closes_sockets(registry):
    conns = [make_connection(game_id=g) for g in ("g1", "g1", "g2")]
    for conn in conns:
        registry.register(conn)

    await registry.shutdown()

    assert registry.connection_count() == 0
    assert all(c.websocket.closed_with == 1001 for c in conns)
    assert all(c.state == ConnectionState.CLOSED for c in conns)


@pytest.mark.asyncio
async def test_publisher_builds_events(registry):
    conn = make_connection()
    registry.register(conn)
    publisher = GameEventPublisher(registry)
    player = Player(name="Bob")

    await publisher.player_joined("g1", player)
    await publisher.player_removed("g1", player.id)

    sent = conn.websocket.sent
    assert sent[0]["type"] == "player-joined"
    assert sent[0]["player"]["id"] == player.id
    assert sent[0]["player"]["name"] == "Bob"
    assert "joinedAt" in sent[0]["player"]
    assert sent[1] == {"type": "player-removed", "gameId": "g1", "playerId": player.id}


@pytest.mark.asyncio
async def test_release_logs_connection_duration(registry, caplog):
    conn = make_connection()
    registry.register(conn)

    with caplog.at_level("INFO", logger="game_api.realtime.connection_registry"):
        await registry.release(conn)

    assert "disconnected from game g1 after" in caplog.text
