import pytest
from fastapi.testclient import TestClient

from game_api.app import app
from game_api.core.env import Environment
from game_api.database.json_store import JsonStore


@pytest.fixture()
def data_dir(tmp_path, monkeypatch):
    path = tmp_path / "data"
    monkeypatch.setenv("DATA_DIR", str(path))
    return path


@pytest.fixture()
def client(data_dir):
    # Entering the client runs the lifespan, so every test gets a fresh store
    # and registry rooted in its own temp directory.
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def store(data_dir):
    json_store = JsonStore(Environment())
    json_store.initialize()
    return json_store


def register(client, username):
    res = client.post("/auth/register", json={"username": username})
    assert res.status_code == 201, res.text
    return res.json()["user"]


def auth(user):
    return {"X-API-Key": user["apiKey"]}


def create_game(client, user, name="Chess night"):
    res = client.post("/games", json={"name": name}, headers=auth(user))
    assert res.status_code == 201, res.text
    return res.json()["game"]


def add_player(client, user, game_id, name="Alice"):
    res = client.post(f"/games/{game_id}/players", json={"name": name}, headers=auth(user))
    assert res.status_code == 201, res.text
    return res.json()["player"]


def ws_url(user, game_id):
    return f"/ws?apiKey={user['apiKey']}&gameId={game_id}"
