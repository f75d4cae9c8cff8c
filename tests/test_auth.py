import json

from conftest import auth, register


def test_register_returns_api_key(client):
    res = client.post("/auth/register", json={"username": "  alice  "})
    assert res.status_code == 201
    body = res.json()
    assert body["message"] == "User registered successfully"
    user = body["user"]
    assert user["username"] == "alice"
    assert set(user) == {"id", "username", "apiKey", "createdAt"}
    assert len(user["apiKey"]) > 32


def test_duplicate_username_rejected_and_users_unchanged(client, data_dir):
    register(client, "alice")
    before = json.loads((data_dir / "users.json").read_text())

    res = client.post("/auth/register", json={"username": "alice"})
    assert res.status_code == 400
    assert res.json() == {"error": "User already exists"}

    after = json.loads((data_dir / "users.json").read_text())
    assert after == before
    assert len(after) == 1


def test_register_rejects_missing_or_blank_username(client):
    assert client.post("/auth/register", json={}).status_code == 400
    assert client.post("/auth/register", json={"username": "   "}).status_code == 400
    assert client.post("/auth/register", json={"username": 42}).status_code == 400


def test_register_rejects_malformed_json(client):
    res = client.post(
        "/auth/register",
        content="{not json",
        headers={"Content-Type": "application/json"},
    )
    assert res.status_code == 400
    assert "error" in res.json()


def test_protected_route_requires_api_key(client):
    res = client.get("/games")
    assert res.status_code == 401
    assert res.json() == {"error": "API key missing"}


def test_protected_route_rejects_unknown_api_key(client):
    res = client.get("/games", headers={"X-API-Key": "nope"})
    assert res.status_code == 401
    assert res.json() == {"error": "Invalid API key"}


def test_api_key_grants_access(client):
    user = register(client, "bob")
    res = client.get("/games", headers=auth(user))
    assert res.status_code == 200
    assert res.json() == {"count": 0, "games": []}


def test_health_and_unknown_route(client):
    res = client.get("/health")
    assert res.status_code == 200
    assert res.json()["status"] == "ok"
    assert res.json()["connections"] == 0

    res = client.get("/does-not-exist")
    assert res.status_code == 404
    assert res.json() == {"error": "Route not found"}
