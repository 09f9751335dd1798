"""
Tests for the posts endpoints.

Covers:
- Authentication gating on POST /api/posts
- Empty content rejection
- Newest-first listing with author names
- Verbatim content and the newPost broadcast to connected clients
- Generic JSON 500 for database and unexpected failures
"""

from datetime import datetime

from tests.conftest import auth_headers, register, sync


def test_create_post_requires_token(client):
    response = client.post("/api/posts", json={"content": "hello"})
    assert response.status_code == 401
    assert response.json() == {"error": "No token provided"}


def test_create_post_rejects_invalid_token(client):
    response = client.post("/api/posts", json={"content": "hello"}, headers=auth_headers("bogus"))
    assert response.status_code == 403
    assert "error" in response.json()


def test_create_post_rejects_empty_content(client):
    token = register(client, "Alice")["token"]

    for content in ("", "   "):
        response = client.post("/api/posts", json={"content": content}, headers=auth_headers(token))
        assert response.status_code == 400
        assert response.json() == {"error": "Post content is required"}

    missing = client.post("/api/posts", json={}, headers=auth_headers(token))
    assert missing.status_code == 400

    assert client.get("/api/posts").json() == []


def test_create_post_returns_post_with_author(client):
    alice = register(client, "Alice")

    response = client.post("/api/posts", json={"content": "hello"}, headers=auth_headers(alice["token"]))
    assert response.status_code == 201
    post = response.json()
    assert post["content"] == "hello"
    assert post["author_id"] == alice["user"]["id"]
    assert post["author_name"] == "Alice"
    assert post["id"] and post["created_at"]


def test_list_posts_newest_first(client):
    alice = register(client, "Alice")
    bob = register(client, "Bob")

    created = []
    for author, content in [(alice, "one"), (bob, "two"), (alice, "three"), (bob, "four")]:
        response = client.post("/api/posts", json={"content": content}, headers=auth_headers(author["token"]))
        created.append(response.json())

    posts = client.get("/api/posts").json()
    assert [p["id"] for p in posts] == [p["id"] for p in reversed(created)]
    assert [p["author_name"] for p in posts] == ["Bob", "Alice", "Bob", "Alice"]

    timestamps = [datetime.fromisoformat(p["created_at"]) for p in posts]
    assert timestamps == sorted(timestamps, reverse=True)


def test_list_posts_is_public(client):
    alice = register(client, "Alice")
    client.post("/api/posts", json={"content": "visible"}, headers=auth_headers(alice["token"]))

    response = client.get("/api/posts")
    assert response.status_code == 200
    assert [p["content"] for p in response.json()] == ["visible"]


def test_post_content_round_trips_verbatim(client):
    alice = register(client, "Alice")
    content = "  <b>Hi</b> there\n\tünïcødé 🎉  "

    with client.websocket_connect("/ws") as viewer:
        sync(viewer)
        response = client.post("/api/posts", json={"content": content}, headers=auth_headers(alice["token"]))
        assert response.status_code == 201

        event = viewer.receive_json()
        assert event["type"] == "newPost"
        assert event["data"]["content"] == content

    assert client.get("/api/posts").json()[0]["content"] == content


def test_new_post_is_broadcast_to_every_connection(client):
    alice = register(client, "A")
    bob = register(client, "B")

    with client.websocket_connect("/ws") as author_ws, \
            client.websocket_connect("/ws") as joined_ws, \
            client.websocket_connect("/ws") as anonymous_ws:
        author_ws.send_json({"action": "join", "data": alice["user"]["id"]})
        joined_ws.send_json({"action": "join", "data": bob["user"]["id"]})
        for ws in (author_ws, joined_ws, anonymous_ws):
            sync(ws)

        response = client.post("/api/posts", json={"content": "hello"}, headers=auth_headers(alice["token"]))
        post = response.json()

        for ws in (author_ws, joined_ws, anonymous_ws):
            event = ws.receive_json()
            assert event == {"type": "newPost", "data": post}
            assert event["data"]["author_name"] == "A"


def test_database_failure_returns_generic_500(client, monkeypatch):
    from sqlalchemy.exc import OperationalError

    from app.repositories.post_repository import PostRepository

    async def broken_list_all(self):
        raise OperationalError("SELECT * FROM posts", {}, Exception("disk I/O error"))

    monkeypatch.setattr(PostRepository, "list_all", broken_list_all)

    response = client.get("/api/posts")
    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}
    assert "disk" not in response.text


def test_unexpected_error_returns_generic_500(client, monkeypatch):
    from fastapi.testclient import TestClient

    from app.main import app
    from app.repositories.post_repository import PostRepository

    async def broken_list_all(self):
        raise RuntimeError("secret internals")

    monkeypatch.setattr(PostRepository, "list_all", broken_list_all)

    # the server re-raises after answering; only the response matters here
    response = TestClient(app, raise_server_exceptions=False).get("/api/posts")
    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}
    assert "secret" not in response.text
