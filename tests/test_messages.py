"""
Tests for the message history endpoints.

Covers:
- GET /api/messages/{id} only for the caller's own id
- Oldest-first history containing sent and received messages with both names
- POST /api/messages persistence, validation and live delivery to the receiver
"""

from tests.conftest import auth_headers, join, register, sync


def send(client, token, receiver_id, content):
    return client.post(
        "/api/messages",
        json={"receiver_id": receiver_id, "content": content},
        headers=auth_headers(token),
    )


def test_history_requires_token(client):
    alice = register(client, "Alice")
    response = client.get(f"/api/messages/{alice['user']['id']}")
    assert response.status_code == 401


def test_history_for_other_user_is_forbidden(client):
    alice = register(client, "Alice")
    bob = register(client, "Bob")

    response = client.get(f"/api/messages/{bob['user']['id']}", headers=auth_headers(alice["token"]))
    assert response.status_code == 403
    assert response.json() == {"error": "Access denied to other user's messages"}

    send(client, bob["token"], alice["user"]["id"], "hi")
    response = client.get(f"/api/messages/{bob['user']['id']}", headers=auth_headers(alice["token"]))
    assert response.status_code == 403


def test_history_oldest_first_with_names(client):
    alice = register(client, "Alice")
    bob = register(client, "Bob")
    carol = register(client, "Carol")
    alice_id, bob_id, carol_id = alice["user"]["id"], bob["user"]["id"], carol["user"]["id"]

    send(client, alice["token"], bob_id, "first")
    send(client, bob["token"], alice_id, "second")
    send(client, bob["token"], carol_id, "not for alice")
    send(client, carol["token"], alice_id, "third")

    response = client.get(f"/api/messages/{alice_id}", headers=auth_headers(alice["token"]))
    assert response.status_code == 200
    messages = response.json()

    assert [m["content"] for m in messages] == ["first", "second", "third"]
    assert [(m["sender_name"], m["receiver_name"]) for m in messages] == [
        ("Alice", "Bob"),
        ("Bob", "Alice"),
        ("Carol", "Alice"),
    ]
    ids = [m["id"] for m in messages]
    assert ids == sorted(ids)


def test_history_empty(client):
    alice = register(client, "Alice")
    response = client.get(f"/api/messages/{alice['user']['id']}", headers=auth_headers(alice["token"]))
    assert response.status_code == 200
    assert response.json() == []


def test_send_message_validation(client):
    alice = register(client, "Alice")
    bob = register(client, "Bob")

    empty = send(client, alice["token"], bob["user"]["id"], "")
    assert empty.status_code == 400

    unknown = send(client, alice["token"], 9999, "hello?")
    assert unknown.status_code == 400
    assert unknown.json() == {"error": "Receiver does not exist"}


def test_send_message_delivers_to_receiver_only(client):
    alice = register(client, "Alice")
    bob = register(client, "Bob")

    with client.websocket_connect("/ws") as alice_ws, client.websocket_connect("/ws") as bob_ws:
        join(alice_ws, alice["user"]["id"])
        join(bob_ws, bob["user"]["id"])

        response = send(client, alice["token"], bob["user"]["id"], "over http")
        assert response.status_code == 201
        message = response.json()
        assert message["sender_name"] == "Alice"
        assert message["receiver_name"] == "Bob"

        assert bob_ws.receive_json() == {"type": "receiveMessage", "data": message}
        sync(alice_ws)
