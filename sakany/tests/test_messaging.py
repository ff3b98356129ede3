from __future__ import annotations

import asyncio

import pytest
from fastapi import WebSocketDisconnect
from fastapi.testclient import TestClient

from sakany import app as app_module
from sakany.app import app
from sakany.messaging.store import clear_messages


def _login(c, email, password):
    return c.post("/auth/login", json={"email": email, "password": password}).json()["user"]


def _pair():
    alice, bob = TestClient(app), TestClient(app)
    alice_user = _login(alice, "user@example.com", "user123")
    bob_user = _login(bob, "landlord@example.com", "landlord123")
    return alice, alice_user, bob, bob_user


def test_rest_messaging_round_trip():
    clear_messages()
    alice, alice_user, bob, bob_user = _pair()

    resp = alice.post("/api/messages", json={"receiver_id": bob_user["id"], "content": "Is it available?"})
    assert resp.status_code == 201
    conv_id = resp.json()["conversation_id"]
    bob.post("/api/messages", json={"receiver_id": alice_user["id"], "content": "Yes"})

    convs = bob.get("/api/conversations").json()
    assert len(convs) == 1
    assert convs[0]["other_user_id"] == alice_user["id"]
    assert convs[0]["other_user_name"] == "Demo User"
    assert convs[0]["unread_count"] == 1
    assert set(convs[0]) == {
        "id", "user1_id", "user2_id", "last_message_at",
        "other_user_id", "other_user_name", "unread_count",
    }

    msgs = bob.get(f"/api/messages/{conv_id}").json()
    assert [m["content"] for m in msgs] == ["Is it available?", "Yes"]

    read = bob.post("/api/messages/read", json={"sender_id": alice_user["id"]}).json()
    assert read["updated"] == 1
    assert bob.get("/api/conversations").json()[0]["unread_count"] == 0


def test_messages_of_other_people_are_forbidden():
    clear_messages()
    alice, _, bob, bob_user = _pair()
    conv_id = alice.post("/api/messages", json={"receiver_id": bob_user["id"], "content": "hi"}).json()["conversation_id"]

    admin = TestClient(app)
    _login(admin, "admin@sakany.com", "admin123")
    assert admin.get(f"/api/messages/{conv_id}").status_code == 403
    assert admin.get("/api/messages/999").status_code == 404


def test_send_message_validation():
    alice, alice_user, _, _ = _pair()
    assert alice.post("/api/messages", json={"receiver_id": "ghost", "content": "hi"}).status_code == 404
    assert alice.post("/api/messages", json={"receiver_id": alice_user["id"], "content": "hi"}).status_code == 400
    assert alice.post("/api/messages", json={"receiver_id": "x", "content": ""}).status_code == 422


def test_websocket_requires_login():
    c = TestClient(app)
    with pytest.raises(WebSocketDisconnect):
        with c.websocket_connect("/ws"):
            pass


def test_websocket_ping_and_send():
    clear_messages()
    alice, _, bob, bob_user = _pair()

    with alice.websocket_connect("/ws") as ws:
        ws.send_json({"type": "ping"})
        assert ws.receive_json() == {"type": "pong"}

        # Garbage and unknown receivers are skipped; the socket stays open.
        ws.send_text("not json")
        ws.send_json({"type": "message", "receiver_id": "ghost", "content": "hi"})
        ws.send_json({"type": "message", "receiver_id": bob_user["id"], "content": "over ws"})
        ack = ws.receive_json()

    assert ack["type"] == "sent"
    assert ack["message"]["content"] == "over ws"
    msgs = bob.get(f"/api/messages/{ack['message']['conversation_id']}").json()
    assert [m["content"] for m in msgs] == ["over ws"]


class _RecordingSocket:
    def __init__(self):
        self.frames = []

    async def send_json(self, frame):
        self.frames.append(frame)


class _ClosedSocket:
    async def send_json(self, frame):
        raise RuntimeError("socket closed")


def test_rest_message_is_pushed_to_online_receiver():
    clear_messages()
    alice, _, _, bob_user = _pair()
    socket = _RecordingSocket()
    app_module.connections.connect(bob_user["id"], socket)
    try:
        alice.post("/api/messages", json={"receiver_id": bob_user["id"], "content": "ping bob"})
    finally:
        app_module.connections.disconnect(bob_user["id"])

    assert len(socket.frames) == 1
    assert socket.frames[0]["type"] == "message"
    assert socket.frames[0]["message"]["content"] == "ping bob"


def test_stale_socket_is_dropped_on_forward():
    socket = _ClosedSocket()
    app_module.connections.connect("stale-user", socket)
    asyncio.run(app_module._forward("stale-user", {"type": "message"}))
    assert app_module.connections.get("stale-user") is None
