"""Message Routes — REST fallback for history, sends and read receipts.

Invariants:
    - Missing or unknown X-User-Id → 401
    - POST /messages/{other} → 201 with the enriched message; pushes if online
    - GET /messages/{other} marks received messages read and returns them ascending
    - Empty content → 400, nothing persisted
"""

from socialhub.core.domain_types import NotificationType
from tests.services.fakes import FakeChannel, as_user


async def test_requires_session_identity(client, users):
    assert (await client.get("/api/v1/conversations")).status_code == 401
    res = await client.get("/api/v1/conversations", headers={"X-User-Id": "999"})
    assert res.status_code == 401
    assert res.json()["error"]["code"] == "UNAUTHORIZED"


async def test_send_returns_enriched_message(client, users):
    alice, bob = users["alice"], users["bob"]

    res = await client.post(
        f"/api/v1/messages/{bob.id}", json={"content": " hi bob "}, headers=as_user(alice),
    )

    assert res.status_code == 201
    body = res.json()
    assert body["content"] == "hi bob"
    assert body["senderId"] == alice.id
    assert body["receiverId"] == bob.id
    assert body["read"] is False
    assert body["sender"]["username"] == "alice"


async def test_send_pushes_to_online_receiver(client, registry, users):
    alice, bob = users["alice"], users["bob"]
    bob_channel = FakeChannel()
    registry.register(bob.id, bob_channel)

    res = await client.post(
        f"/api/v1/messages/{bob.id}", json={"content": "ping"}, headers=as_user(alice),
    )

    assert bob_channel.of_type("message_received")[0]["message"]["id"] == res.json()["id"]
    pushed = bob_channel.of_type("notification")[0]["notification"]
    assert pushed["type"] == NotificationType.MESSAGE.value
    assert pushed["entityId"] == res.json()["id"]


async def test_send_rejects_empty_content(client, users):
    alice, bob = users["alice"], users["bob"]

    res = await client.post(
        f"/api/v1/messages/{bob.id}", json={"content": "   "}, headers=as_user(alice),
    )

    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"
    history = await client.get(f"/api/v1/messages/{alice.id}", headers=as_user(bob))
    assert history.json() == []


async def test_send_rejects_over_length_content(client, users):
    alice, bob = users["alice"], users["bob"]

    res = await client.post(
        f"/api/v1/messages/{bob.id}", json={"content": "x" * 6000}, headers=as_user(alice),
    )

    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_send_to_unknown_user_is_400(client, users):
    res = await client.post(
        "/api/v1/messages/999", json={"content": "hello?"}, headers=as_user(users["alice"]),
    )
    assert res.status_code == 400


async def test_history_is_ascending_and_marks_read(client, users):
    alice, bob = users["alice"], users["bob"]
    for text in ("one", "two"):
        await client.post(
            f"/api/v1/messages/{bob.id}", json={"content": text}, headers=as_user(alice),
        )
    await client.post(
        f"/api/v1/messages/{alice.id}", json={"content": "three"}, headers=as_user(bob),
    )

    res = await client.get(f"/api/v1/messages/{alice.id}", headers=as_user(bob))

    messages = res.json()
    assert [m["content"] for m in messages] == ["one", "two", "three"]
    assert [m["read"] for m in messages] == [True, True, False]
    counts = await client.get("/api/v1/notifications/unread-count", headers=as_user(bob))
    assert counts.json()["messages"] == 0


async def test_conversations_preview(client, users):
    alice, bob, carol = users["alice"], users["bob"], users["carol"]
    await client.post(
        f"/api/v1/messages/{alice.id}", json={"content": "from bob"}, headers=as_user(bob),
    )
    await client.post(
        f"/api/v1/messages/{alice.id}", json={"content": "from carol"}, headers=as_user(carol),
    )

    res = await client.get("/api/v1/conversations", headers=as_user(alice))

    previews = res.json()
    assert [p["user"]["username"] for p in previews] == ["carol", "bob"]
    assert previews[0]["lastMessage"]["content"] == "from carol"
    assert all(p["unreadCount"] == 1 for p in previews)


async def test_mark_single_message_read_is_idempotent(client, users):
    alice, bob = users["alice"], users["bob"]
    sent = await client.post(
        f"/api/v1/messages/{bob.id}", json={"content": "x"}, headers=as_user(alice),
    )
    message_id = sent.json()["id"]

    first = await client.post(f"/api/v1/messages/{message_id}/read", headers=as_user(bob))
    second = await client.post(f"/api/v1/messages/{message_id}/read", headers=as_user(bob))
    stale = await client.post("/api/v1/messages/9999/read", headers=as_user(bob))

    assert first.json()["updated"] is True
    assert second.status_code == 200 and second.json()["updated"] is False
    assert stale.status_code == 200 and stale.json()["updated"] is False
