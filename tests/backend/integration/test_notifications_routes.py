import uuid

import pytest

pytestmark = pytest.mark.asyncio


async def test_notifications_require_auth(client):
    resp = await client.get("/api/notifications")
    assert resp.status_code == 401


async def test_list_and_mark_notifications(client, accepted_partnership):
    requester_headers, receiver_headers, partnership = accepted_partnership
    await client.post(
        "/api/messages/send",
        json={"partnershipId": partnership["id"], "content": "Welcome aboard"},
        headers=requester_headers,
    )

    listing = (await client.get("/api/notifications", headers=receiver_headers)).json()["data"]
    assert listing["unreadCount"] == 2
    # Newest first
    assert [n["notificationType"] for n in listing["notifications"]] == ["NEW_MESSAGE", "PARTNERSHIP_REQUEST"]

    first_id = listing["notifications"][0]["id"]
    marked = await client.put(f"/api/notifications/{first_id}/read", headers=receiver_headers)
    assert marked.status_code == 200
    assert marked.json()["data"]["notification"]["isRead"] is True

    unread_only = (
        await client.get("/api/notifications", params={"unreadOnly": "true"}, headers=receiver_headers)
    ).json()["data"]
    assert [n["notificationType"] for n in unread_only["notifications"]] == ["PARTNERSHIP_REQUEST"]
    assert unread_only["unreadCount"] == 1

    all_read = await client.put("/api/notifications/read-all", headers=receiver_headers)
    assert all_read.json()["data"]["markedCount"] == 1
    after = (await client.get("/api/notifications", headers=receiver_headers)).json()["data"]
    assert after["unreadCount"] == 0


async def test_cannot_mark_someone_elses_notification(client, accepted_partnership):
    requester_headers, receiver_headers, _ = accepted_partnership
    theirs = (await client.get("/api/notifications", headers=receiver_headers)).json()["data"]["notifications"][0]

    resp = await client.put(f"/api/notifications/{theirs['id']}/read", headers=requester_headers)
    assert resp.status_code == 404

    missing = await client.put(f"/api/notifications/{uuid.uuid4()}/read", headers=requester_headers)
    assert missing.status_code == 404
