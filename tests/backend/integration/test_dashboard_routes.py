import pytest

from synqit.models import Project

pytestmark = pytest.mark.asyncio


async def test_dashboard_requires_auth(client):
    resp = await client.get("/api/dashboard/stats")
    assert resp.status_code == 401
    assert resp.json()["success"] is False


async def test_dashboard_stats_for_new_user(client, register_user):
    headers, _ = await register_user()

    resp = await client.get("/api/dashboard/stats", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["data"] == {
        "totalPartnerships": 0,
        "pendingRequests": 0,
        "acceptedPartnerships": 0,
        "unreadMessages": 0,
        "totalConnections": 0,
        "company": None,
        "completionRate": 20,
    }


async def test_dashboard_stats_counts(client, register_user, create_project, accepted_partnership):
    requester_headers, receiver_headers, partnership = accepted_partnership
    receiver_project = partnership["myProject"]
    await client.post(
        "/api/messages/send",
        json={"partnershipId": partnership["id"], "content": "Welcome aboard"},
        headers=requester_headers,
    )

    # A second, still pending request towards the receiver
    newcomer_headers, _ = await register_user()
    await create_project(newcomer_headers)
    created = await client.post(
        "/api/matches/request",
        json={
            "receiverProjectId": receiver_project["id"],
            "partnershipType": "MARKETING",
            "title": "Co-marketing campaign",
            "description": "Joint AMA series and a shared launch announcement.",
        },
        headers=newcomer_headers,
    )
    assert created.status_code == 201
    await Project.filter(id=receiver_project["id"]).update(is_verified=True, trust_score=72)

    receiver = (await client.get("/api/dashboard/stats", headers=receiver_headers)).json()["data"]
    assert receiver["totalPartnerships"] == 2
    assert receiver["pendingRequests"] == 1
    assert receiver["acceptedPartnerships"] == 1
    assert receiver["totalConnections"] == 1
    assert receiver["unreadMessages"] == 1
    assert receiver["completionRate"] == 85
    assert receiver["company"] == {
        "id": receiver_project["id"],
        "name": receiver_project["name"],
        "isVerified": True,
        "trustScore": 72,
    }

    # The sender of a pending request isn't waiting on themselves
    newcomer = (await client.get("/api/dashboard/stats", headers=newcomer_headers)).json()["data"]
    assert newcomer["totalPartnerships"] == 1
    assert newcomer["pendingRequests"] == 0
    assert newcomer["unreadMessages"] == 0
