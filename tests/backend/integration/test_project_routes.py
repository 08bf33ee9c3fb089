import uuid

import pytest

pytestmark = pytest.mark.asyncio

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


async def test_get_project_when_missing(client, register_user):
    headers, _ = await register_user()
    resp = await client.get("/api/project", headers=headers)
    assert resp.status_code == 404
    assert resp.json() == {"success": False, "message": "Project not found"}


async def test_create_and_update_project(client, register_user):
    headers, user = await register_user()

    resp = await client.post(
        "/api/project",
        json={
            "name": "LendFi",
            "description": "Permissionless lending markets",
            "projectType": "DEFI",
            "tags": [" DeFi ", "lending", "defi", ""],
            "blockchainPreferences": ["ETHEREUM", "ARBITRUM"],
        },
        headers=headers,
    )
    body = resp.json()
    project = body["data"]["project"]
    assert resp.status_code == 201
    assert body["message"] == "Project created successfully"
    assert project["ownerId"] == user["id"]
    assert project["projectType"] == "DEFI"
    assert sorted(project["tags"]) == ["DeFi", "lending"]
    primary = [p for p in project["blockchainPreferences"] if p["isPrimary"]]
    assert primary == [{"blockchain": "ETHEREUM", "isPrimary": True}]

    # Omitted fields and collections stay as they were
    resp = await client.post("/api/project", json={"website": "https://lendfi.example"}, headers=headers)
    updated = resp.json()["data"]["project"]
    assert resp.status_code == 200
    assert resp.json()["message"] == "Project updated successfully"
    assert updated["id"] == project["id"]
    assert updated["name"] == "LendFi"
    assert updated["website"] == "https://lendfi.example"
    assert sorted(updated["tags"]) == ["DeFi", "lending"]
    assert len(updated["blockchainPreferences"]) == 2

    # An empty list replaces the stored set
    resp = await client.post("/api/project", json={"tags": []}, headers=headers)
    cleared = resp.json()["data"]["project"]
    assert cleared["tags"] == []
    assert len(cleared["blockchainPreferences"]) == 2

    mine = await client.get("/api/project", headers=headers)
    assert mine.json()["data"]["project"]["tags"] == []


async def test_create_requires_name_and_description(client, register_user):
    headers, _ = await register_user()
    resp = await client.post("/api/project", json={"name": "No description"}, headers=headers)
    assert resp.status_code == 400
    assert resp.json()["message"] == "Project name and description are required"


async def test_too_many_tags_rejected(client, register_user):
    headers, _ = await register_user()
    resp = await client.post(
        "/api/project",
        json={"name": "Tagged", "description": "Lots of tags", "tags": [f"t{i}" for i in range(21)]},
        headers=headers,
    )
    assert resp.status_code == 400
    assert resp.json()["message"] == "Validation failed"


async def test_public_project_view_increments_views(client, register_user, create_project):
    headers, user = await register_user()
    project = await create_project(headers)

    first = await client.get(f"/api/project/{project['id']}")
    second = await client.get(f"/api/project/{project['id']}")
    assert first.status_code == 200
    assert first.json()["data"]["project"]["viewCount"] == 1
    assert second.json()["data"]["project"]["viewCount"] == 2
    assert second.json()["data"]["project"]["owner"]["id"] == user["id"]
    assert "email" not in second.json()["data"]["project"]["owner"]

    missing = await client.get(f"/api/project/{uuid.uuid4()}")
    assert missing.status_code == 404


async def test_list_projects_filters(client, register_user, create_project):
    defi_headers, _ = await register_user()
    game_headers, _ = await register_user()
    await create_project(
        defi_headers,
        name="Yield Optimizer",
        projectType="DEFI",
        tags=["yield", "Lending"],
        blockchainPreferences=["ETHEREUM"],
        isLookingForPartners=True,
    )
    await create_project(
        game_headers,
        name="Pixel Quest",
        projectType="GAMEFI",
        tags=["gaming"],
        blockchainPreferences=["SOLANA"],
    )

    everything = await client.get("/api/projects")
    assert everything.json()["data"]["pagination"]["total"] == 2

    by_type = await client.get("/api/projects", params={"projectType": "GAMEFI"})
    assert [p["name"] for p in by_type.json()["data"]["projects"]] == ["Pixel Quest"]

    by_search = await client.get("/api/projects", params={"search": "yield"})
    assert [p["name"] for p in by_search.json()["data"]["projects"]] == ["Yield Optimizer"]

    by_chain = await client.get("/api/projects", params={"blockchain": "SOLANA"})
    assert [p["name"] for p in by_chain.json()["data"]["projects"]] == ["Pixel Quest"]

    # Tag match is case-insensitive and any-of
    by_tags = await client.get("/api/projects", params={"tags": "lending,gaming", "sortBy": "name", "sortOrder": "asc"})
    assert [p["name"] for p in by_tags.json()["data"]["projects"]] == ["Pixel Quest", "Yield Optimizer"]

    partners = await client.get("/api/projects", params={"isLookingForPartners": "true"})
    assert [p["name"] for p in partners.json()["data"]["projects"]] == ["Yield Optimizer"]

    paged = await client.get("/api/projects", params={"limit": 1, "page": 2})
    pagination = paged.json()["data"]["pagination"]
    assert len(paged.json()["data"]["projects"]) == 1
    assert pagination == {"page": 2, "limit": 1, "total": 2, "totalPages": 2}

    bad = await client.get("/api/projects", params={"projectType": "SPACESHIPS"})
    assert bad.status_code == 400


async def test_project_stats(client, accepted_partnership, register_user):
    requester_headers, receiver_headers, partnership = accepted_partnership

    resp = await client.get(f"/api/project/{partnership['receiverProjectId']}/stats", headers=receiver_headers)
    stats = resp.json()["data"]["stats"]
    assert resp.status_code == 200
    assert stats["partnershipRequestsReceived"] == 1
    assert stats["partnershipRequestsSent"] == 0
    assert stats["activePartnerships"] == 1
    assert stats["pendingPartnerships"] == 0

    anonymous = await client.get(f"/api/project/{partnership['receiverProjectId']}/stats")
    assert anonymous.status_code == 401


async def test_upload_logo_and_banner(client, register_user, create_project, image_store, s3_client):
    headers, _ = await register_user()

    no_project = await client.post(
        "/api/project/upload-logo", files={"file": ("logo.png", PNG_BYTES, "image/png")}, headers=headers
    )
    assert no_project.status_code == 404

    await create_project(headers)
    logo = await client.post(
        "/api/project/upload-logo", files={"file": ("logo.png", PNG_BYTES, "image/png")}, headers=headers
    )
    data = logo.json()["data"]
    assert logo.status_code == 200
    assert data["logoUrl"].startswith(f"{image_store.public_base_url}/projects/logos/")
    assert ("synqit-media", image_store.key_for(data["logoUrl"])) in s3_client.objects
    assert data["project"]["logoUrl"] == data["logoUrl"]

    banner = await client.post(
        "/api/project/upload-banner", files={"file": ("banner.gif", b"GIF89a....", "image/gif")}, headers=headers
    )
    assert banner.json()["data"]["bannerUrl"].endswith(".gif")

    empty = await client.post(
        "/api/project/upload-banner", files={"file": ("banner.png", b"", "image/png")}, headers=headers
    )
    assert empty.status_code == 400


async def test_delete_project(client, accepted_partnership):
    requester_headers, receiver_headers, partnership = accepted_partnership

    resp = await client.delete("/api/project", headers=receiver_headers)
    assert resp.status_code == 200
    assert (await client.get("/api/project", headers=receiver_headers)).status_code == 404

    listing = await client.get("/api/matches", headers=requester_headers)
    assert listing.json()["data"]["partnerships"] == []

    again = await client.delete("/api/project", headers=receiver_headers)
    assert again.status_code == 404
