import uuid

import pytest
import pytest_asyncio

from synqit.models import Project

pytestmark = pytest.mark.asyncio


@pytest_asyncio.fixture
async def directory(register_user, create_project):
    """Three companies: a verified trusted DEFI one, a DEFI newcomer and a GAMEFI studio."""
    owners = []
    profiles = [
        dict(name="Aave Clone", projectType="DEFI", developmentFocus="lending", fundingStage="SEED",
             teamSize="SMALL_2_10", country="Germany", tags=["lending"]),
        dict(name="Dex Starter", projectType="DEFI", developmentFocus="AMM", fundingStage="PRE_SEED",
             teamSize="SOLO", tags=["swap"]),
        dict(name="Pixel Quest", projectType="GAMEFI", developmentFocus="play to earn", fundingStage="SERIES_A",
             teamSize="MEDIUM_11_50", city="Lisbon", tags=["gaming"]),
    ]
    for fields in profiles:
        headers, _ = await register_user()
        project = await create_project(headers, **fields)
        owners.append((headers, project))
    await Project.filter(id=owners[0][1]["id"]).update(is_verified=True, trust_score=85)
    await Project.filter(id=owners[2][1]["id"]).update(trust_score=40)
    return owners


async def test_list_companies(client, directory):
    resp = await client.get("/api/companies")
    data = resp.json()["data"]
    assert resp.status_code == 200
    assert data["pagination"]["total"] == 3
    # trustScore desc by default
    assert [c["name"] for c in data["companies"]] == ["Aave Clone", "Pixel Quest", "Dex Starter"]
    assert all("partnershipCount" in c for c in data["companies"])

    defi = await client.get("/api/companies", params={"projectType": "DEFI", "sortBy": "name", "sortOrder": "asc"})
    assert [c["name"] for c in defi.json()["data"]["companies"]] == ["Aave Clone", "Dex Starter"]

    located = await client.get("/api/companies", params={"location": "lisbon"})
    assert [c["name"] for c in located.json()["data"]["companies"]] == ["Pixel Quest"]

    verified = await client.get("/api/companies", params={"isVerified": "true"})
    assert [c["name"] for c in verified.json()["data"]["companies"]] == ["Aave Clone"]


async def test_featured_and_trending(client, directory):
    featured = await client.get("/api/companies/featured")
    assert [c["name"] for c in featured.json()["data"]["companies"]] == ["Aave Clone"]

    await client.get(f"/api/companies/{directory[1][1]['id']}")
    trending = await client.get("/api/companies/trending", params={"limit": 1})
    assert [c["name"] for c in trending.json()["data"]["companies"]] == ["Dex Starter"]


async def test_search_companies(client, directory):
    by_tag = await client.get("/api/companies/search", params={"q": "gaming"})
    data = by_tag.json()["data"]
    assert data["searchTerm"] == "gaming"
    assert [c["name"] for c in data["companies"]] == ["Pixel Quest"]

    multi = await client.get(
        "/api/companies/search", params={"fundingStages": "SEED,PRE_SEED", "minTrustScore": 50}
    )
    assert [c["name"] for c in multi.json()["data"]["companies"]] == ["Aave Clone"]

    focus = await client.get("/api/companies/search", params={"blockchainFocuses": "amm,play"})
    names = {c["name"] for c in focus.json()["data"]["companies"]}
    assert names == {"Dex Starter", "Pixel Quest"}

    invalid = await client.get("/api/companies/search", params={"projectTypes": "DEFI,ROCKETS"})
    assert invalid.status_code == 400


async def test_company_statistics(client, directory):
    stats = (await client.get("/api/companies/stats")).json()["data"]["stats"]
    assert stats["totalCompanies"] == 3
    assert stats["verifiedCompanies"] == 1
    assert stats["verificationRate"] == 33
    assert stats["companiesByType"] == {"DEFI": 2, "GAMEFI": 1}
    assert stats["trustScoreStats"] == {"average": 42, "minimum": 0, "maximum": 85}
    assert len(stats["topFocuses"]) == 3


async def test_companies_by_type(client, directory):
    resp = await client.get("/api/companies/by-type/DEFI")
    assert resp.json()["data"]["pagination"]["total"] == 2

    bad = await client.get("/api/companies/by-type/SPACESHIPS")
    assert bad.status_code == 400


async def test_company_detail_counts_views_except_owner(client, directory):
    owner_headers, project = directory[0]

    anonymous = await client.get(f"/api/companies/{project['id']}")
    company = anonymous.json()["data"]["company"]
    assert anonymous.status_code == 200
    assert company["viewCount"] == 1
    assert company["partnershipStats"] == {"sent": 0, "received": 0, "total": 0, "accepted": 0, "successRate": 0}
    assert company["recentPartnerships"] == []

    own = await client.get(f"/api/companies/{project['id']}", headers=owner_headers)
    assert own.json()["data"]["company"]["viewCount"] == 1

    other_headers = directory[1][0]
    other = await client.get(f"/api/companies/{project['id']}", headers=other_headers)
    assert other.json()["data"]["company"]["viewCount"] == 2

    missing = await client.get(f"/api/companies/{uuid.uuid4()}")
    assert missing.status_code == 404
    assert missing.json()["message"] == "Company not found"


async def test_similar_companies(client, directory):
    resp = await client.get(f"/api/companies/{directory[0][1]['id']}/similar")
    assert [c["name"] for c in resp.json()["data"]["companies"]] == ["Dex Starter"]
