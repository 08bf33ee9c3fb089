import os
import uuid

TEST_DB_URL = "sqlite://:memory:?cache=shared"
os.environ["DATABASE_URL"] = TEST_DB_URL
os.environ["RATE_LIMIT_ENABLED"] = "false"

import pytest
import pytest_asyncio
from botocore.exceptions import ClientError
from httpx import ASGITransport, AsyncClient

from synqit.config import settings
from synqit.core.db import Database, DatabaseHealthMonitor
from synqit.core.notifications import NotificationSink, OutboundNotification
from synqit.core.rate_limit import ALL_LIMITERS
from synqit.core.storage import S3ImageStore
from synqit.main import app

PASSWORD = "StrongPass1!"
MEDIA_URL = "https://media.synqit.test/synqit-media"


class RecordingNotificationSink(NotificationSink):
    """Keeps every notification so tests can read tokens out of `context`."""

    def __init__(self):
        self.delivered: list[OutboundNotification] = []

    async def deliver(self, notification: OutboundNotification) -> None:
        self.delivered.append(notification)

    @property
    def name(self) -> str:
        return "recording"


class InMemoryS3Client:
    """The slice of the boto3 S3 client the image store calls, backed by a dict."""

    def __init__(self):
        self.buckets: set[str] = set()
        self.objects: dict[tuple[str, str], dict] = {}

    def head_bucket(self, Bucket):
        if Bucket not in self.buckets:
            raise ClientError({"Error": {"Code": "404", "Message": "Not Found"}}, "HeadBucket")
        return {}

    def create_bucket(self, Bucket):
        self.buckets.add(Bucket)
        return {}

    def put_object(self, Bucket, Key, Body, ContentType):
        self.objects[(Bucket, Key)] = {"Body": Body, "ContentType": ContentType}
        return {}

    def delete_object(self, Bucket, Key):
        self.objects.pop((Bucket, Key), None)
        return {}


@pytest.fixture
def sink():
    """Captures outbound notifications (verification and reset tokens live in `context`)."""
    return RecordingNotificationSink()


@pytest.fixture
def s3_client():
    return InMemoryS3Client()


@pytest.fixture
def image_store(s3_client):
    return S3ImageStore("synqit-media", public_base_url=MEDIA_URL, client=s3_client)


@pytest_asyncio.fixture
async def client(sink, image_store):
    """
    Provide an HTTPX AsyncClient bound to the FastAPI app with a fresh DB.
    Startup hooks don't run under ASGITransport, so the app state they
    would build is wired here instead.
    """
    db = Database(TEST_DB_URL, with_aerich=False)
    await db.connect(generate_schemas=True)
    app.state.db = db
    app.state.health_monitor = DatabaseHealthMonitor(db, interval=settings.db_health_interval_sec)
    app.state.notification_sink = sink
    app.state.image_store = image_store
    for limiter in ALL_LIMITERS:
        limiter.reset()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as async_client:
        yield async_client
    await db.close()


@pytest_asyncio.fixture
async def register_user(client):
    """
    Factory fixture registering a user through the API.
    Returns (auth headers, user dict from the response).
    """

    async def _register(
        email: str | None = None,
        password: str = PASSWORD,
        user_type: str = "STARTUP",
        **extra,
    ) -> tuple[dict[str, str], dict]:
        email = email or f"user_{uuid.uuid4().hex[:8]}@example.com"
        resp = await client.post(
            "/api/auth/register",
            json={
                "email": email,
                "password": password,
                "firstName": "Test",
                "lastName": "User",
                "userType": user_type,
                **extra,
            },
        )
        assert resp.status_code == 201, resp.text
        data = resp.json()["data"]
        # Requests authenticate through the header only
        client.cookies.clear()
        return {"Authorization": f"Bearer {data['token']}"}, data["user"]

    return _register


@pytest_asyncio.fixture
async def create_project(client):
    """Factory fixture creating the caller's project via POST /api/project."""

    async def _create(headers: dict[str, str], **fields) -> dict:
        body = {
            "name": f"Project {uuid.uuid4().hex[:6]}",
            "description": "A decentralized protocol for testing partnerships",
            **fields,
        }
        resp = await client.post("/api/project", json=body, headers=headers)
        assert resp.status_code == 201, resp.text
        return resp.json()["data"]["project"]

    return _create


@pytest_asyncio.fixture
async def accepted_partnership(client, register_user, create_project):
    """
    Two users with projects and an ACCEPTED partnership between them.
    Returns (requester headers, receiver headers, partnership dict).
    """
    requester_headers, _ = await register_user()
    receiver_headers, _ = await register_user()
    await create_project(requester_headers, projectType="DEFI")
    target = await create_project(receiver_headers, projectType="INFRASTRUCTURE")

    resp = await client.post(
        "/api/matches/request",
        json={
            "receiverProjectId": target["id"],
            "partnershipType": "TECHNICAL",
            "title": "Integration partnership",
            "description": "Let's integrate our protocols for mutual benefit.",
        },
        headers=requester_headers,
    )
    assert resp.status_code == 201, resp.text
    partnership_id = resp.json()["data"]["partnership"]["id"]
    resp = await client.post(f"/api/matches/{partnership_id}/accept", headers=receiver_headers)
    assert resp.status_code == 200, resp.text
    return requester_headers, receiver_headers, resp.json()["data"]["partnership"]
