# synqit/core/db.py
"""
Database configuration and connection management.
Handles Tortoise ORM setup, the injectable Database handle, and the
background health check that runs for the lifetime of the application.
"""
import asyncio
import logging
from typing import Optional

from tortoise import Tortoise, connections
from tortoise.exceptions import DBConnectionError
from tortoise.transactions import in_transaction

from synqit.config import settings

logger = logging.getLogger("uvicorn.error")

MODEL_MODULES = [
    "synqit.models.user",          # User, UserSession
    "synqit.models.project",       # Project, BlockchainPreference, ProjectTag
    "synqit.models.partnership",   # Partnership
    "synqit.models.message",       # Message
    "synqit.models.notification",  # Notification
]


def build_tortoise_config(db_url: str, with_aerich: bool = True) -> dict:
    """
    Build the Tortoise ORM configuration dictionary for a database URL.

    The same structure is used by Aerich for migrations, which is why
    `aerich.models` is registered alongside the application models.
    """
    models = list(MODEL_MODULES)
    if with_aerich:
        models.append("aerich.models")  # Let Aerich manage its migration table
    return {
        "connections": {"default": db_url},
        "apps": {
            "models": {
                "models": models,
                "default_connection": "default",
            },
        },
        "use_tz": True,
        "timezone": "UTC",
    }


# Module-level config consumed by the aerich CLI (tool.aerich in pyproject.toml)
TORTOISE_ORM = build_tortoise_config(settings.database_url)


class Database:
    """
    Explicitly constructed database handle.

    Created once at startup and handed to every service. Wraps connection
    setup (with a bounded, fixed-delay retry), transactions and liveness
    checks so nothing else talks to Tortoise's global registry directly.
    """

    def __init__(
        self,
        db_url: str,
        connection_name: str = "default",
        max_retries: int = 3,
        retry_delay: float = 1.0,
        with_aerich: bool = True,
    ):
        self.db_url = db_url
        self.connection_name = connection_name
        self.max_retries = max(1, max_retries)
        self.retry_delay = retry_delay
        self.config = build_tortoise_config(db_url, with_aerich=with_aerich)

    async def connect(self, generate_schemas: bool = False) -> None:
        """
        Initialize Tortoise and open the connection pool.

        Transient connection failures are retried `max_retries` times with
        a fixed delay before giving up and re-raising.
        """
        for attempt in range(1, self.max_retries + 1):
            try:
                await Tortoise.init(config=self.config)
                break
            except (DBConnectionError, ConnectionError, OSError) as exc:
                if attempt == self.max_retries:
                    logger.error("[db] connection failed after %s attempts: %s", attempt, exc)
                    raise
                logger.warning(
                    "[db] connection attempt %s/%s failed (%s), retrying in %.1fs",
                    attempt, self.max_retries, exc, self.retry_delay,
                )
                await asyncio.sleep(self.retry_delay)

        # Don't auto-generate tables in production; migrations own the schema
        if generate_schemas:
            await Tortoise.generate_schemas()
        logger.info("[db] connected")

    async def close(self) -> None:
        await Tortoise.close_connections()
        logger.info("[db] disconnected")

    def transaction(self):
        """Async context manager running the enclosed queries atomically."""
        return in_transaction(self.connection_name)

    async def ping(self) -> bool:
        try:
            conn = connections.get(self.connection_name)
            await conn.execute_query("SELECT 1")
            return True
        except Exception as exc:
            logger.error("[db] health check failed: %s", exc)
            return False


class DatabaseHealthMonitor:
    """
    Periodically pings the database from a background task.

    `start()` is called on application startup and `stop()` on shutdown;
    the latest result is exposed as `healthy` for the health endpoint.
    """

    def __init__(self, db: Database, interval: float = 30.0):
        self.db = db
        self.interval = interval
        self.healthy: Optional[bool] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="db-health-monitor")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def check_once(self) -> bool:
        healthy = await self.db.ping()
        if self.healthy and not healthy:
            logger.warning("[db] database became unreachable")
        elif self.healthy is False and healthy:
            logger.info("[db] database reachable again")
        self.healthy = healthy
        return healthy

    async def _run(self) -> None:
        while True:
            await self.check_once()
            await asyncio.sleep(self.interval)
