# synqit/core/bootstrap.py
"""
Bootstrap module for application initialization.
Handles housekeeping that runs once on startup, before traffic arrives.
"""
import logging

from synqit.core.db import Database
from synqit.services.auth_service import AuthService

logger = logging.getLogger("uvicorn.error")


async def run_startup_tasks(db: Database) -> None:
    """
    Deactivate sessions that expired while the server was down.
    Failures are logged and do not block startup.
    """
    try:
        count = await AuthService(db).cleanup_expired_sessions()
    except Exception:
        logger.exception("[bootstrap] expired session cleanup failed")
        return
    logger.info("[bootstrap] startup housekeeping done (expired sessions=%s)", count)
