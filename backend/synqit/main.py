# synqit/main.py
import logging

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Your configuration and DB
from synqit.config import settings
from synqit.core.db import Database, DatabaseHealthMonitor
from synqit.core.errors import register_exception_handlers
from synqit.core.notifications import get_notification_sink
from synqit.core.rate_limit import general_limiter
from synqit.core.responses import iso, ok, utc_now
from synqit.core.storage import build_image_store

from synqit.api.routers import auth, companies, dashboard, matches, messages, notifications, profile, project

from synqit.core.bootstrap import run_startup_tasks
logger = logging.getLogger("uvicorn.error")

API_PREFIX = "/api"

app = FastAPI(title=settings.APP_NAME, version=settings.APP_VERSION)

# CORS (with Cookie)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS + [settings.frontend_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Collaborators are attached to app.state so routers can build services per request
app.state.db = Database(
    settings.database_url,
    max_retries=settings.db_connect_retries,
    retry_delay=settings.db_retry_delay_sec,
)
app.state.health_monitor = DatabaseHealthMonitor(app.state.db, interval=settings.db_health_interval_sec)
app.state.notification_sink = get_notification_sink(settings.enable_email_notifications)
app.state.image_store = build_image_store(settings)

@app.on_event("startup")
async def on_startup():
    # DB first; the retry loop gives a starting database a few seconds
    await app.state.db.connect()
    app.state.health_monitor.start()
    logger.info("[startup] notification sink: %s", app.state.notification_sink.name)
    logger.info("[startup] image bucket: %s", app.state.image_store.bucket)
    await run_startup_tasks(app.state.db)

@app.on_event("shutdown")
async def on_shutdown():
    await app.state.health_monitor.stop()
    await app.state.db.close()

# REST
app.include_router(auth.router, prefix=API_PREFIX)
for r in (
    profile.router,
    project.router,
    project.listing_router,
    matches.router,
    messages.router,
    companies.router,
    notifications.router,
    dashboard.router,
):
    app.include_router(r, prefix=API_PREFIX, dependencies=[Depends(general_limiter)])


@app.get(f"{API_PREFIX}/health")
async def health():
    monitor: DatabaseHealthMonitor = app.state.health_monitor
    database = {True: "connected", False: "disconnected", None: "unknown"}[monitor.healthy]
    return ok(
        {
            "status": "ok" if monitor.healthy is not False else "degraded",
            "database": database,
            "environment": settings.env,
            "version": settings.APP_VERSION,
            "timestamp": iso(utc_now()),
        },
        "Synqit API is running",
    )

@app.get(API_PREFIX)
async def info():
    return ok(
        {
            "name": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "endpoints": {
                "auth": f"{API_PREFIX}/auth",
                "profile": f"{API_PREFIX}/profile",
                "project": f"{API_PREFIX}/project",
                "projects": f"{API_PREFIX}/projects",
                "matches": f"{API_PREFIX}/matches",
                "messages": f"{API_PREFIX}/messages",
                "companies": f"{API_PREFIX}/companies",
                "notifications": f"{API_PREFIX}/notifications",
                "dashboard": f"{API_PREFIX}/dashboard",
                "health": f"{API_PREFIX}/health",
            },
        },
        "Welcome to the Synqit API",
    )
