# synqit/api/deps.py
from dataclasses import dataclass

import jwt
from fastapi import Depends, Header, Request, status

from synqit.core.db import Database
from synqit.core.errors import AppError
from synqit.core.security import decode_access_token, extract_bearer_token
from synqit.models.user import User
from synqit.services import (
    AuthService,
    CompanyService,
    DashboardService,
    MatchingService,
    MessageService,
    NotificationService,
    ProfileService,
    ProjectService,
)


@dataclass
class CurrentSession:
    user: User
    session_id: str


def get_db(request: Request) -> Database:
    return request.app.state.db


def get_auth_service(request: Request) -> AuthService:
    return AuthService(request.app.state.db, request.app.state.notification_sink)


def get_notification_service(request: Request) -> NotificationService:
    return NotificationService(request.app.state.db, request.app.state.notification_sink)


def get_project_service(request: Request) -> ProjectService:
    return ProjectService(request.app.state.db, request.app.state.image_store)


def get_profile_service(
    request: Request,
    projects: ProjectService = Depends(get_project_service),
) -> ProfileService:
    return ProfileService(request.app.state.db, projects, request.app.state.image_store)


def get_matching_service(
    request: Request,
    notifications: NotificationService = Depends(get_notification_service),
) -> MatchingService:
    return MatchingService(request.app.state.db, notifications)


def get_message_service(
    request: Request,
    notifications: NotificationService = Depends(get_notification_service),
) -> MessageService:
    return MessageService(request.app.state.db, notifications)


def get_company_service() -> CompanyService:
    return CompanyService()


def get_dashboard_service(
    matching: MatchingService = Depends(get_matching_service),
    messages: MessageService = Depends(get_message_service),
) -> DashboardService:
    return DashboardService(matching, messages)


async def get_current_session(
    request: Request,
    authorization: str | None = Header(default=None),
    auth: AuthService = Depends(get_auth_service),
) -> CurrentSession:
    """
    FastAPI dependency resolving the caller's session.

    The JWT is read from either:
    1. Authorization header (Bearer token) - preferred method
    2. HttpOnly cookie (accessToken) - fallback method

    A token that decodes fine is still refused unless the session it names
    is active and unexpired (logout and password changes revoke sessions).

    Raises:
        AppError (401): No token, invalid/expired token, or dead session
    """
    token = extract_bearer_token(authorization) or request.cookies.get("accessToken")
    if not token:
        raise AppError("Access token is required", status.HTTP_401_UNAUTHORIZED)

    try:
        payload = decode_access_token(token)
    except jwt.PyJWTError:
        raise AppError("Invalid or expired token", status.HTTP_401_UNAUTHORIZED)

    session_id = payload.get("sessionId")
    user = await auth.validate_session(session_id)
    if not user or str(user.id) != str(payload.get("userId")):
        raise AppError("Session expired or revoked", status.HTTP_401_UNAUTHORIZED)
    return CurrentSession(user=user, session_id=session_id)


async def get_current_user(current: CurrentSession = Depends(get_current_session)) -> User:
    """
    FastAPI dependency to get the current authenticated user.

    Usage:
        @router.get("/protected")
        async def protected_route(user: User = Depends(get_current_user)):
            return {"user_id": str(user.id)}
    """
    return current.user


async def get_optional_user(
    request: Request,
    authorization: str | None = Header(default=None),
    auth: AuthService = Depends(get_auth_service),
) -> User | None:
    """Like get_current_user, but anonymous callers get None instead of a 401."""
    try:
        current = await get_current_session(request, authorization, auth)
    except AppError:
        return None
    return current.user
