# synqit/api/routers/auth.py
from fastapi import APIRouter, Depends, Response, status

from synqit.api.deps import CurrentSession, get_auth_service, get_current_session, get_current_user
from synqit.config import settings
from synqit.core.rate_limit import auth_limiter
from synqit.core.responses import ok
from synqit.models.user import User
from synqit.schemas.auth import (
    ChangePasswordRequest,
    EmailRequest,
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
    TokenRequest,
)
from synqit.services import AuthService
from synqit.services.serializers import user_to_dict

router = APIRouter(prefix="/auth", tags=["auth"])


def _set_token_cookie(response: Response, result: dict) -> None:
    response.set_cookie(
        "accessToken",
        result["token"],
        httponly=True,
        secure=settings.env != "dev",
        samesite="lax",
        max_age=settings.session_ttl_days * 24 * 3600,
    )


@router.post("/register", status_code=status.HTTP_201_CREATED, dependencies=[Depends(auth_limiter)])
async def register(body: RegisterRequest, response: Response, auth: AuthService = Depends(get_auth_service)):
    """
    Register a new user account.

    Creates the user, stores a hashed email verification token (sent to the
    notification sink) and opens a first session.

    Returns:
        dict: Envelope whose data holds user, token and expiresAt

    Raises:
        AppError (400): Weak password
        AppError (409): Email or wallet address already registered
    """
    result = await auth.register(body)
    _set_token_cookie(response, result)
    return ok(result, "User registered successfully. Please check your email to verify your account.")


@router.post("/login", dependencies=[Depends(auth_limiter)])
async def login(body: LoginRequest, response: Response, auth: AuthService = Depends(get_auth_service)):
    """
    Authenticate user and create a session.

    The access token is returned in the body and also set as an HttpOnly
    cookie named "accessToken" for browser clients.

    Raises:
        AppError (401): Unknown email or wrong password (same message)
        AppError (423): Account locked after too many failed attempts
    """
    result = await auth.login(body.email, body.password)
    _set_token_cookie(response, result)
    return ok(result, "Login successful")


@router.post("/logout")
async def logout(
    response: Response,
    current: CurrentSession = Depends(get_current_session),
    auth: AuthService = Depends(get_auth_service),
):
    await auth.logout(current.session_id)
    response.delete_cookie("accessToken")
    return ok(message="Logout successful")


@router.get("/profile")
async def profile(user: User = Depends(get_current_user)):
    return ok({"user": user_to_dict(user)}, "Profile retrieved successfully")


@router.post("/refresh")
async def refresh(
    response: Response,
    current: CurrentSession = Depends(get_current_session),
    auth: AuthService = Depends(get_auth_service),
):
    """Issue a new token and retire the one used to call this endpoint."""
    result = await auth.refresh(current.user, current.session_id)
    _set_token_cookie(response, result)
    return ok(result, "Token refreshed successfully")


@router.post("/verify-email")
async def verify_email(body: TokenRequest, auth: AuthService = Depends(get_auth_service)):
    await auth.verify_email(body.token)
    return ok(message="Email verified successfully")


@router.post("/resend-verification")
async def resend_verification(body: EmailRequest, auth: AuthService = Depends(get_auth_service)):
    await auth.resend_verification(body.email)
    return ok(message="If the account exists and is unverified, a verification email has been sent.")


@router.post("/forgot-password", dependencies=[Depends(auth_limiter)])
async def forgot_password(body: EmailRequest, auth: AuthService = Depends(get_auth_service)):
    """Always answers the same way, whether or not the email is registered."""
    message = await auth.forgot_password(body.email)
    return ok(message=message)


@router.post("/reset-password", dependencies=[Depends(auth_limiter)])
async def reset_password(body: ResetPasswordRequest, auth: AuthService = Depends(get_auth_service)):
    """
    Set a new password from a reset token.

    All existing sessions of the user are revoked, so every device has to
    log in again.
    """
    await auth.reset_password(body.token, body.newPassword)
    return ok(message="Password reset successfully. Please log in with your new password.")


@router.post("/change-password")
async def change_password(
    body: ChangePasswordRequest,
    user: User = Depends(get_current_user),
    auth: AuthService = Depends(get_auth_service),
):
    await auth.change_password(user, body.currentPassword, body.newPassword)
    return ok(message="Password changed successfully. Please log in again.")
