# synqit/api/routers/profile.py
from fastapi import APIRouter, Depends, File, Response, UploadFile

from synqit.api.deps import get_auth_service, get_current_user, get_profile_service, get_project_service
from synqit.core.responses import ok
from synqit.models.user import User
from synqit.schemas.auth import ChangePasswordRequest
from synqit.schemas.profile import (
    BlockchainPreferencesRequest,
    DeleteAccountRequest,
    TwoFactorRequest,
    UserUpdateRequest,
)
from synqit.schemas.project import ProjectIn
from synqit.services import AuthService, ProfileService, ProjectService

router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("/user")
async def get_profile(user: User = Depends(get_current_user), profiles: ProfileService = Depends(get_profile_service)):
    """The caller's account together with their project (null when they have none)."""
    return ok(await profiles.get_profile(user), "Profile retrieved successfully")


@router.put("/user")
async def update_user(
    body: UserUpdateRequest,
    user: User = Depends(get_current_user),
    profiles: ProfileService = Depends(get_profile_service),
):
    """
    Partially update the caller's profile.

    Only firstName, lastName, bio, walletAddress and profileImage are
    writable; any other key in the body is ignored.

    Raises:
        AppError (409): walletAddress already belongs to another account
    """
    return ok({"user": await profiles.update_user_profile(user, body)}, "Profile updated successfully")


@router.post("/user/upload-profile-image")
async def upload_profile_image(
    file: UploadFile = File(...),
    user: User = Depends(get_current_user),
    profiles: ProfileService = Depends(get_profile_service),
):
    data = await file.read()
    result = await profiles.upload_profile_image(user, data, file.content_type)
    return ok(result, "Profile image uploaded successfully")


@router.get("/company")
async def get_company_profile(
    user: User = Depends(get_current_user),
    profiles: ProfileService = Depends(get_profile_service),
):
    profile = await profiles.get_profile(user)
    return ok({"project": profile["project"]}, "Company profile retrieved successfully")


@router.put("/company")
async def save_company_profile(
    body: ProjectIn,
    response: Response,
    user: User = Depends(get_current_user),
    projects: ProjectService = Depends(get_project_service),
):
    """Create the caller's project on first save, update it afterwards."""
    project, created = await projects.save_project(user, body)
    if created:
        response.status_code = 201
    message = "Company profile created successfully" if created else "Company profile updated successfully"
    return ok({"project": project}, message)


@router.post("/company/upload-logo")
async def upload_company_logo(
    file: UploadFile = File(...),
    user: User = Depends(get_current_user),
    projects: ProjectService = Depends(get_project_service),
):
    result = await projects.upload_image(user, "logo", await file.read(), file.content_type)
    return ok(result, "Logo uploaded successfully")


@router.post("/company/upload-banner")
async def upload_company_banner(
    file: UploadFile = File(...),
    user: User = Depends(get_current_user),
    projects: ProjectService = Depends(get_project_service),
):
    result = await projects.upload_image(user, "banner", await file.read(), file.content_type)
    return ok(result, "Banner uploaded successfully")


@router.post("/change-password")
async def change_password(
    body: ChangePasswordRequest,
    user: User = Depends(get_current_user),
    auth: AuthService = Depends(get_auth_service),
):
    await auth.change_password(user, body.currentPassword, body.newPassword)
    return ok(message="Password changed successfully. Please log in again.")


@router.post("/toggle-2fa")
async def toggle_two_factor(
    body: TwoFactorRequest,
    user: User = Depends(get_current_user),
    profiles: ProfileService = Depends(get_profile_service),
):
    result = await profiles.toggle_two_factor(user, body.enabled)
    state = "enabled" if result["twoFactorEnabled"] else "disabled"
    return ok(result, f"Two-factor authentication {state}")


@router.delete("/delete-account")
async def delete_account(
    body: DeleteAccountRequest,
    response: Response,
    user: User = Depends(get_current_user),
    profiles: ProfileService = Depends(get_profile_service),
):
    await profiles.delete_account(user, body.password)
    response.delete_cookie("accessToken")
    return ok(message="Account deleted successfully")


@router.get("/blockchain-preferences")
async def get_blockchain_preferences(
    user: User = Depends(get_current_user),
    profiles: ProfileService = Depends(get_profile_service),
):
    prefs = await profiles.get_blockchain_preferences(user)
    return ok({"blockchainPreferences": prefs}, "Blockchain preferences retrieved successfully")


@router.put("/blockchain-preferences")
async def update_blockchain_preferences(
    body: BlockchainPreferencesRequest,
    user: User = Depends(get_current_user),
    profiles: ProfileService = Depends(get_profile_service),
):
    """Replace the whole preference set; an empty list clears it."""
    prefs = await profiles.update_blockchain_preferences(user, body.blockchainPreferences)
    return ok({"blockchainPreferences": prefs}, "Blockchain preferences updated successfully")
