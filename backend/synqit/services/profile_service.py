# synqit/services/profile_service.py
"""
Profile Service

The signed-in user's own account: profile fields, 2FA flag, profile
picture, blockchain preferences and account deletion. Project writes are
delegated to ProjectService.
"""
import logging
from typing import Optional

from fastapi import status
from tortoise.expressions import Q

from synqit.config import settings
from synqit.core.db import Database
from synqit.core.errors import AppError
from synqit.core.responses import enum_value
from synqit.core.security import verify_password
from synqit.core.storage import ImageStore, discard_quietly, validate_image
from synqit.models import (
    BlockchainPreference,
    Message,
    Notification,
    Partnership,
    Project,
    ProjectTag,
    User,
    UserSession,
)
from synqit.services.project_service import PROJECT_RELATIONS, ProjectService
from synqit.services.serializers import project_to_dict, user_to_dict

logger = logging.getLogger("uvicorn.error")

# camelCase request key -> User attribute; nothing else is writable here
USER_FIELDS = {
    "firstName": "first_name",
    "lastName": "last_name",
    "bio": "bio",
    "walletAddress": "wallet_address",
    "profileImage": "profile_image",
}


class ProfileService:
    def __init__(self, db: Database, projects: ProjectService, image_store: Optional[ImageStore] = None):
        self.db = db
        self.projects = projects
        self.image_store = image_store

    async def get_profile(self, user: User) -> dict:
        project = await Project.get_or_none(owner_id=user.id)
        if project:
            await project.fetch_related(*PROJECT_RELATIONS)
        return {"user": user_to_dict(user), "project": project_to_dict(project) if project else None}

    async def update_user_profile(self, user: User, data) -> dict:
        values = data.model_dump(exclude_unset=True)
        wallet = values.get("walletAddress")
        if wallet and wallet != user.wallet_address:
            if await User.filter(wallet_address=wallet).exclude(id=user.id).exists():
                raise AppError("Wallet address is already linked to another account", status.HTTP_409_CONFLICT)

        changed = []
        for key, attr in USER_FIELDS.items():
            if key in values:
                setattr(user, attr, values[key])
                changed.append(attr)
        if changed:
            await user.save(update_fields=changed + ["updated_at"])
        return user_to_dict(user)

    async def toggle_two_factor(self, user: User, enabled: Optional[bool] = None) -> dict:
        user.two_factor_enabled = (not user.two_factor_enabled) if enabled is None else enabled
        await user.save(update_fields=["two_factor_enabled", "updated_at"])
        return {"twoFactorEnabled": user.two_factor_enabled}

    async def delete_account(self, user: User, password: str) -> None:
        """Remove the user and everything hanging off the account, in one transaction."""
        if not verify_password(password, user.password_hash):
            raise AppError("Password is incorrect", status.HTTP_400_BAD_REQUEST)

        project = await Project.get_or_none(owner_id=user.id)
        async with self.db.transaction():
            partnership_ids = await Partnership.filter(
                Q(requester_id=user.id) | Q(receiver_id=user.id)
            ).values_list("id", flat=True)
            if partnership_ids:
                await Notification.filter(partnership_id__in=list(partnership_ids)).delete()
                await Message.filter(partnership_id__in=list(partnership_ids)).delete()
                await Partnership.filter(id__in=list(partnership_ids)).delete()
            await Notification.filter(user_id=user.id).delete()
            if project:
                await ProjectTag.filter(project_id=project.id).delete()
                await BlockchainPreference.filter(project_id=project.id).delete()
                await project.delete()
            await UserSession.filter(user_id=user.id).delete()
            await user.delete()

        if self.image_store:
            await discard_quietly(self.image_store, user.profile_image)
            if project:
                await discard_quietly(self.image_store, project.logo_url)
                await discard_quietly(self.image_store, project.banner_url)
        logger.info("[profile] account %s deleted", user.id)

    async def get_blockchain_preferences(self, user: User) -> list[dict]:
        project = await Project.get_or_none(owner_id=user.id)
        if not project:
            return []
        prefs = await BlockchainPreference.filter(project_id=project.id)
        prefs.sort(key=lambda bp: not bp.is_primary)
        return [{"blockchain": enum_value(bp.blockchain), "isPrimary": bp.is_primary} for bp in prefs]

    async def update_blockchain_preferences(self, user: User, preferences: list) -> list[dict]:
        project = await Project.get_or_none(owner_id=user.id)
        if not project:
            raise AppError("Create a project before setting blockchain preferences", status.HTTP_404_NOT_FOUND)
        await self.projects.replace_children(project, blockchain_preferences=preferences)
        return await self.get_blockchain_preferences(user)

    async def upload_profile_image(self, user: User, data: bytes, content_type: Optional[str]) -> dict:
        validate_image(data, content_type, settings.allowed_image_types, settings.max_upload_mb)
        url = await self.image_store.save(data, content_type, "profiles")
        previous = user.profile_image
        user.profile_image = url
        await user.save(update_fields=["profile_image", "updated_at"])
        await discard_quietly(self.image_store, previous)
        return {"profileImage": url, "user": user_to_dict(user)}
