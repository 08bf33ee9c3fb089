# synqit/services/project_service.py
"""
Project Service

Project create/update commands, the public project listing, per-project
stats and logo/banner uploads. Tags and blockchain preferences are always
written through `replace_children`, which swaps the whole set inside one
transaction.
"""
import logging
from typing import Optional

from fastapi import status
from tortoise.exceptions import IntegrityError
from tortoise.expressions import F, Q, Subquery

from synqit.config import settings
from synqit.core.db import Database
from synqit.core.errors import AppError
from synqit.core.responses import pagination
from synqit.core.storage import ImageStore, discard_quietly, validate_image
from synqit.models import BlockchainPreference, Partnership, Project, ProjectTag, User
from synqit.models.enums import PartnershipStatus
from synqit.services.serializers import project_to_dict

logger = logging.getLogger("uvicorn.error")

# camelCase request key -> model attribute
PROJECT_FIELDS = {
    "name": "name",
    "description": "description",
    "website": "website",
    "logoUrl": "logo_url",
    "bannerUrl": "banner_url",
    "foundedYear": "founded_year",
    "projectType": "project_type",
    "projectStage": "project_stage",
    "teamSize": "team_size",
    "fundingStage": "funding_stage",
    "tokenAvailability": "token_availability",
    "totalFunding": "total_funding",
    "isLookingForFunding": "is_looking_for_funding",
    "isLookingForPartners": "is_looking_for_partners",
    "developmentFocus": "development_focus",
    "contactEmail": "contact_email",
    "twitterHandle": "twitter_handle",
    "discordServer": "discord_server",
    "telegramGroup": "telegram_group",
    "redditCommunity": "reddit_community",
    "githubUrl": "github_url",
    "whitepaperUrl": "whitepaper_url",
    "country": "country",
    "city": "city",
    "timezone": "timezone",
}

SORTABLE_FIELDS = {
    "updatedAt": "updated_at",
    "createdAt": "created_at",
    "name": "name",
    "trustScore": "trust_score",
    "viewCount": "view_count",
    "foundedYear": "founded_year",
}

PROJECT_RELATIONS = ("tags", "blockchain_preferences")


def normalize_tags(tags) -> list[str]:
    """Strip, drop blanks and de-duplicate case-insensitively; first spelling wins."""
    result, seen = [], set()
    for tag in tags or []:
        cleaned = tag.strip()
        key = cleaned.lower()
        if cleaned and key not in seen:
            seen.add(key)
            result.append(cleaned)
    return result


def normalize_blockchains(prefs) -> list[tuple]:
    """
    Accepts bare chains or `{blockchain, isPrimary}` entries and returns
    (blockchain, is_primary) pairs, one per chain. When no entry is marked
    primary the first chain becomes primary.
    """
    pairs, seen = [], set()
    for item in prefs or []:
        if isinstance(item, dict):
            chain, primary = item.get("blockchain"), bool(item.get("isPrimary"))
        elif hasattr(item, "blockchain"):
            chain, primary = item.blockchain, bool(item.isPrimary)
        else:
            chain, primary = item, False
        if chain in seen:
            continue
        seen.add(chain)
        pairs.append((chain, primary))
    if pairs and not any(primary for _, primary in pairs):
        pairs[0] = (pairs[0][0], True)
    return pairs


def _apply_fields(project: Project, values: dict) -> list[str]:
    changed = []
    for key, attr in PROJECT_FIELDS.items():
        if key in values:
            setattr(project, attr, values[key])
            changed.append(attr)
    return changed


class ProjectService:
    def __init__(self, db: Database, image_store: Optional[ImageStore] = None):
        self.db = db
        self.image_store = image_store

    # ------------------------------------------------------------------
    # Child collections
    # ------------------------------------------------------------------
    async def replace_children(self, project: Project, tags=None, blockchain_preferences=None) -> None:
        """
        Replace the project's tags and/or blockchain preferences.
        `None` leaves a collection alone; a list (even empty) replaces it.
        Both replacements happen in a single transaction.
        """
        if tags is None and blockchain_preferences is None:
            return
        async with self.db.transaction():
            await self._replace_children_in_tx(project, tags, blockchain_preferences)

    async def _replace_children_in_tx(self, project: Project, tags, blockchain_preferences) -> None:
        if tags is not None:
            await ProjectTag.filter(project_id=project.id).delete()
            cleaned = normalize_tags(tags)
            if cleaned:
                await ProjectTag.bulk_create([ProjectTag(project_id=project.id, tag=t) for t in cleaned])
        if blockchain_preferences is not None:
            await BlockchainPreference.filter(project_id=project.id).delete()
            pairs = normalize_blockchains(blockchain_preferences)
            if pairs:
                await BlockchainPreference.bulk_create([
                    BlockchainPreference(project_id=project.id, blockchain=chain, is_primary=primary)
                    for chain, primary in pairs
                ])

    async def _load(self, project: Project, include_owner: bool = False) -> dict:
        relations = PROJECT_RELATIONS + (("owner",) if include_owner else ())
        await project.fetch_related(*relations)
        return project_to_dict(project, include_owner=include_owner)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------
    async def create_project(self, user: User, data) -> dict:
        values = data.model_dump(exclude_unset=True)
        if not values.get("name") or not values.get("description"):
            raise AppError("Project name and description are required", status.HTTP_400_BAD_REQUEST)
        if await Project.filter(owner_id=user.id).exists():
            raise AppError("You already have a project", status.HTTP_409_CONFLICT)

        try:
            async with self.db.transaction():
                project = Project(owner_id=user.id)
                _apply_fields(project, values)
                await project.save()
                await self._replace_children_in_tx(
                    project, values.get("tags"), values.get("blockchainPreferences")
                )
        except IntegrityError:
            # A concurrent first write won the unique owner constraint
            raise AppError("You already have a project", status.HTTP_409_CONFLICT)

        logger.info("[project] created %s for user %s", project.id, user.id)
        return await self._load(project)

    async def update_project(self, user: User, data) -> dict:
        project = await Project.get_or_none(owner_id=user.id)
        if not project:
            raise AppError("Project not found", status.HTTP_404_NOT_FOUND)

        values = data.model_dump(exclude_unset=True)
        for required in ("name", "description"):
            if required in values and not values[required]:
                raise AppError(f"Project {required} cannot be empty", status.HTTP_400_BAD_REQUEST)

        async with self.db.transaction():
            changed = _apply_fields(project, values)
            if changed:
                await project.save(update_fields=changed + ["updated_at"])
            await self._replace_children_in_tx(
                project, values.get("tags"), values.get("blockchainPreferences")
            )
        return await self._load(project)

    async def save_project(self, user: User, data) -> tuple[dict, bool]:
        """Create when the user has no project yet, update otherwise. Returns (project, created)."""
        if await Project.filter(owner_id=user.id).exists():
            return await self.update_project(user, data), False
        return await self.create_project(user, data), True

    async def delete_project(self, user: User) -> None:
        project = await Project.get_or_none(owner_id=user.id)
        if not project:
            raise AppError("Project not found", status.HTTP_404_NOT_FOUND)
        async with self.db.transaction():
            await Partnership.filter(
                Q(requester_project_id=project.id) | Q(receiver_project_id=project.id)
            ).delete()
            await ProjectTag.filter(project_id=project.id).delete()
            await BlockchainPreference.filter(project_id=project.id).delete()
            await project.delete()
        if self.image_store:
            await discard_quietly(self.image_store, project.logo_url)
            await discard_quietly(self.image_store, project.banner_url)
        logger.info("[project] deleted %s", project.id)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    async def get_my_project(self, user: User) -> dict:
        project = await Project.get_or_none(owner_id=user.id)
        if not project:
            raise AppError("Project not found", status.HTTP_404_NOT_FOUND)
        return await self._load(project)

    async def get_project_by_id(self, project_id, increment_view: bool = True) -> dict:
        project = await Project.get_or_none(id=project_id)
        if not project:
            raise AppError("Project not found", status.HTTP_404_NOT_FOUND)
        if increment_view:
            await Project.filter(id=project.id).update(view_count=F("view_count") + 1)
            project.view_count += 1
        return await self._load(project, include_owner=True)

    async def list_projects(
        self,
        page: int = 1,
        limit: int = 20,
        search: Optional[str] = None,
        project_type=None,
        project_stage=None,
        funding_stage=None,
        team_size=None,
        token_availability=None,
        blockchain=None,
        tags: Optional[list[str]] = None,
        country: Optional[str] = None,
        development_focus: Optional[str] = None,
        is_looking_for_funding: Optional[bool] = None,
        is_looking_for_partners: Optional[bool] = None,
        sort_by: str = "updatedAt",
        sort_order: str = "desc",
    ) -> dict:
        qs = Project.all()
        if search:
            qs = qs.filter(
                Q(name__icontains=search)
                | Q(description__icontains=search)
                | Q(development_focus__icontains=search)
            )
        for attr, value in (
            ("project_type", project_type),
            ("project_stage", project_stage),
            ("funding_stage", funding_stage),
            ("team_size", team_size),
            ("token_availability", token_availability),
            ("is_looking_for_funding", is_looking_for_funding),
            ("is_looking_for_partners", is_looking_for_partners),
        ):
            if value is not None:
                qs = qs.filter(**{attr: value})
        if country:
            qs = qs.filter(country__icontains=country)
        if development_focus:
            qs = qs.filter(development_focus__icontains=development_focus)
        if blockchain:
            chains = BlockchainPreference.filter(blockchain=blockchain).values("project_id")
            qs = qs.filter(id__in=Subquery(chains))
        cleaned_tags = normalize_tags(tags)
        if cleaned_tags:
            tag_q = Q(*[Q(tag__iexact=t) for t in cleaned_tags], join_type=Q.OR)
            tagged = ProjectTag.filter(tag_q).values("project_id")
            qs = qs.filter(id__in=Subquery(tagged))

        order = SORTABLE_FIELDS.get(sort_by, "updated_at")
        prefix = "" if sort_order == "asc" else "-"

        total = await qs.count()
        rows = (
            await qs.order_by(f"{prefix}{order}")
            .offset((page - 1) * limit)
            .limit(limit)
            .prefetch_related(*PROJECT_RELATIONS, "owner")
        )
        return {
            "projects": [project_to_dict(p, include_owner=True) for p in rows],
            "pagination": pagination(page, limit, total),
        }

    async def get_project_stats(self, project_id) -> dict:
        project = await Project.get_or_none(id=project_id)
        if not project:
            raise AppError("Project not found", status.HTTP_404_NOT_FOUND)
        involving = Q(requester_project_id=project.id) | Q(receiver_project_id=project.id)
        return {
            "viewCount": project.view_count,
            "partnershipRequestsReceived": await Partnership.filter(receiver_project_id=project.id).count(),
            "partnershipRequestsSent": await Partnership.filter(requester_project_id=project.id).count(),
            "activePartnerships": await Partnership.filter(involving, status=PartnershipStatus.ACCEPTED).count(),
            "pendingPartnerships": await Partnership.filter(involving, status=PartnershipStatus.PENDING).count(),
        }

    # ------------------------------------------------------------------
    # Uploads
    # ------------------------------------------------------------------
    async def upload_image(self, user: User, kind: str, data: bytes, content_type: Optional[str]) -> dict:
        """Store a logo or banner and point the project at it; `kind` is "logo" or "banner"."""
        attr = {"logo": "logo_url", "banner": "banner_url"}[kind]
        project = await Project.get_or_none(owner_id=user.id)
        if not project:
            raise AppError("Project not found", status.HTTP_404_NOT_FOUND)
        validate_image(data, content_type, settings.allowed_image_types, settings.max_upload_mb)

        url = await self.image_store.save(data, content_type, f"projects/{kind}s")
        previous = getattr(project, attr)
        setattr(project, attr, url)
        await project.save(update_fields=[attr, "updated_at"])
        await discard_quietly(self.image_store, previous)
        return {f"{kind}Url": url, "project": await self._load(project)}
