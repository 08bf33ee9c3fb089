# synqit/api/routers/project.py
from typing import Literal, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Query, Response, UploadFile, status

from synqit.api.deps import get_current_user, get_project_service
from synqit.core.responses import ok
from synqit.models.enums import (
    Blockchain,
    FundingStage,
    ProjectStage,
    ProjectType,
    TeamSize,
    TokenAvailability,
)
from synqit.models.user import User
from synqit.schemas.project import ProjectIn
from synqit.services import ProjectService

router = APIRouter(prefix="/project", tags=["project"])
listing_router = APIRouter(prefix="/projects", tags=["project"])


@router.get("")
async def get_my_project(user: User = Depends(get_current_user), projects: ProjectService = Depends(get_project_service)):
    return ok({"project": await projects.get_my_project(user)}, "Project retrieved successfully")


@router.post("")
async def save_project(
    body: ProjectIn,
    response: Response,
    user: User = Depends(get_current_user),
    projects: ProjectService = Depends(get_project_service),
):
    """
    Create or update the caller's project.

    The first call creates the project (201) and requires name and
    description; later calls update only the fields present in the body.
    A `tags` or `blockchainPreferences` list replaces the stored set.

    Raises:
        AppError (400): name/description missing on create
    """
    project, created = await projects.save_project(user, body)
    if created:
        response.status_code = status.HTTP_201_CREATED
        return ok({"project": project}, "Project created successfully")
    return ok({"project": project}, "Project updated successfully")


@router.delete("")
async def delete_project(user: User = Depends(get_current_user), projects: ProjectService = Depends(get_project_service)):
    """Delete the caller's project along with its tags, preferences and partnerships."""
    await projects.delete_project(user)
    return ok(message="Project deleted successfully")


@router.post("/upload-logo")
async def upload_logo(
    file: UploadFile = File(...),
    user: User = Depends(get_current_user),
    projects: ProjectService = Depends(get_project_service),
):
    result = await projects.upload_image(user, "logo", await file.read(), file.content_type)
    return ok(result, "Logo uploaded successfully")


@router.post("/upload-banner")
async def upload_banner(
    file: UploadFile = File(...),
    user: User = Depends(get_current_user),
    projects: ProjectService = Depends(get_project_service),
):
    result = await projects.upload_image(user, "banner", await file.read(), file.content_type)
    return ok(result, "Banner uploaded successfully")


@router.get("/{project_id}")
async def get_project(project_id: UUID, projects: ProjectService = Depends(get_project_service)):
    """Public project page; every view increments the project's view counter."""
    return ok({"project": await projects.get_project_by_id(project_id)}, "Project retrieved successfully")


@router.get("/{project_id}/stats")
async def get_project_stats(
    project_id: UUID,
    user: User = Depends(get_current_user),
    projects: ProjectService = Depends(get_project_service),
):
    return ok({"stats": await projects.get_project_stats(project_id)}, "Project statistics retrieved successfully")


@listing_router.get("")
async def list_projects(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    search: Optional[str] = None,
    projectType: Optional[ProjectType] = None,
    projectStage: Optional[ProjectStage] = None,
    fundingStage: Optional[FundingStage] = None,
    teamSize: Optional[TeamSize] = None,
    tokenAvailability: Optional[TokenAvailability] = None,
    blockchain: Optional[Blockchain] = None,
    tags: Optional[str] = Query(None, description="Comma separated"),
    country: Optional[str] = None,
    developmentFocus: Optional[str] = None,
    isLookingForFunding: Optional[bool] = None,
    isLookingForPartners: Optional[bool] = None,
    sortBy: Literal["updatedAt", "createdAt", "name", "trustScore", "viewCount", "foundedYear"] = "updatedAt",
    sortOrder: Literal["asc", "desc"] = "desc",
    projects: ProjectService = Depends(get_project_service),
):
    """
    Public, paginated project listing.

    `search` matches name, description and development focus
    (case-insensitive). `tags` matches projects carrying any of the given
    tags.
    """
    result = await projects.list_projects(
        page=page,
        limit=limit,
        search=search,
        project_type=projectType,
        project_stage=projectStage,
        funding_stage=fundingStage,
        team_size=teamSize,
        token_availability=tokenAvailability,
        blockchain=blockchain,
        tags=tags.split(",") if tags else None,
        country=country,
        development_focus=developmentFocus,
        is_looking_for_funding=isLookingForFunding,
        is_looking_for_partners=isLookingForPartners,
        sort_by=sortBy,
        sort_order=sortOrder,
    )
    return ok(result, "Projects retrieved successfully")
