# synqit/api/routers/companies.py
from typing import Literal, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from synqit.api.deps import get_company_service, get_optional_user
from synqit.core.errors import AppError
from synqit.core.responses import ok
from synqit.models.enums import FundingStage, ProjectType, TeamSize
from synqit.models.user import User
from synqit.services import CompanyService

router = APIRouter(prefix="/companies", tags=["companies"])


def _csv(value: Optional[str]) -> Optional[list[str]]:
    if not value:
        return None
    return [part.strip() for part in value.split(",") if part.strip()]


def _enum_csv(value: Optional[str], enum_type, field: str) -> Optional[list]:
    parts = _csv(value)
    if parts is None:
        return None
    try:
        return [enum_type(part) for part in parts]
    except ValueError:
        raise AppError(f"Invalid {field}: {value}", status.HTTP_400_BAD_REQUEST)


@router.get("")
async def list_companies(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    search: Optional[str] = None,
    projectType: Optional[ProjectType] = None,
    blockchainFocus: Optional[str] = None,
    location: Optional[str] = None,
    fundingStage: Optional[FundingStage] = None,
    teamSize: Optional[TeamSize] = None,
    isVerified: Optional[bool] = None,
    sortBy: Literal["trustScore", "viewCount", "createdAt", "name"] = "trustScore",
    sortOrder: Literal["asc", "desc"] = "desc",
    companies: CompanyService = Depends(get_company_service),
):
    result = await companies.list_companies(
        page=page,
        limit=limit,
        search=search,
        project_type=projectType,
        focus=blockchainFocus,
        location=location,
        funding_stage=fundingStage,
        team_size=teamSize,
        is_verified=isVerified,
        sort_by=sortBy,
        sort_order=sortOrder,
    )
    return ok(result, "Companies retrieved successfully")


@router.get("/featured")
async def featured(limit: int = Query(10, ge=1, le=50), companies: CompanyService = Depends(get_company_service)):
    """Verified companies with a trust score of at least 70."""
    return ok({"companies": await companies.get_featured_companies(limit)}, "Featured companies retrieved successfully")


@router.get("/trending")
async def trending(limit: int = Query(10, ge=1, le=50), companies: CompanyService = Depends(get_company_service)):
    return ok({"companies": await companies.get_trending_companies(limit)}, "Trending companies retrieved successfully")


@router.get("/search")
async def search(
    q: str = Query("", max_length=200),
    projectTypes: Optional[str] = Query(None, description="Comma separated"),
    blockchainFocuses: Optional[str] = Query(None, description="Comma separated"),
    fundingStages: Optional[str] = Query(None, description="Comma separated"),
    teamSizes: Optional[str] = Query(None, description="Comma separated"),
    minTrustScore: Optional[int] = Query(None, ge=0, le=100),
    isVerified: Optional[bool] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    companies: CompanyService = Depends(get_company_service),
):
    """
    Free-text search over name, description, focus and tags, narrowed by
    multi-value filters (comma separated enum values).
    """
    result = await companies.search_companies(
        q.strip(),
        project_types=_enum_csv(projectTypes, ProjectType, "projectTypes"),
        focuses=_csv(blockchainFocuses),
        funding_stages=_enum_csv(fundingStages, FundingStage, "fundingStages"),
        team_sizes=_enum_csv(teamSizes, TeamSize, "teamSizes"),
        min_trust_score=minTrustScore,
        is_verified=isVerified,
        page=page,
        limit=limit,
    )
    return ok(result, "Search completed successfully")


@router.get("/stats")
async def statistics(companies: CompanyService = Depends(get_company_service)):
    return ok({"stats": await companies.get_company_statistics()}, "Company statistics retrieved successfully")


@router.get("/by-type/{project_type}")
async def by_type(
    project_type: ProjectType,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    companies: CompanyService = Depends(get_company_service),
):
    result = await companies.get_companies_by_type(project_type, page=page, limit=limit)
    return ok(result, f"{project_type.value} companies retrieved successfully")


@router.get("/{company_id}")
async def get_company(
    company_id: UUID,
    viewer: Optional[User] = Depends(get_optional_user),
    companies: CompanyService = Depends(get_company_service),
):
    """Company detail. Views by anyone other than the owner count towards viewCount."""
    company = await companies.get_company_by_id(company_id, viewer_id=viewer.id if viewer else None)
    return ok({"company": company}, "Company retrieved successfully")


@router.get("/{company_id}/similar")
async def similar(
    company_id: UUID,
    limit: int = Query(5, ge=1, le=20),
    companies: CompanyService = Depends(get_company_service),
):
    return ok({"companies": await companies.get_similar_companies(company_id, limit)}, "Similar companies retrieved successfully")
