# synqit/api/routers/matches.py
from typing import Literal, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from synqit.api.deps import get_current_user, get_matching_service
from synqit.core.responses import ok
from synqit.models.enums import PartnershipStatus, PartnershipType, ProjectType
from synqit.models.user import User
from synqit.schemas.partnership import PartnershipRequestIn
from synqit.services import MatchingService

router = APIRouter(prefix="/matches", tags=["matches"])

SortBy = Literal["createdAt", "updatedAt", "title"]
SortOrder = Literal["asc", "desc"]


async def _listing(
    matching: MatchingService,
    user: User,
    direction: str,
    page: int,
    limit: int,
    status_filter: Optional[PartnershipStatus],
    partnership_type: Optional[PartnershipType],
    sort_by: str,
    sort_order: str,
) -> dict:
    return await matching.get_user_partnerships(
        user,
        page=page,
        limit=limit,
        status_filter=status_filter,
        partnership_type=partnership_type,
        sort_by=sort_by,
        sort_order=sort_order,
        direction=direction,
    )


@router.post("/request", status_code=status.HTTP_201_CREATED)
async def create_partnership_request(
    body: PartnershipRequestIn,
    user: User = Depends(get_current_user),
    matching: MatchingService = Depends(get_matching_service),
):
    """
    Send a partnership request from the caller's project to another project.

    The receiver gets a PARTNERSHIP_REQUEST notification, written in the
    same transaction as the request.

    Raises:
        AppError (400): Caller has no project, or targets their own project
        AppError (404): Receiver project doesn't exist
        AppError (409): A pending/accepted partnership already links the two projects
    """
    partnership = await matching.create_partnership_request(user, body)
    return ok({"partnership": partnership}, "Partnership request sent successfully")


@router.get("")
async def list_partnerships(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status_filter: Optional[PartnershipStatus] = Query(None, alias="status"),
    partnershipType: Optional[PartnershipType] = None,
    sortBy: SortBy = "createdAt",
    sortOrder: SortOrder = "desc",
    user: User = Depends(get_current_user),
    matching: MatchingService = Depends(get_matching_service),
):
    result = await _listing(matching, user, "all", page, limit, status_filter, partnershipType, sortBy, sortOrder)
    return ok(result, "Partnerships retrieved successfully")


@router.get("/sent")
async def list_sent(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status_filter: Optional[PartnershipStatus] = Query(None, alias="status"),
    partnershipType: Optional[PartnershipType] = None,
    sortBy: SortBy = "createdAt",
    sortOrder: SortOrder = "desc",
    user: User = Depends(get_current_user),
    matching: MatchingService = Depends(get_matching_service),
):
    result = await _listing(matching, user, "sent", page, limit, status_filter, partnershipType, sortBy, sortOrder)
    return ok(result, "Sent partnership requests retrieved successfully")


@router.get("/received")
async def list_received(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status_filter: Optional[PartnershipStatus] = Query(None, alias="status"),
    partnershipType: Optional[PartnershipType] = None,
    sortBy: SortBy = "createdAt",
    sortOrder: SortOrder = "desc",
    user: User = Depends(get_current_user),
    matching: MatchingService = Depends(get_matching_service),
):
    result = await _listing(matching, user, "received", page, limit, status_filter, partnershipType, sortBy, sortOrder)
    return ok(result, "Received partnership requests retrieved successfully")


@router.get("/recommendations")
async def recommendations(
    limit: int = Query(10, ge=1, le=50),
    projectType: Optional[ProjectType] = None,
    blockchainFocus: Optional[str] = None,
    excludeExisting: bool = True,
    user: User = Depends(get_current_user),
    matching: MatchingService = Depends(get_matching_service),
):
    """
    Projects the caller might partner with, highest compatibilityScore first.

    Each entry carries `compatibilityScore` (50-100) and `commonTags`.
    """
    matches = await matching.get_recommended_matches(
        user,
        limit=limit,
        project_type=projectType,
        blockchain_focus=blockchainFocus,
        exclude_existing=excludeExisting,
    )
    return ok({"recommendations": matches}, "Recommendations retrieved successfully")


@router.get("/stats")
async def stats(user: User = Depends(get_current_user), matching: MatchingService = Depends(get_matching_service)):
    return ok({"stats": await matching.get_partnership_stats(user)}, "Partnership statistics retrieved successfully")


@router.get("/{partnership_id}")
async def get_partnership(
    partnership_id: UUID,
    user: User = Depends(get_current_user),
    matching: MatchingService = Depends(get_matching_service),
):
    partnership = await matching.get_partnership_by_id(user, partnership_id)
    return ok({"partnership": partnership}, "Partnership retrieved successfully")


@router.post("/{partnership_id}/accept")
async def accept(
    partnership_id: UUID,
    user: User = Depends(get_current_user),
    matching: MatchingService = Depends(get_matching_service),
):
    """
    Accept a pending request. Receiver only.

    Raises:
        AppError (404): Partnership missing or caller not a party
        AppError (403): Caller is the requester
        AppError (409): Request is no longer pending
    """
    partnership = await matching.accept_partnership_request(user, partnership_id)
    return ok({"partnership": partnership}, "Partnership request accepted successfully")


@router.post("/{partnership_id}/reject")
async def reject(
    partnership_id: UUID,
    user: User = Depends(get_current_user),
    matching: MatchingService = Depends(get_matching_service),
):
    """Reject a pending request. Receiver only; same errors as accept."""
    partnership = await matching.reject_partnership_request(user, partnership_id)
    return ok({"partnership": partnership}, "Partnership request rejected")


@router.post("/{partnership_id}/cancel")
async def cancel(
    partnership_id: UUID,
    user: User = Depends(get_current_user),
    matching: MatchingService = Depends(get_matching_service),
):
    """Withdraw a pending request. Requester only."""
    partnership = await matching.cancel_partnership_request(user, partnership_id)
    return ok({"partnership": partnership}, "Partnership request cancelled")
