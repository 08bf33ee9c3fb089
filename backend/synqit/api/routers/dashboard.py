# synqit/api/routers/dashboard.py
from fastapi import APIRouter, Depends

from synqit.api.deps import get_current_user, get_dashboard_service
from synqit.core.responses import ok
from synqit.models.user import User
from synqit.services import DashboardService

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/stats")
async def dashboard_stats(
    user: User = Depends(get_current_user),
    dashboard: DashboardService = Depends(get_dashboard_service),
):
    """
    Summary counts for the caller's dashboard.

    Returns:
        totalPartnerships, pendingRequests (awaiting the caller's answer),
        acceptedPartnerships, unreadMessages, totalConnections, company
        (the caller's project summary or null) and completionRate
    """
    stats = await dashboard.get_user_stats(user)
    return ok(stats, "Dashboard stats retrieved successfully")
