# synqit/api/routers/notifications.py
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from synqit.api.deps import get_current_user, get_notification_service
from synqit.core.responses import ok
from synqit.models.user import User
from synqit.services import NotificationService

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("")
async def list_notifications(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    unreadOnly: bool = False,
    user: User = Depends(get_current_user),
    notifications: NotificationService = Depends(get_notification_service),
):
    """Newest first, with the caller's total unread count alongside."""
    result = await notifications.list_notifications(user, page=page, limit=limit, unread_only=unreadOnly)
    return ok(result, "Notifications retrieved successfully")


@router.put("/read-all")
async def mark_all_read(
    user: User = Depends(get_current_user),
    notifications: NotificationService = Depends(get_notification_service),
):
    count = await notifications.mark_all_as_read(user)
    return ok({"markedCount": count}, "All notifications marked as read")


@router.put("/{notification_id}/read")
async def mark_read(
    notification_id: UUID,
    user: User = Depends(get_current_user),
    notifications: NotificationService = Depends(get_notification_service),
):
    notification = await notifications.mark_as_read(user, notification_id)
    return ok({"notification": notification}, "Notification marked as read")
