# synqit/api/routers/messages.py
import datetime as dt
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from synqit.api.deps import get_current_user, get_message_service
from synqit.core.rate_limit import message_limiter
from synqit.core.responses import ok
from synqit.models.user import User
from synqit.schemas.message import MarkReadIn, SendMessageIn
from synqit.services import MessageService

router = APIRouter(prefix="/messages", tags=["messages"])


@router.post("/send", status_code=status.HTTP_201_CREATED, dependencies=[Depends(message_limiter)])
async def send_message(
    body: SendMessageIn,
    user: User = Depends(get_current_user),
    messages: MessageService = Depends(get_message_service),
):
    """
    Send a message inside a partnership.

    The receiver is always the other party; they get a NEW_MESSAGE
    notification.

    Raises:
        AppError (404): Partnership missing or caller not a party
        AppError (400): Partnership is not ACCEPTED
    """
    message = await messages.send_message(user, body.partnershipId, body.content, body.messageType)
    return ok({"message": message}, "Message sent successfully")


@router.get("/conversations")
async def conversations(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    unreadOnly: bool = False,
    user: User = Depends(get_current_user),
    messages: MessageService = Depends(get_message_service),
):
    result = await messages.get_user_conversations(user, page=page, limit=limit, unread_only=unreadOnly)
    return ok(result, "Conversations retrieved successfully")


@router.get("/partnerships/{partnership_id}")
async def partnership_messages(
    partnership_id: UUID,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=100),
    before: Optional[dt.datetime] = None,
    after: Optional[dt.datetime] = None,
    user: User = Depends(get_current_user),
    messages: MessageService = Depends(get_message_service),
):
    """
    A page of messages in one partnership, oldest first within the page.
    Reading marks every unread message addressed to the caller as read.
    """
    result = await messages.get_partnership_messages(
        user, partnership_id, page=page, limit=limit, before=before, after=after
    )
    return ok(result, "Messages retrieved successfully")


@router.post("/mark-read")
async def mark_read(
    body: MarkReadIn,
    user: User = Depends(get_current_user),
    messages: MessageService = Depends(get_message_service),
):
    count = await messages.mark_messages_as_read(user, body.partnershipId, body.messageIds)
    return ok({"markedCount": count}, f"{count} messages marked as read")


@router.get("/unread-count")
async def unread_count(user: User = Depends(get_current_user), messages: MessageService = Depends(get_message_service)):
    return ok({"unreadCount": await messages.get_unread_message_count(user)}, "Unread count retrieved successfully")


@router.get("/search")
async def search(
    q: str = Query(..., min_length=1, max_length=200),
    partnershipId: Optional[UUID] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    user: User = Depends(get_current_user),
    messages: MessageService = Depends(get_message_service),
):
    result = await messages.search_messages(user, q, partnership_id=partnershipId, page=page, limit=limit)
    return ok(result, "Search completed successfully")


@router.get("/stats")
async def stats(user: User = Depends(get_current_user), messages: MessageService = Depends(get_message_service)):
    return ok({"stats": await messages.get_message_stats(user)}, "Message statistics retrieved successfully")


@router.get("/recent")
async def recent(
    limit: int = Query(10, ge=1, le=50),
    user: User = Depends(get_current_user),
    messages: MessageService = Depends(get_message_service),
):
    return ok({"messages": await messages.get_recent_messages(user, limit=limit)}, "Recent messages retrieved successfully")


@router.delete("/{message_id}")
async def delete_message(
    message_id: UUID,
    user: User = Depends(get_current_user),
    messages: MessageService = Depends(get_message_service),
):
    """Sender only. The message stays in the thread with its content blanked."""
    message = await messages.delete_message(user, message_id)
    return ok({"message": message}, "Message deleted successfully")
