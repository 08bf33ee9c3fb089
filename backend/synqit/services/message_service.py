# synqit/services/message_service.py
"""
Messaging Service

Messages live inside a partnership and only its two parties can see them.
Sending requires an ACCEPTED partnership. Reading a partnership's message
list marks everything the other party sent there as read.
"""
import datetime as dt
import logging
from typing import Optional

from fastapi import status
from tortoise.expressions import Q, Subquery
from tortoise.functions import Count, Max

from synqit.core.db import Database
from synqit.core.errors import AppError
from synqit.core.responses import as_utc, iso, pagination
from synqit.models import Message, Partnership, User
from synqit.models.enums import MessageType, NotificationType, PartnershipStatus
from synqit.models.message import DELETED_MESSAGE_PLACEHOLDER
from synqit.services.notification_service import NotificationService
from synqit.services.serializers import message_to_dict, partnership_to_dict, user_summary

logger = logging.getLogger("uvicorn.error")

PREVIEW_CHARS = 100


def _involving(user_id) -> Q:
    return Q(requester_id=user_id) | Q(receiver_id=user_id)


def _as_datetime(value) -> Optional[dt.datetime]:
    """Aggregated timestamps come back as text on some backends."""
    if isinstance(value, str):
        value = dt.datetime.fromisoformat(value)
    return as_utc(value)


class MessageService:
    def __init__(self, db: Database, notifications: NotificationService):
        self.db = db
        self.notifications = notifications

    async def _partnership_for(self, user: User, partnership_id) -> Partnership:
        """The partnership if `user` is one of its parties, else 404."""
        partnership = await Partnership.filter(_involving(user.id), id=partnership_id).first()
        if not partnership:
            raise AppError("Partnership not found", status.HTTP_404_NOT_FOUND)
        return partnership

    async def send_message(
        self, user: User, partnership_id, content: str, message_type: MessageType = MessageType.TEXT
    ) -> dict:
        partnership = await self._partnership_for(user, partnership_id)
        if partnership.status != PartnershipStatus.ACCEPTED:
            raise AppError("Messages can only be sent in accepted partnerships", status.HTTP_400_BAD_REQUEST)

        receiver_id = partnership.other_party_id(user.id)
        message = await Message.create(
            partnership_id=partnership.id,
            sender_id=user.id,
            receiver_id=receiver_id,
            content=content,
            message_type=message_type,
        )
        preview = content if len(content) <= PREVIEW_CHARS else content[:PREVIEW_CHARS] + "..."
        await self.notifications.notify(
            receiver_id,
            title=f"New message from {user.full_name}",
            content=preview,
            notification_type=NotificationType.NEW_MESSAGE,
            partnership_id=partnership.id,
        )
        data = message_to_dict(message)
        data["sender"] = user_summary(user)
        return data

    async def get_partnership_messages(
        self,
        user: User,
        partnership_id,
        page: int = 1,
        limit: int = 50,
        before: Optional[dt.datetime] = None,
        after: Optional[dt.datetime] = None,
    ) -> dict:
        """
        One page of a partnership's messages. Pages count back from the
        newest message; each page is returned oldest-first.
        """
        partnership = await self._partnership_for(user, partnership_id)

        qs = Message.filter(partnership_id=partnership.id)
        if before:
            qs = qs.filter(created_at__lt=as_utc(before))
        if after:
            qs = qs.filter(created_at__gt=as_utc(after))
        total = await qs.count()
        rows = (
            await qs.order_by("-created_at")
            .offset((page - 1) * limit)
            .limit(limit)
            .prefetch_related("sender")
        )

        marked = await Message.filter(
            partnership_id=partnership.id, receiver_id=user.id, is_read=False
        ).update(is_read=True)

        messages = []
        for m in reversed(rows):
            if str(m.receiver_id) == str(user.id):
                m.is_read = True
            data = message_to_dict(m)
            data["sender"] = user_summary(m.sender)
            messages.append(data)
        return {
            "messages": messages,
            "markedAsRead": marked,
            "pagination": pagination(page, limit, total),
        }

    async def get_user_conversations(
        self, user: User, page: int = 1, limit: int = 20, unread_only: bool = False
    ) -> dict:
        """
        The caller's partnerships with their last message and unread count,
        most recent activity first.

        Ordering needs every partnership's last activity, which comes from
        two grouped queries (latest message time, unread count). Only the
        requested page is then loaded in full.
        """
        involved = Partnership.filter(_involving(user.id))
        partnership_rows = await involved.values("id", "updated_at")
        if not partnership_rows:
            return {"conversations": [], "pagination": pagination(page, limit, 0)}

        last_rows = (
            await Message.filter(partnership_id__in=Subquery(involved.values("id")))
            .annotate(last_at=Max("created_at"))
            .group_by("partnership_id")
            .values("partnership_id", "last_at")
        )
        last_at = {str(r["partnership_id"]): _as_datetime(r["last_at"]) for r in last_rows}
        unread_rows = (
            await Message.filter(
                partnership_id__in=Subquery(involved.values("id")), receiver_id=user.id, is_read=False
            )
            .annotate(unread=Count("id"))
            .group_by("partnership_id")
            .values("partnership_id", "unread")
        )
        unread = {str(r["partnership_id"]): r["unread"] for r in unread_rows}

        activity = []
        for row in partnership_rows:
            pid = str(row["id"])
            if unread_only and not unread.get(pid):
                continue
            activity.append((last_at.get(pid) or as_utc(row["updated_at"]), pid))
        activity.sort(reverse=True)

        start = (page - 1) * limit
        page_items = activity[start:start + limit]
        page_ids = [pid for _, pid in page_items]
        if not page_ids:
            return {"conversations": [], "pagination": pagination(page, limit, len(activity))}

        partnerships = {
            str(p.id): p
            for p in await Partnership.filter(id__in=page_ids).prefetch_related(
                "requester", "receiver", "requester_project", "receiver_project"
            )
        }
        last_messages: dict[str, Message] = {}
        with_messages = [pid for pid in page_ids if pid in last_at]
        if with_messages:
            latest = Q(
                *[Q(partnership_id=pid, created_at=last_at[pid]) for pid in with_messages], join_type=Q.OR
            )
            for m in await Message.filter(latest).order_by("-created_at"):
                last_messages.setdefault(str(m.partnership_id), m)

        conversations = []
        for when, pid in page_items:
            last = last_messages.get(pid)
            data = partnership_to_dict(partnerships[pid], viewer_id=user.id, with_parties=True)
            data["lastMessage"] = message_to_dict(last) if last else None
            data["unreadCount"] = unread.get(pid, 0)
            data["lastActivityAt"] = iso(when)
            conversations.append(data)
        return {
            "conversations": conversations,
            "pagination": pagination(page, limit, len(activity)),
        }

    async def mark_messages_as_read(self, user: User, partnership_id, message_ids: Optional[list] = None) -> int:
        partnership = await self._partnership_for(user, partnership_id)
        qs = Message.filter(partnership_id=partnership.id, receiver_id=user.id, is_read=False)
        if message_ids:
            qs = qs.filter(id__in=message_ids)
        return await qs.update(is_read=True)

    async def get_unread_message_count(self, user: User) -> int:
        return await Message.filter(receiver_id=user.id, is_read=False).count()

    async def search_messages(
        self, user: User, query: str, partnership_id=None, page: int = 1, limit: int = 20
    ) -> dict:
        query = (query or "").strip()
        if not query:
            raise AppError("Search query is required", status.HTTP_400_BAD_REQUEST)
        if partnership_id:
            partnership = await self._partnership_for(user, partnership_id)
            qs = Message.filter(partnership_id=partnership.id)
        else:
            ids = await Partnership.filter(_involving(user.id)).values_list("id", flat=True)
            if not ids:
                return {"messages": [], "query": query, "pagination": pagination(page, limit, 0)}
            qs = Message.filter(partnership_id__in=list(ids))
        qs = qs.filter(content__icontains=query)

        total = await qs.count()
        rows = (
            await qs.order_by("-created_at")
            .offset((page - 1) * limit)
            .limit(limit)
            .prefetch_related("sender")
        )
        results = []
        for m in rows:
            data = message_to_dict(m)
            data["sender"] = user_summary(m.sender)
            results.append(data)
        return {"messages": results, "query": query, "pagination": pagination(page, limit, total)}

    async def delete_message(self, user: User, message_id) -> dict:
        """Logical delete: the row stays, its content is replaced."""
        message = await Message.get_or_none(id=message_id)
        if not message:
            raise AppError("Message not found", status.HTTP_404_NOT_FOUND)
        if str(message.sender_id) != str(user.id):
            raise AppError("You can only delete your own messages", status.HTTP_403_FORBIDDEN)
        message.content = DELETED_MESSAGE_PLACEHOLDER
        message.message_type = MessageType.SYSTEM
        await message.save(update_fields=["content", "message_type"])
        return message_to_dict(message)

    async def get_message_stats(self, user: User) -> dict:
        sent = await Message.filter(sender_id=user.id).count()
        received = await Message.filter(receiver_id=user.id).count()
        unread = await Message.filter(receiver_id=user.id, is_read=False).count()
        active = len(set(
            await Message.filter(Q(sender_id=user.id) | Q(receiver_id=user.id))
            .values_list("partnership_id", flat=True)
        ))
        return {
            "messagesSent": sent,
            "messagesReceived": received,
            "unreadMessages": unread,
            "activeConversations": active,
            "totalMessages": sent + received,
        }

    async def get_recent_messages(self, user: User, limit: int = 10) -> list[dict]:
        """Latest messages received by the caller, across all partnerships."""
        rows = (
            await Message.filter(receiver_id=user.id)
            .order_by("-created_at")
            .limit(limit)
            .prefetch_related("sender", "partnership")
        )
        out = []
        for m in rows:
            data = message_to_dict(m)
            data["sender"] = user_summary(m.sender)
            data["partnershipTitle"] = m.partnership.title
            out.append(data)
        return out
