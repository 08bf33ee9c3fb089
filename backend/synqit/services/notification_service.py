# synqit/services/notification_service.py
"""
Notification Service

Creates in-app notifications for partnership and message events, serves
the user's notification list, and forwards events to the outbound
NotificationSink when one is configured.
"""
from typing import Optional

from fastapi import status

from synqit.core.db import Database
from synqit.core.errors import AppError
from synqit.core.notifications import NotificationSink, OutboundNotification, deliver_quietly
from synqit.core.responses import pagination
from synqit.models import Notification, User
from synqit.models.enums import NotificationType
from synqit.services.serializers import notification_to_dict


class NotificationService:
    def __init__(self, db: Database, sink: Optional[NotificationSink] = None):
        self.db = db
        self.sink = sink

    async def notify(
        self,
        user_id,
        title: str,
        content: str,
        notification_type: NotificationType,
        partnership_id=None,
        email_event: Optional[str] = None,
    ) -> Notification:
        """
        Store a notification for `user_id`; when `email_event` is given the
        same text is also handed to the outbound sink (best effort).
        """
        notification = await Notification.create(
            user_id=user_id,
            title=title,
            content=content,
            notification_type=notification_type,
            partnership_id=partnership_id,
        )
        if email_event:
            recipient = await User.get_or_none(id=user_id)
            if recipient:
                await deliver_quietly(
                    self.sink,
                    OutboundNotification(
                        recipient_email=recipient.email,
                        subject=title,
                        body=content,
                        event=email_event,
                        context={"partnershipId": str(partnership_id) if partnership_id else None},
                    ),
                )
        return notification

    async def list_notifications(self, user: User, page: int = 1, limit: int = 20, unread_only: bool = False) -> dict:
        qs = Notification.filter(user_id=user.id)
        if unread_only:
            qs = qs.filter(is_read=False)
        total = await qs.count()
        unread = await Notification.filter(user_id=user.id, is_read=False).count()
        rows = await qs.order_by("-created_at").offset((page - 1) * limit).limit(limit)
        return {
            "notifications": [notification_to_dict(n) for n in rows],
            "unreadCount": unread,
            "pagination": pagination(page, limit, total),
        }

    async def mark_as_read(self, user: User, notification_id) -> dict:
        n = await Notification.get_or_none(id=notification_id, user_id=user.id)
        if not n:
            raise AppError("Notification not found", status.HTTP_404_NOT_FOUND)
        if not n.is_read:
            n.is_read = True
            await n.save(update_fields=["is_read"])
        return notification_to_dict(n)

    async def mark_all_as_read(self, user: User) -> int:
        return await Notification.filter(user_id=user.id, is_read=False).update(is_read=True)
