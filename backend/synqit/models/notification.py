# synqit/models/notification.py
import uuid
from tortoise import fields, models

from synqit.models.enums import NotificationType


class Notification(models.Model):
    """In-app notification created as a side effect of partnership and message events."""
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    user = fields.ForeignKeyField("models.User", related_name="notifications", on_delete=fields.CASCADE)
    title = fields.CharField(max_length=200)
    content = fields.TextField()
    notification_type = fields.CharEnumField(NotificationType, max_length=32)
    partnership = fields.ForeignKeyField(
        "models.Partnership", related_name="notifications", null=True, on_delete=fields.CASCADE
    )
    is_read = fields.BooleanField(default=False)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "notifications"
