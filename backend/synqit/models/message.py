# synqit/models/message.py
import uuid
from tortoise import fields, models

from synqit.models.enums import MessageType

DELETED_MESSAGE_PLACEHOLDER = "[Message deleted]"


class Message(models.Model):
    """
    A message inside one partnership. `receiver` is always the other party.
    Deleted messages keep their row; content is replaced by a placeholder.
    """
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    partnership = fields.ForeignKeyField("models.Partnership", related_name="messages", on_delete=fields.CASCADE)
    sender = fields.ForeignKeyField("models.User", related_name="sent_messages", on_delete=fields.CASCADE)
    receiver = fields.ForeignKeyField("models.User", related_name="received_messages", on_delete=fields.CASCADE)
    content = fields.TextField()
    message_type = fields.CharEnumField(MessageType, max_length=16, default=MessageType.TEXT)
    is_read = fields.BooleanField(default=False)
    created_at = fields.DatetimeField(auto_now_add=True, index=True)

    class Meta:
        table = "messages"
