# synqit/schemas/message.py
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, constr

from synqit.models.enums import MessageType


class SendMessageIn(BaseModel):
    partnershipId: UUID
    content: constr(strip_whitespace=True, min_length=1, max_length=5000)
    messageType: MessageType = MessageType.TEXT


class MarkReadIn(BaseModel):
    """Without `messageIds`, every unread message in the partnership is marked."""
    partnershipId: UUID
    messageIds: Optional[list[UUID]] = None
