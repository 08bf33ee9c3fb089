# synqit/models/partnership.py
"""
Database model for partnership requests between two projects.
"""
import uuid
from tortoise import fields, models

from synqit.models.enums import PartnershipStatus, PartnershipType


class Partnership(models.Model):
    """
    A directional request from the requester's project to the receiver's.

    Lifecycle: PENDING -> ACCEPTED | REJECTED (receiver) or CANCELLED
    (requester). All three outcomes are terminal and stamp `responded_at`.
    At most one PENDING/ACCEPTED partnership exists per project pair,
    regardless of direction.
    """
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    requester = fields.ForeignKeyField(
        "models.User", related_name="sent_partnerships", on_delete=fields.CASCADE
    )
    requester_project = fields.ForeignKeyField(
        "models.Project", related_name="sent_partnerships", on_delete=fields.CASCADE
    )
    receiver = fields.ForeignKeyField(
        "models.User", related_name="received_partnerships", on_delete=fields.CASCADE
    )
    receiver_project = fields.ForeignKeyField(
        "models.Project", related_name="received_partnerships", on_delete=fields.CASCADE
    )
    partnership_type = fields.CharEnumField(PartnershipType, max_length=32)
    title = fields.CharField(max_length=100)
    description = fields.TextField()
    proposed_terms = fields.TextField(null=True)
    status = fields.CharEnumField(PartnershipStatus, max_length=16, default=PartnershipStatus.PENDING, index=True)
    responded_at = fields.DatetimeField(null=True)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "partnerships"

    def other_party_id(self, user_id) -> uuid.UUID:
        """The user on the opposite side of the partnership from `user_id`."""
        return self.receiver_id if str(self.requester_id) == str(user_id) else self.requester_id
