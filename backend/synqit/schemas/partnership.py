# synqit/schemas/partnership.py
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, constr

from synqit.models.enums import PartnershipType


class PartnershipRequestIn(BaseModel):
    """Body of POST /matches/request."""
    receiverProjectId: UUID
    partnershipType: PartnershipType
    title: constr(strip_whitespace=True, min_length=5, max_length=100)
    description: constr(strip_whitespace=True, min_length=20, max_length=2000)
    proposedTerms: Optional[constr(max_length=2000)] = None
