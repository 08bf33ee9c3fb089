# synqit/services/matching_service.py
"""
Partnership (matching) Service

Owns the partnership request lifecycle:

    PENDING --accept (receiver)--> ACCEPTED
    PENDING --reject (receiver)--> REJECTED
    PENDING --cancel (requester)-> CANCELLED

Every transition is a compare-and-set UPDATE guarded by
`status = PENDING`, so two racing responses can't both win and a
terminal partnership never changes again. Each transition (and each new
request) leaves a Notification for the counter-party.
"""
import logging
from typing import Optional

from fastapi import status
from tortoise.expressions import Q

from synqit.core.db import Database
from synqit.core.errors import AppError
from synqit.core.responses import pagination, utc_now
from synqit.models import Message, Partnership, Project, User
from synqit.models.enums import (
    ACTIVE_PARTNERSHIP_STATUSES,
    NotificationType,
    PartnershipStatus,
)
from synqit.services.notification_service import NotificationService
from synqit.services.project_service import PROJECT_RELATIONS
from synqit.services.scoring import score_candidate
from synqit.services.serializers import message_to_dict, partnership_to_dict, project_to_dict

logger = logging.getLogger("uvicorn.error")

NOT_FOUND = "Partnership request not found"
NO_LONGER_PENDING = "Partnership request is no longer pending"

PARTY_RELATIONS = ("requester", "receiver", "requester_project", "receiver_project")

SORTABLE_FIELDS = {"createdAt": "created_at", "updatedAt": "updated_at", "title": "title"}

# action -> (role allowed to perform it, resulting status, notification type, verb)
TRANSITIONS = {
    "accept": ("receiver", PartnershipStatus.ACCEPTED, NotificationType.PARTNERSHIP_ACCEPTED, "accepted"),
    "reject": ("receiver", PartnershipStatus.REJECTED, NotificationType.PARTNERSHIP_REJECTED, "rejected"),
    "cancel": ("requester", PartnershipStatus.CANCELLED, NotificationType.PARTNERSHIP_CANCELLED, "cancelled"),
}


def _involving(user_id) -> Q:
    return Q(requester_id=user_id) | Q(receiver_id=user_id)


class MatchingService:
    def __init__(self, db: Database, notifications: NotificationService):
        self.db = db
        self.notifications = notifications

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    async def create_partnership_request(self, user: User, data) -> dict:
        own_project = await Project.get_or_none(owner_id=user.id)
        if not own_project:
            raise AppError("You must have a project to send partnership requests", status.HTTP_400_BAD_REQUEST)

        target = await Project.get_or_none(id=data.receiverProjectId)
        if not target:
            raise AppError("Receiver project not found", status.HTTP_404_NOT_FOUND)
        if target.id == own_project.id:
            raise AppError("You cannot send a partnership request to your own project", status.HTTP_400_BAD_REQUEST)

        pair = (
            Q(requester_project_id=own_project.id, receiver_project_id=target.id)
            | Q(requester_project_id=target.id, receiver_project_id=own_project.id)
        )
        async with self.db.transaction():
            if await Partnership.filter(pair, status__in=ACTIVE_PARTNERSHIP_STATUSES).exists():
                raise AppError(
                    "Partnership request already exists between these projects", status.HTTP_409_CONFLICT
                )
            partnership = await Partnership.create(
                requester_id=user.id,
                requester_project_id=own_project.id,
                receiver_id=target.owner_id,
                receiver_project_id=target.id,
                partnership_type=data.partnershipType,
                title=data.title,
                description=data.description,
                proposed_terms=data.proposedTerms,
            )
            await self.notifications.notify(
                target.owner_id,
                title="New Partnership Request",
                content=f"{own_project.name} wants to partner with {target.name}: {data.title}",
                notification_type=NotificationType.PARTNERSHIP_REQUEST,
                partnership_id=partnership.id,
                email_event="partnership_request",
            )

        logger.info("[matches] %s requested partnership %s -> %s", user.id, own_project.id, target.id)
        await partnership.fetch_related(*PARTY_RELATIONS)
        return partnership_to_dict(partnership, viewer_id=user.id, with_parties=True)

    async def _transition(self, user: User, partnership_id, action: str) -> dict:
        role, new_status, notification_type, verb = TRANSITIONS[action]

        partnership = await Partnership.filter(_involving(user.id), id=partnership_id).first()
        if not partnership:
            raise AppError(NOT_FOUND, status.HTTP_404_NOT_FOUND)
        actor_id = partnership.receiver_id if role == "receiver" else partnership.requester_id
        if str(actor_id) != str(user.id):
            raise AppError(f"Only the {role} can {action} this partnership request", status.HTTP_403_FORBIDDEN)

        now = utc_now()
        updated = await Partnership.filter(id=partnership.id, status=PartnershipStatus.PENDING).update(
            status=new_status, responded_at=now, updated_at=now
        )
        if not updated:
            raise AppError(NO_LONGER_PENDING, status.HTTP_409_CONFLICT)

        await partnership.refresh_from_db()
        await partnership.fetch_related(*PARTY_RELATIONS)
        project_name = (
            partnership.receiver_project.name if role == "receiver" else partnership.requester_project.name
        )
        await self.notifications.notify(
            partnership.other_party_id(user.id),
            title=f"Partnership Request {verb.capitalize()}",
            content=f"{project_name} {verb} the partnership request \"{partnership.title}\"",
            notification_type=notification_type,
            partnership_id=partnership.id,
            email_event=f"partnership_{verb}",
        )
        logger.info("[matches] partnership %s %s by %s", partnership.id, verb, user.id)
        return partnership_to_dict(partnership, viewer_id=user.id, with_parties=True)

    async def accept_partnership_request(self, user: User, partnership_id) -> dict:
        return await self._transition(user, partnership_id, "accept")

    async def reject_partnership_request(self, user: User, partnership_id) -> dict:
        return await self._transition(user, partnership_id, "reject")

    async def cancel_partnership_request(self, user: User, partnership_id) -> dict:
        return await self._transition(user, partnership_id, "cancel")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    async def get_user_partnerships(
        self,
        user: User,
        page: int = 1,
        limit: int = 20,
        status_filter: Optional[PartnershipStatus] = None,
        partnership_type=None,
        sort_by: str = "createdAt",
        sort_order: str = "desc",
        direction: str = "all",
    ) -> dict:
        if direction == "sent":
            qs = Partnership.filter(requester_id=user.id)
        elif direction == "received":
            qs = Partnership.filter(receiver_id=user.id)
        else:
            qs = Partnership.filter(_involving(user.id))
        if status_filter:
            qs = qs.filter(status=status_filter)
        if partnership_type:
            qs = qs.filter(partnership_type=partnership_type)

        order = SORTABLE_FIELDS.get(sort_by, "created_at")
        prefix = "" if sort_order == "asc" else "-"
        total = await qs.count()
        rows = (
            await qs.order_by(f"{prefix}{order}")
            .offset((page - 1) * limit)
            .limit(limit)
            .prefetch_related(*PARTY_RELATIONS)
        )
        return {
            "partnerships": [partnership_to_dict(p, viewer_id=user.id, with_parties=True) for p in rows],
            "pagination": pagination(page, limit, total),
        }

    async def get_partnership_by_id(self, user: User, partnership_id) -> dict:
        partnership = await Partnership.filter(_involving(user.id), id=partnership_id).first()
        if not partnership:
            raise AppError("Partnership not found", status.HTTP_404_NOT_FOUND)
        await partnership.fetch_related(*PARTY_RELATIONS)
        messages = await Message.filter(partnership_id=partnership.id).order_by("created_at")
        data = partnership_to_dict(partnership, viewer_id=user.id, with_parties=True)
        data["messages"] = [message_to_dict(m) for m in messages]
        return data

    async def get_partnership_stats(self, user: User) -> dict:
        rows = await Partnership.filter(_involving(user.id)).values("status", "requester_id")
        counts = {s: 0 for s in PartnershipStatus}
        sent = 0
        awaiting_response = 0
        for row in rows:
            row_status = PartnershipStatus(row["status"])
            counts[row_status] += 1
            if str(row["requester_id"]) == str(user.id):
                sent += 1
            elif row_status == PartnershipStatus.PENDING:
                awaiting_response += 1
        total = len(rows)
        accepted = counts[PartnershipStatus.ACCEPTED]
        return {
            "total": total,
            "pending": counts[PartnershipStatus.PENDING],
            "accepted": accepted,
            "rejected": counts[PartnershipStatus.REJECTED],
            "cancelled": counts[PartnershipStatus.CANCELLED],
            "sent": sent,
            "received": total - sent,
            "awaitingResponse": awaiting_response,
            "successRate": round(accepted / total * 100) if total else 0,
        }

    async def get_recommended_matches(
        self,
        user: User,
        limit: int = 10,
        project_type=None,
        blockchain_focus: Optional[str] = None,
        exclude_existing: bool = True,
    ) -> list[dict]:
        """
        Candidate projects for the caller, best match first.

        Candidates are pre-selected by trust score, views and recency,
        then scored in `synqit.services.scoring`.
        """
        own = await Project.get_or_none(owner_id=user.id)
        if not own:
            raise AppError("You must have a project to get match recommendations", status.HTTP_400_BAD_REQUEST)
        await own.fetch_related("tags")

        excluded = {own.id}
        if exclude_existing:
            pairs = await Partnership.filter(
                _involving(user.id), status__in=ACTIVE_PARTNERSHIP_STATUSES
            ).values_list("requester_project_id", "receiver_project_id")
            for requester_project_id, receiver_project_id in pairs:
                excluded.update((requester_project_id, receiver_project_id))

        qs = Project.exclude(id__in=list(excluded))
        if project_type:
            qs = qs.filter(project_type=project_type)
        if blockchain_focus:
            qs = qs.filter(development_focus__icontains=blockchain_focus)
        candidates = (
            await qs.order_by("-trust_score", "-view_count", "-created_at")
            .limit(limit)
            .prefetch_related(*PROJECT_RELATIONS, "owner")
        )

        activity = await self._partnership_counts([c.id for c in candidates])
        own_tags = [t.tag for t in own.tags]
        results = []
        for candidate in candidates:
            score, shared = score_candidate(
                own.project_type,
                own.development_focus,
                own_tags,
                candidate.project_type,
                candidate.development_focus,
                [t.tag for t in candidate.tags],
                activity.get(str(candidate.id), 0),
            )
            data = project_to_dict(candidate, include_owner=True)
            data["compatibilityScore"] = score
            data["commonTags"] = shared
            results.append(data)
        results.sort(key=lambda r: r["compatibilityScore"], reverse=True)
        return results

    @staticmethod
    async def _partnership_counts(project_ids: list) -> dict:
        """project id -> number of partnerships (any status, either side)."""
        counts: dict[str, int] = {}
        if not project_ids:
            return counts
        for field in ("requester_project_id", "receiver_project_id"):
            ids = await Partnership.filter(**{f"{field}__in": project_ids}).values_list(field, flat=True)
            for pid in ids:
                counts[str(pid)] = counts.get(str(pid), 0) + 1
        return counts
