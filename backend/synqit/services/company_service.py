# synqit/services/company_service.py
"""
Company directory: read-only discovery views over projects.

A "company" is a project serialized with its owner and partnership
counts. Only `get_company_by_id` writes anything (the view counter).
"""
from collections import Counter
from typing import Optional

from fastapi import status
from tortoise.expressions import F, Q, Subquery

from synqit.core.errors import AppError
from synqit.core.responses import enum_value, iso, pagination
from synqit.models import Partnership, Project, ProjectTag
from synqit.models.enums import PartnershipStatus, ProjectType
from synqit.services.project_service import PROJECT_RELATIONS
from synqit.services.serializers import project_to_dict

FEATURED_MIN_TRUST = 70

COMPANY_SORT_FIELDS = {
    "trustScore": "trust_score",
    "viewCount": "view_count",
    "createdAt": "created_at",
    "name": "name",
}


async def _partnership_counts(project_ids) -> dict:
    """project id -> {"sent": n, "received": n} across all statuses."""
    ids = list(project_ids)
    counts = {str(pid): {"sent": 0, "received": 0} for pid in ids}
    if not ids:
        return counts
    for pid in await Partnership.filter(requester_project_id__in=ids).values_list("requester_project_id", flat=True):
        counts[str(pid)]["sent"] += 1
    for pid in await Partnership.filter(receiver_project_id__in=ids).values_list("receiver_project_id", flat=True):
        counts[str(pid)]["received"] += 1
    return counts


async def _companies(rows: list[Project]) -> list[dict]:
    counts = await _partnership_counts(p.id for p in rows)
    out = []
    for p in rows:
        data = project_to_dict(p, include_owner=True)
        c = counts[str(p.id)]
        data["partnershipCount"] = c["sent"] + c["received"]
        out.append(data)
    return out


def _order(sort_by: str, sort_order: str) -> list[str]:
    field = COMPANY_SORT_FIELDS.get(sort_by, "trust_score")
    prefix = "" if sort_order == "asc" else "-"
    return [f"{prefix}{field}", "-created_at"]


class CompanyService:
    async def _page(self, qs, page: int, limit: int, ordering: list[str]) -> dict:
        total = await qs.count()
        rows = (
            await qs.order_by(*ordering)
            .offset((page - 1) * limit)
            .limit(limit)
            .prefetch_related(*PROJECT_RELATIONS, "owner")
        )
        return {"companies": await _companies(rows), "pagination": pagination(page, limit, total)}

    async def list_companies(
        self,
        page: int = 1,
        limit: int = 20,
        search: Optional[str] = None,
        project_type=None,
        focus: Optional[str] = None,
        location: Optional[str] = None,
        funding_stage=None,
        team_size=None,
        is_verified: Optional[bool] = None,
        sort_by: str = "trustScore",
        sort_order: str = "desc",
    ) -> dict:
        qs = Project.all()
        if search:
            qs = qs.filter(Q(name__icontains=search) | Q(description__icontains=search))
        if project_type:
            qs = qs.filter(project_type=project_type)
        if focus:
            qs = qs.filter(development_focus__icontains=focus)
        if location:
            qs = qs.filter(Q(country__icontains=location) | Q(city__icontains=location))
        if funding_stage:
            qs = qs.filter(funding_stage=funding_stage)
        if team_size:
            qs = qs.filter(team_size=team_size)
        if is_verified is not None:
            qs = qs.filter(is_verified=is_verified)
        return await self._page(qs, page, limit, _order(sort_by, sort_order))

    async def get_featured_companies(self, limit: int = 10) -> list[dict]:
        rows = (
            await Project.filter(is_verified=True, trust_score__gte=FEATURED_MIN_TRUST)
            .order_by("-trust_score", "-view_count")
            .limit(limit)
            .prefetch_related(*PROJECT_RELATIONS, "owner")
        )
        return await _companies(rows)

    async def get_trending_companies(self, limit: int = 10) -> list[dict]:
        rows = (
            await Project.all()
            .order_by("-view_count", "-trust_score", "-created_at")
            .limit(limit)
            .prefetch_related(*PROJECT_RELATIONS, "owner")
        )
        return await _companies(rows)

    async def get_companies_by_type(self, project_type: ProjectType, page: int = 1, limit: int = 20) -> dict:
        qs = Project.filter(project_type=project_type)
        return await self._page(qs, page, limit, ["-trust_score", "-view_count"])

    async def search_companies(
        self,
        term: str,
        project_types: Optional[list] = None,
        focuses: Optional[list[str]] = None,
        funding_stages: Optional[list] = None,
        team_sizes: Optional[list] = None,
        min_trust_score: Optional[int] = None,
        is_verified: Optional[bool] = None,
        page: int = 1,
        limit: int = 20,
    ) -> dict:
        qs = Project.all()
        if term:
            qs = qs.filter(
                Q(name__icontains=term)
                | Q(description__icontains=term)
                | Q(development_focus__icontains=term)
                | Q(id__in=Subquery(ProjectTag.filter(tag__icontains=term).values("project_id")))
            )
        if project_types:
            qs = qs.filter(project_type__in=project_types)
        if focuses:
            qs = qs.filter(Q(*[Q(development_focus__icontains=f) for f in focuses], join_type=Q.OR))
        if funding_stages:
            qs = qs.filter(funding_stage__in=funding_stages)
        if team_sizes:
            qs = qs.filter(team_size__in=team_sizes)
        if min_trust_score is not None:
            qs = qs.filter(trust_score__gte=min_trust_score)
        if is_verified is not None:
            qs = qs.filter(is_verified=is_verified)
        result = await self._page(qs, page, limit, ["-trust_score", "-view_count"])
        result["searchTerm"] = term
        return result

    async def get_company_statistics(self) -> dict:
        projects = await Project.all().values(
            "project_type", "funding_stage", "team_size", "trust_score", "is_verified", "development_focus"
        )
        total = len(projects)
        verified = sum(1 for p in projects if p["is_verified"])
        scores = [p["trust_score"] for p in projects]

        def by(key):
            return dict(Counter(enum_value(p[key]) for p in projects if p[key] is not None))

        focuses = Counter(p["development_focus"] for p in projects if p["development_focus"])
        return {
            "totalCompanies": total,
            "verifiedCompanies": verified,
            "verificationRate": round(verified / total * 100) if total else 0,
            "companiesByType": by("project_type"),
            "companiesByFunding": by("funding_stage"),
            "companiesByTeamSize": by("team_size"),
            "trustScoreStats": {
                "average": round(sum(scores) / total) if total else 0,
                "minimum": min(scores, default=0),
                "maximum": max(scores, default=0),
            },
            "topFocuses": [{"focus": f, "count": c} for f, c in focuses.most_common(10)],
        }

    async def get_company_by_id(self, company_id, viewer_id=None) -> dict:
        """Company detail with partnership stats; a view by anyone but the owner bumps the counter."""
        project = await Project.get_or_none(id=company_id)
        if not project:
            raise AppError("Company not found", status.HTTP_404_NOT_FOUND)
        if viewer_id is None or str(viewer_id) != str(project.owner_id):
            await Project.filter(id=project.id).update(view_count=F("view_count") + 1)
            project.view_count += 1
        await project.fetch_related(*PROJECT_RELATIONS, "owner")

        involving = Q(requester_project_id=project.id) | Q(receiver_project_id=project.id)
        sent = await Partnership.filter(requester_project_id=project.id).count()
        received = await Partnership.filter(receiver_project_id=project.id).count()
        accepted = await Partnership.filter(involving, status=PartnershipStatus.ACCEPTED).count()
        recent = await Partnership.filter(involving).order_by("-created_at").limit(5)

        data = project_to_dict(project, include_owner=True)
        data["partnershipStats"] = {
            "sent": sent,
            "received": received,
            "total": sent + received,
            "accepted": accepted,
            "successRate": round(accepted / (sent + received) * 100) if sent + received else 0,
        }
        data["recentPartnerships"] = [
            {
                "id": str(pt.id),
                "status": enum_value(pt.status),
                "partnershipType": enum_value(pt.partnership_type),
                "createdAt": iso(pt.created_at),
            }
            for pt in recent
        ]
        return data

    async def get_similar_companies(self, company_id, limit: int = 5) -> list[dict]:
        project = await Project.get_or_none(id=company_id)
        if not project:
            raise AppError("Company not found", status.HTTP_404_NOT_FOUND)
        if project.project_type is None:
            return []
        rows = (
            await Project.filter(project_type=project.project_type)
            .exclude(id=project.id)
            .order_by("-trust_score", "-view_count")
            .limit(limit)
            .prefetch_related(*PROJECT_RELATIONS, "owner")
        )
        return await _companies(rows)
