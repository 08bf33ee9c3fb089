# synqit/services/dashboard_service.py
"""
Dashboard summary for the signed-in user, composed from the matching and
messaging services plus the caller's own project.
"""
from synqit.models import Project, User
from synqit.services.matching_service import MatchingService
from synqit.services.message_service import MessageService

# Onboarding progress shown on the dashboard: a project finishes setup
COMPLETION_WITH_PROJECT = 85
COMPLETION_WITHOUT_PROJECT = 20


class DashboardService:
    def __init__(self, matching: MatchingService, messages: MessageService):
        self.matching = matching
        self.messages = messages

    async def get_user_stats(self, user: User) -> dict:
        partnerships = await self.matching.get_partnership_stats(user)
        unread = await self.messages.get_unread_message_count(user)
        project = await Project.get_or_none(owner_id=user.id)
        company = None
        if project:
            company = {
                "id": str(project.id),
                "name": project.name,
                "isVerified": project.is_verified,
                "trustScore": project.trust_score,
            }
        return {
            "totalPartnerships": partnerships["total"],
            "pendingRequests": partnerships["awaitingResponse"],
            "acceptedPartnerships": partnerships["accepted"],
            "unreadMessages": unread,
            "totalConnections": partnerships["accepted"],
            "company": company,
            "completionRate": COMPLETION_WITH_PROJECT if project else COMPLETION_WITHOUT_PROJECT,
        }
