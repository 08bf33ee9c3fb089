"""
Services Module

Business logic behind the HTTP routers:
- Auth: registration, login lockout, sessions, email verification, password reset
- Profile / Project: account and project management, uploads
- Company: read-only directory views over projects
- Dashboard: per-user summary counts
- Matching: partnership lifecycle and recommendations (scoring in `scoring`)
- Message: partnership-scoped messaging
- Notification: in-app notifications and outbound delivery
"""

from .auth_service import AuthService
from .company_service import CompanyService
from .dashboard_service import DashboardService
from .matching_service import MatchingService
from .message_service import MessageService
from .notification_service import NotificationService
from .profile_service import ProfileService
from .project_service import ProjectService

__all__ = [
    "AuthService",
    "CompanyService",
    "DashboardService",
    "MatchingService",
    "MessageService",
    "NotificationService",
    "ProfileService",
    "ProjectService",
]
