# synqit/models/__init__.py
"""
Database models module initialization.
Exports all Tortoise ORM models for convenient imports.

Models exported:
- User, UserSession: accounts and login sessions
- Project, BlockchainPreference, ProjectTag: projects and their child sets
- Partnership: partnership requests between projects
- Message: partnership-scoped messages
- Notification: in-app notifications
"""
from .user import User, UserSession
from .project import Project, BlockchainPreference, ProjectTag
from .partnership import Partnership
from .message import Message
from .notification import Notification
