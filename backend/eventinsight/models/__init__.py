"""Models package."""
from eventinsight.models.user import User, Account, Session, VerificationToken
from eventinsight.models.project import Project
from eventinsight.models.environment import Environment
from eventinsight.models.api_key import APIKey
from eventinsight.models.event import Event

__all__ = [
    "User",
    "Account",
    "Session",
    "VerificationToken",
    "Project",
    "Environment",
    "APIKey",
    "Event",
]
