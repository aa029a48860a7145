"""SQLAlchemy models package."""

from .base import Base
from .enums import CommentType, IncidentStatus, Role, Severity
from .user import User
from .incident import Incident
from .comment import Comment

__all__ = [
    "Base",
    "CommentType",
    "IncidentStatus",
    "Role",
    "Severity",
    "User",
    "Incident",
    "Comment",
]
