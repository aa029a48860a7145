"""Enumerations shared by models, the transition table and the guard."""

from enum import Enum


class Severity(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class IncidentStatus(str, Enum):
    OPEN = "OPEN"
    INVESTIGATING = "INVESTIGATING"
    IDENTIFIED = "IDENTIFIED"
    MITIGATED = "MITIGATED"
    RESOLVED = "RESOLVED"
    CLOSED = "CLOSED"
    DISCARDED = "DISCARDED"


class CommentType(str, Enum):
    SYSTEM_EVENT = "SYSTEM_EVENT"
    USER_COMMENT = "USER_COMMENT"


class Role(str, Enum):
    ADMIN = "ADMIN"
    RESPONDER = "RESPONDER"
    VIEWER = "VIEWER"
