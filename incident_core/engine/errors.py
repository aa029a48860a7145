"""Incident engine error taxonomy.

Every failure raised by the incident manager derives from ``IncidentError``.
Each error carries a stable ``code``, a ``retryable`` flag and a ``context``
dict with the values a caller needs to decide between retrying and showing
a message. Only ``ConcurrentModification`` is retryable, and only after the
caller re-reads the incident.
"""

from typing import Any, Optional


class IncidentError(Exception):
    """Base class for incident lifecycle failures."""

    code = "INCIDENT_ERROR"
    retryable = False

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "message": self.message,
            "retryable": self.retryable,
            "context": dict(self.context),
        }


class InvalidSeverity(IncidentError):
    code = "INVALID_SEVERITY"

    def __init__(self, severity: Any):
        super().__init__(f"Invalid severity: {severity!r}", severity=severity)
        self.severity = severity


class IncidentNotFound(IncidentError):
    code = "INCIDENT_NOT_FOUND"

    def __init__(self, incident_id: str):
        super().__init__(f"Incident not found: {incident_id}", incident_id=incident_id)
        self.incident_id = incident_id


class UserNotFound(IncidentError):
    code = "USER_NOT_FOUND"

    def __init__(self, user_id: str):
        super().__init__(f"User not found: {user_id}", user_id=user_id)
        self.user_id = user_id


class Unauthorized(IncidentError):
    code = "UNAUTHORIZED"

    def __init__(self, user_id: str, incident_id: str):
        super().__init__(
            "Only the incident owner or an admin can change status",
            user_id=user_id,
            incident_id=incident_id,
        )
        self.user_id = user_id
        self.incident_id = incident_id


class InvalidTransition(IncidentError):
    code = "INVALID_TRANSITION"

    def __init__(self, from_status: str, to_status: Any):
        super().__init__(
            f"Invalid transition from {from_status} to {to_status}",
            from_status=from_status,
            to_status=to_status,
        )
        self.from_status = from_status
        self.to_status = to_status


class UnhandledState(IncidentError):
    """Stored status is outside the known set; points at corrupted data."""

    code = "UNHANDLED_STATE"

    def __init__(self, status: Any):
        super().__init__(f"Unhandled current status: {status}", status=status)
        self.status = status


class ConcurrentModification(IncidentError):
    code = "CONCURRENT_MODIFICATION"
    retryable = True

    def __init__(self, incident_id: str, expected_version: Optional[int]):
        super().__init__(
            f"Incident {incident_id} was modified concurrently "
            f"(expected version {expected_version})",
            incident_id=incident_id,
            expected_version=expected_version,
        )
        self.incident_id = incident_id
        self.expected_version = expected_version
