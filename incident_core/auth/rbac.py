"""Role-based guard for incident status changes."""

from ..engine.errors import Unauthorized
from ..models.enums import Role
from ..utils.logging import get_logger

logger = get_logger("auth.rbac")

ADMIN_ROLES = frozenset({Role.ADMIN})


def is_admin(user) -> bool:
    return user.role in ADMIN_ROLES


def can_change_status(user, incident) -> bool:
    """Admins may move any incident; everyone else only the ones they own."""
    return is_admin(user) or user.id == incident.owner_id


def authorize_status_change(user, incident) -> None:
    if not can_change_status(user, incident):
        logger.warning(
            "status_change_denied",
            user_id=user.id,
            role=user.role,
            incident_id=incident.id,
            owner_id=incident.owner_id,
        )
        raise Unauthorized(user.id, incident.id)
