"""Incident Manager: incident creation and status lifecycle."""

from datetime import datetime
from typing import Any, Awaitable, Callable, Optional

from ..auth.rbac import authorize_status_change
from ..models.base import utcnow
from ..models.comment import Comment
from ..models.enums import CommentType, IncidentStatus, Severity
from ..models.incident import Incident
from ..utils.logging import get_logger
from .errors import ConcurrentModification, IncidentNotFound, UserNotFound
from .repository import IncidentRepository
from .sla import sla_target_for
from .transitions import TransitionRejected, build_status_message, plan_transition

logger = get_logger("engine.incident_manager")

EventHook = Callable[[dict], Awaitable[Any]]


class IncidentManager:
    """Creates incidents and moves them through the status state machine.

    Every call opens its own session from ``db_session_factory``; no state
    is shared between calls. Errors from ``engine.errors`` propagate to the
    caller unchanged and nothing is retried here.
    """

    def __init__(self, db_session_factory=None, event_hook: Optional[EventHook] = None):
        self._db_session_factory = db_session_factory
        self._event_hook = event_hook

    def set_db_session_factory(self, factory) -> None:
        self._db_session_factory = factory

    def set_event_hook(self, fn: Optional[EventHook]) -> None:
        self._event_hook = fn

    async def _emit(self, event: str, incident: Incident, **extra: Any) -> None:
        """Notify the event hook. The write is already committed, so failures are only logged."""
        if not self._event_hook:
            return
        try:
            await self._event_hook({
                "type": "incident_update",
                "data": {"event": event, **self._to_dict(incident), **extra},
            })
        except Exception as exc:
            logger.warning("incident_event_hook_failed", id=incident.id, hook_event=event, error=str(exc))

    async def create_incident(
        self,
        title: str,
        description: Optional[str],
        severity: Any,
        created_by_id: str,
        owner_id: Optional[str] = None,
    ) -> Incident:
        """Create an OPEN incident with its SLA target derived from severity."""
        sla_minutes = sla_target_for(severity)
        now = utcnow()

        async with self._db_session_factory() as session:
            incident = Incident(
                title=title,
                description=description,
                severity=Severity(severity).value,
                status=IncidentStatus.OPEN.value,
                sla_target_minutes=sla_minutes,
                current_sla_start_at=now,
                owner_id=owner_id or created_by_id,
                created_by_id=created_by_id,
                created_at=now,
            )
            await IncidentRepository(session).add_incident(incident)

        logger.info(
            "incident_created",
            id=incident.id,
            severity=incident.severity,
            sla_target_minutes=sla_minutes,
            owner_id=incident.owner_id,
        )
        await self._emit("created", incident)
        return incident

    async def update_status(self, incident_id: str, new_status: Any, user_id: str) -> Incident:
        """Move an incident to ``new_status`` on behalf of ``user_id``.

        Validation and authorization happen before anything is written; the
        status change and its SYSTEM_EVENT comment are committed together,
        conditioned on the version read here.
        """
        now = utcnow()

        async with self._db_session_factory() as session:
            repo = IncidentRepository(session)

            incident = await repo.get_incident(incident_id)
            if incident is None:
                raise IncidentNotFound(incident_id)
            user = await repo.get_user(user_id)
            if user is None:
                raise UserNotFound(user_id)

            authorize_status_change(user, incident)

            outcome = plan_transition(incident.status, new_status, now)
            if isinstance(outcome, TransitionRejected):
                logger.info(
                    "incident_transition_rejected",
                    id=incident_id,
                    code=outcome.error.code,
                    **outcome.error.context,
                )
                raise outcome.error

            comment = Comment(
                incident_id=incident.id,
                author_id=user.id,
                message=build_status_message(outcome.from_status, outcome.to_status),
                type=CommentType.SYSTEM_EVENT.value,
            )
            try:
                incident = await repo.commit_status_change(incident, outcome, comment)
            except ConcurrentModification as exc:
                logger.warning(
                    "incident_version_conflict",
                    id=incident_id,
                    expected_version=exc.expected_version,
                    requested=outcome.to_status.value,
                )
                raise

        logger.info(
            "incident_status_updated",
            id=incident_id,
            old=outcome.from_status.value,
            new=outcome.to_status.value,
            version=incident.version,
            reopened=outcome.is_reopen,
        )
        await self._emit("status_changed", incident, previous_status=outcome.from_status.value)
        return incident

    async def get_incident(self, incident_id: str) -> Incident:
        """Get a single incident by ID."""
        async with self._db_session_factory() as session:
            incident = await IncidentRepository(session).get_incident(incident_id)
        if incident is None:
            raise IncidentNotFound(incident_id)
        return incident

    async def get_audit_trail(self, incident_id: str) -> list[Comment]:
        """All comments on an incident, oldest first."""
        async with self._db_session_factory() as session:
            repo = IncidentRepository(session)
            if await repo.get_incident(incident_id) is None:
                raise IncidentNotFound(incident_id)
            return await repo.list_comments(incident_id)

    @staticmethod
    def _to_dict(incident: Incident) -> dict:
        def _iso(value: Optional[datetime]) -> Optional[str]:
            return value.isoformat() if value else None

        return {
            "id": incident.id,
            "title": incident.title,
            "severity": incident.severity,
            "status": incident.status,
            "sla_target_minutes": incident.sla_target_minutes,
            "current_sla_start_at": _iso(incident.current_sla_start_at),
            "acknowledged_at": _iso(incident.acknowledged_at),
            "resolved_at": _iso(incident.resolved_at),
            "closed_at": _iso(incident.closed_at),
            "owner_id": incident.owner_id,
            "created_by_id": incident.created_by_id,
            "version": incident.version,
        }
