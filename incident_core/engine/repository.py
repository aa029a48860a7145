"""Incident persistence: lookups and the version-checked status write."""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from ..models.comment import Comment
from ..models.incident import Incident
from ..models.user import User
from .errors import ConcurrentModification
from .transitions import TransitionPlan


class IncidentRepository:
    """Session-scoped data access for the incident manager."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_incident(self, incident_id: str) -> Optional[Incident]:
        return (await self._session.execute(
            select(Incident).where(Incident.id == incident_id)
        )).scalar_one_or_none()

    async def get_user(self, user_id: str) -> Optional[User]:
        return (await self._session.execute(
            select(User).where(User.id == user_id)
        )).scalar_one_or_none()

    async def add_incident(self, incident: Incident) -> Incident:
        self._session.add(incident)
        await self._session.commit()
        return incident

    async def commit_status_change(
        self, incident: Incident, plan: TransitionPlan, comment: Comment
    ) -> Incident:
        """Apply ``plan`` and insert ``comment`` in one transaction.

        The incident UPDATE is conditioned on the version loaded into this
        session. If another writer got there first nothing is written, the
        comment included, and ConcurrentModification is raised.
        """
        incident_id = incident.id
        expected_version = incident.version

        incident.status = plan.to_status.value
        for name, value in plan.changes.items():
            setattr(incident, name, value)
        self._session.add(comment)

        try:
            await self._session.commit()
        except StaleDataError:
            await self._session.rollback()
            raise ConcurrentModification(incident_id, expected_version) from None
        return incident

    async def list_comments(self, incident_id: str) -> list[Comment]:
        result = await self._session.execute(
            select(Comment).where(Comment.incident_id == incident_id).order_by(Comment.id)
        )
        return list(result.scalars().all())
