"""Integration fixtures: file-backed SQLite database, seeded users, manager."""

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from incident_core.engine.incident_manager import IncidentManager
from incident_core.models import Base, Incident, Role, User


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    """Async session factory over a fresh SQLite file.

    A file (not :memory:) so that concurrent sessions get their own
    connections and real database locking.
    """
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'incidents.db'}",
        connect_args={"timeout": 30},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, expire_on_commit=False)
    await engine.dispose()


@pytest_asyncio.fixture
async def users(session_factory):
    """An admin, an incident owner and a responder who owns nothing."""
    async with session_factory() as session:
        seeded = {
            "admin": User(username="admin", role=Role.ADMIN.value),
            "owner": User(username="owner", role=Role.RESPONDER.value),
            "bystander": User(username="bystander", role=Role.RESPONDER.value),
            "viewer": User(username="viewer", role=Role.VIEWER.value),
        }
        session.add_all(seeded.values())
        await session.commit()
    return seeded


@pytest.fixture
def manager(session_factory):
    return IncidentManager(db_session_factory=session_factory)


@pytest.fixture
def force_status(session_factory):
    """Write a status straight to the table, bypassing the state machine."""

    async def _force(incident_id, status, **fields):
        async with session_factory() as session:
            incident = await session.get(Incident, incident_id)
            incident.status = status
            for name, value in fields.items():
                setattr(incident, name, value)
            await session.commit()
            return incident

    return _force
