"""Service test fixtures — async DB, fixed clock and FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - All sessions (request, audit, recompute) share one connection via StaticPool,
      so rows written by side sessions are visible to the test session
    - get_db dependency overridden to use the test DB; db_manager patched for readiness
    - Services receive a fixed clock so windows and decay are deterministic

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for service tests
"""

from datetime import timedelta

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from sqlalchemy.pool import StaticPool
from httpx import ASGITransport, AsyncClient

import cookgov.models  # noqa: F401
from cookgov.db.base import Base
from cookgov.infrastructure.database import get_db, DatabaseSessionManager
import cookgov.infrastructure.database as db_module
from cookgov.main import app
from cookgov.services.ledger_service import LedgerService
from cookgov.services.team_service import TeamService
from tests.core.helpers import NOW


class FixedClock:
    """Callable clock that tests can move forward."""

    def __init__(self, now=NOW):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
async def team(test_db, clock):
    """A team with default settings."""
    return await TeamService(test_db, clock).upsert_team("team-1", name="Kitchen")


@pytest.fixture
async def seed_ledger(test_db, clock, team):
    """alice 100 COOK, bob 50 COOK, carol 30 COOK issued ten months ago."""
    ledger = LedgerService(test_db, clock)
    await ledger.record_contribution("team-1", "alice", 100)
    await ledger.record_contribution("team-1", "bob", 50)
    await ledger.record_contribution(
        "team-1", "carol", 30, issued_at=clock() - timedelta(days=305),
    )
    return ledger


@pytest.fixture
async def client(test_engine, test_session_factory):
    """FastAPI test client with DB dependency overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager
