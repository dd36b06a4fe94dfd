"""Pytest configuration and shared fixtures.

Usage Guide:
- For ORM model tests: import factories from tests.factories
- For orchestrator/bulk/trigger tests: use the fake_registry fixture, which
  registers the in-memory "trackerx" adapter from tests.fakes
- For HTTP adapter tests: use pytest-httpx's httpx_mock fixture
"""

from datetime import UTC, datetime

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from feedback_sync.db.models import Base
from feedback_sync.providers import ProviderRegistry
from feedback_sync.schemas import FeedbackSnapshot, ProjectSnapshot
from tests.fakes import FakeTracker, register_fake

# -----------------------------------------------------------------------------
# Test Timeline Constants
# -----------------------------------------------------------------------------
JAN_15 = datetime(2024, 1, 15, 10, 0, 0, tzinfo=UTC)


# -----------------------------------------------------------------------------
# Database Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
async def test_engine():
    """Create an in-memory SQLite engine for tests.

    Each test gets a fresh database with all tables created.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    """Session factory bound to the test engine (for code that opens its own sessions)."""
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest.fixture
async def db_session(session_factory):
    """Create an async session with auto-rollback.

    Changes are rolled back after each test to ensure isolation.
    """
    async with session_factory() as session:
        yield session
        await session.rollback()


# -----------------------------------------------------------------------------
# Provider Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def tracker() -> FakeTracker:
    """Shared state of the in-memory tracker (calls, items, scripted failures)."""
    return FakeTracker()


@pytest.fixture
def fake_registry(tracker) -> ProviderRegistry:
    """Registry holding only the fake "trackerx" provider."""
    registry = ProviderRegistry()
    register_fake(registry, tracker)
    return registry


# -----------------------------------------------------------------------------
# Snapshot Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def project_snapshot() -> ProjectSnapshot:
    return ProjectSnapshot(id=1, name="Acme")


@pytest.fixture
def feedback_snapshot() -> FeedbackSnapshot:
    return FeedbackSnapshot(
        id=10,
        project_id=1,
        title="Dark mode",
        description="Please add a dark theme.",
        vote_count=12,
        submitter_email="ana@example.com",
        mrr=49.0,
    )
