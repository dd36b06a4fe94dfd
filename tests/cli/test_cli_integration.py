"""Integration tests for fbsync CLI commands.

These tests verify end-to-end flows:
- Real database operations (temporary SQLite file)
- The in-memory trackerx provider instead of a real API
- Actual service layer logic
"""

import json

import pytest
from sqlalchemy import create_engine, select
from sqlalchemy.orm import Session
from typer.testing import CliRunner

from feedback_sync.cli.app import app
from feedback_sync.config import get_settings
from feedback_sync.db.models import (
    Base,
    Feedback,
    IntegrationConfig,
    LinkState,
    Project,
    SyncFailure,
    SyncFailureStatus,
)
from feedback_sync.providers import ProviderRegistry
from tests.conftest import JAN_15
from tests.fakes import PROVIDER, FakeTracker, register_fake

runner = CliRunner()


# -----------------------------------------------------------------------------
# Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def db_path(tmp_path, monkeypatch):
    """Point the CLI at a fresh SQLite file seeded with one linkable project."""
    path = tmp_path / "fbsync.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{path}")
    monkeypatch.setattr("feedback_sync.db.engine._engine", None)
    monkeypatch.setattr("feedback_sync.db.engine._async_session_factory", None)
    get_settings.cache_clear()

    sync_engine = create_engine(f"sqlite:///{path}")
    Base.metadata.create_all(sync_engine)
    with Session(sync_engine) as session:
        project = Project(name="Acme")
        session.add(project)
        session.flush()
        session.add_all(
            [
                Feedback(project_id=project.id, title="Dark mode", description="Please."),
                Feedback(project_id=project.id, title="Export CSV", description="For finance."),
                IntegrationConfig(
                    project_id=project.id,
                    provider=PROVIDER,
                    credential="secret-token",
                    target_ref={"board_id": "b1"},
                    default_tags=["feedback"],
                ),
            ]
        )
        session.commit()
    sync_engine.dispose()

    yield path
    get_settings.cache_clear()


@pytest.fixture
def fake_tracker(monkeypatch) -> FakeTracker:
    """Make ProviderRegistry.default() return a registry with only the fake provider."""
    tracker = FakeTracker()
    registry = ProviderRegistry()
    register_fake(registry, tracker)
    monkeypatch.setattr(ProviderRegistry, "default", classmethod(lambda cls: registry))
    return tracker


def read_rows(path, model) -> list:
    engine = create_engine(f"sqlite:///{path}")
    with Session(engine) as session:
        rows = list(session.execute(select(model)).scalars().all())
        session.expunge_all()
    engine.dispose()
    return rows


# -----------------------------------------------------------------------------
# Integration Tests
# -----------------------------------------------------------------------------
class TestDbInit:
    def test_db_init_creates_tables(self, tmp_path, monkeypatch):
        path = tmp_path / "fresh.db"
        monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{path}")
        monkeypatch.setattr("feedback_sync.db.engine._engine", None)
        monkeypatch.setattr("feedback_sync.db.engine._async_session_factory", None)
        get_settings.cache_clear()

        result = runner.invoke(app, ["db", "init"])
        get_settings.cache_clear()

        assert result.exit_code == 0, result.output
        assert "Initialized" in result.stdout
        assert read_rows(path, LinkState) == []


class TestLinkIntegration:
    def test_create_then_show(self, db_path, fake_tracker):
        result = runner.invoke(app, ["link", "create", "1", PROVIDER, "--tags", "ui"])

        assert result.exit_code == 0, result.output
        assert "T-1" in result.stdout
        assert fake_tracker.calls_of("create_item")[0][3] == ["feedback", "ui"]

        links = read_rows(db_path, LinkState)
        assert [(link.feedback_id, link.remote_id) for link in links] == [(1, "T-1")]

        result = runner.invoke(app, ["link", "show", "1", "--format", "json"])
        output = json.loads(result.stdout)
        assert output["links"][PROVIDER]["remote_url"] == "https://trackerx.test/items/T-1"

    def test_second_create_is_refused(self, db_path, fake_tracker):
        runner.invoke(app, ["link", "create", "1", PROVIDER])
        result = runner.invoke(app, ["link", "create", "1", PROVIDER])

        assert result.exit_code == 1
        assert "already linked" in result.stdout
        assert len(fake_tracker.calls_of("create_item")) == 1

    def test_bulk_with_partial_failure(self, db_path, fake_tracker):
        fake_tracker.fail_titles = {"Export CSV"}

        result = runner.invoke(app, ["link", "bulk", "1,2,99", PROVIDER, "--format", "json"])

        assert result.exit_code == 0, result.output
        output = json.loads(result.stdout)
        assert [link["feedback_id"] for link in output["created"]] == [1]
        assert sorted(output["failed"]) == [2, 99]

        failures = read_rows(db_path, SyncFailure)
        assert [(f.feedback_id, f.status) for f in failures] == [(2, SyncFailureStatus.PENDING)]

    def test_failures_retry_resolves(self, db_path, fake_tracker):
        engine = create_engine(f"sqlite:///{db_path}")
        with Session(engine) as session:
            session.add(
                SyncFailure(
                    feedback_id=2,
                    provider=PROVIDER,
                    error_message="trackerx error (503): service unavailable",
                    error_type="RemoteError",
                    failed_at=JAN_15,
                )
            )
            session.commit()
        engine.dispose()

        result = runner.invoke(app, ["failures", "retry"])

        assert result.exit_code == 0, result.output
        assert "Succeeded" in result.stdout
        assert [f.status for f in read_rows(db_path, SyncFailure)] == [
            SyncFailureStatus.RESOLVED
        ]
        assert [link.feedback_id for link in read_rows(db_path, LinkState)] == [2]

        stats = runner.invoke(app, ["failures", "stats", "-f", "json"])
        assert json.loads(stats.stdout)["resolved"] == 1
