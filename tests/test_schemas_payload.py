"""Tests for domain schemas and the provider-agnostic payload builders."""

import pytest
from pydantic import ValidationError

from feedback_sync.schemas import (
    FeedbackCategory,
    FeedbackSnapshot,
    FeedbackStatus,
    IntegrationConfigRead,
    ProjectSnapshot,
    RemoteRef,
    build_item_payload,
    merge_tags,
    render_comment,
    render_description,
)


class TestMergeTags:
    """Tests for merge_tags."""

    def test_merge_keeps_first_occurrence(self):
        assert merge_tags(["feedback", "ui"], ["ui", "q3"]) == ["feedback", "ui", "q3"]

    def test_merge_drops_blanks_and_strips(self):
        assert merge_tags([" ui ", "", "  "], None, ["ui"]) == ["ui"]

    def test_merge_nothing(self):
        assert merge_tags() == []


class TestRenderDescription:
    """Tests for the Markdown body of new remote items."""

    def test_full_description(self, feedback_snapshot, project_snapshot):
        body = render_description(feedback_snapshot, project_snapshot)

        assert body.startswith("## Feature Request\n\nPlease add a dark theme.")
        assert "**Source:** FeedbackKit" in body
        assert "**Project:** Acme" in body
        assert "**Status:** Pending" in body
        assert "**Votes:** 12" in body
        assert "**MRR:** $49.00" in body
        assert body.endswith("**Submitted by:** ana@example.com")

    def test_optional_lines_omitted(self, project_snapshot):
        feedback = FeedbackSnapshot(
            id=1,
            project_id=1,
            title="Crash on save",
            category=FeedbackCategory.BUG_REPORT,
            status=FeedbackStatus.IN_PROGRESS,
            mrr=0,
        )

        body = render_description(feedback, project_snapshot)

        assert body.startswith("## Bug Report")
        assert "**Status:** In Progress" in body
        assert "MRR" not in body
        assert "Submitted by" not in body

    def test_build_item_payload(self, feedback_snapshot, project_snapshot):
        payload = build_item_payload(feedback_snapshot, project_snapshot, ["ui", "ui"])

        assert payload.title == "Dark mode"
        assert payload.body == render_description(feedback_snapshot, project_snapshot)
        assert payload.tags == ["ui"]


class TestRenderComment:
    def test_comment_has_author_and_footer(self):
        text = render_comment("Looks great", "Admin")

        assert text.startswith("**[Admin] Comment:**\n\nLooks great")
        assert text.endswith("_Synced from FeedbackKit_")


class TestSnapshots:
    """Tests for snapshot validation."""

    def test_title_required(self):
        with pytest.raises(ValidationError):
            FeedbackSnapshot(id=1, project_id=1, title="")

    def test_negative_votes_rejected(self):
        with pytest.raises(ValidationError):
            FeedbackSnapshot(id=1, project_id=1, title="T", vote_count=-1)

    def test_project_name_stripped(self):
        assert ProjectSnapshot(id=1, name="  Acme ").name == "Acme"

    def test_remote_ref_requires_id(self):
        with pytest.raises(ValidationError):
            RemoteRef(remote_id="", remote_url="https://example.test")

    def test_status_display_name(self):
        assert FeedbackStatus.IN_PROGRESS.display_name == "In Progress"


class TestIntegrationConfigRead:
    """Tests for the configured check."""

    def test_configured(self):
        config = IntegrationConfigRead(
            project_id=1, provider="clickup", credential="pk_1", target_ref={"list_id": "9"}
        )

        assert config.is_configured(("list_id",))
        assert config.missing_target_keys(("list_id",)) == []

    def test_stored_values_coerced_to_strings(self):
        config = IntegrationConfigRead(
            project_id=1,
            provider="monday",
            credential="tok",
            target_ref={"board_id": 4512, "group_id": None},
            target_names=None,
        )

        assert config.target_ref == {"board_id": "4512", "group_id": ""}
        assert config.target_names == {}
        assert config.missing_target_keys(("board_id", "group_id")) == ["group_id"]

    def test_blank_target_is_missing(self):
        config = IntegrationConfigRead(
            project_id=1, provider="clickup", credential="pk_1", target_ref={"list_id": " "}
        )

        assert not config.is_configured(("list_id",))
        assert config.missing_target_keys(("list_id",)) == ["list_id"]

    def test_blank_credential(self):
        config = IntegrationConfigRead(
            project_id=1, provider="linear", credential="   ", target_ref={"team_id": "t"}
        )

        assert not config.is_configured(("team_id",))
