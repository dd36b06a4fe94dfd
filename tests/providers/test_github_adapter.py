"""Tests for GitHubAdapter (githubkit client mocked)."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from githubkit.exception import RequestFailed

from feedback_sync.exceptions import RemoteError, UnsupportedOperationError
from feedback_sync.providers import GitHubAdapter

TARGET = {"owner": "acme", "repo": "app"}


@pytest.fixture
def mock_github():
    """Create a mock githubkit GitHub client."""
    with patch("feedback_sync.providers.github.GitHub") as mock_class:
        mock_instance = MagicMock()
        mock_class.return_value = mock_instance
        yield mock_instance


@pytest.fixture
def adapter(mock_github):
    return GitHubAdapter("ghp_test", target=TARGET)


def request_failed(status_code: int) -> RequestFailed:
    mock_response = MagicMock()
    mock_response.status_code = status_code
    mock_response.headers = {}
    return RequestFailed(mock_response)


class TestGitHubCreate:
    async def test_create_issue(self, adapter, mock_github):
        issue = MagicMock(number=17, html_url="https://github.com/acme/app/issues/17")
        mock_github.rest.issues.async_create = AsyncMock(return_value=MagicMock(parsed_data=issue))

        ref = await adapter.create_item(TARGET, "Dark mode", "Body", ["feedback"])

        assert ref.remote_id == "17"
        assert ref.display_id == "#17"
        assert ref.remote_url == "https://github.com/acme/app/issues/17"
        mock_github.rest.issues.async_create.assert_awaited_once_with(
            "acme", "app", title="Dark mode", body="Body", labels=["feedback"]
        )

    async def test_create_without_tags_sends_no_labels(self, adapter, mock_github):
        issue = MagicMock(number=1, html_url="u")
        mock_github.rest.issues.async_create = AsyncMock(return_value=MagicMock(parsed_data=issue))

        await adapter.create_item(TARGET, "T", "B")

        assert "labels" not in mock_github.rest.issues.async_create.await_args.kwargs

    async def test_request_failed_maps_to_remote_error(self, adapter, mock_github):
        mock_github.rest.issues.async_create = AsyncMock(side_effect=request_failed(404))

        with pytest.raises(RemoteError) as exc_info:
            await adapter.create_item(TARGET, "T", "B")

        assert exc_info.value.http_status == 404
        assert exc_info.value.provider == "github"


class TestGitHubUpdates:
    @pytest.mark.parametrize(
        ("token", "expected"),
        [
            ("open", {"state": "open"}),
            ("closed", {"state": "closed", "state_reason": "completed"}),
            ("not_planned", {"state": "closed", "state_reason": "not_planned"}),
        ],
    )
    async def test_update_status(self, adapter, mock_github, token, expected):
        mock_github.rest.issues.async_update = AsyncMock()

        await adapter.update_status("17", token)

        mock_github.rest.issues.async_update.assert_awaited_once_with("acme", "app", 17, **expected)

    async def test_add_comment(self, adapter, mock_github):
        mock_github.rest.issues.async_create_comment = AsyncMock()

        await adapter.add_comment("17", "Hello")

        mock_github.rest.issues.async_create_comment.assert_awaited_once_with(
            "acme", "app", 17, body="Hello"
        )

    async def test_numeric_fields_unsupported(self, adapter):
        with pytest.raises(UnsupportedOperationError):
            await adapter.set_numeric_field("17", "votes", 3)


class TestGitHubHierarchy:
    async def test_root_lists_repositories(self, adapter, mock_github):
        repo = MagicMock(full_name="acme/app")
        mock_github.rest.repos.async_list_for_authenticated_user = AsyncMock(
            return_value=MagicMock(parsed_data=[repo])
        )

        resources = await adapter.list_children([])

        assert [(r.id, r.kind) for r in resources] == [("acme/app", "repository")]

    async def test_repository_lists_labels(self, adapter, mock_github):
        label = MagicMock()
        label.name = "feedback"
        mock_github.rest.issues.async_list_labels_for_repo = AsyncMock(
            return_value=MagicMock(parsed_data=[label])
        )

        resources = await adapter.list_children(["acme/app"])

        assert resources[0].name == "feedback"
        mock_github.rest.issues.async_list_labels_for_repo.assert_awaited_once_with(
            "acme", "app", per_page=100
        )
