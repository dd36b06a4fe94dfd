"""GitHub adapter using githubkit.

Feedback items become issues; the remote ID is the issue number.
"""

from __future__ import annotations

from typing import Any, ClassVar

from githubkit import GitHub
from githubkit.exception import GitHubException, RequestFailed

from feedback_sync.exceptions import MalformedResponseError, RemoteError
from feedback_sync.logging import get_logger
from feedback_sync.schemas import RemoteRef, Resource

from .base import ProviderAdapter
from .status import GITHUB_STATUS, StatusMapping

logger = get_logger(__name__)

# Status token -> (issue state, state_reason)
_ISSUE_STATES: dict[str, tuple[str, str | None]] = {
    "open": ("open", None),
    "closed": ("closed", "completed"),
    "not_planned": ("closed", "not_planned"),
}


class GitHubAdapter(ProviderAdapter):
    """Mirrors feedback as issues in a repository.

    Hierarchy paths:
        []              -> repositories of the token's user
        ["owner/repo"]  -> labels of the repository
    """

    provider_id: ClassVar[str] = "github"
    status_mapping: ClassVar[StatusMapping] = GITHUB_STATUS
    required_target_keys: ClassVar[tuple[str, ...]] = ("owner", "repo")

    def __init__(
        self,
        credential: str,
        *,
        target: dict[str, str] | None = None,
        status_field_ref: str | None = None,
    ) -> None:
        super().__init__(credential, target=target, status_field_ref=status_field_ref)
        self._client: GitHub[Any] | None = None

    @property
    def _github(self) -> GitHub[Any]:
        """Get or create the githubkit client instance."""
        if self._client is None:
            self._client = GitHub(self._credential)
        return self._client

    async def close(self) -> None:
        self._client = None

    def _handle_error(self, e: GitHubException) -> RemoteError:
        """Convert githubkit exceptions to RemoteError."""
        if isinstance(e, RequestFailed):
            return RemoteError(self.provider_id, str(e), e.response.status_code)
        return RemoteError(self.provider_id, str(e) or type(e).__name__)

    def _repo(self, target: dict[str, str]) -> tuple[str, str]:
        return self._target_value(target, "owner"), self._target_value(target, "repo")

    def _issue_number(self, remote_id: str) -> int:
        try:
            return int(remote_id)
        except ValueError as e:
            raise MalformedResponseError(
                self.provider_id, f"'{remote_id}' is not an issue number"
            ) from e

    # -------------------------------------------------------------------------
    # Capability surface
    # -------------------------------------------------------------------------
    async def create_item(
        self,
        target: dict[str, str],
        title: str,
        body: str,
        tags: list[str] | None = None,
    ) -> RemoteRef:
        owner, repo = self._repo(target)
        fields: dict[str, Any] = {"title": title, "body": body}
        if tags:
            fields["labels"] = list(tags)
        try:
            resp = await self._github.rest.issues.async_create(owner, repo, **fields)
        except GitHubException as e:
            raise self._handle_error(e) from e

        issue = resp.parsed_data
        return RemoteRef(
            remote_id=str(issue.number),
            remote_url=issue.html_url,
            display_id=f"#{issue.number}",
        )

    async def update_status(self, remote_id: str, token: str) -> None:
        owner, repo = self._repo(self._target)
        if token not in _ISSUE_STATES:
            raise RemoteError(self.provider_id, f"unknown issue state '{token}'")
        state, reason = _ISSUE_STATES[token]
        fields: dict[str, Any] = {"state": state}
        if reason is not None:
            fields["state_reason"] = reason

        try:
            await self._github.rest.issues.async_update(
                owner, repo, self._issue_number(remote_id), **fields
            )
        except GitHubException as e:
            raise self._handle_error(e) from e

    async def add_comment(self, remote_id: str, text: str) -> None:
        owner, repo = self._repo(self._target)
        try:
            await self._github.rest.issues.async_create_comment(
                owner,
                repo,
                self._issue_number(remote_id),
                body=text,
            )
        except GitHubException as e:
            raise self._handle_error(e) from e

    async def list_children(self, path: list[str]) -> list[Resource]:
        try:
            match path:
                case []:
                    resp = await self._github.rest.repos.async_list_for_authenticated_user(
                        per_page=100, sort="updated"
                    )
                    return [
                        Resource(id=r.full_name, name=r.full_name, kind="repository")
                        for r in resp.parsed_data
                    ]
                case [full_name]:
                    owner, _, repo = full_name.partition("/")
                    if not owner or not repo:
                        raise RemoteError(
                            self.provider_id, f"'{full_name}' is not an owner/repo name"
                        )
                    resp = await self._github.rest.issues.async_list_labels_for_repo(
                        owner, repo, per_page=100
                    )
                    return [
                        Resource(id=label.name, name=label.name, kind="label")
                        for label in resp.parsed_data
                    ]
        except GitHubException as e:
            raise self._handle_error(e) from e
        raise self._depth_error(path)
