"""Linear adapter (GraphQL, personal API key in the Authorization header)."""

from typing import Any, ClassVar

from feedback_sync.exceptions import RemoteError
from feedback_sync.schemas import RemoteRef, Resource

from .base import HttpProviderAdapter
from .status import LINEAR_STATUS, StatusMapping

ISSUE_CREATE = """
mutation IssueCreate($input: IssueCreateInput!) {
  issueCreate(input: $input) {
    success
    issue { id identifier url }
  }
}
"""

ISSUE_UPDATE = """
mutation IssueUpdate($id: String!, $input: IssueUpdateInput!) {
  issueUpdate(id: $id, input: $input) { success }
}
"""

COMMENT_CREATE = """
mutation CommentCreate($input: CommentCreateInput!) {
  commentCreate(input: $input) { success }
}
"""

TEAM_STATES = """
query TeamStates($teamId: String!) {
  team(id: $teamId) {
    states { nodes { id name type position } }
  }
}
"""

TEAMS = """
query Teams {
  teams { nodes { id name key } }
}
"""

TEAM_PROJECTS = """
query TeamProjects($teamId: String!) {
  team(id: $teamId) {
    projects { nodes { id name } }
  }
}
"""

TEAM_LABELS = """
query TeamLabels($teamId: String!) {
  team(id: $teamId) {
    labels { nodes { id name } }
  }
}
"""


class LinearAdapter(HttpProviderAdapter):
    """Mirrors feedback as issues in a Linear team.

    Workflow state names differ per team, so status tokens are state
    *types* (backlog, unstarted, started, completed, canceled) resolved
    against the team's states at update time.

    Hierarchy paths:
        []                -> teams
        [team]            -> projects of the team
        [team, project]   -> labels of the team
    """

    provider_id: ClassVar[str] = "linear"
    status_mapping: ClassVar[StatusMapping] = LINEAR_STATUS
    required_target_keys: ClassVar[tuple[str, ...]] = ("team_id",)
    base_url: ClassVar[str] = "https://api.linear.app/graphql"

    def _auth_headers(self) -> dict[str, str]:
        return {"Authorization": self._credential}

    async def create_item(
        self,
        target: dict[str, str],
        title: str,
        body: str,
        tags: list[str] | None = None,
    ) -> RemoteRef:
        team_id = self._target_value(target, "team_id")
        issue_input: dict[str, Any] = {"teamId": team_id, "title": title, "description": body}
        if target.get("project_id"):
            issue_input["projectId"] = target["project_id"]
        if tags:
            label_ids = await self._label_ids(team_id, tags)
            if label_ids:
                issue_input["labelIds"] = label_ids

        data = await self._graphql(ISSUE_CREATE, {"input": issue_input})
        result = self._field(data, "issueCreate")
        if not result.get("success"):
            raise RemoteError(self.provider_id, "issueCreate was not successful")

        issue = self._field(result, "issue")
        return RemoteRef(
            remote_id=str(self._field(issue, "id")),
            remote_url=str(self._field(issue, "url")),
            display_id=issue.get("identifier"),
        )

    async def update_status(self, remote_id: str, token: str) -> None:
        team_id = self._target_value(self._target, "team_id")
        data = await self._graphql(TEAM_STATES, {"teamId": team_id})
        states = self._field(data, "team", "states", "nodes")

        candidates = sorted(
            (s for s in states if isinstance(s, dict) and s.get("type") == token),
            key=lambda s: s.get("position") or 0,
        )
        if not candidates:
            raise RemoteError(
                self.provider_id, f"team {team_id} has no workflow state of type '{token}'"
            )

        data = await self._graphql(
            ISSUE_UPDATE, {"id": remote_id, "input": {"stateId": candidates[0]["id"]}}
        )
        if not self._field(data, "issueUpdate").get("success"):
            raise RemoteError(self.provider_id, "issueUpdate was not successful")

    async def add_comment(self, remote_id: str, text: str) -> None:
        data = await self._graphql(COMMENT_CREATE, {"input": {"issueId": remote_id, "body": text}})
        if not self._field(data, "commentCreate").get("success"):
            raise RemoteError(self.provider_id, "commentCreate was not successful")

    async def list_children(self, path: list[str]) -> list[Resource]:
        match path:
            case []:
                data = await self._graphql(TEAMS)
                return self._resources(self._field(data, "teams", "nodes"), "team")
            case [team_id]:
                data = await self._graphql(TEAM_PROJECTS, {"teamId": team_id})
                return self._resources(
                    self._field(data, "team", "projects", "nodes"), "project"
                )
            case [team_id, _]:
                data = await self._graphql(TEAM_LABELS, {"teamId": team_id})
                return self._resources(self._field(data, "team", "labels", "nodes"), "label")
        raise self._depth_error(path)

    async def _label_ids(self, team_id: str, names: list[str]) -> list[str]:
        """Resolve tag names to the team's label IDs; unknown names are dropped."""
        data = await self._graphql(TEAM_LABELS, {"teamId": team_id})
        labels = self._resources(self._field(data, "team", "labels", "nodes"), "label")
        by_name = {label.name.casefold(): label.id for label in labels}
        return [by_name[n.casefold()] for n in names if n.casefold() in by_name]
