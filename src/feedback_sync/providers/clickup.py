"""ClickUp adapter (REST v2, personal token in the Authorization header)."""

from typing import Any, ClassVar

from feedback_sync.exceptions import MalformedResponseError
from feedback_sync.schemas import RemoteRef, Resource

from .base import HttpProviderAdapter
from .status import CLICKUP_STATUS, StatusMapping


class ClickUpAdapter(HttpProviderAdapter):
    """Mirrors feedback as tasks in a ClickUp list.

    Hierarchy paths:
        []                          -> workspaces
        [workspace]                 -> spaces
        [workspace, space]          -> folders and folderless lists
        [workspace, space, folder]  -> lists in the folder
        [workspace, space, folder, list] -> custom fields of the list
    """

    provider_id: ClassVar[str] = "clickup"
    status_mapping: ClassVar[StatusMapping] = CLICKUP_STATUS
    required_target_keys: ClassVar[tuple[str, ...]] = ("list_id",)
    supports_numeric_fields: ClassVar[bool] = True
    base_url: ClassVar[str] = "https://api.clickup.com/api/v2"

    def _auth_headers(self) -> dict[str, str]:
        return {"Authorization": self._credential}

    async def create_item(
        self,
        target: dict[str, str],
        title: str,
        body: str,
        tags: list[str] | None = None,
    ) -> RemoteRef:
        list_id = self._target_value(target, "list_id")
        payload: dict[str, Any] = {"name": title, "markdown_description": body}
        if tags:
            payload["tags"] = tags

        task = await self._request("POST", f"/list/{list_id}/task", json=payload)
        return RemoteRef(
            remote_id=str(self._field(task, "id")),
            remote_url=str(self._field(task, "url")),
            display_id=task.get("custom_id"),
        )

    async def update_status(self, remote_id: str, token: str) -> None:
        await self._request("PUT", f"/task/{remote_id}", json={"status": token})

    async def add_comment(self, remote_id: str, text: str) -> None:
        await self._request(
            "POST",
            f"/task/{remote_id}/comment",
            json={"comment_text": text, "notify_all": False},
        )

    async def set_numeric_field(self, remote_id: str, field_ref: str, value: int) -> None:
        await self._request("POST", f"/task/{remote_id}/field/{field_ref}", json={"value": value})

    async def list_children(self, path: list[str]) -> list[Resource]:
        match path:
            case []:
                body = await self._request("GET", "/team")
                return self._resources(self._field(body, "teams"), "workspace")
            case [workspace_id]:
                body = await self._request("GET", f"/team/{workspace_id}/space")
                return self._resources(self._field(body, "spaces"), "space")
            case [_, space_id]:
                folders = await self._request("GET", f"/space/{space_id}/folder")
                lists = await self._request("GET", f"/space/{space_id}/list")
                return self._resources(self._field(folders, "folders"), "folder") + (
                    self._resources(self._field(lists, "lists"), "list")
                )
            case [_, _, folder_id]:
                body = await self._request("GET", f"/folder/{folder_id}/list")
                return self._resources(self._field(body, "lists"), "list")
            case [_, _, _, list_id]:
                return await self._custom_fields(list_id)
        raise self._depth_error(path)

    async def _custom_fields(self, list_id: str) -> list[Resource]:
        body = await self._request("GET", f"/list/{list_id}/field")
        fields = self._field(body, "fields")
        if not isinstance(fields, list):
            raise MalformedResponseError(self.provider_id, "expected a list of fields")
        return [
            Resource(id=str(f["id"]), name=str(f.get("name") or ""), kind=f.get("type"))
            for f in fields
            if isinstance(f, dict) and f.get("id")
        ]
