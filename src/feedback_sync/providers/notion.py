"""Notion adapter (REST, integration token as Bearer, pinned API version)."""

from typing import Any, ClassVar

from feedback_sync.exceptions import MalformedResponseError
from feedback_sync.schemas import RemoteRef, Resource

from .base import HttpProviderAdapter
from .status import NOTION_STATUS, StatusMapping

NOTION_VERSION = "2022-06-28"

# Notion rejects rich text objects above this length
MAX_TEXT_LENGTH = 2000
MAX_CHILD_BLOCKS = 100


def _rich_text(text: str) -> list[dict[str, Any]]:
    chunks = [text[i : i + MAX_TEXT_LENGTH] for i in range(0, len(text), MAX_TEXT_LENGTH)]
    return [{"type": "text", "text": {"content": chunk}} for chunk in chunks or [""]]


def _paragraphs(body: str) -> list[dict[str, Any]]:
    blocks = [
        {"object": "block", "type": "paragraph", "paragraph": {"rich_text": _rich_text(part)}}
        for part in body.split("\n\n")
        if part.strip()
    ]
    return blocks[:MAX_CHILD_BLOCKS]


def _plain_text(rich_text: Any) -> str:
    if not isinstance(rich_text, list):
        return ""
    return "".join(str(t.get("plain_text", "")) for t in rich_text if isinstance(t, dict))


class NotionAdapter(HttpProviderAdapter):
    """Mirrors feedback as pages in a Notion database.

    Optional target keys: ``title_property`` (default "Name") and
    ``tags_property`` (a multi-select; tags are only sent when set).

    Hierarchy paths:
        []          -> databases shared with the integration
        [database]  -> properties of the database
    """

    provider_id: ClassVar[str] = "notion"
    status_mapping: ClassVar[StatusMapping] = NOTION_STATUS
    required_target_keys: ClassVar[tuple[str, ...]] = ("database_id",)
    supports_numeric_fields: ClassVar[bool] = True
    base_url: ClassVar[str] = "https://api.notion.com/v1"

    def _auth_headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._credential}",
            "Notion-Version": NOTION_VERSION,
        }

    async def create_item(
        self,
        target: dict[str, str],
        title: str,
        body: str,
        tags: list[str] | None = None,
    ) -> RemoteRef:
        database_id = self._target_value(target, "database_id")
        title_property = target.get("title_property") or "Name"

        properties: dict[str, Any] = {
            title_property: {"title": [{"text": {"content": title[:MAX_TEXT_LENGTH]}}]},
        }
        if tags and target.get("tags_property"):
            properties[target["tags_property"]] = {
                "multi_select": [{"name": tag} for tag in tags]
            }

        page = await self._request(
            "POST",
            "/pages",
            json={
                "parent": {"database_id": database_id},
                "properties": properties,
                "children": _paragraphs(body),
            },
        )
        return RemoteRef(
            remote_id=str(self._field(page, "id")),
            remote_url=str(self._field(page, "url")),
        )

    async def update_status(self, remote_id: str, token: str) -> None:
        status_property = self._status_field_ref or "Status"
        await self._request(
            "PATCH",
            f"/pages/{remote_id}",
            json={"properties": {status_property: {"status": {"name": token}}}},
        )

    async def add_comment(self, remote_id: str, text: str) -> None:
        await self._request(
            "POST",
            "/comments",
            json={"parent": {"page_id": remote_id}, "rich_text": _rich_text(text)},
        )

    async def set_numeric_field(self, remote_id: str, field_ref: str, value: int) -> None:
        await self._request(
            "PATCH",
            f"/pages/{remote_id}",
            json={"properties": {field_ref: {"number": value}}},
        )

    async def list_children(self, path: list[str]) -> list[Resource]:
        match path:
            case []:
                body = await self._request(
                    "POST",
                    "/search",
                    json={"filter": {"property": "object", "value": "database"}},
                )
                results = self._field(body, "results")
                if not isinstance(results, list):
                    raise MalformedResponseError(self.provider_id, "expected a list of results")
                return [
                    Resource(
                        id=str(db["id"]),
                        name=_plain_text(db.get("title")) or "Untitled",
                        kind="database",
                    )
                    for db in results
                    if isinstance(db, dict) and db.get("id")
                ]
            case [database_id]:
                body = await self._request("GET", f"/databases/{database_id}")
                properties = self._field(body, "properties")
                if not isinstance(properties, dict):
                    raise MalformedResponseError(self.provider_id, "properties is not an object")
                return [
                    Resource(id=str(prop.get("id", name)), name=name, kind=prop.get("type"))
                    for name, prop in properties.items()
                    if isinstance(prop, dict)
                ]
        raise self._depth_error(path)
