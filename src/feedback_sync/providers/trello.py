"""Trello adapter (REST v1, application key + member token as query params)."""

from typing import ClassVar

import httpx

from feedback_sync.config import get_settings
from feedback_sync.exceptions import NotConfiguredError, RemoteError
from feedback_sync.schemas import RemoteRef, Resource

from .base import HttpProviderAdapter
from .status import TRELLO_STATUS, StatusMapping


class TrelloAdapter(HttpProviderAdapter):
    """Mirrors feedback as cards on a Trello list.

    Trello has no status field: a status change moves the card to the list
    on the configured board whose name matches the token. Tags are not sent
    because Trello labels must be created per board first.

    Hierarchy paths:
        []       -> open boards of the token's member
        [board]  -> lists on the board
    """

    provider_id: ClassVar[str] = "trello"
    status_mapping: ClassVar[StatusMapping] = TRELLO_STATUS
    required_target_keys: ClassVar[tuple[str, ...]] = ("board_id", "list_id")
    base_url: ClassVar[str] = "https://api.trello.com/1"

    def __init__(
        self,
        credential: str,
        *,
        target: dict[str, str] | None = None,
        status_field_ref: str | None = None,
        http_client: httpx.AsyncClient | None = None,
        api_key: str | None = None,
    ) -> None:
        super().__init__(
            credential,
            target=target,
            status_field_ref=status_field_ref,
            http_client=http_client,
        )
        key = api_key if api_key is not None else get_settings().trello_api_key
        if not key.strip():
            # The member token alone cannot authenticate
            raise NotConfiguredError(self.provider_id, ["trello_api_key"])
        self._api_key = key

    def _auth_params(self) -> dict[str, str]:
        return {"key": self._api_key, "token": self._credential}

    async def create_item(
        self,
        target: dict[str, str],
        title: str,
        body: str,
        tags: list[str] | None = None,
    ) -> RemoteRef:
        list_id = self._target_value(target, "list_id")
        card = await self._request(
            "POST",
            "/cards",
            json={"idList": list_id, "name": title, "desc": body, "pos": "bottom"},
        )
        short_id = card.get("idShort") if isinstance(card, dict) else None
        return RemoteRef(
            remote_id=str(self._field(card, "id")),
            remote_url=str(card.get("shortUrl") or self._field(card, "url")),
            display_id=f"#{short_id}" if short_id is not None else None,
        )

    async def update_status(self, remote_id: str, token: str) -> None:
        board_id = self._target_value(self._target, "board_id")
        lists = self._resources(
            await self._request("GET", f"/boards/{board_id}/lists"), "list"
        )
        wanted = token.casefold()
        destination = next((lst for lst in lists if lst.name.casefold() == wanted), None)
        if destination is None:
            raise RemoteError(self.provider_id, f"no list named '{token}' on board {board_id}")

        await self._request("PUT", f"/cards/{remote_id}", json={"idList": destination.id})

    async def add_comment(self, remote_id: str, text: str) -> None:
        await self._request("POST", f"/cards/{remote_id}/actions/comments", json={"text": text})

    async def list_children(self, path: list[str]) -> list[Resource]:
        match path:
            case []:
                boards = await self._request(
                    "GET", "/members/me/boards", params={"filter": "open"}
                )
                return self._resources(boards, "board")
            case [board_id]:
                return self._resources(
                    await self._request("GET", f"/boards/{board_id}/lists"), "list"
                )
        raise self._depth_error(path)
