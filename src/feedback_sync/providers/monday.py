"""monday.com adapter (GraphQL v2, personal token in the Authorization header)."""

from typing import Any, ClassVar

from feedback_sync.exceptions import MalformedResponseError, RemoteError
from feedback_sync.logging import get_logger
from feedback_sync.schemas import RemoteRef, Resource

from .base import HttpProviderAdapter
from .status import MONDAY_STATUS, StatusMapping

logger = get_logger(__name__)

API_VERSION = "2024-01"

CREATE_ITEM = """
mutation CreateItem($boardId: ID!, $groupId: String, $name: String!) {
  create_item(board_id: $boardId, group_id: $groupId, item_name: $name) { id url }
}
"""

CREATE_UPDATE = """
mutation CreateUpdate($itemId: ID!, $body: String!) {
  create_update(item_id: $itemId, body: $body) { id }
}
"""

CHANGE_COLUMN = """
mutation ChangeColumn($boardId: ID!, $itemId: ID!, $columnId: String!, $value: String!) {
  change_simple_column_value(
    board_id: $boardId, item_id: $itemId, column_id: $columnId, value: $value
  ) { id }
}
"""

BOARDS = """
query Boards {
  boards(limit: 100) { id name }
}
"""

BOARD_GROUPS = """
query BoardGroups($boardId: ID!) {
  boards(ids: [$boardId]) { groups { id title } }
}
"""

BOARD_COLUMNS = """
query BoardColumns($boardId: ID!) {
  boards(ids: [$boardId]) { columns { id title type } }
}
"""


class MondayAdapter(HttpProviderAdapter):
    """Mirrors feedback as items on a monday.com board.

    The rendered description is posted as the item's first update, since
    items have no body of their own.

    Hierarchy paths:
        []              -> boards
        [board]         -> groups of the board
        [board, group]  -> columns of the board
    """

    provider_id: ClassVar[str] = "monday"
    status_mapping: ClassVar[StatusMapping] = MONDAY_STATUS
    required_target_keys: ClassVar[tuple[str, ...]] = ("board_id",)
    supports_numeric_fields: ClassVar[bool] = True
    base_url: ClassVar[str] = "https://api.monday.com/v2"

    def _auth_headers(self) -> dict[str, str]:
        return {"Authorization": self._credential, "API-Version": API_VERSION}

    async def create_item(
        self,
        target: dict[str, str],
        title: str,
        body: str,
        tags: list[str] | None = None,
    ) -> RemoteRef:
        board_id = self._target_value(target, "board_id")
        data = await self._graphql(
            CREATE_ITEM,
            {"boardId": board_id, "groupId": target.get("group_id") or None, "name": title},
        )
        item = self._field(data, "create_item")
        item_id = str(self._field(item, "id"))
        fallback_url = f"https://monday.com/boards/{board_id}/pulses/{item_id}"
        ref = RemoteRef(remote_id=item_id, remote_url=str(item.get("url") or fallback_url))

        # The item exists now; a failed description must not hide that
        try:
            await self._graphql(CREATE_UPDATE, {"itemId": item_id, "body": body})
        except RemoteError as e:
            logger.warning("Item {} created without description: {}", item_id, e)
        return ref

    async def update_status(self, remote_id: str, token: str) -> None:
        await self._change_column(remote_id, self._status_field_ref or "status", token)

    async def add_comment(self, remote_id: str, text: str) -> None:
        await self._graphql(CREATE_UPDATE, {"itemId": remote_id, "body": text})

    async def set_numeric_field(self, remote_id: str, field_ref: str, value: int) -> None:
        await self._change_column(remote_id, field_ref, str(value))

    async def list_children(self, path: list[str]) -> list[Resource]:
        match path:
            case []:
                data = await self._graphql(BOARDS)
                return self._resources(self._field(data, "boards"), "board")
            case [board_id]:
                board = await self._board(BOARD_GROUPS, board_id)
                return self._resources(
                    self._field(board, "groups"), "group", name_key="title"
                )
            case [board_id, _]:
                board = await self._board(BOARD_COLUMNS, board_id)
                columns = self._field(board, "columns")
                if not isinstance(columns, list):
                    raise MalformedResponseError(self.provider_id, "expected a list of columns")
                return [
                    Resource(id=str(c["id"]), name=str(c.get("title") or ""), kind=c.get("type"))
                    for c in columns
                    if isinstance(c, dict) and c.get("id")
                ]
        raise self._depth_error(path)

    async def _change_column(self, item_id: str, column_id: str, value: str) -> None:
        board_id = self._target_value(self._target, "board_id")
        await self._graphql(
            CHANGE_COLUMN,
            {"boardId": board_id, "itemId": item_id, "columnId": column_id, "value": value},
        )

    async def _board(self, query: str, board_id: str) -> dict[str, Any]:
        data = await self._graphql(query, {"boardId": board_id})
        boards = self._field(data, "boards")
        if not isinstance(boards, list) or not boards:
            raise RemoteError(self.provider_id, f"board {board_id} not found")
        board: dict[str, Any] = boards[0]
        return board
