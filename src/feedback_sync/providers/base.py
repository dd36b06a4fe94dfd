"""Provider adapter contract and the shared httpx transport.

Every adapter exposes the same capability surface:

    create_item(target, title, body, tags) -> RemoteRef
    update_status(remote_id, token)
    add_comment(remote_id, text)
    set_numeric_field(remote_id, field_ref, value)
    list_children(path) -> list[Resource]

An adapter performs exactly the remote call asked of it. It never retries
and holds no state beyond its authenticated client.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar

import httpx

from feedback_sync.config import get_settings
from feedback_sync.exceptions import (
    MalformedResponseError,
    RemoteError,
    UnsupportedOperationError,
)
from feedback_sync.logging import get_logger
from feedback_sync.schemas import RemoteRef, Resource

from .status import StatusMapping

logger = get_logger(__name__)


class ProviderAdapter(ABC):
    """Uniform capability set implemented once per external tracker."""

    provider_id: ClassVar[str]
    status_mapping: ClassVar[StatusMapping]
    required_target_keys: ClassVar[tuple[str, ...]] = ()
    supports_numeric_fields: ClassVar[bool] = False

    def __init__(
        self,
        credential: str,
        *,
        target: dict[str, str] | None = None,
        status_field_ref: str | None = None,
    ) -> None:
        """Initialize the adapter.

        Args:
            credential: Provider token or API key
            target: Configured target reference (needed by adapters that
                resolve statuses against the target, e.g., Trello lists)
            status_field_ref: Provider field holding the status, where the
                provider stores status in a user-defined field
        """
        self._credential = credential
        self._target = dict(target or {})
        self._status_field_ref = status_field_ref

    # -------------------------------------------------------------------------
    # Capability surface
    # -------------------------------------------------------------------------
    @abstractmethod
    async def create_item(
        self,
        target: dict[str, str],
        title: str,
        body: str,
        tags: list[str] | None = None,
    ) -> RemoteRef:
        """Create the remote resource mirroring a feedback item."""

    @abstractmethod
    async def update_status(self, remote_id: str, token: str) -> None:
        """Apply a mapped status token to an existing remote resource."""

    @abstractmethod
    async def add_comment(self, remote_id: str, text: str) -> None:
        """Append a comment to an existing remote resource."""

    async def set_numeric_field(self, remote_id: str, field_ref: str, value: int) -> None:
        """Write a number into a provider field (e.g., a votes column)."""
        raise UnsupportedOperationError(self.provider_id, "numeric fields")

    async def list_children(self, path: list[str]) -> list[Resource]:
        """List the hierarchy nodes beneath ``path`` (empty path = roots)."""
        raise UnsupportedOperationError(self.provider_id, "hierarchy browsing")

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------
    async def close(self) -> None:
        """Release the underlying client."""
        return None

    async def __aenter__(self) -> ProviderAdapter:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        await self.close()

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------
    def _target_value(self, target: dict[str, str], key: str) -> str:
        value = (target.get(key) or "").strip()
        if not value:
            # Guarded by the orchestrator; reaching here is a wiring bug
            raise ValueError(f"{self.provider_id} target is missing '{key}'")
        return value

    def _depth_error(self, path: list[str]) -> UnsupportedOperationError:
        return UnsupportedOperationError(
            self.provider_id, f"browsing {len(path)} levels deep"
        )


class HttpProviderAdapter(ProviderAdapter):
    """Adapter base for providers reached over plain REST or GraphQL.

    Owns an ``httpx.AsyncClient`` unless one is injected, attaches the
    provider's auth scheme, and maps every failure onto RemoteError.
    """

    base_url: ClassVar[str]

    def __init__(
        self,
        credential: str,
        *,
        target: dict[str, str] | None = None,
        status_field_ref: str | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(credential, target=target, status_field_ref=status_field_ref)
        self._client = http_client
        self._owns_client = http_client is None

    @property
    def _http(self) -> httpx.AsyncClient:
        """Get or create the httpx client."""
        if self._client is None:
            http = get_settings().http
            self._client = httpx.AsyncClient(
                timeout=http.timeout_seconds,
                headers={"User-Agent": http.user_agent},
            )
        return self._client

    async def close(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    # -------------------------------------------------------------------------
    # Auth scheme
    # -------------------------------------------------------------------------
    def _auth_headers(self) -> dict[str, str]:
        """Headers carrying the credential."""
        return {}

    def _auth_params(self) -> dict[str, str]:
        """Query parameters carrying the credential."""
        return {}

    # -------------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------------
    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Send one request and return the decoded JSON body.

        Raises:
            RemoteError: On transport failure or a non-2xx response
            MalformedResponseError: If a 2xx body is empty or not JSON
        """
        url = f"{self.base_url}{path}"
        query = {**self._auth_params(), **(params or {})}
        logger.debug("{} {} {}", self.provider_id, method, path)

        try:
            response = await self._http.request(
                method,
                url,
                headers=self._auth_headers(),
                params=query or None,
                json=json,
            )
        except httpx.HTTPError as e:
            raise RemoteError(self.provider_id, str(e) or type(e).__name__) from e

        if not response.is_success:
            raise RemoteError(
                self.provider_id,
                self._error_message(response),
                response.status_code,
            )

        return self._decode(response)

    def _decode(self, response: httpx.Response) -> Any:
        if not response.content:
            raise MalformedResponseError(self.provider_id, "empty body", response.status_code)
        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponseError(
                self.provider_id, "body is not JSON", response.status_code
            ) from e

    def _error_message(self, response: httpx.Response) -> str:
        """Extract the provider's own message from an error response."""
        try:
            data = response.json()
        except ValueError:
            data = None

        if isinstance(data, dict):
            for key in ("err", "message", "error", "error_message"):
                value = data.get(key)
                if isinstance(value, str) and value:
                    return value
            errors = data.get("errors")
            if isinstance(errors, list) and errors and isinstance(errors[0], dict):
                return str(errors[0].get("message", errors[0]))

        text = response.text.strip()
        return text[:200] if text else response.reason_phrase

    async def _graphql(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        """Run a GraphQL operation and return its ``data`` object.

        GraphQL servers report errors with a 200 status, so an ``errors``
        array becomes a RemoteError without an HTTP status.
        """
        body = await self._request("POST", "", json={"query": query, "variables": variables or {}})
        if not isinstance(body, dict):
            raise MalformedResponseError(self.provider_id, "GraphQL body is not an object")

        errors = body.get("errors")
        if errors:
            first = errors[0] if isinstance(errors, list) else errors
            message = first.get("message") if isinstance(first, dict) else str(first)
            raise RemoteError(self.provider_id, message or "GraphQL error")

        data = body.get("data")
        if not isinstance(data, dict):
            raise MalformedResponseError(self.provider_id, "GraphQL response has no data")
        return data

    def _field(self, data: Any, *keys: str) -> Any:
        """Walk nested keys of a decoded body, raising if any is absent."""
        current = data
        for key in keys:
            if not isinstance(current, dict) or current.get(key) is None:
                raise MalformedResponseError(
                    self.provider_id, f"missing '{'.'.join(keys)}'"
                )
            current = current[key]
        return current

    def _resources(
        self,
        items: Any,
        kind: str,
        *,
        id_key: str = "id",
        name_key: str = "name",
    ) -> list[Resource]:
        if not isinstance(items, list):
            raise MalformedResponseError(self.provider_id, f"expected a list of {kind}s")
        return [
            Resource(id=str(item[id_key]), name=str(item.get(name_key) or ""), kind=kind)
            for item in items
            if isinstance(item, dict) and item.get(id_key) is not None
        ]
