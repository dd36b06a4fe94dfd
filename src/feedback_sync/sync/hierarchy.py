"""Hierarchy Browser - read-only traversal of a provider's resources.

Feeds configuration pickers (workspace -> space -> folder -> list,
board -> group, team -> project -> label). Never touches link state or
integration configs.
"""

from collections.abc import Sequence

import httpx

from feedback_sync.exceptions import NotConfiguredError
from feedback_sync.logging import bind_provider
from feedback_sync.providers import ProviderRegistry
from feedback_sync.schemas import Resource


class HierarchyBrowser:
    """Lists the children of a node in a provider's hierarchy."""

    def __init__(
        self,
        registry: ProviderRegistry | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._registry = registry or ProviderRegistry.default()
        self._http_client = http_client

    async def list_children(
        self,
        provider_id: str,
        credential: str | None,
        path: Sequence[str] = (),
    ) -> list[Resource]:
        """List resources under ``path`` using the given credential.

        Args:
            provider_id: Registered provider identifier
            credential: Token the project would use for this provider
            path: Parent ids from the root (empty = top level)

        Raises:
            NotConfiguredError: If no credential is given
            UnsupportedOperationError: If the path is deeper than the provider goes
            RemoteError: If the provider rejects the call
        """
        if not (credential or "").strip():
            raise NotConfiguredError(provider_id, ["credential"])

        parts = [str(p) for p in path]
        adapter = self._registry.create_adapter(
            provider_id, credential or "", http_client=self._http_client
        )
        async with adapter:
            resources = await adapter.list_children(parts)

        bind_provider(provider_id).debug(
            "Browsed /{}: {} resources", "/".join(parts), len(resources)
        )
        return resources
