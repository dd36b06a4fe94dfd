"""Provider registry: resolves a provider id to its adapter and status mapping."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import httpx

from feedback_sync.exceptions import UnknownProviderError
from feedback_sync.schemas import IntegrationConfigRead

from .base import HttpProviderAdapter, ProviderAdapter
from .clickup import ClickUpAdapter
from .github import GitHubAdapter
from .linear import LinearAdapter
from .monday import MondayAdapter
from .notion import NotionAdapter
from .status import StatusMapping
from .trello import TrelloAdapter

AdapterFactory = Callable[..., ProviderAdapter]


@dataclass(frozen=True)
class ProviderEntry:
    """Adapter factory paired with the provider's status mapping."""

    provider_id: str
    factory: AdapterFactory
    status_mapping: StatusMapping
    required_target_keys: tuple[str, ...]
    accepts_http_client: bool = False


class ProviderRegistry:
    """Registry of adapters keyed by provider id.

    Usage:
        registry = ProviderRegistry.default()
        adapter = registry.adapter_for(config)
        token = registry.mapping_for("linear").map(FeedbackStatus.COMPLETED)
    """

    def __init__(self) -> None:
        self._entries: dict[str, ProviderEntry] = {}

    @classmethod
    def default(cls) -> ProviderRegistry:
        """Registry with every built-in provider."""
        registry = cls()
        for adapter_class in (
            GitHubAdapter,
            ClickUpAdapter,
            TrelloAdapter,
            LinearAdapter,
            NotionAdapter,
            MondayAdapter,
        ):
            registry.register_adapter(adapter_class)
        return registry

    def register(
        self,
        provider_id: str,
        factory: AdapterFactory,
        status_mapping: StatusMapping,
        required_target_keys: tuple[str, ...] = (),
        *,
        accepts_http_client: bool = False,
    ) -> None:
        """Register (or replace) a provider.

        Only factories registered with ``accepts_http_client`` receive a
        shared ``httpx.AsyncClient``.
        """
        self._entries[provider_id] = ProviderEntry(
            provider_id=provider_id,
            factory=factory,
            status_mapping=status_mapping,
            required_target_keys=required_target_keys,
            accepts_http_client=accepts_http_client,
        )

    def register_adapter(self, adapter_class: type[ProviderAdapter]) -> None:
        """Register an adapter class using its declared metadata."""
        self.register(
            adapter_class.provider_id,
            adapter_class,
            adapter_class.status_mapping,
            adapter_class.required_target_keys,
            accepts_http_client=issubclass(adapter_class, HttpProviderAdapter),
        )

    def get(self, provider_id: str) -> ProviderEntry:
        """Get a provider entry.

        Raises:
            UnknownProviderError: If nothing is registered under the id
        """
        entry = self._entries.get(provider_id)
        if entry is None:
            raise UnknownProviderError(provider_id)
        return entry

    def mapping_for(self, provider_id: str) -> StatusMapping:
        return self.get(provider_id).status_mapping

    def provider_ids(self) -> list[str]:
        return sorted(self._entries)

    def __contains__(self, provider_id: object) -> bool:
        return provider_id in self._entries

    def adapter_for(
        self,
        config: IntegrationConfigRead,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> ProviderAdapter:
        """Build an adapter authenticated with a project's integration config."""
        return self.create_adapter(
            config.provider,
            config.credential or "",
            target=config.target_ref,
            status_field_ref=config.status_field_ref,
            http_client=http_client,
        )

    def create_adapter(
        self,
        provider_id: str,
        credential: str,
        *,
        target: dict[str, str] | None = None,
        status_field_ref: str | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> ProviderAdapter:
        """Build an adapter from raw parts (used for hierarchy browsing)."""
        entry = self.get(provider_id)
        kwargs: dict[str, Any] = {"target": target, "status_field_ref": status_field_ref}
        # Only httpx-based adapters take the shared client
        if http_client is not None and entry.accepts_http_client:
            kwargs["http_client"] = http_client
        return entry.factory(credential, **kwargs)
