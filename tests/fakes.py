"""In-memory provider used by orchestrator, bulk and trigger tests.

``FakeTracker`` records every call and can be scripted to fail or hang;
``register_fake`` installs a "trackerx" adapter backed by it.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any

from feedback_sync.exceptions import RemoteError
from feedback_sync.providers import ProviderAdapter, ProviderRegistry, StatusMapping
from feedback_sync.schemas import FeedbackStatus, RemoteRef, Resource

PROVIDER = "trackerx"

TRACKERX_STATUS = StatusMapping(
    default="Inbox",
    table={
        FeedbackStatus.IN_PROGRESS: "Doing",
        FeedbackStatus.COMPLETED: "Shipped",
    },
)


@dataclass
class FakeTracker:
    """Remote state and call log shared by every adapter instance."""

    calls: list[tuple[str, Any]] = field(default_factory=list)
    items: dict[str, dict[str, Any]] = field(default_factory=dict)
    fail_titles: set[str] = field(default_factory=set)
    fail_all: bool = False
    hang: bool = False
    delay: float = 0.0
    in_flight: int = 0
    max_in_flight: int = 0
    closed: int = 0

    def calls_of(self, name: str) -> list[Any]:
        return [args for call, args in self.calls if call == name]

    async def _enter(self, name: str, args: Any) -> None:
        self.calls.append((name, args))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.hang:
                await asyncio.Event().wait()
            if self.delay:
                await asyncio.sleep(self.delay)
        finally:
            self.in_flight -= 1
        if self.fail_all:
            raise RemoteError(PROVIDER, "service unavailable", 503)


class FakeTrackerAdapter(ProviderAdapter):
    provider_id = PROVIDER
    status_mapping = TRACKERX_STATUS
    required_target_keys = ("board_id",)
    supports_numeric_fields = True

    def __init__(self, credential: str, *, tracker: FakeTracker, **kwargs: Any) -> None:
        super().__init__(credential, **kwargs)
        self._tracker = tracker

    async def create_item(self, target, title, body, tags=None) -> RemoteRef:
        await self._tracker._enter("create_item", (dict(target), title, body, list(tags or [])))
        if title in self._tracker.fail_titles:
            raise RemoteError(PROVIDER, f"rejected '{title}'", 422)
        remote_id = f"T-{len(self._tracker.items) + 1}"
        self._tracker.items[remote_id] = {"title": title, "body": body, "status": "Inbox"}
        return RemoteRef(
            remote_id=remote_id,
            remote_url=f"https://trackerx.test/items/{remote_id}",
            display_id=f"#{len(self._tracker.items)}",
        )

    async def update_status(self, remote_id: str, token: str) -> None:
        await self._tracker._enter("update_status", (remote_id, token))

    async def add_comment(self, remote_id: str, text: str) -> None:
        await self._tracker._enter("add_comment", (remote_id, text))

    async def set_numeric_field(self, remote_id: str, field_ref: str, value: int) -> None:
        await self._tracker._enter("set_numeric_field", (remote_id, field_ref, value))

    async def list_children(self, path: list[str]) -> list[Resource]:
        await self._tracker._enter("list_children", list(path))
        if path:
            return [Resource(id=f"{path[-1]}-1", name="Child", kind="list")]
        return [Resource(id="b1", name="Board", kind="board")]

    async def close(self) -> None:
        self._tracker.closed += 1


def register_fake(registry: ProviderRegistry, tracker: FakeTracker) -> None:
    """Register the fake provider, binding every adapter to ``tracker``."""

    def factory(credential: str, **kwargs: Any) -> FakeTrackerAdapter:
        return FakeTrackerAdapter(credential, tracker=tracker, **kwargs)

    registry.register(
        PROVIDER,
        factory,
        TRACKERX_STATUS,
        FakeTrackerAdapter.required_target_keys,
    )
