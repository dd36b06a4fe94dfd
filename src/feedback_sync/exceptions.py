"""Sync engine exceptions.

Local errors are deterministic and raised before any network call.
Remote errors wrap whatever the provider (or the transport) rejected.
"""


class SyncError(Exception):
    """Base exception for sync engine errors."""

    pass


# -----------------------------------------------------------------------------
# Local errors
# -----------------------------------------------------------------------------
class LocalSyncError(SyncError):
    """Base class for deterministic errors detected without calling a provider."""

    pass


class NotConfiguredError(LocalSyncError):
    """Raised when a provider has no credential or no target reference."""

    def __init__(self, provider: str, missing: list[str] | None = None) -> None:
        self.provider = provider
        self.missing = missing or []
        detail = f" (missing: {', '.join(self.missing)})" if self.missing else ""
        super().__init__(f"{provider} integration is not configured{detail}")


class InactiveError(LocalSyncError):
    """Raised when a configured integration is switched off."""

    def __init__(self, provider: str) -> None:
        self.provider = provider
        super().__init__(f"{provider} integration is inactive")


class AlreadyLinkedError(LocalSyncError):
    """Raised when a feedback item already has a remote resource on a provider."""

    def __init__(self, feedback_id: int, provider: str) -> None:
        self.feedback_id = feedback_id
        self.provider = provider
        super().__init__(f"Feedback {feedback_id} is already linked to {provider}")


class NotLinkedError(LocalSyncError):
    """Raised when an update is requested before the remote resource exists."""

    def __init__(self, feedback_id: int, provider: str) -> None:
        self.feedback_id = feedback_id
        self.provider = provider
        super().__init__(f"Feedback {feedback_id} is not linked to {provider}")


class UnsupportedOperationError(LocalSyncError):
    """Raised when a provider lacks an optional capability."""

    def __init__(self, provider: str, operation: str) -> None:
        self.provider = provider
        self.operation = operation
        super().__init__(f"{provider} does not support {operation}")


class FeedbackNotFoundError(LocalSyncError):
    """Raised when a feedback id does not exist in the project."""

    def __init__(self, feedback_id: int) -> None:
        self.feedback_id = feedback_id
        super().__init__(f"Feedback {feedback_id} not found")


class UnknownProviderError(LocalSyncError):
    """Raised when no adapter is registered under a provider id."""

    def __init__(self, provider: str) -> None:
        self.provider = provider
        super().__init__(f"Unknown provider: {provider}")


# -----------------------------------------------------------------------------
# Remote errors
# -----------------------------------------------------------------------------
class RemoteError(SyncError):
    """Raised when a provider rejects a call or cannot be reached.

    ``http_status`` is None for transport failures and for indirect lookups
    (e.g., a workflow state) that found no match.
    """

    def __init__(
        self,
        provider: str,
        provider_message: str,
        http_status: int | None = None,
    ) -> None:
        self.provider = provider
        self.provider_message = provider_message
        self.http_status = http_status
        status = f" ({http_status})" if http_status is not None else ""
        super().__init__(f"{provider} error{status}: {provider_message}")


class MalformedResponseError(RemoteError):
    """Raised when a successful response body is empty or cannot be decoded."""

    def __init__(self, provider: str, detail: str, http_status: int | None = None) -> None:
        super().__init__(provider, f"malformed response: {detail}", http_status)


# -----------------------------------------------------------------------------
# Persistence errors
# -----------------------------------------------------------------------------
class LinkPersistenceError(SyncError):
    """Raised when a remote resource was created but its link could not be stored.

    The remote resource is orphaned: nothing local points at it.
    """

    def __init__(self, provider: str, remote_id: str, remote_url: str, cause: str) -> None:
        self.provider = provider
        self.remote_id = remote_id
        self.remote_url = remote_url
        super().__init__(
            f"{provider} resource {remote_id} ({remote_url}) was created "
            f"but its link was not saved: {cause}"
        )
