"""Errors raised by the reconciliation core."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable


class PledgeSyncError(RuntimeError):
    """Base class for reconciliation failures."""


class UpstreamFetchError(PledgeSyncError):
    """Raised when a listing page could not be fetched during a bulk pull.

    Nothing is persisted when this is raised; the whole pull has to be retried.
    """

    def __init__(self, uri: str, message: str | None = None) -> None:
        super().__init__(message or f"Broken response for page {uri}")
        self.uri = uri


class MalformedEntryError(PledgeSyncError):
    """Raised when a membership entry lacks the relationships needed to identify its patron."""


class UnsupportedTriggerError(PledgeSyncError):
    """Raised for webhook triggers that do not map to a reconciler operation."""

    def __init__(self, trigger: str) -> None:
        super().__init__(f"Unsupported webhook trigger: {trigger!r}")
        self.trigger = trigger


class ConfigurationError(PledgeSyncError):
    """Raised when configuration values are invalid."""


class MissingConfigurationError(ConfigurationError):
    """Raised when required environment variables are absent or blank."""

    def __init__(self, names: Iterable[str]) -> None:
        self.names = tuple(sorted(names))
        super().__init__(f"Missing configuration for: {', '.join(self.names)}")
