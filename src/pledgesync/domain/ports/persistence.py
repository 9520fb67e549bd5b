"""Ports for the persisted snapshot and identity lookup."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping


@runtime_checkable
class KeyValueStore(Protocol):
    """Named JSON blobs, each replaced as a whole on write."""

    def get(self, name: str) -> Any | None: ...

    def set(self, name: str, value: Any) -> None: ...

    def set_many(self, values: Mapping[str, Any]) -> None:
        """Write several blobs as one composite write."""
        ...


@runtime_checkable
class PatronDirectory(Protocol):
    """Maps an external patron id to a local user account."""

    def resolve_local_user(self, patron_id: str) -> str | None: ...

    def link(self, patron_id: str, user_id: str) -> None:
        """Record that ``patron_id`` belongs to local user ``user_id``, replacing any link."""
        ...
