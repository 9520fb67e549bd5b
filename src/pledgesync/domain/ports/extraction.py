"""Port turning raw payloads into domain entries and partial tables."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from pledgesync.domain.model import MembershipEntry, SnapshotTables

    from .fetching import Payload


@runtime_checkable
class RecordExtractor(Protocol):
    def extract(self, payload: Payload | None) -> SnapshotTables:
        """Return the four partial tables described by one payload.

        Must not raise for malformed entries; those are skipped.
        """
        ...

    def parse_entry(self, raw: object) -> MembershipEntry | None:
        """Translate one ``data`` object; ``None`` for resource types that carry no membership.

        Raises ``MalformedEntryError`` when the patron cannot be identified.
        """
        ...
