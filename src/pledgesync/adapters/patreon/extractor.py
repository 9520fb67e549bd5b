"""Extract the four partial snapshot tables from a Patreon payload."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from pledgesync.domain.errors import MalformedEntryError
from pledgesync.domain.model import SnapshotTables

from .translator import parse_entry, parse_user_email

if TYPE_CHECKING:
    from pledgesync.domain.model import MembershipEntry
    from pledgesync.domain.ports.fetching import Payload

log = getLogger(__name__)


def extract_tables(payload: Payload | None) -> SnapshotTables:
    """Return pledges, declines, reward buckets and emails described by ``payload``.

    ``data`` may be a single resource (webhook) or a list (listing page). Entries
    that cannot name their patron are skipped so one bad record does not cost the
    rest of the page. No ``data`` means no tables, even if users are included.
    """

    tables = SnapshotTables()
    if not isinstance(payload, Mapping):
        return tables
    data = payload.get("data")
    if not data:
        return tables

    for raw in data if isinstance(data, list) else [data]:
        try:
            entry = parse_entry(raw)
        except MalformedEntryError as exc:
            log.warning(f"Skipping malformed entry: {exc}")
            continue
        if entry is not None:
            _add_entry(tables, entry)

    for raw in payload.get("included") or ():
        user_email = parse_user_email(raw)
        if user_email is not None:
            user_id, email = user_email
            tables.users[user_id] = email

    return tables


def _add_entry(tables: SnapshotTables, entry: MembershipEntry) -> None:
    for reward_id in entry.reward_ids:
        tables.add_reward_user(reward_id, entry.patron_id)
    if entry.amount_cents is not None:
        tables.pledges[entry.patron_id] = entry.amount_cents
    decline = entry.decline
    if decline is not None:
        tables.declines[entry.patron_id] = decline


@dataclass(frozen=True, slots=True)
class PatreonRecordExtractor:
    """``RecordExtractor`` for Patreon's pledge (v1) and member (v2) resources."""

    def extract(self, payload: Payload | None) -> SnapshotTables:
        return extract_tables(payload)

    def parse_entry(self, raw: object) -> MembershipEntry | None:
        return parse_entry(raw)


if TYPE_CHECKING:
    from pledgesync.domain.ports.extraction import RecordExtractor

    _extractor_check: RecordExtractor = PatreonRecordExtractor()
