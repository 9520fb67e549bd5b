"""Membership reconciliation: webhook entries and paginated bulk pulls."""

from __future__ import annotations

from collections import deque
from collections.abc import Mapping
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from .errors import MalformedEntryError, PledgeSyncError, UpstreamFetchError
from .expiration import ExpirationLedger
from .ports.fetching import is_error_marker, next_page_uri
from .snapshot import SnapshotMerger, SnapshotRepository
from .timestamps import Clock, add_months, parse_timestamp, utcnow

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .model import MembershipEntry, SnapshotTables
    from .ports.access import AccessControl
    from .ports.extraction import RecordExtractor
    from .ports.fetching import PageFetcher, Payload
    from .ports.persistence import KeyValueStore, PatronDirectory

log = getLogger(__name__)


@dataclass(slots=True)
class PullResult:
    """Outcome of a bulk pull."""

    pages: int
    patrons: int
    uris: tuple[str, ...]


@dataclass(slots=True)
class MembershipReconciler:
    """Keep the patron snapshot in step with the billing API.

    Callers must not run two reconciler operations against the same store at the
    same time; every operation is a plain load, mutate, save sequence.
    """

    store: KeyValueStore
    extractor: RecordExtractor
    patrons: PatronDirectory
    fetch_page: PageFetcher | None = None
    access: AccessControl | None = None
    clock: Clock = field(default=utcnow)
    ledger: ExpirationLedger = field(init=False)
    _snapshots: SnapshotRepository = field(init=False, repr=False)
    _merger: SnapshotMerger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.ledger = ExpirationLedger(self.store, access=self.access, clock=self.clock)
        self._snapshots = SnapshotRepository(self.store)
        self._merger = SnapshotMerger(self._snapshots, self.patrons, self.ledger)

    def snapshot(self) -> SnapshotTables:
        return self._snapshots.load()

    def create(self, payload: Payload) -> SnapshotTables:
        """Merge one webhook payload into the stored snapshot."""

        return self._merger.append(self.extractor.extract(payload))

    def update(self, payload: Payload) -> SnapshotTables:
        """Delete then create with the same payload.

        The patron's amount, decline and email are rebuilt from the payload. Only the
        reward buckets the payload names are stripped first, so a patron stays in
        any bucket the new entry no longer lists until the next full pull.
        """

        self.delete(payload)
        return self.create(payload)

    def delete(self, payload: Payload) -> SnapshotTables:
        """Remove the entry's patron from every table.

        The entry's charge is looked at first: a paid charge whose coverage runs
        into the future records an expiration for the patron's local user.
        """

        entry = self._entry_from(payload)
        self._record_paid_coverage(entry)

        tables = self._snapshots.load()
        tables.discard_patron(entry.patron_id, reward_ids=entry.reward_ids)
        self._snapshots.save(tables)
        return tables

    def pull(self, uris: Iterable[str]) -> PullResult:
        """Fetch every listing page reachable from ``uris`` and replace the snapshot."""

        if self.fetch_page is None:
            raise PledgeSyncError("Reconciler has no page fetcher configured")

        pending = deque(uris)
        fetched: list[str] = []
        pages: list[Payload] = []
        while pending:
            uri = pending.popleft()
            if uri in fetched:
                log.warning("Skipping already fetched page %s", uri)
                continue

            log.debug("Fetching page %s", uri)
            page = self.fetch_page(uri)
            fetched.append(uri)
            if not page or is_error_marker(page):
                log.error("Aborting pull: broken response for %s", uri)
                raise UpstreamFetchError(uri)

            next_uri = next_page_uri(page)
            if next_uri is not None:
                pending.append(next_uri)
            pages.append(page)

        tables = self._merger.replace(self.extractor.extract(page) for page in pages)
        log.info("Pulled %d page(s) covering %d patron(s)", len(pages), len(tables.pledges))
        return PullResult(pages=len(pages), patrons=len(tables.pledges), uris=tuple(fetched))

    def _entry_from(self, payload: Payload) -> MembershipEntry:
        data = payload.get("data") if isinstance(payload, Mapping) else None
        entry = self.extractor.parse_entry(data)
        if entry is None:
            raise MalformedEntryError("Payload does not carry a pledge or member entry")
        return entry

    def _record_paid_coverage(self, entry: MembershipEntry) -> None:
        charge = entry.charge
        if not charge.is_paid or charge.date is None:
            return
        try:
            charged_at = parse_timestamp(charge.date)
        except ValueError:
            log.warning("Ignoring unparseable charge date %r for %s", charge.date, entry.patron_id)
            return

        expiration = add_months(charged_at, charge.cadence_months)
        if expiration <= self.clock():
            return
        user_id = self.patrons.resolve_local_user(entry.patron_id)
        if user_id is not None:
            self.ledger.set(user_id, expiration)
