"""Persistence and merging of the patron snapshot tables."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Any, Final

from .model import SnapshotTables

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .expiration import ExpirationLedger
    from .ports.persistence import KeyValueStore, PatronDirectory

log = getLogger(__name__)

PLEDGES_BLOB: Final[str] = "pledges"
DECLINES_BLOB: Final[str] = "pledge-declines"
REWARD_USERS_BLOB: Final[str] = "reward-users"
USERS_BLOB: Final[str] = "users"


@dataclass(slots=True)
class SnapshotRepository:
    """Loads and saves the four tables as whole-blob replacements."""

    store: KeyValueStore

    def load(self) -> SnapshotTables:
        return SnapshotTables(
            pledges={str(k): int(v) for k, v in self._mapping(PLEDGES_BLOB).items()},
            declines={str(k): str(v) for k, v in self._mapping(DECLINES_BLOB).items()},
            reward_users={
                str(k): {str(patron_id) for patron_id in v or ()}
                for k, v in self._mapping(REWARD_USERS_BLOB).items()
            },
            users={str(k): str(v) for k, v in self._mapping(USERS_BLOB).items()},
        )

    def save(self, tables: SnapshotTables) -> None:
        self.store.set_many(
            {
                PLEDGES_BLOB: dict(tables.pledges),
                DECLINES_BLOB: dict(tables.declines),
                REWARD_USERS_BLOB: {
                    reward_id: sorted(patron_ids)
                    for reward_id, patron_ids in tables.reward_users.items()
                },
                USERS_BLOB: dict(tables.users),
            }
        )

    def _mapping(self, name: str) -> dict[str, Any]:
        return dict(self.store.get(name) or {})


@dataclass(slots=True)
class SnapshotMerger:
    """Fold extracted payloads into the persisted snapshot.

    ``replace`` rebuilds the snapshot from scratch (bulk pull); ``append`` folds a
    single payload into what is already stored (webhook). Either way every patron
    that shows up in a reward bucket has its local user's expiration cleared: an
    active entitlement means access is not lapsing.
    """

    snapshots: SnapshotRepository
    patrons: PatronDirectory
    ledger: ExpirationLedger

    def replace(self, extracted: Iterable[SnapshotTables]) -> SnapshotTables:
        return self._merge(SnapshotTables(), extracted)

    def append(self, extracted: SnapshotTables) -> SnapshotTables:
        return self._merge(self.snapshots.load(), (extracted,))

    def _merge(self, tables: SnapshotTables, extracted: Iterable[SnapshotTables]) -> SnapshotTables:
        resolved: set[str] = set()
        for partial in extracted:
            tables.absorb(partial)
            self._clear_expirations(partial.rewarded_patrons() - resolved)
            resolved.update(partial.rewarded_patrons())

        tables.refresh_all_patrons()
        self.snapshots.save(tables)
        log.debug(
            "Saved snapshot: %d pledges, %d declines, %d reward buckets, %d users",
            len(tables.pledges),
            len(tables.declines),
            len(tables.reward_users),
            len(tables.users),
        )
        return tables

    def _clear_expirations(self, patron_ids: Iterable[str]) -> None:
        for patron_id in sorted(patron_ids):
            user_id = self.patrons.resolve_local_user(patron_id)
            if user_id is not None:
                self.ledger.clear(user_id)
