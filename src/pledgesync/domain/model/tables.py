"""In-memory form of the denormalized patron snapshot."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from collections.abc import Iterable

ALL_PATRONS_BUCKET: Final[str] = "0"


@dataclass(slots=True)
class SnapshotTables:
    """The four patron tables, either a full snapshot or one payload's share of it.

    ``reward_users`` maps a reward/tier id to the patrons entitled to it. The
    synthetic ``ALL_PATRONS_BUCKET`` mirrors the keys of ``pledges`` and is only
    meaningful after :meth:`refresh_all_patrons`.
    """

    pledges: dict[str, int] = field(default_factory=dict)
    declines: dict[str, str] = field(default_factory=dict)
    reward_users: dict[str, set[str]] = field(default_factory=dict)
    users: dict[str, str] = field(default_factory=dict)

    def absorb(self, other: SnapshotTables) -> None:
        """Fold ``other`` into this snapshot; later values win, reward buckets are unioned."""

        self.pledges.update(other.pledges)
        self.declines.update(other.declines)
        self.users.update(other.users)
        for reward_id, patron_ids in other.reward_users.items():
            self.reward_users.setdefault(reward_id, set()).update(patron_ids)

    def add_reward_user(self, reward_id: str, patron_id: str) -> None:
        self.reward_users.setdefault(reward_id, set()).add(patron_id)

    def discard_patron(self, patron_id: str, *, reward_ids: Iterable[str] = ()) -> None:
        """Remove a patron from every table and from the given reward buckets."""

        for reward_id in reward_ids:
            bucket = self.reward_users.get(reward_id)
            if bucket is not None:
                bucket.discard(patron_id)
        self.pledges.pop(patron_id, None)
        self.declines.pop(patron_id, None)
        self.users.pop(patron_id, None)
        self.refresh_all_patrons()

    def refresh_all_patrons(self) -> None:
        self.reward_users[ALL_PATRONS_BUCKET] = set(self.pledges)

    def rewarded_patrons(self) -> set[str]:
        """Every patron listed in a real reward bucket."""

        patrons: set[str] = set()
        for reward_id, patron_ids in self.reward_users.items():
            if reward_id != ALL_PATRONS_BUCKET:
                patrons.update(patron_ids)
        return patrons

    def patrons_for_reward(self, reward_id: str) -> frozenset[str]:
        return frozenset(self.reward_users.get(reward_id, ()))

    def pledge_amount(self, patron_id: str) -> int | None:
        return self.pledges.get(patron_id)

    def declined_since(self, patron_id: str) -> str | None:
        return self.declines.get(patron_id)

    def email_for(self, patron_id: str) -> str | None:
        return self.users.get(patron_id)
