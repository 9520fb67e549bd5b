"""Membership entries as delivered by the billing API.

Two record shapes exist upstream: the legacy ``pledge`` resource and the newer
``member`` resource. Both are reduced to the facts the snapshot needs; the
differences between them (where the patron id lives, how rewards and declines
are expressed) are resolved when an entry is built.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

PAID_STATUS: Final[str] = "Paid"
DECLINED_STATUS: Final[str] = "Declined"


@dataclass(frozen=True, slots=True)
class Charge:
    """Latest charge reported for an entry."""

    status: str | None = None
    date: str | None = None
    cadence_months: int = 1

    @property
    def is_paid(self) -> bool:
        return self.status == PAID_STATUS and self.date is not None

    @property
    def is_declined(self) -> bool:
        return self.status == DECLINED_STATUS


@dataclass(frozen=True, slots=True)
class PledgeEntry:
    patron_id: str
    amount_cents: int | None = None
    reward_id: str | None = None
    declined_since: str | None = None
    charge: Charge = Charge()

    @property
    def reward_ids(self) -> tuple[str, ...]:
        return (self.reward_id,) if self.reward_id else ()

    @property
    def decline(self) -> str | None:
        return self.declined_since or None


@dataclass(frozen=True, slots=True)
class MemberEntry:
    patron_id: str
    amount_cents: int | None = None
    tier_ids: tuple[str, ...] = ()
    charge: Charge = Charge()

    @property
    def reward_ids(self) -> tuple[str, ...]:
        return self.tier_ids

    @property
    def decline(self) -> str | None:
        return self.charge.date if self.charge.is_declined else None


type MembershipEntry = PledgeEntry | MemberEntry
