"""Domain model for the patron snapshot."""

from __future__ import annotations

from .entries import (
    DECLINED_STATUS,
    PAID_STATUS,
    Charge,
    MemberEntry,
    MembershipEntry,
    PledgeEntry,
)
from .tables import ALL_PATRONS_BUCKET, SnapshotTables

__all__ = [
    "ALL_PATRONS_BUCKET",
    "DECLINED_STATUS",
    "PAID_STATUS",
    "Charge",
    "MemberEntry",
    "MembershipEntry",
    "PledgeEntry",
    "SnapshotTables",
]
