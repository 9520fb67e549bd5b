from __future__ import annotations

from pledgesync.domain.model import ALL_PATRONS_BUCKET, SnapshotTables


def test_absorb_overwrites_scalars_and_unions_buckets() -> None:
    tables = SnapshotTables(
        pledges={"p1": 100},
        declines={"p1": "2024-01-01"},
        reward_users={"r1": {"p1"}},
        users={"p1": "old@example.com"},
    )
    incoming = SnapshotTables(
        pledges={"p1": 200, "p2": 300},
        reward_users={"r1": {"p1", "p2"}, "r2": {"p2"}},
        users={"p1": "new@example.com"},
    )

    tables.absorb(incoming)

    assert tables.pledges == {"p1": 200, "p2": 300}
    assert tables.declines == {"p1": "2024-01-01"}
    assert tables.reward_users == {"r1": {"p1", "p2"}, "r2": {"p2"}}
    assert tables.users == {"p1": "new@example.com"}


def test_absorb_does_not_share_bucket_sets() -> None:
    tables = SnapshotTables()
    incoming = SnapshotTables(reward_users={"r1": {"p1"}})

    tables.absorb(incoming)
    tables.add_reward_user("r1", "p2")

    assert incoming.reward_users["r1"] == {"p1"}


def test_discard_patron_only_touches_named_buckets() -> None:
    tables = SnapshotTables(
        pledges={"p1": 100, "p2": 200},
        declines={"p1": "2024-01-01"},
        reward_users={"r1": {"p1", "p2"}, "r2": {"p1"}},
        users={"p1": "a@example.com"},
    )

    tables.discard_patron("p1", reward_ids=["r1", "missing"])

    assert tables.pledges == {"p2": 200}
    assert tables.declines == {}
    assert tables.users == {}
    assert tables.reward_users["r1"] == {"p2"}
    assert tables.reward_users["r2"] == {"p1"}
    assert tables.reward_users[ALL_PATRONS_BUCKET] == {"p2"}


def test_rewarded_patrons_ignores_all_patrons_bucket() -> None:
    tables = SnapshotTables(pledges={"p1": 1, "p2": 2}, reward_users={"r1": {"p1"}})
    tables.refresh_all_patrons()

    assert tables.rewarded_patrons() == {"p1"}
    assert tables.patrons_for_reward(ALL_PATRONS_BUCKET) == frozenset({"p1", "p2"})


def test_read_helpers_return_none_for_unknown_patrons() -> None:
    tables = SnapshotTables()

    assert tables.pledge_amount("nobody") is None
    assert tables.declined_since("nobody") is None
    assert tables.email_for("nobody") is None
    assert tables.patrons_for_reward("r1") == frozenset()
