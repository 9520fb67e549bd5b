"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from logging import getLogger
from typing import TYPE_CHECKING, Final

from pledgesync.adapters.patreon import PatreonPageFetcher, PatreonRecordExtractor
from pledgesync.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork, is_started, startup
from pledgesync.config import get_patreon_config
from pledgesync.domain.errors import MalformedEntryError, UnsupportedTriggerError
from pledgesync.domain.expiration import ExpirationLedger
from pledgesync.domain.reconciler import MembershipReconciler, PullResult
from pledgesync.domain.timestamps import Clock, utcnow

if TYPE_CHECKING:
    from pledgesync.config import PatreonConfig
    from pledgesync.domain.model import SnapshotTables
    from pledgesync.domain.ports.access import AccessControl
    from pledgesync.domain.ports.fetching import PageFetcher, Payload
    from pledgesync.domain.ports.unit_of_work import (
        ReconcilerRepositories,
        ReconcilerUnitOfWork,
    )

UnitOfWorkFactory = Callable[[], "ReconcilerUnitOfWork"]

log = getLogger(__name__)

# Creates are reconciled as updates so every webhook goes through delete first
# and the charge it carries reaches the expiration ledger.
WEBHOOK_OPERATIONS: Final[Mapping[str, str]] = {
    "members:create": "update",
    "members:update": "update",
    "members:delete": "delete",
    "members:pledge:create": "update",
    "members:pledge:update": "update",
    "members:pledge:delete": "delete",
    "pledges:create": "update",
    "pledges:update": "update",
    "pledges:delete": "delete",
}


def _default_unit_of_work() -> ReconcilerUnitOfWork:
    if not is_started():
        startup()
    return SqlAlchemyUnitOfWork()


def build_reconciler(
    repositories: ReconcilerRepositories,
    *,
    fetch_page: PageFetcher | None = None,
    access: AccessControl | None = None,
    clock: Clock = utcnow,
) -> MembershipReconciler:
    return MembershipReconciler(
        store=repositories.blobs,
        extractor=PatreonRecordExtractor(),
        patrons=repositories.patrons,
        fetch_page=fetch_page,
        access=access,
        clock=clock,
    )


def sync_patreon_pledges(
    *,
    config: PatreonConfig | None = None,
    fetcher: PageFetcher | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    access: AccessControl | None = None,
    clock: Clock = utcnow,
) -> PullResult:
    """Replace the stored snapshot with a full pull of the campaign's members."""

    patreon = config or get_patreon_config()
    effective_uow = unit_of_work_factory or _default_unit_of_work
    owned_fetcher = PatreonPageFetcher(patreon) if fetcher is None else None
    page_fetcher = fetcher or owned_fetcher
    log.info("Starting Patreon pull for campaign %s", patreon.campaign_id)

    try:
        with effective_uow() as uow:
            reconciler = build_reconciler(
                uow.repositories, fetch_page=page_fetcher, access=access, clock=clock
            )
            result = reconciler.pull([patreon.members_url()])
            uow.commit()
    finally:
        if owned_fetcher is not None:
            owned_fetcher.close()

    log.info(f"Finished Patreon pull: pages={result.pages}, patrons={result.patrons}")
    return result


def handle_webhook(
    trigger: str,
    payload: Payload,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    access: AccessControl | None = None,
    clock: Clock = utcnow,
) -> SnapshotTables:
    """Apply one verified webhook delivery to the stored snapshot."""

    operation = WEBHOOK_OPERATIONS.get(trigger)
    if operation is None:
        raise UnsupportedTriggerError(trigger)

    effective_uow = unit_of_work_factory or _default_unit_of_work
    with effective_uow() as uow:
        reconciler = build_reconciler(uow.repositories, access=access, clock=clock)
        if operation == "delete":
            tables = reconciler.delete(payload)
        else:
            tables = reconciler.update(payload)
        uow.commit()

    log.info("Applied %s webhook for patron %s", trigger, patron_id_of(payload))
    return tables


def is_access_expired(
    user_id: str,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    clock: Clock = utcnow,
) -> tuple[bool, str | None]:
    """Return whether ``user_id``'s access has lapsed, with the stored expiration."""

    effective_uow = unit_of_work_factory or _default_unit_of_work
    with effective_uow() as uow:
        ledger = ExpirationLedger(uow.repositories.blobs, clock=clock)
        return ledger.is_expired(user_id), ledger.get(user_id)


def link_patron(
    patron_id: str,
    user_id: str,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> None:
    """Tie an external patron to a local user so charges and rewards reach their ledger entry."""

    effective_uow = unit_of_work_factory or _default_unit_of_work
    with effective_uow() as uow:
        uow.repositories.patrons.link(patron_id, user_id)
        uow.commit()
    log.info("Linked patron %s to user %s", patron_id, user_id)


def patron_id_of(payload: Payload) -> str:
    """External patron id named by a webhook payload."""

    entry = PatreonRecordExtractor().parse_entry(payload.get("data"))
    if entry is None:
        raise MalformedEntryError("Payload does not carry a pledge or member entry")
    return entry.patron_id
