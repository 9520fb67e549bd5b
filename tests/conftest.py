from __future__ import annotations

import os
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002

from pledgesync.adapters.memory import (
    InMemoryKeyValueStore,
    InMemoryPatronDirectory,
    RecordingAccessControl,
)
from pledgesync.adapters.patreon import PatreonRecordExtractor
from pledgesync.adapters.sqlalchemy.migrations import upgrade_head
from pledgesync.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork, shutdown, startup
from pledgesync.domain.reconciler import MembershipReconciler
from tests.helpers.clock import make_clock
from tests.helpers.fetching import ScriptedPageFetcher

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from pledgesync.domain.timestamps import Clock


@pytest.fixture
def now() -> datetime:
    return datetime(2024, 1, 15, tzinfo=UTC)


@pytest.fixture
def clock(now: datetime) -> Clock:
    return make_clock(now)


@pytest.fixture
def store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def patrons() -> InMemoryPatronDirectory:
    return InMemoryPatronDirectory()


@pytest.fixture
def access() -> RecordingAccessControl:
    return RecordingAccessControl()


@pytest.fixture
def fetcher() -> ScriptedPageFetcher:
    return ScriptedPageFetcher()


@pytest.fixture
def make_reconciler(
    store: InMemoryKeyValueStore,
    patrons: InMemoryPatronDirectory,
    access: RecordingAccessControl,
    fetcher: ScriptedPageFetcher,
) -> Callable[[Clock], MembershipReconciler]:
    def factory(clock: Clock) -> MembershipReconciler:
        return MembershipReconciler(
            store=store,
            extractor=PatreonRecordExtractor(),
            patrons=patrons,
            fetch_page=fetcher,
            access=access,
            clock=clock,
        )

    return factory


@pytest.fixture
def reconciler(
    make_reconciler: Callable[[Clock], MembershipReconciler],
    clock: Clock,
) -> MembershipReconciler:
    return make_reconciler(clock)


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    upgrade_head(engine=engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_unit_of_work(
    sqlite_engine: Engine,
) -> Iterator[Callable[[], SqlAlchemyUnitOfWork]]:
    startup(engine=sqlite_engine, force=True)

    def factory() -> SqlAlchemyUnitOfWork:
        return SqlAlchemyUnitOfWork()

    try:
        yield factory
    finally:
        shutdown()
