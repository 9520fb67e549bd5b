"""One database transaction per reconciler operation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from pledgesync.config import get_database_config
from pledgesync.domain.errors import PledgeSyncError
from pledgesync.domain.ports.unit_of_work import ReconcilerRepositories

from .migrations import upgrade_head
from .repositories import SqlAlchemyKeyValueStore, SqlAlchemyPatronDirectory

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine


class StartupError(PledgeSyncError):
    """Raised when the database is used before :func:`startup` or configured twice."""


@dataclass(slots=True)
class _Database:
    engine: Engine | None = None
    sessions: sessionmaker[Session] | None = None


_DATABASE = _Database()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> Engine:
    """Migrate the schema to head and make ``engine`` the one every unit of work uses."""

    if _DATABASE.engine is not None and not force:
        raise StartupError("Database already started; pass force=True to switch engines")

    resolved = engine or create_engine(database_uri or get_database_config().uri)
    upgrade_head(engine=resolved)
    _DATABASE.engine = resolved
    _DATABASE.sessions = sessionmaker(bind=resolved)
    return resolved


def is_started() -> bool:
    return _DATABASE.engine is not None


def shutdown() -> None:
    if _DATABASE.engine is not None:
        _DATABASE.engine.dispose()
    _DATABASE.engine = None
    _DATABASE.sessions = None


class SqlAlchemyUnitOfWork:
    """Session-scoped repositories; anything not committed is rolled back on exit."""

    def __init__(self) -> None:
        if _DATABASE.sessions is None:
            raise StartupError("Database not started; call startup() first")
        self._sessions = _DATABASE.sessions
        self._session: Session | None = None
        self._repositories: ReconcilerRepositories | None = None

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work is not open")
        return self._session

    @property
    def repositories(self) -> ReconcilerRepositories:
        if self._repositories is None:
            raise StartupError("Unit of work is not open")
        return self._repositories

    def __enter__(self) -> SqlAlchemyUnitOfWork:
        if self._session is not None:
            raise StartupError("Unit of work is already open")
        self._session = self._sessions()
        self._repositories = ReconcilerRepositories(
            blobs=SqlAlchemyKeyValueStore(self._session),
            patrons=SqlAlchemyPatronDirectory(self._session),
        )
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        session = self.session
        self._session = None
        self._repositories = None
        try:
            session.rollback()
        finally:
            session.close()
        return False

    def commit(self) -> None:
        self.session.commit()


if TYPE_CHECKING:
    from pledgesync.domain.ports.unit_of_work import ReconcilerUnitOfWork

    _uow_check: ReconcilerUnitOfWork = SqlAlchemyUnitOfWork()
