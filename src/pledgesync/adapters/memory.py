"""In-process adapters for embedding the reconciler and for tests."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Literal

from pledgesync.domain.ports.unit_of_work import ReconcilerRepositories

if TYPE_CHECKING:
    from collections.abc import Mapping
    from datetime import datetime
    from types import TracebackType


@dataclass(slots=True)
class InMemoryKeyValueStore:
    """Blobs held as JSON text, so values round-trip exactly like a real store."""

    blobs: dict[str, str] = field(default_factory=dict)

    def get(self, name: str) -> Any | None:
        raw = self.blobs.get(name)
        return None if raw is None else json.loads(raw)

    def set(self, name: str, value: Any) -> None:
        self.blobs[name] = json.dumps(value, sort_keys=True)

    def set_many(self, values: Mapping[str, Any]) -> None:
        encoded = {name: json.dumps(value, sort_keys=True) for name, value in values.items()}
        self.blobs.update(encoded)


@dataclass(slots=True)
class InMemoryPatronDirectory:
    links: dict[str, str] = field(default_factory=dict)

    def resolve_local_user(self, patron_id: str) -> str | None:
        return self.links.get(patron_id)

    def link(self, patron_id: str, user_id: str) -> None:
        self.links[patron_id] = user_id


@dataclass(slots=True)
class RecordingAccessControl:
    """Remembers grants and revocations instead of acting on them."""

    grants: dict[str, datetime] = field(default_factory=dict)
    revocations: list[str] = field(default_factory=list)

    def grant_access_until(self, user_id: str, expiration: datetime) -> None:
        self.grants[user_id] = expiration

    def revoke_access_tracking(self, user_id: str) -> None:
        self.grants.pop(user_id, None)
        self.revocations.append(user_id)


class InMemoryUnitOfWork:
    """Unit of work over in-memory repositories; uncommitted changes are rolled back on exit."""

    def __init__(
        self,
        store: InMemoryKeyValueStore | None = None,
        patrons: InMemoryPatronDirectory | None = None,
    ) -> None:
        self.store = store if store is not None else InMemoryKeyValueStore()
        self._repositories = ReconcilerRepositories(
            blobs=self.store,
            patrons=patrons if patrons is not None else InMemoryPatronDirectory(),
        )
        self._checkpoint: dict[str, str] = {}
        self.committed = False

    @property
    def repositories(self) -> ReconcilerRepositories:
        return self._repositories

    def __enter__(self) -> InMemoryUnitOfWork:
        self._checkpoint = dict(self.store.blobs)
        self.committed = False
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        if not self.committed:
            self.rollback()
        return False

    def commit(self) -> None:
        self._checkpoint = dict(self.store.blobs)
        self.committed = True

    def rollback(self) -> None:
        self.store.blobs.clear()
        self.store.blobs.update(self._checkpoint)


if TYPE_CHECKING:
    from pledgesync.domain.ports.access import AccessControl
    from pledgesync.domain.ports.persistence import KeyValueStore, PatronDirectory
    from pledgesync.domain.ports.unit_of_work import ReconcilerUnitOfWork

    _store_check: KeyValueStore = InMemoryKeyValueStore()
    _directory_check: PatronDirectory = InMemoryPatronDirectory()
    _access_check: AccessControl = RecordingAccessControl()
    _uow_check: ReconcilerUnitOfWork = InMemoryUnitOfWork()
