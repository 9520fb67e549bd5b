"""Transaction boundary around one reconciler operation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from types import TracebackType

    from .persistence import KeyValueStore, PatronDirectory


@dataclass(slots=True)
class ReconcilerRepositories:
    """Everything a reconciler reads from or writes to."""

    blobs: KeyValueStore
    patrons: PatronDirectory


@runtime_checkable
class ReconcilerUnitOfWork(Protocol):
    """Writes made through ``repositories`` only persist if ``commit`` is called before exit."""

    @property
    def repositories(self) -> ReconcilerRepositories: ...

    def __enter__(self) -> ReconcilerUnitOfWork: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    def commit(self) -> None: ...
