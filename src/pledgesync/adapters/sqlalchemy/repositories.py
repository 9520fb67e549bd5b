"""SQLAlchemy-backed repositories for the reconciler."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import insert, select, update

from .mappings import blob_table, patron_link_table

if TYPE_CHECKING:
    from collections.abc import Mapping

    from sqlalchemy.orm import Session


class SqlAlchemyKeyValueStore:
    """JSON blobs in the ``blobs`` table.

    Writes join the session's transaction; nothing is visible to other sessions
    until the owning unit of work commits.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, name: str) -> Any | None:
        raw = self.session.execute(
            select(blob_table.c.value).where(blob_table.c.name == name)
        ).scalar_one_or_none()
        return None if raw is None else json.loads(raw)

    def set(self, name: str, value: Any) -> None:
        self.set_many({name: value})

    def set_many(self, values: Mapping[str, Any]) -> None:
        written_at = datetime.now(UTC)
        for name, value in values.items():
            self._upsert(name, json.dumps(value, sort_keys=True), written_at)

    def _upsert(self, name: str, encoded: str, written_at: datetime) -> None:
        result = self.session.execute(
            update(blob_table)
            .where(blob_table.c.name == name)
            .values(value=encoded, updated_at=written_at)
        )
        if result.rowcount == 0:
            self.session.execute(
                insert(blob_table).values(name=name, value=encoded, updated_at=written_at)
            )


class SqlAlchemyPatronDirectory:
    """Patron id to local user id links in the ``patron_links`` table."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def resolve_local_user(self, patron_id: str) -> str | None:
        return self.session.execute(
            select(patron_link_table.c.user_id).where(patron_link_table.c.patron_id == patron_id)
        ).scalar_one_or_none()

    def link(self, patron_id: str, user_id: str) -> None:
        result = self.session.execute(
            update(patron_link_table)
            .where(patron_link_table.c.patron_id == patron_id)
            .values(user_id=user_id)
        )
        if result.rowcount == 0:
            self.session.execute(
                insert(patron_link_table).values(patron_id=patron_id, user_id=user_id)
            )
