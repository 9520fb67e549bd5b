"""Alembic environment for the blob store schema."""

from __future__ import annotations

from typing import TYPE_CHECKING

from alembic import context
from sqlalchemy import create_engine, pool

from pledgesync.adapters.sqlalchemy.mappings import metadata

if TYPE_CHECKING:
    from sqlalchemy.engine import Connection

config = context.config


def _migrate(connection: Connection) -> None:
    # Batch mode lets later revisions alter SQLite tables.
    context.configure(connection=connection, target_metadata=metadata, render_as_batch=True)
    with context.begin_transaction():
        context.run_migrations()


def run_migrations() -> None:
    connection = config.attributes.get("connection")
    if connection is not None:
        _migrate(connection)
        return

    url = config.get_main_option("sqlalchemy.url")
    if not url:
        raise RuntimeError("No connection or sqlalchemy.url given to the migration environment")
    engine = create_engine(url, poolclass=pool.NullPool)
    try:
        with engine.begin() as connection:
            _migrate(connection)
    finally:
        engine.dispose()


if context.is_offline_mode():
    raise RuntimeError("Offline SQL generation is not supported; run migrations online")
run_migrations()
