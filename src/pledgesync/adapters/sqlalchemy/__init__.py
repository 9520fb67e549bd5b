"""SQLAlchemy adapter package for pledgesync."""

from __future__ import annotations

from .mappings import blob_table, metadata, patron_link_table
from .repositories import SqlAlchemyKeyValueStore, SqlAlchemyPatronDirectory

__all__ = [
    "SqlAlchemyKeyValueStore",
    "SqlAlchemyPatronDirectory",
    "blob_table",
    "metadata",
    "patron_link_table",
]
