"""Domain port definitions for adapters."""

from __future__ import annotations

from .access import AccessControl
from .extraction import RecordExtractor
from .fetching import PageFetcher, Payload, is_error_marker, next_page_uri
from .persistence import KeyValueStore, PatronDirectory
from .unit_of_work import ReconcilerRepositories, ReconcilerUnitOfWork

__all__ = [
    "AccessControl",
    "KeyValueStore",
    "PageFetcher",
    "PatronDirectory",
    "Payload",
    "ReconcilerRepositories",
    "ReconcilerUnitOfWork",
    "RecordExtractor",
    "is_error_marker",
    "next_page_uri",
]
