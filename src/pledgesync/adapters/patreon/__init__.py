"""Public interface for the Patreon adapter."""

from __future__ import annotations

from .client import PatreonPageFetcher
from .extractor import PatreonRecordExtractor, extract_tables
from .schema import ErrorDocument, MemberResource, PledgeResource, UserResource
from .translator import parse_entry, parse_user_email

__all__ = [
    "ErrorDocument",
    "MemberResource",
    "PatreonPageFetcher",
    "PatreonRecordExtractor",
    "PledgeResource",
    "UserResource",
    "extract_tables",
    "parse_entry",
    "parse_user_email",
]
