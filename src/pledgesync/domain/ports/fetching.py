"""Ports for fetching listing pages from the billing API."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

type Payload = Mapping[str, Any]

ERROR_MARKER_KEYS = frozenset({"error", "errors"})


@runtime_checkable
class PageFetcher(Protocol):
    """Callable port returning one decoded page, or ``None`` when nothing usable came back.

    Upstream failures are reported in-band: a payload carrying an ``error`` or
    ``errors`` key is an error marker, not a page.
    """

    def __call__(self, uri: str) -> Payload | None: ...


def is_error_marker(payload: Payload) -> bool:
    return any(key in payload for key in ERROR_MARKER_KEYS)


def next_page_uri(payload: Payload) -> str | None:
    links = payload.get("links")
    if not isinstance(links, Mapping):
        return None
    next_uri = links.get("next")
    return next_uri if isinstance(next_uri, str) and next_uri else None
