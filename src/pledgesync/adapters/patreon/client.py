"""HTTP page fetcher for the Patreon creator API."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING, Any

import httpx
from pydantic import ValidationError

from pledgesync.adapters.http_resilience import ResilienceConfig, ResilientClient
from pledgesync.config.patreon import PatreonConfig, get_patreon_config

from .schema import ErrorDocument

if TYPE_CHECKING:
    from types import TracebackType

    from pledgesync.domain.ports.fetching import Payload

log = getLogger(__name__)


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


class PatreonPageFetcher:
    """``PageFetcher`` returning decoded Patreon listing pages.

    Failures never raise: a transport failure or an undecodable body yields
    ``None``, an HTTP error yields the API's ``{"errors": [...]}`` document. One
    HTTP client (and its rate limiter) is kept for the lifetime of the fetcher so
    consecutive pages of a pull share the request budget; call :meth:`close`
    or use the fetcher as a context manager.
    """

    def __init__(
        self,
        config: PatreonConfig | None = None,
        *,
        client_factory: Callable[[ResilienceConfig], ResilientClient] = _default_client_factory,
    ) -> None:
        self.config = config or get_patreon_config()
        self._client_factory = client_factory
        self._runner: asyncio.Runner | None = None
        self._client: ResilientClient | None = None

    def __enter__(self) -> PatreonPageFetcher:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def __call__(self, uri: str) -> Payload | None:
        if self._runner is None:
            self._runner = asyncio.Runner()
        return self._runner.run(self._fetch_page(uri))

    def close(self) -> None:
        if self._runner is None:
            return
        try:
            if self._client is not None:
                self._runner.run(self._client.aclose())
        finally:
            self._client = None
            self._runner.close()
            self._runner = None

    async def _fetch_page(self, uri: str) -> Payload | None:
        if self._client is None:
            self._client = self._client_factory(self.config.resilience)

        headers = {"Authorization": f"Bearer {self.config.access_token}"}
        try:
            response = await self._client.get(uri, headers=headers)
        except httpx.HTTPError as exc:
            log.error(f"Patreon request for {uri} failed: {exc}")
            return None

        try:
            payload: Any = response.json()
        except ValueError:
            log.error(f"Undecodable Patreon body for {uri} (HTTP {response.status_code})")
            return None

        if response.is_error:
            return _error_document(payload, response)
        if not isinstance(payload, dict):
            log.error(f"Unexpected Patreon response payload for {uri}")
            return None
        return payload


def _error_document(payload: object, response: httpx.Response) -> dict[str, Any]:
    try:
        document = ErrorDocument.model_validate(payload)
    except ValidationError:
        document = ErrorDocument()
    if not document.errors:
        document = ErrorDocument.model_validate(
            {"errors": [{"status": str(response.status_code), "title": response.reason_phrase}]}
        )
    log.error(f"Patreon API error (HTTP {response.status_code}): {document.summary()}")
    return document.model_dump(exclude_none=True)


if TYPE_CHECKING:
    from pledgesync.domain.ports.fetching import PageFetcher

    _fetcher_check: PageFetcher = PatreonPageFetcher()
