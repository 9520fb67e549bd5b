"""Patreon API configuration values."""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlencode

from pledgesync.domain.errors import ConfigurationError

from .env import require_env_vars
from .http_resilience import RateLimit, ResilienceConfig

PATREON_BASE_URL = "https://www.patreon.com/api/oauth2/v2/"
PATREON_TIMEOUT_SECONDS = 30.0
DEFAULT_PAGE_SIZE = 500

MEMBER_INCLUDES = ("user", "currently_entitled_tiers")
MEMBER_FIELDS = (
    "currently_entitled_amount_cents",
    "last_charge_date",
    "last_charge_status",
    "patron_status",
    "pledge_cadence",
)
USER_FIELDS = ("email", "full_name")


@dataclass(frozen=True)
class PatreonConfig:
    """Holds Patreon creator API configuration values."""

    access_token: str
    campaign_id: str
    resilience: ResilienceConfig
    page_size: int = DEFAULT_PAGE_SIZE

    def members_url(self) -> str:
        """Return the first page of the campaign member listing."""

        base_url = self.resilience.base_url or PATREON_BASE_URL
        query = urlencode(
            {
                "include": ",".join(MEMBER_INCLUDES),
                "fields[member]": ",".join(MEMBER_FIELDS),
                "fields[user]": ",".join(USER_FIELDS),
                "page[count]": self.page_size,
            }
        )
        return f"{base_url.rstrip('/')}/campaigns/{self.campaign_id}/members?{query}"


def default_resilience_config() -> ResilienceConfig:
    return ResilienceConfig(
        base_url=PATREON_BASE_URL,
        timeout_seconds=PATREON_TIMEOUT_SECONDS,
        ratelimit=RateLimit(max_calls=1, per_seconds=1.0),
        headers={"Accept": "application/vnd.api+json"},
    )


def get_patreon_config(
    *,
    resilience: ResilienceConfig | None = None,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> PatreonConfig:
    if page_size <= 0:
        raise ConfigurationError(f"Patreon page size must be positive, got {page_size}")
    values = require_env_vars(("PATREON_ACCESS_TOKEN", "PATREON_CAMPAIGN_ID"))
    return PatreonConfig(
        access_token=values["PATREON_ACCESS_TOKEN"],
        campaign_id=values["PATREON_CAMPAIGN_ID"],
        resilience=resilience or default_resilience_config(),
        page_size=page_size,
    )
