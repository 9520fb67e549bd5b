"""Application configuration helpers."""

from __future__ import annotations

from pledgesync.domain.errors import ConfigurationError, MissingConfigurationError

from .env import require_env_vars
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .patreon import PatreonConfig, default_resilience_config, get_patreon_config
from .storage import DatabaseConfig, data_dir, get_database_config

__all__ = [
    "ConfigurationError",
    "DatabaseConfig",
    "MissingConfigurationError",
    "PatreonConfig",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "data_dir",
    "default_resilience_config",
    "get_database_config",
    "get_patreon_config",
    "require_env_vars",
]
