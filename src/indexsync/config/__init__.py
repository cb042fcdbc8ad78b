"""Application configuration helpers."""

from __future__ import annotations

from .env import optional_float_env, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError, MissingPrimaryFieldError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .storage import DatabaseConfig, get_database_config
from .typesense import TypesenseConfig, get_typesense_config

__all__ = [
    "ConfigurationError",
    "DatabaseConfig",
    "MissingConfigurationError",
    "MissingPrimaryFieldError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "TypesenseConfig",
    "configure_logging",
    "get_database_config",
    "get_typesense_config",
    "optional_float_env",
    "require_env_vars",
]
