"""Typesense connection settings."""

from __future__ import annotations

import os
from dataclasses import dataclass

from .env import optional_float_env, require_env_vars
from .http_resilience import ResilienceConfig, RetryPolicy

DEFAULT_TYPESENSE_URL = "http://localhost:8108"
DEFAULT_TYPESENSE_TIMEOUT = 10.0
# Imports with action=create are not idempotent, so POST is never retried.
RETRIED_METHODS = frozenset({"DELETE"})
API_KEY_HEADER = "X-TYPESENSE-API-KEY"


@dataclass(frozen=True, slots=True)
class TypesenseConfig:
    resilience: ResilienceConfig
    api_key: str


def get_typesense_config() -> TypesenseConfig:
    values = require_env_vars(("TYPESENSE_API_KEY",))
    api_key = values["TYPESENSE_API_KEY"]
    base_url = os.getenv("TYPESENSE_URL") or DEFAULT_TYPESENSE_URL

    resilience = ResilienceConfig(
        name="typesense",
        base_url=base_url.rstrip("/"),
        timeout_seconds=optional_float_env("TYPESENSE_TIMEOUT", DEFAULT_TYPESENSE_TIMEOUT),
        retry=RetryPolicy(total=3, allowed_methods=RETRIED_METHODS),
        default_headers={API_KEY_HEADER: api_key},
    )

    return TypesenseConfig(resilience=resilience, api_key=api_key)
