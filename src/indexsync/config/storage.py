"""Database configuration helpers."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Final

DEFAULT_DATABASE_URI: Final[str] = "sqlite+pysqlite:///:memory:"


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str


def get_database_config() -> DatabaseConfig:
    env_uri = os.getenv("DATABASE_URI")
    if env_uri:
        return DatabaseConfig(uri=env_uri)
    return DatabaseConfig(uri=DEFAULT_DATABASE_URI)
