"""Configuration error definitions."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """Raised when configuration values are invalid."""


class MissingConfigurationError(ConfigurationError):
    """Raised when required configuration values are absent or blank."""


class MissingPrimaryFieldError(ConfigurationError):
    """Raised when a collection definition does not declare exactly one primary field."""

    def __init__(self, collection: str) -> None:
        super().__init__(
            f"Primary key info have not been found for Typesense collection {collection}"
        )
        self.collection = collection
