from __future__ import annotations

import os

import pytest

from indexsync.config import (
    ConfigurationError,
    MissingConfigurationError,
    get_database_config,
    get_typesense_config,
    optional_float_env,
    require_env_vars,
)
from indexsync.config.typesense import API_KEY_HEADER, DEFAULT_TYPESENSE_URL


def test_require_env_vars_returns_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "value")

    result = require_env_vars(["EXAMPLE_VAR"])

    assert result["EXAMPLE_VAR"] == "value"


def test_require_env_vars_raises_when_any_missing(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MISSING_VAR", raising=False)

    with pytest.raises(MissingConfigurationError) as exc:
        require_env_vars(["MISSING_VAR"])

    assert "MISSING_VAR" in str(exc.value)


def test_require_env_vars_handles_blank_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "   ")

    with pytest.raises(MissingConfigurationError):
        require_env_vars(["EXAMPLE_VAR"])


def test_optional_float_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("EXAMPLE_FLOAT", raising=False)
    assert optional_float_env("EXAMPLE_FLOAT", 1.5) == 1.5

    monkeypatch.setenv("EXAMPLE_FLOAT", "2.5")
    assert optional_float_env("EXAMPLE_FLOAT", 1.5) == 2.5

    monkeypatch.setenv("EXAMPLE_FLOAT", "fast")
    with pytest.raises(ConfigurationError):
        optional_float_env("EXAMPLE_FLOAT", 1.5)


def test_typesense_config_requires_api_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("TYPESENSE_API_KEY", raising=False)

    with pytest.raises(MissingConfigurationError, match="TYPESENSE_API_KEY"):
        get_typesense_config()


def test_typesense_config_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TYPESENSE_API_KEY", "xyz")
    monkeypatch.setenv("TYPESENSE_URL", "https://search.example.com/")
    monkeypatch.setenv("TYPESENSE_TIMEOUT", "3")

    config = get_typesense_config()

    assert config.api_key == "xyz"
    assert config.resilience.base_url == "https://search.example.com"
    assert config.resilience.timeout_seconds == 3.0
    assert config.resilience.default_headers == {API_KEY_HEADER: "xyz"}


def test_typesense_config_defaults_url(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TYPESENSE_API_KEY", "xyz")
    monkeypatch.delenv("TYPESENSE_URL", raising=False)

    assert get_typesense_config().resilience.base_url == DEFAULT_TYPESENSE_URL


def test_database_config_prefers_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URI", "sqlite+pysqlite:///tmp/example.db")

    assert get_database_config().uri == "sqlite+pysqlite:///tmp/example.db"

    monkeypatch.delenv("DATABASE_URI")
    assert os.getenv("DATABASE_URI") is None
    assert get_database_config().uri.startswith("sqlite")


def test_typesense_config_never_retries_imports(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TYPESENSE_API_KEY", "xyz")

    retry = get_typesense_config().resilience.retry

    assert "POST" not in retry.allowed_methods
    assert "DELETE" in retry.allowed_methods
