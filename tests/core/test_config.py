"""
Unit Tests for Settings

Tests cover:
- Defaults with an empty environment
- Store backend validation
- DATABASE_URL normalization
"""

import pytest

from bonfire.config import get_settings

ENV_VARS = (
    "STORE_BACKEND",
    "DATABASE_URL",
    "INTEGRATION_TIMEOUT",
    "LOG_LEVEL",
    "JSON_LOGS",
    "LOG_FILE",
    "CORS_ORIGINS",
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.mark.unit
def test_defaults(clean_env):
    settings = get_settings()

    assert settings.store_backend == "memory"
    assert settings.database_url is None
    assert settings.integration_timeout == 10.0
    assert settings.log_level == "INFO"
    assert settings.json_logs is False
    assert settings.log_file is None
    assert settings.cors_origins == ["http://localhost:3000", "http://localhost:5173"]


@pytest.mark.unit
def test_sql_backend(clean_env):
    clean_env.setenv("STORE_BACKEND", "SQL")
    clean_env.setenv("DATABASE_URL", "postgres://u:p@db/bonfire")

    settings = get_settings()

    assert settings.store_backend == "sql"
    assert settings.database_url == "postgresql://u:p@db/bonfire"


@pytest.mark.unit
def test_sql_backend_requires_database_url(clean_env):
    clean_env.setenv("STORE_BACKEND", "sql")

    with pytest.raises(ValueError, match="DATABASE_URL"):
        get_settings()


@pytest.mark.unit
def test_unknown_backend(clean_env):
    clean_env.setenv("STORE_BACKEND", "redis")

    with pytest.raises(ValueError, match="Unknown STORE_BACKEND 'redis'"):
        get_settings()


@pytest.mark.unit
def test_overrides(clean_env):
    clean_env.setenv("INTEGRATION_TIMEOUT", "2.5")
    clean_env.setenv("JSON_LOGS", "TRUE")
    clean_env.setenv("CORS_ORIGINS", "https://app.example.com, https://admin.example.com,")

    settings = get_settings()

    assert settings.integration_timeout == 2.5
    assert settings.json_logs is True
    assert settings.cors_origins == ["https://app.example.com", "https://admin.example.com"]
