import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from menugate.core.config import Settings, get_settings


def test_settings_defaults():
    """Test that settings load with correct defaults."""
    get_settings.cache_clear()

    with patch.dict(os.environ, {}, clear=True):
        settings = Settings(_env_file=None)

    assert settings.app_name == "MenuGate"
    assert settings.environment == "development"
    assert settings.api_prefix == "/api/v1"
    assert settings.database_url == "sqlite+aiosqlite:///./mg_data/menugate.db"
    assert settings.menu_cache_ttl_seconds == 300
    assert settings.is_development is True
    assert settings.is_production is False


def test_settings_env_override():
    """Test that MENUGATE_ environment variables override defaults."""
    with patch.dict(
        os.environ,
        {
            "MENUGATE_APP_NAME": "TestApp",
            "MENUGATE_ENVIRONMENT": "production",
            "MENUGATE_PORT": "9000",
            "MENUGATE_MENU_CACHE_TTL_SECONDS": "0",
        },
    ):
        settings = Settings(_env_file=None)

    assert settings.app_name == "TestApp"
    assert settings.is_production is True
    assert settings.port == 9000
    assert settings.menu_cache_ttl_seconds == 0


def test_cors_origins_csv():
    settings = Settings(_env_file=None, cors_origins="http://example.com, http://test.com")

    assert settings.cors_origins == ["http://example.com", "http://test.com"]


def test_negative_cache_ttl_rejected():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, menu_cache_ttl_seconds=-1)


def test_sqlite_rejects_multiple_workers():
    with pytest.raises(ValidationError) as exc_info:
        Settings(_env_file=None, workers=4, database_url="sqlite+aiosqlite:///./x.db")

    assert "SQLite does not support multiple worker processes" in str(exc_info.value)


def test_get_settings_is_cached():
    get_settings.cache_clear()

    assert get_settings() is get_settings()
