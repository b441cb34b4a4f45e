from __future__ import annotations

import pytest
from pydantic import ValidationError

from registry_api.core.settings import Settings


def _settings(**overrides) -> Settings:
    return Settings(_env_file=None, DATABASE_URL="sqlite+aiosqlite:///test.db", **overrides)


def test_settings_defaults(monkeypatch):
    for name in ("LOG_LEVEL", "DEFAULT_PAGE_SIZE", "MAIL_API_KEY", "MAIL_FROM"):
        monkeypatch.delenv(name, raising=False)

    settings = _settings()

    assert settings.log_level == "INFO"
    assert settings.default_page_size == 10
    assert settings.mail_api_url == "https://api.resend.com"
    assert settings.mail_enabled is False


def test_cors_origins_parsed_from_string():
    settings = _settings(CORS_ORIGINS="http://localhost:3000/, https://registry.test")

    assert settings.cors_origins == [
        "http://127.0.0.1:3000",
        "http://localhost:3000",
        "https://registry.test",
    ]


def test_log_level_is_normalised():
    assert _settings(LOG_LEVEL="debug").log_level == "DEBUG"


def test_unknown_log_level_rejected():
    with pytest.raises(ValidationError):
        _settings(LOG_LEVEL="chatty")


def test_mail_enabled_needs_key_and_sender():
    assert _settings(MAIL_API_KEY="key").mail_enabled is False
    assert _settings(MAIL_API_KEY="key", MAIL_FROM="no-reply@registry.test").mail_enabled is True


def test_urls_lose_trailing_slash():
    settings = _settings(WEB_BASE_URL="https://registry.test/", MAIL_API_URL="https://mail.test/")

    assert settings.web_base_url == "https://registry.test"
    assert settings.mail_api_url == "https://mail.test"
